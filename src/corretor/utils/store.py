"""Loads the broker's sales, pending invoices and constructor directory.

Records are produced by whatever system exports them into the data dir as
JSON arrays; this module only reads them. Changes made during a session stay
in memory (see ``services.lifecycle.Ledger``).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from filelock import FileLock

from corretor import config as _config
from corretor.models.constructor import Constructor
from corretor.models.invoice import PendingInvoice
from corretor.models.sale import Sale
from corretor.services.rates import duplicate_overrides

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _backup_corrupt(path: Path) -> Path:
    """Rename a corrupt file to a timestamped backup so it is not read again."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    backup = path.with_name(f"{path.name}.corrupt.{ts}")
    path.rename(backup)
    logger.warning("Corrupt file backed up: %s → %s", path, backup)
    return backup


@contextmanager
def _locked(path: Path) -> Iterator[None]:
    """Hold the data file's lock so an exporter is never read mid-write."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(path.with_suffix(".lock"))
    with lock:
        yield


def _load(path: Path) -> list[Any]:
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, ValueError):
        _backup_corrupt(path)
        return []
    if not isinstance(data, list):
        logger.warning("%s does not hold a JSON array, ignoring it", path)
        return []
    return data


def _parse_all(entries: list[Any], factory: Callable[[dict], T], what: str) -> list[T]:
    records: list[T] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("Skipping %s #%d: not an object", what, index)
            continue
        try:
            records.append(factory(entry))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping %s #%d: %s", what, index, e)
    return records


def load_sales() -> list[Sale]:
    path = _config.get_sales_path()
    with _locked(path):
        entries = _load(path)
    return _parse_all(entries, Sale.from_dict, "sale")


def load_pending_invoices() -> list[PendingInvoice]:
    path = _config.get_pending_invoices_path()
    with _locked(path):
        entries = _load(path)
    return _parse_all(entries, PendingInvoice.from_dict, "pending invoice")


def load_constructors() -> dict[str, Constructor]:
    """Constructor directory keyed by id, warning about shadowed rate overrides."""
    directory: dict[str, Constructor] = {}
    records = [{"id": key, **data} for key, data in _config.load_constructor_directory().items()]
    for constructor in _parse_all(records, Constructor.from_dict, "constructor"):
        for override in duplicate_overrides(constructor.commission_rates):
            logger.warning(
                "Constructor %s: override %s/%s (%s%%) is shadowed by an earlier one",
                constructor.id,
                override.project_id or "*",
                override.broker_id or "*",
                override.rate,
            )
        directory[constructor.id] = constructor
    return directory
