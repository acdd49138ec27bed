from __future__ import annotations

import logging
import os
from datetime import timedelta, timezone
from decimal import Decimal
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

from corretor.models.session import SessionContext

logger = logging.getLogger(__name__)

APP_NAME = "painel-corretor"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Same resolution order as _resolve_dir, but only sources available before .env
    is loaded. Returns None when only the platformdirs location would resolve and
    it does not exist yet.
    """
    from_env = os.environ.get("CORRETOR_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str, kind: str) -> Path:
    """Resolve a directory from env var, repo layout, or platform default.

    Priority: 1) env var, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    # Development layout: src/corretor/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / default_subdir
    if candidate.is_dir():
        return candidate
    if kind == "config":
        return Path(platformdirs.user_config_dir(APP_NAME))
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("CORRETOR_CONFIG_DIR", "config", kind="config")


def get_data_dir() -> Path:
    """Resolve data directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("CORRETOR_DATA_DIR", "data", kind="data")


BRT = timezone(timedelta(hours=-3))

# Used when a constructor has no default commission rate at all.
RATE_FLOOR = Decimal("3.0")

NFSE_PORTAL_URL = "https://www.nfse.gov.br/EmissorNacional"

# Municipal service list item for real-estate brokerage (LC 116/2003).
DEFAULT_SERVICE_CODE = "10.05"


# --- YAML config ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text())


def load_broker() -> dict:
    """Load the current broker profile from config/broker.yaml."""
    return load_yaml(get_config_dir() / "broker.yaml")


def load_constructor(slug: str) -> dict:
    """Load a constructor record from config/constructors/{slug}.yaml."""
    return load_yaml(get_config_dir() / "constructors" / f"{slug}.yaml")


def list_constructors() -> list[str]:
    """Return sorted list of constructor slugs (YAML file stems) from config/constructors/."""
    constructors_dir = get_config_dir() / "constructors"
    if not constructors_dir.exists():
        return []
    return sorted(f.stem for f in constructors_dir.glob("*.yaml"))


def load_constructor_directory() -> dict[str, dict]:
    """Load every constructor file, keyed by the record's ``id`` (slug as fallback)."""
    directory: dict[str, dict] = {}
    for slug in list_constructors():
        data = load_constructor(slug) or {}
        if not isinstance(data, dict):
            logger.warning("Skipping %s.yaml: not a mapping", slug)
            continue
        key = str(data.get("id") or slug)
        if key in directory:
            logger.warning("Duplicate constructor id %r in %s.yaml, keeping the first", key, slug)
            continue
        directory[key] = data
    return directory


# --- Session identity ---


def load_session() -> SessionContext:
    """Build the session identity for the current broker.

    Priority: 1) CORRETOR_BROKER_ID / CORRETOR_CONSTRUCTOR_ID env vars,
    2) broker.yaml (``id`` and optional ``construtora``).
    Raises KeyError if no broker id can be found.
    """
    broker_id = os.environ.get("CORRETOR_BROKER_ID")
    constructor_id = os.environ.get("CORRETOR_CONSTRUCTOR_ID")
    if broker_id is None or constructor_id is None:
        path = get_config_dir() / "broker.yaml"
        profile = load_yaml(path) if path.is_file() else {}
        profile = profile or {}
        if broker_id is None and profile.get("id"):
            broker_id = str(profile["id"])
        if constructor_id is None and profile.get("construtora"):
            constructor_id = str(profile["construtora"])
    if not broker_id:
        raise KeyError("CORRETOR_BROKER_ID")
    return SessionContext(broker_id=broker_id, constructor_id=constructor_id or None)


# --- Data files ---


def get_sales_path() -> Path:
    return get_data_dir() / "sales.json"


def get_pending_invoices_path() -> Path:
    return get_data_dir() / "pending_invoices.json"
