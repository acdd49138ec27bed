from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from corretor.utils.dates import (
    month_label,
    month_offset,
    months_ago,
    parse_date,
    today_brt,
)


class TestParseDate:
    def test_iso_date(self):
        assert parse_date("2026-03-02") == date(2026, 3, 2)

    def test_utc_datetime_lands_on_brt_day(self):
        assert parse_date("2025-03-01T01:00:00Z") == date(2025, 2, 28)

    def test_naive_datetime(self):
        assert parse_date("2025-03-01T01:00:00") == date(2025, 3, 1)

    def test_datetime_object(self):
        dt = datetime(2025, 3, 1, 2, 59, tzinfo=timezone.utc)
        assert parse_date(dt) == date(2025, 2, 28)

    def test_date_passthrough(self):
        assert parse_date(date(2026, 1, 1)) == date(2026, 1, 1)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_date("ontem")


class TestMonthsAgo:
    def test_same_day(self):
        assert months_ago(date(2026, 3, 15), 1) == date(2026, 2, 15)

    def test_across_year(self):
        assert months_ago(date(2026, 1, 15), 2) == date(2025, 11, 15)

    def test_clamps_day(self):
        assert months_ago(date(2026, 3, 31), 1) == date(2026, 2, 28)
        assert months_ago(date(2024, 3, 30), 1) == date(2024, 2, 29)

    def test_twelve_months(self):
        assert months_ago(date(2026, 3, 15), 12) == date(2025, 3, 15)


class TestMonthHelpers:
    def test_offset(self):
        today = date(2026, 3, 15)
        assert month_offset(date(2026, 3, 1), today) == 0
        assert month_offset(date(2025, 11, 5), today) == 4
        assert month_offset(date(2026, 4, 1), today) == -1

    def test_label(self):
        today = date(2026, 3, 15)
        assert month_label(today, 0) == "Mar"
        assert month_label(today, 3) == "Dez"
        assert month_label(today, 14) == "Jan"


def test_today_brt_is_a_date():
    assert isinstance(today_brt(), date)
