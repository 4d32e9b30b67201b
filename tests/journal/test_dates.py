"""Tests for daylog.journal.dates."""

from datetime import date, datetime

import pytest

from daylog.journal.dates import day_keys_between, days_between, parse_day_key, shift_day_key, to_day_key, today_key


class TestDayKeys:
    def test_to_day_key_accepts_dates_and_strings(self):
        assert to_day_key(date(2026, 1, 5)) == "2026-01-05"
        assert to_day_key(datetime(2026, 1, 5, 23, 59)) == "2026-01-05"
        assert to_day_key("2026-01-05") == "2026-01-05"

    @pytest.mark.parametrize("bad", ["2026-1-5", "2026/01/05", "2026-02-30", "", None, 20260105])
    def test_parse_rejects_malformed(self, bad):
        with pytest.raises(ValueError, match="Invalid day key"):
            parse_day_key(bad)

    def test_today_key_uses_clock(self):
        assert today_key(lambda: date(2026, 3, 1)) == "2026-03-01"

    def test_shift_crosses_month_and_year(self):
        assert shift_day_key("2026-03-01", -1) == "2026-02-28"
        assert shift_day_key("2025-12-31", 1) == "2026-01-01"

    def test_days_between(self):
        assert days_between("2026-01-01", "2026-01-04") == 3
        assert days_between("2026-01-04", "2026-01-01") == -3

    def test_day_keys_between_is_exclusive(self):
        assert day_keys_between("2026-01-01", "2026-01-04") == ["2026-01-02", "2026-01-03"]
        assert day_keys_between("2026-01-01", "2026-01-02") == []

    def test_lexicographic_order_matches_date_order(self):
        keys = ["2026-10-01", "2026-02-15", "2025-12-31"]
        assert sorted(keys) == [to_day_key(d) for d in sorted(parse_day_key(k) for k in keys)]
