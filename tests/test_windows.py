"""
test_windows.py — Tests for the analytics time window resolver.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.services.windows import InvalidWindowBoundary, parse_boundary, resolve_window

NOW = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


class TestDefaults:
    def test_no_arguments_is_thirty_days_ending_now(self):
        window = resolve_window(now=NOW)
        assert window.end == NOW
        assert window.start == NOW - timedelta(seconds=30 * 24 * 3600)

    def test_reads_the_clock_when_now_omitted(self):
        before = datetime.now(tz=timezone.utc)
        window = resolve_window()
        after = datetime.now(tz=timezone.utc)

        assert before <= window.end <= after
        assert window.end - window.start == timedelta(days=30)

    def test_custom_day_count(self):
        window = resolve_window(now=NOW, days=7)
        assert window.start == NOW - timedelta(days=7)

    def test_empty_strings_count_as_absent(self):
        window = resolve_window("", "", now=NOW)
        assert window.end == NOW
        assert window.start == NOW - timedelta(days=30)


class TestExplicitBounds:
    def test_bare_dates_are_midnight_utc(self):
        window = resolve_window("2026-01-01", "2026-01-31", now=NOW)
        assert window.start == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert window.end == datetime(2026, 1, 31, tzinfo=timezone.utc)

    def test_only_from_keeps_default_end(self):
        window = resolve_window("2026-09-01", now=NOW)
        assert window.start == datetime(2026, 9, 1, tzinfo=timezone.utc)
        assert window.end == NOW

    def test_only_to_keeps_default_start(self):
        window = resolve_window(to="2026-10-01", now=NOW)
        assert window.start == NOW - timedelta(days=30)
        assert window.end == datetime(2026, 10, 1, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        parsed = parse_boundary("from", "2026-02-01T12:00:00+05:30")
        assert parsed == datetime(2026, 2, 1, 6, 30, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_zulu_suffix(self):
        assert parse_boundary("to", "2026-02-01T00:00:00Z") == datetime(2026, 2, 1, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self):
        assert parse_boundary("to", "2026-02-01T08:15:00") == datetime(2026, 2, 1, 8, 15, tzinfo=timezone.utc)

    def test_inverted_window_is_not_reordered(self):
        window = resolve_window("2026-05-01", "2026-04-01", now=NOW)
        assert window.start > window.end


class TestMalformed:
    @pytest.mark.parametrize("value", [
        "yesterday",
        "2026-13-01",
        "01/02/2026",
        "2026-02-30",
        "0001-01-01T00:00:00+01:00",
        "9999-12-31T23:00:00-05:00",
    ])
    def test_bad_from_raises(self, value):
        with pytest.raises(InvalidWindowBoundary) as excinfo:
            resolve_window(value, now=NOW)
        assert excinfo.value.param == "from"
        assert value in str(excinfo.value)

    def test_bad_to_raises(self):
        with pytest.raises(InvalidWindowBoundary) as excinfo:
            resolve_window("2026-01-01", "soon", now=NOW)
        assert excinfo.value.param == "to"

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_boundary("from", "not-a-date")
