"""Tests for activity window arithmetic."""

from datetime import datetime, timedelta, timezone

import pytest

from timeflow.core.errors import InvalidTimestamp
from timeflow.core.windows import (
    compute_window,
    format_instant,
    minutes_since,
    parse_instant,
    utc_midnight,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestComputeWindow:
    def test_reference_scenario(self):
        window = compute_window("2024-01-01T09:00:00Z", 5, 2, 1)
        assert window.window_start == utc(2024, 1, 1, 8, 55)
        assert window.core_start == utc(2024, 1, 1, 9, 0)
        assert window.core_end == utc(2024, 1, 1, 9, 1)
        assert window.window_end == utc(2024, 1, 1, 9, 3)

    def test_core_duration_defaults_to_one_minute(self):
        window = compute_window("2024-01-01T09:00:00Z", 0, 0)
        assert window.core_end - window.core_start == timedelta(minutes=1)

    def test_zero_durations_collapse_phases(self):
        window = compute_window("2024-01-01T09:00:00Z", 0, 0, 0)
        assert window.window_start == window.core_start == window.core_end == window.window_end

    @pytest.mark.parametrize(
        "pre,post,core",
        [(0, 0, 1), (5, 0, 1), (0, 7, 1), (30, 15, 10), (90, 120, 0)],
    )
    def test_ordering_holds(self, pre, post, core):
        window = compute_window("2024-03-10T23:50:00Z", pre, post, core)
        assert window.window_start <= window.core_start <= window.core_end <= window.window_end
        assert (window.window_start == window.core_start) == (pre == 0)
        assert (window.core_end == window.window_end) == (post == 0)

    def test_crosses_midnight(self):
        window = compute_window("2024-01-01T00:10:00Z", 30, 0)
        assert window.window_start == utc(2023, 12, 31, 23, 40)

    def test_non_utc_offset_is_normalized(self):
        window = compute_window("2024-01-01T02:00:00-07:00", 0, 0)
        assert window.core_start == utc(2024, 1, 1, 9, 0)
        assert window.core_start.tzinfo is timezone.utc

    def test_naive_datetime_is_utc(self):
        window = compute_window(datetime(2024, 1, 1, 9, 0), 5, 2)
        assert window.core_start == utc(2024, 1, 1, 9, 0)

    def test_total_minutes(self):
        window = compute_window("2024-01-01T09:00:00Z", 5, 2, 1)
        assert window.total_minutes() == 8

    def test_invalid_timestamp_raises(self):
        with pytest.raises(InvalidTimestamp):
            compute_window("not a time", 5, 2)

    def test_negative_duration_raises(self):
        with pytest.raises(ValueError):
            compute_window("2024-01-01T09:00:00Z", -1, 2)


class TestParseInstant:
    def test_z_suffix(self):
        assert parse_instant("2024-06-01T12:30:00Z") == utc(2024, 6, 1, 12, 30)

    def test_milliseconds(self):
        assert parse_instant("2024-06-01T12:30:00.250Z") == utc(2024, 6, 1, 12, 30, 0, 250000)

    def test_date_only_is_not_an_instant(self):
        with pytest.raises(InvalidTimestamp):
            parse_instant("2024-06-01")

    def test_non_string_raises(self):
        with pytest.raises(InvalidTimestamp):
            parse_instant(12345)

    def test_invalid_timestamp_is_value_error(self):
        with pytest.raises(ValueError):
            parse_instant("2024-13-45T99:00:00Z")


class TestHelpers:
    def test_format_instant(self):
        assert format_instant(utc(2024, 1, 1, 8, 55)) == "2024-01-01T08:55:00.000Z"

    def test_format_instant_keeps_milliseconds(self):
        assert format_instant("2024-01-01T08:55:00.123456Z") == "2024-01-01T08:55:00.123Z"

    def test_utc_midnight_from_instant(self):
        assert utc_midnight("2024-01-01T17:45:00Z") == utc(2024, 1, 1)

    def test_utc_midnight_from_date(self):
        assert utc_midnight(datetime(2024, 1, 1, 17, 45).date()) == utc(2024, 1, 1)

    def test_minutes_since_negative(self):
        assert minutes_since(utc(2024, 1, 1), utc(2023, 12, 31, 23, 30)) == -30
