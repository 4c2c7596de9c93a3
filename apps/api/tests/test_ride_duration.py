"""
Tests for ride duration derivation and timestamp normalization.
"""
from datetime import datetime, timedelta, timezone

from services.ride_duration import (
    exact_duration_minutes,
    minutes_between,
    rounded_duration_minutes,
    to_utc,
)

START = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


class TestToUTC:

    def test_none_passes_through(self):
        assert to_utc(None) is None

    def test_naive_is_taken_as_utc(self):
        result = to_utc(datetime(2024, 1, 1, 10, 0))
        assert result == START
        assert result.tzinfo == timezone.utc

    def test_offset_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        result = to_utc(datetime(2024, 1, 1, 12, 0, tzinfo=plus_two))
        assert result == START
        assert result.utcoffset() == timedelta(0)


class TestRoundedDuration:
    """Duration on create: nearest whole minute."""

    def test_whole_minutes(self):
        assert rounded_duration_minutes(START, START + timedelta(minutes=30)) == 30

    def test_rounds_down_below_half(self):
        assert rounded_duration_minutes(START, START + timedelta(minutes=30, seconds=29)) == 30

    def test_half_minute_rounds_up(self):
        assert rounded_duration_minutes(START, START + timedelta(minutes=30, seconds=30)) == 31

    def test_even_half_still_rounds_up(self):
        # round() would give 32 here; we want half-up, not half-even
        assert rounded_duration_minutes(START, START + timedelta(minutes=32, seconds=30)) == 33

    def test_mixed_timezones(self):
        end = datetime(2024, 1, 1, 6, 45, tzinfo=timezone(timedelta(hours=-4)))
        assert rounded_duration_minutes(START, end) == 45

    def test_end_before_start_is_negative(self):
        assert rounded_duration_minutes(START, START - timedelta(minutes=10)) == -10


class TestExactDuration:
    """Duration on update: unrounded, two decimals."""

    def test_fractional_minutes_kept(self):
        assert exact_duration_minutes(START, START + timedelta(minutes=45, seconds=30)) == 45.5

    def test_two_decimal_precision(self):
        assert exact_duration_minutes(START, START + timedelta(seconds=100)) == 1.67

    def test_minutes_between_is_unrounded(self):
        assert minutes_between(START, START + timedelta(seconds=90)) == 1.5
