"""Unit tests for clocks and ledger timestamp formatting."""

from datetime import datetime, timedelta, timezone

import pytest

from stock_kernel.domain.clock import (
    DeterministicClock,
    SequentialClock,
    SystemClock,
    format_timestamp,
)


class TestFormatTimestamp:
    def test_millisecond_precision_with_z(self):
        moment = datetime(2024, 3, 5, 9, 7, 1, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-03-05T09:07:01.123Z"

    def test_converts_to_utc(self):
        moment = datetime(2024, 3, 5, 10, 0, tzinfo=timezone(timedelta(hours=1)))
        assert format_timestamp(moment) == "2024-03-05T09:00:00.000Z"

    def test_naive_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_lexical_order_matches_time_order(self):
        early = format_timestamp(datetime(2024, 1, 1, 9, 59, 59, 999000))
        late = format_timestamp(datetime(2024, 1, 1, 10, 0, 0))
        assert early < late


class TestClocks:
    def test_deterministic_clock_is_stable(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now()
        assert clock.timestamp() == "2024-01-01T12:00:00.000Z"

    def test_tick_and_advance(self):
        clock = DeterministicClock()
        clock.tick()
        clock.advance(59)
        assert clock.timestamp() == "2024-01-01T12:01:00.000Z"

    def test_set_time_resets_advance(self):
        clock = DeterministicClock()
        clock.advance(10)
        clock.set_time(datetime(2025, 6, 1, tzinfo=timezone.utc))
        assert clock.timestamp() == "2025-06-01T00:00:00.000Z"

    def test_sequential_clock_repeats_last(self):
        times = [datetime(2024, 1, 1, tzinfo=timezone.utc), datetime(2024, 1, 2, tzinfo=timezone.utc)]
        clock = SequentialClock(times)
        assert [clock.now(), clock.now(), clock.now()] == [times[0], times[1], times[1]]

    def test_sequential_clock_requires_times(self):
        with pytest.raises(ValueError):
            SequentialClock([])

    def test_system_clock_is_aware(self):
        assert SystemClock().now().tzinfo is not None
