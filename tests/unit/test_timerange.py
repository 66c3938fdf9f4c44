"""
Unit tests for time range partitioning.

Covers containment, chunk splitting, calendar-day splitting and the
ownership rule that assigns every instant to exactly one part.
"""

import pytest
from datetime import datetime, timedelta, timezone

from ec2spot.utils.exceptions import DataValidationError
from ec2spot.utils.timerange import TimeRange, day, days_ago, start_of_day


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def assert_partition(outer: TimeRange, parts, max_duration: timedelta) -> None:
    """Parts are ordered, contiguous, non-overlapping, bounded and cover outer exactly."""
    assert parts[0].start == outer.start
    assert parts[-1].end == outer.end
    for prev, nxt in zip(parts, parts[1:]):
        assert prev.end == nxt.start
        assert prev.start < nxt.start
    for part in parts:
        assert timedelta(0) < part.duration <= max_duration


class TestTimeRangeContains:
    """Test cases for TimeRange.contains."""

    def setup_method(self):
        self.t1 = utc(2009, 11, 10, 23)
        self.t2 = utc(2009, 11, 17, 23)
        self.range = TimeRange(self.t1, self.t2)

    def test_excludes_dates_outside(self):
        assert not self.range.contains(utc(2009, 11, 22, 23))
        assert not self.range.contains(self.t1 - timedelta(microseconds=1))

    def test_includes_dates_inside(self):
        assert self.range.contains(utc(2009, 11, 14, 23))

    def test_includes_both_ends(self):
        assert self.range.contains(self.t1)
        assert self.range.contains(self.t2)

    def test_start_after_end_rejected(self):
        with pytest.raises(DataValidationError):
            TimeRange(self.t2, self.t1)


class TestTimeRangeSplit:
    """Test cases for TimeRange.split."""

    def test_split_hours(self):
        r = TimeRange(utc(2009, 11, 10, 10), utc(2009, 11, 10, 20))

        parts = r.split(timedelta(hours=1))

        assert len(parts) == 10
        assert_partition(r, parts, timedelta(hours=1))

    def test_split_uneven_last_chunk_is_shorter(self):
        r = TimeRange(utc(2024, 1, 1, 0), utc(2024, 1, 1, 10, 30))

        parts = r.split(timedelta(hours=4))

        assert len(parts) == 3
        assert parts[-1].duration == timedelta(hours=2, minutes=30)
        assert_partition(r, parts, timedelta(hours=4))

    def test_split_duration_longer_than_range(self):
        r = TimeRange(utc(2024, 1, 1, 0), utc(2024, 1, 1, 1))

        assert r.split(timedelta(days=1)) == [r]

    def test_split_zero_length_range(self):
        instant = utc(2024, 1, 1)

        assert TimeRange(instant, instant).split(timedelta(hours=1)) == []

    @pytest.mark.parametrize("duration", [timedelta(0), timedelta(hours=-1)])
    def test_split_rejects_non_positive_duration(self, duration):
        r = TimeRange(utc(2024, 1, 1), utc(2024, 1, 2))

        with pytest.raises(DataValidationError):
            r.split(duration)

    @pytest.mark.parametrize("start_offset,length,chunk", [
        (timedelta(0), timedelta(days=1), timedelta(hours=4)),
        (timedelta(minutes=7), timedelta(days=3, minutes=13), timedelta(hours=8)),
        (timedelta(seconds=1), timedelta(hours=5, seconds=59), timedelta(minutes=17)),
        (timedelta(0), timedelta(microseconds=10), timedelta(microseconds=3)),
    ])
    def test_split_partitions_range(self, start_offset, length, chunk):
        start = utc(2024, 2, 28) + start_offset
        r = TimeRange(start, start + length)

        parts = r.split(chunk)

        assert_partition(r, parts, chunk)

    def test_every_instant_owned_by_exactly_one_chunk(self):
        r = TimeRange(utc(2024, 1, 1, 0), utc(2024, 1, 1, 9))
        parts = r.split(timedelta(hours=2))
        last = len(parts) - 1

        probes = [r.start, r.end] + [p.start for p in parts] + [
            r.start + timedelta(minutes=m) for m in range(0, 9 * 60, 13)
        ]
        for instant in probes:
            owners = [i for i, p in enumerate(parts) if p.owns(instant, final=i == last)]
            assert len(owners) == 1, instant

    def test_instants_outside_not_owned(self):
        r = TimeRange(utc(2024, 1, 1, 0), utc(2024, 1, 1, 4))
        parts = r.split(timedelta(hours=2))

        assert not parts[0].owns(r.start - timedelta(microseconds=1))
        assert not parts[-1].owns(r.end + timedelta(microseconds=1), final=True)


class TestTimeRangeDays:
    """Test cases for TimeRange.days."""

    def test_partial_first_and_last_days(self):
        r = TimeRange(utc(2009, 11, 10, 23), utc(2009, 11, 17, 23))

        days = r.days()

        assert len(days) == 8
        assert days[0] == TimeRange(utc(2009, 11, 10, 23), utc(2009, 11, 11))
        assert days[-1] == TimeRange(utc(2009, 11, 17), utc(2009, 11, 17, 23))
        assert_partition(r, days, timedelta(days=1))

    @pytest.mark.parametrize("n", [1, 2, 7, 31])
    def test_aligned_range_yields_n_days(self, n):
        start = utc(2024, 2, 10)
        r = TimeRange(start, start + timedelta(days=n))

        days = r.days()

        assert len(days) == n
        assert all(d.duration == timedelta(days=1) for d in days)

    def test_range_within_one_day(self):
        r = TimeRange(utc(2024, 1, 1, 3), utc(2024, 1, 1, 5))

        assert r.days() == [r]


class TestHelpers:
    """Test cases for module helper functions."""

    def test_start_of_day(self):
        assert start_of_day(utc(2024, 5, 6, 13, 14, 15, 16)) == utc(2024, 5, 6)

    def test_day(self):
        assert day(utc(2024, 5, 6, 13)) == TimeRange(utc(2024, 5, 6), utc(2024, 5, 7))

    def test_days_ago(self):
        now = utc(2024, 5, 6, 13)

        assert days_ago(now, 7) == TimeRange(utc(2024, 4, 29, 13), now)

    def test_shift(self):
        r = TimeRange(utc(2024, 1, 1), utc(2024, 1, 2))

        assert r.shift(days=1, hours=2) == TimeRange(utc(2024, 1, 2, 2), utc(2024, 1, 3, 2))

    def test_str(self):
        r = TimeRange(utc(2024, 1, 1), utc(2024, 1, 2))

        assert str(r) == "2024-01-01T00:00:00+00:00 - 2024-01-02T00:00:00+00:00"
