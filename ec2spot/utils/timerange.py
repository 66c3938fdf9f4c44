"""
Time range arithmetic used to break a lookback window into small queries.

Partitioning convention: ranges produced by ``split`` and ``days`` share
their boundary instants. Each part owns ``[start, end)``; the final part
also owns the outer range's ``end``. Under that rule every instant of the
outer range belongs to exactly one part (see ``TimeRange.owns``).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List

from ec2spot.utils.exceptions import DataValidationError


ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class TimeRange:
    """
    An interval between two instants, ``start <= end``.

    Attributes:
        start: First instant of the range
        end: Last instant of the range
    """
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise DataValidationError(
                message=f"Range start {self.start} is after end {self.end}",
                field_name="start",
                field_value=self.start,
                validation_rule="start <= end"
            )

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        """Return True if instant falls within the range, both ends inclusive."""
        return self.start <= instant <= self.end

    def owns(self, instant: datetime, final: bool = False) -> bool:
        """
        Membership under the partitioning convention.

        Args:
            instant: Instant to test
            final: Whether this range is the last part of its partition

        Returns:
            True if instant is in ``[start, end)``, or ``[start, end]`` when final
        """
        if final:
            return self.contains(instant)
        return self.start <= instant < self.end

    def split(self, duration: timedelta) -> List["TimeRange"]:
        """
        Split the range into consecutive chunks of at most ``duration``.

        The last chunk is shorter when the range is not a whole multiple of
        ``duration``. A zero-length range yields no chunks.

        Raises:
            DataValidationError: If duration is not positive
        """
        if duration <= timedelta(0):
            raise DataValidationError(
                message=f"Chunk duration must be positive, got {duration}",
                field_name="duration",
                field_value=duration,
                validation_rule="duration > 0"
            )

        parts = []
        start = self.start
        while start < self.end:
            end = min(start + duration, self.end)
            parts.append(TimeRange(start, end))
            start = end

        return parts

    def days(self) -> List["TimeRange"]:
        """
        Split the range at calendar-day boundaries.

        The first and last ranges may cover partial days. Day boundaries are
        midnight in the timezone of ``start``.
        """
        parts = []
        start = self.start
        while self.contains(start) and start < self.end:
            end = min(start_of_day(start) + ONE_DAY, self.end)
            parts.append(TimeRange(start, end))
            start = end

        return parts

    def shift(self, days: int = 0, hours: int = 0) -> "TimeRange":
        """Return the range moved by the given amount of time."""
        delta = timedelta(days=days, hours=hours)
        return TimeRange(self.start + delta, self.end + delta)


def start_of_day(instant: datetime) -> datetime:
    """Return midnight of the day instant falls within, keeping its tzinfo."""
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def day(instant: datetime) -> TimeRange:
    """Return the whole calendar day containing instant."""
    start = start_of_day(instant)
    return TimeRange(start, start + ONE_DAY)


def days_ago(now: datetime, days: int) -> TimeRange:
    """Return the range from ``days`` days before now up to now."""
    return TimeRange(now - timedelta(days=days), now)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
