"""
Domain models for time intervals, working hours and bookable slots.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from pendulum import DateTime

from .exceptions import InvalidRangeError

# Weekday numbering used throughout the package: 0=Sunday ... 6=Saturday
SUNDAY = 0
MONDAY = 1
TUESDAY = 2
WEDNESDAY = 3
THURSDAY = 4
FRIDAY = 5
SATURDAY = 6


def weekday_of(dt: DateTime) -> int:
    """Return the weekday of ``dt`` with Sunday as 0 and Saturday as 6."""
    return dt.isoweekday() % 7


@dataclass(frozen=True)
class TimeInterval:
    """
    Represents an immutable half-open interval ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        """
        Check whether this interval collides with ``other``.

        True when this start falls inside ``other``, when this end falls
        inside ``other``, or when this interval fully contains ``other``.
        """
        return (
            (self.start >= other.start and self.start < other.end)
            or (self.end > other.start and self.end <= other.end)
            or (self.start <= other.start and self.end >= other.end)
        )

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class BusyInterval(TimeInterval):
    """A busy period reported by the calendar, optionally tagged with its event."""
    event_id: Optional[str] = None
    summary: Optional[str] = None


@dataclass(frozen=True)
class WorkingHours:
    """
    Daily bookable window in local clock hours.
    """
    start_hour: int = 9
    end_hour: int = 17
    exclude_weekdays: Tuple[int, ...] = (SUNDAY, SATURDAY)
    timezone: str = "America/New_York"

    def __post_init__(self):
        for hour in (self.start_hour, self.end_hour):
            if not 0 <= hour <= 23:
                raise ValueError(f"Hour must be between 0 and 23, got {hour}")
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"start_hour {self.start_hour} must be before end_hour {self.end_hour}"
            )

    def is_working_day(self, dt: DateTime) -> bool:
        """Check if a given datetime falls on a working day."""
        return weekday_of(dt) not in self.exclude_weekdays

    def get_working_hours_for_day(self, date: DateTime) -> Optional[TimeInterval]:
        """
        Get the working window for a specific day.
        Returns None if it's not a working day.
        """
        if not self.is_working_day(date):
            return None

        start = date.set(hour=self.start_hour, minute=0, second=0, microsecond=0)
        end = date.set(hour=self.end_hour, minute=0, second=0, microsecond=0)

        return TimeInterval(start=start, end=end)


@dataclass(frozen=True)
class SlotRequest:
    """
    Query describing which candidate slots to generate.

    An inverted range is allowed here and simply produces no candidates;
    ``validate`` rejects it before any calendar call is made.
    """
    range_start: DateTime
    range_end: DateTime
    duration_minutes: int = 60

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise InvalidRangeError(
                f"duration_minutes must be greater than zero, got {self.duration_minutes}"
            )

    def validate(self) -> "SlotRequest":
        if self.range_start > self.range_end:
            raise InvalidRangeError(
                f"Range start {self.range_start} is after range end {self.range_end}"
            )
        return self


@dataclass(frozen=True)
class AvailableSlot:
    """
    A candidate slot confirmed free of every busy interval.
    """
    time_range: TimeInterval
    duration_minutes: int

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end

    @classmethod
    def from_interval(cls, interval: TimeInterval) -> "AvailableSlot":
        return cls(time_range=interval, duration_minutes=interval.duration_minutes())

    def __str__(self) -> str:
        return str(self.time_range)
