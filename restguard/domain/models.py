"""
Domain models for worker schedule intervals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple

from pendulum import Date, DateTime


StartOfDay = Callable[[DateTime], DateTime]


class IntervalCategory(str, Enum):
    """Category tag of a schedule interval."""
    REST = "rest"
    WORK = "work"


@dataclass(frozen=True)
class Interval:
    """
    A half-open time span ``[start, end)`` tagged as REST or WORK.

    Construction does not enforce ``start < end``; the validator reports
    such intervals as ``InvalidInterval`` instead of raising.
    """
    start: DateTime
    end: DateTime
    category: IntervalCategory
    id: Optional[str] = None

    def is_valid(self) -> bool:
        """Return True if the interval has a strictly positive length."""
        return self.start < self.end

    def duration_hours(self) -> float:
        """Return the duration in hours."""
        return (self.end - self.start).total_seconds() / 3600

    def overlaps(self, other: "Interval") -> bool:
        """Check if this interval overlaps with another."""
        return overlaps(self, other)

    def clip(self, lower: DateTime, upper: DateTime) -> "Interval | None":
        """
        Clip the interval to ``[lower, upper)``.
        Returns None if nothing of the interval remains.
        """
        clipped_start = max(self.start, lower)
        clipped_end = min(self.end, upper)

        if clipped_end <= clipped_start:
            return None

        return Interval(
            start=clipped_start,
            end=clipped_end,
            category=self.category,
            id=self.id,
        )

    def __str__(self) -> str:
        label = self.category.value.upper()
        return f"{label} {self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('DD.MM.YYYY HH:mm')}"


def overlaps(a: Interval, b: Interval) -> bool:
    """
    Half-open intersection test.

    Back-to-back intervals (``a.end == b.start``) do not overlap.
    """
    return a.start < b.end and b.start < a.end


def default_start_of_day(instant: DateTime) -> DateTime:
    """Midnight of the calendar day containing ``instant`` in its own timezone."""
    return instant.start_of("day")


@dataclass(frozen=True)
class DayBucket:
    """
    A calendar day ``[start, end)`` in the caller's reference time scale.
    """
    date: Date
    start: DateTime
    end: DateTime

    @classmethod
    def containing(cls, instant: DateTime, start_of_day: StartOfDay = default_start_of_day) -> "DayBucket":
        """Build the bucket for the day that contains ``instant``."""
        start = start_of_day(instant)
        # Next midnight is derived from the following day so DST days keep 23/25 hours
        end = start_of_day(start.add(days=1))
        return cls(date=start.date(), start=start, end=end)

    def following(self, start_of_day: StartOfDay = default_start_of_day) -> "DayBucket":
        """Return the next calendar day's bucket."""
        return DayBucket.containing(self.end, start_of_day)

    def __str__(self) -> str:
        return self.date.format("DD.MM.YYYY")


@dataclass(frozen=True)
class WorkerScheduleSnapshot:
    """
    Immutable, worker-scoped view of existing intervals for one validation call.
    """
    worker_id: str
    rest_intervals: Tuple[Interval, ...] = field(default_factory=tuple)
    work_intervals: Tuple[Interval, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable from callers but keep the snapshot immutable
        object.__setattr__(self, "rest_intervals", tuple(self.rest_intervals))
        object.__setattr__(self, "work_intervals", tuple(self.work_intervals))

    def rest_excluding(self, exclude_id: Optional[str]) -> Tuple[Interval, ...]:
        """REST intervals without the record currently being edited."""
        if exclude_id is None:
            return self.rest_intervals
        return tuple(i for i in self.rest_intervals if i.id != exclude_id)

    def work_excluding(self, exclude_id: Optional[str]) -> Tuple[Interval, ...]:
        """WORK intervals without the record currently being edited."""
        if exclude_id is None:
            return self.work_intervals
        return tuple(i for i in self.work_intervals if i.id != exclude_id)

    def find(self, record_id: str) -> Interval | None:
        """Look up an interval of either category by record id."""
        for interval in self.rest_intervals + self.work_intervals:
            if interval.id == record_id:
                return interval
        return None


@dataclass(frozen=True)
class Candidate:
    """
    The interval under evaluation.

    ``exclude_id`` names an existing record being updated so that it is not
    counted against itself.
    """
    interval: Interval
    worker_id: str
    exclude_id: Optional[str] = None
