"""
Per-day apportionment of rest durations.

Intervals that straddle midnight are clipped to each day they touch, so a
rest period from 23:00 to 01:00 counts one hour against both days.
"""

from typing import Iterable, Iterator, List, Optional

from pendulum import DateTime

from .models import DayBucket, Interval, IntervalCategory, StartOfDay, default_start_of_day


class DailyDurationAggregator:
    """
    Sums REST durations per calendar day.

    The reference time scale is defined entirely by ``start_of_day``; the
    aggregator itself only compares instants.
    """

    def __init__(self, start_of_day: StartOfDay = default_start_of_day):
        self.start_of_day = start_of_day

    def bucket_for(self, instant: DateTime) -> DayBucket:
        """Return the day bucket containing ``instant``."""
        return DayBucket.containing(instant, self.start_of_day)

    def days_touched(self, interval: Interval) -> List[DayBucket]:
        """
        Return every day bucket that shares a non-empty span with the interval.

        An interval ending exactly at midnight does not touch the next day.
        """
        return list(self._iter_days(interval))

    def daily_rest_hours(
        self,
        day: DayBucket,
        rest_intervals: Iterable[Interval],
        candidate: Optional[Interval] = None,
    ) -> float:
        """
        Total REST hours attributed to ``day``.

        Args:
            day: The calendar day to total
            rest_intervals: Existing REST intervals of one worker
            candidate: Optional interval under evaluation; only counted if REST

        Returns:
            Hours of rest falling inside ``[day.start, day.end)``
        """
        intervals = list(rest_intervals)
        if candidate is not None and candidate.category is IntervalCategory.REST:
            intervals.append(candidate)

        total = 0.0
        for interval in intervals:
            if interval.category is not IntervalCategory.REST:
                continue
            clipped = interval.clip(day.start, day.end)
            if clipped:
                total += clipped.duration_hours()

        return total

    def _iter_days(self, interval: Interval) -> Iterator[DayBucket]:
        if not interval.is_valid():
            return

        day = self.bucket_for(interval.start)
        while day.start < interval.end:
            yield day
            day = day.following(self.start_of_day)
