"""
Tests for domain models.
"""

import pendulum
import pytest

from restguard.domain.models import (
    DayBucket,
    Interval,
    IntervalCategory,
    WorkerScheduleSnapshot,
    overlaps,
)


TZ = "Europe/Berlin"


def _rest(start: str, end: str, record_id=None) -> Interval:
    return Interval(
        start=pendulum.parse(start, tz=TZ),
        end=pendulum.parse(end, tz=TZ),
        category=IntervalCategory.REST,
        id=record_id,
    )


def _work(start: str, end: str, record_id=None) -> Interval:
    return Interval(
        start=pendulum.parse(start, tz=TZ),
        end=pendulum.parse(end, tz=TZ),
        category=IntervalCategory.WORK,
        id=record_id,
    )


class TestInterval:
    """Tests for Interval model."""

    def test_create_valid_interval(self):
        """Test creating a valid interval."""
        interval = _rest("2024-11-25 07:00", "2024-11-25 08:30")

        assert interval.is_valid()
        assert interval.duration_hours() == 1.5

    def test_inverted_and_empty_intervals_are_not_valid(self):
        """Construction succeeds, validity is reported instead of raised."""
        inverted = _rest("2024-11-25 09:00", "2024-11-25 08:00")
        empty = _rest("2024-11-25 09:00", "2024-11-25 09:00")

        assert not inverted.is_valid()
        assert not empty.is_valid()

    def test_clip(self):
        """Test clipping to a window."""
        interval = _rest("2024-11-25 23:00", "2024-11-26 01:00", record_id="r1")

        clipped = interval.clip(
            pendulum.parse("2024-11-25 00:00", tz=TZ),
            pendulum.parse("2024-11-26 00:00", tz=TZ),
        )

        assert clipped is not None
        assert clipped.start == pendulum.parse("2024-11-25 23:00", tz=TZ)
        assert clipped.end == pendulum.parse("2024-11-26 00:00", tz=TZ)
        assert clipped.id == "r1"
        assert clipped.category is IntervalCategory.REST

    def test_clip_outside_window_returns_none(self):
        """Test clipping with no shared span."""
        interval = _rest("2024-11-25 07:00", "2024-11-25 08:00")

        clipped = interval.clip(
            pendulum.parse("2024-11-25 08:00", tz=TZ),
            pendulum.parse("2024-11-25 12:00", tz=TZ),
        )

        assert clipped is None


class TestOverlaps:
    """Tests for half-open overlap detection."""

    def test_back_to_back_intervals_do_not_overlap(self):
        """[10,12) and [12,14) share only a boundary."""
        a = _rest("2024-11-25 10:00", "2024-11-25 12:00")
        b = _work("2024-11-25 12:00", "2024-11-25 14:00")

        assert not overlaps(a, b)

    def test_partial_overlap(self):
        """[10,12) and [11,13) intersect."""
        a = _rest("2024-11-25 10:00", "2024-11-25 12:00")
        b = _work("2024-11-25 11:00", "2024-11-25 13:00")

        assert overlaps(a, b)

    def test_containment_overlaps(self):
        """An interval strictly inside another overlaps it."""
        outer = _work("2024-11-25 09:00", "2024-11-25 17:00")
        inner = _rest("2024-11-25 12:00", "2024-11-25 12:30")

        assert overlaps(outer, inner)
        assert inner.overlaps(outer)

    def test_overlap_is_symmetric(self):
        """overlaps(a, b) == overlaps(b, a) for every pair."""
        intervals = [
            _rest("2024-11-25 10:00", "2024-11-25 12:00"),
            _rest("2024-11-25 11:00", "2024-11-25 13:00"),
            _work("2024-11-25 12:00", "2024-11-25 14:00"),
            _work("2024-11-25 09:00", "2024-11-25 17:00"),
            _rest("2024-11-25 23:00", "2024-11-26 01:00"),
        ]

        for a in intervals:
            for b in intervals:
                assert overlaps(a, b) == overlaps(b, a)

    def test_different_timezones_compare_as_instants(self):
        """Endpoints in different zones are compared as absolute instants."""
        berlin = _rest("2024-11-25 10:00", "2024-11-25 11:00")
        utc = Interval(
            start=pendulum.parse("2024-11-25 09:30", tz="UTC"),
            end=pendulum.parse("2024-11-25 10:30", tz="UTC"),
            category=IntervalCategory.WORK,
        )

        assert overlaps(berlin, utc)


class TestDayBucket:
    """Tests for DayBucket."""

    def test_containing(self):
        """The bucket spans midnight to midnight."""
        bucket = DayBucket.containing(pendulum.parse("2024-11-25 14:30", tz=TZ))

        assert bucket.date == pendulum.date(2024, 11, 25)
        assert bucket.start == pendulum.parse("2024-11-25 00:00", tz=TZ)
        assert bucket.end == pendulum.parse("2024-11-26 00:00", tz=TZ)
        assert str(bucket) == "25.11.2024"

    def test_dst_day_has_23_hours(self):
        """Spring-forward day in Berlin is one hour short."""
        bucket = DayBucket.containing(pendulum.parse("2024-03-31 12:00", tz=TZ))

        assert (bucket.end - bucket.start).total_seconds() == 23 * 3600

    def test_following(self):
        """Test stepping to the next day."""
        bucket = DayBucket.containing(pendulum.parse("2024-11-25 14:30", tz=TZ))

        assert bucket.following().date == pendulum.date(2024, 11, 26)


class TestWorkerScheduleSnapshot:
    """Tests for WorkerScheduleSnapshot."""

    def test_lists_are_frozen_into_tuples(self):
        """Caller lists are copied so later mutation does not leak in."""
        rest = [_rest("2024-11-25 07:00", "2024-11-25 07:30", record_id="r1")]
        snapshot = WorkerScheduleSnapshot(worker_id="w-1", rest_intervals=rest)

        rest.append(_rest("2024-11-25 08:00", "2024-11-25 08:30", record_id="r2"))

        assert isinstance(snapshot.rest_intervals, tuple)
        assert len(snapshot.rest_intervals) == 1
        assert snapshot.work_intervals == ()

    def test_excluding_and_find(self):
        """Test exclusion of the edited record and lookup by id."""
        snapshot = WorkerScheduleSnapshot(
            worker_id="w-1",
            rest_intervals=[
                _rest("2024-11-25 07:00", "2024-11-25 07:30", record_id="r1"),
                _rest("2024-11-25 08:00", "2024-11-25 08:30", record_id="r2"),
            ],
            work_intervals=[_work("2024-11-25 09:00", "2024-11-25 17:00", record_id="w1")],
        )

        assert [i.id for i in snapshot.rest_excluding("r1")] == ["r2"]
        assert len(snapshot.rest_excluding(None)) == 2
        assert snapshot.work_excluding("w1") == ()
        assert snapshot.find("w1").category is IntervalCategory.WORK
        assert snapshot.find("missing") is None

    def test_snapshot_is_immutable(self):
        """Snapshots cannot be reassigned."""
        snapshot = WorkerScheduleSnapshot(worker_id="w-1")

        with pytest.raises(AttributeError):
            snapshot.worker_id = "w-2"
