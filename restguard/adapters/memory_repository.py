"""
In-memory schedule repository, optionally backed by a JSON file.

File format::

    {
      "workers": {
        "w-1": [
          {"id": "r1", "category": "rest", "start": "2024-11-25T07:00:00", "end": "2024-11-25T07:30:00"}
        ]
      }
    }
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ValidationError

from ..domain.exceptions import RecordNotFoundError, ScheduleDataError
from ..domain.models import Interval, IntervalCategory, WorkerScheduleSnapshot


logger = logging.getLogger(__name__)


class IntervalRecord(BaseModel):
    """Serialized form of one stored interval."""
    id: Optional[str] = None
    category: IntervalCategory
    start: str
    end: str

    def to_interval(self, timezone: str) -> Interval:
        """Parse the record, normalizing instants into ``timezone``."""
        start = self._parse_instant(self.start, timezone)
        end = self._parse_instant(self.end, timezone)

        interval = Interval(start=start, end=end, category=self.category, id=self.id)
        if not interval.is_valid():
            raise ScheduleDataError(f"Record '{self.id}' ends before it starts")
        return interval

    def _parse_instant(self, value: str, timezone: str) -> DateTime:
        try:
            parsed = pendulum.parse(value, tz=timezone, exact=True)
        except (ValueError, TypeError) as exc:
            raise ScheduleDataError(f"Record '{self.id}' has an unparseable instant: {exc}") from exc

        # Dates, times and durations would land in the wrong day bucket
        if not isinstance(parsed, DateTime):
            raise ScheduleDataError(
                f"Record '{self.id}' needs a full date-time, got '{value}'"
            )

        return parsed.in_timezone(timezone)

    @classmethod
    def from_interval(cls, interval: Interval) -> "IntervalRecord":
        return cls(
            id=interval.id,
            category=interval.category,
            start=interval.start.to_iso8601_string(),
            end=interval.end.to_iso8601_string(),
        )


class InMemoryScheduleRepository:
    """
    Keeps intervals per worker in memory.

    Snapshot reads yield to the event loop once, so concurrent submissions
    interleave the way they would against a real database.
    """

    def __init__(self, intervals: Optional[Dict[str, List[Interval]]] = None):
        self._intervals: Dict[str, List[Interval]] = {
            worker_id: list(items) for worker_id, items in (intervals or {}).items()
        }

    async def get_snapshot(self, worker_id: str) -> WorkerScheduleSnapshot:
        """Return the worker's current rest and work intervals."""
        await asyncio.sleep(0)
        items = self._intervals.get(worker_id, [])
        return WorkerScheduleSnapshot(
            worker_id=worker_id,
            rest_intervals=[i for i in items if i.category is IntervalCategory.REST],
            work_intervals=[i for i in items if i.category is IntervalCategory.WORK],
        )

    async def add_interval(self, worker_id: str, interval: Interval) -> None:
        """Store a new interval for the worker."""
        self._intervals.setdefault(worker_id, []).append(interval)
        logger.debug("Stored %s for worker %s", interval, worker_id)

    async def replace_interval(self, worker_id: str, interval: Interval) -> None:
        """Replace the stored interval with the same id."""
        items = self._intervals.get(worker_id, [])
        for index, existing in enumerate(items):
            if existing.id == interval.id:
                items[index] = interval
                logger.debug("Replaced %s for worker %s", interval, worker_id)
                return
        raise RecordNotFoundError(f"No interval '{interval.id}' for worker '{worker_id}'")

    async def list_workers(self) -> List[str]:
        """Return all worker ids with stored intervals, sorted."""
        return sorted(self._intervals)

    @classmethod
    def from_json_file(cls, path: Path, timezone: str = "UTC") -> "InMemoryScheduleRepository":
        """
        Load a repository from a JSON schedule file.

        A missing file yields an empty repository.

        Raises:
            ScheduleDataError: If the file content is malformed
        """
        if not path.exists():
            logger.warning("Schedule file %s not found, starting with an empty schedule", path)
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ScheduleDataError(f"Invalid JSON in {path}: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("workers", {}), dict):
            raise ScheduleDataError(f"{path} must contain a 'workers' mapping")

        intervals: Dict[str, List[Interval]] = {}
        for worker_id, records in data.get("workers", {}).items():
            try:
                parsed = [IntervalRecord(**record) for record in records]
            except (TypeError, ValidationError) as exc:
                raise ScheduleDataError(f"Invalid record for worker '{worker_id}': {exc}") from exc
            intervals[worker_id] = [record.to_interval(timezone) for record in parsed]

        logger.info("Loaded schedules for %d worker(s) from %s", len(intervals), path)
        return cls(intervals)

    def save_json_file(self, path: Path) -> None:
        """Write all stored intervals to ``path``."""
        data = {
            "workers": {
                worker_id: [
                    IntervalRecord.from_interval(interval).model_dump(mode="json")
                    for interval in sorted(items, key=lambda i: i.start)
                ]
                for worker_id, items in sorted(self._intervals.items())
            }
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
