"""
Application service that guards schedule mutations.

The domain validator is pure and judges a candidate against whatever snapshot
it is given. Two concurrent submissions for the same worker could each pass
against a snapshot missing the other. This service closes that gap by running
"fetch snapshot -> validate -> persist" under a lock scoped to the worker, so
submissions for one worker are serialized while different workers proceed in
parallel.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional, Protocol, Tuple

from pendulum import DateTime

from ..domain.constraint_validator import ConstraintValidator
from ..domain.exceptions import RecordNotFoundError, ScheduleContractError
from ..domain.models import Candidate, Interval, IntervalCategory, WorkerScheduleSnapshot
from ..domain.violations import ValidationResult


logger = logging.getLogger(__name__)


class ScheduleRepositoryProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    async def get_snapshot(self, worker_id: str) -> WorkerScheduleSnapshot:
        """Return only this worker's rest and work intervals."""

    async def add_interval(self, worker_id: str, interval: Interval) -> None:
        """Persist a new interval."""

    async def replace_interval(self, worker_id: str, interval: Interval) -> None:
        """Persist a changed interval, matched by id."""

    async def list_workers(self) -> List[str]:
        """Return known worker ids."""


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of a guarded submission."""
    result: ValidationResult
    interval: Interval
    persisted: bool

    @property
    def accepted(self) -> bool:
        return self.result.accepted


class ScheduleGuardService:
    """
    Orchestrates snapshot retrieval, validation and persistence.

    Dependency inversion toward a protocol makes it easy to plug in a real
    database-backed repository or the in-memory one in tests.
    """

    def __init__(
        self,
        repository: ScheduleRepositoryProtocol,
        validator: ConstraintValidator,
    ) -> None:
        self._repository = repository
        self._validator = validator
        # worker id -> (lock, number of tasks holding or waiting for it)
        self._locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _worker_boundary(self, worker_id: str) -> AsyncIterator[None]:
        """Hold the worker's lock; the lock is dropped once nobody uses it."""
        lock, users = self._locks.get(worker_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[worker_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[worker_id]
            if users == 1:
                del self._locks[worker_id]
            else:
                self._locks[worker_id] = (lock, users - 1)

    async def submit_rest(
        self,
        worker_id: str,
        start: DateTime,
        end: DateTime,
        *,
        record_id: Optional[str] = None,
        commit: bool = True,
    ) -> SubmissionOutcome:
        """Validate and, if admissible, store a new rest period.

        Raises:
            ScheduleContractError: If ``record_id`` is already used by this worker
        """
        interval = Interval(start=start, end=end, category=IntervalCategory.REST, id=record_id)
        return await self._submit(worker_id, interval, exclude_id=None, commit=commit)

    async def submit_work(
        self,
        worker_id: str,
        start: DateTime,
        end: DateTime,
        *,
        record_id: Optional[str] = None,
        commit: bool = True,
    ) -> SubmissionOutcome:
        """Validate and, if admissible, store a new work assignment."""
        interval = Interval(start=start, end=end, category=IntervalCategory.WORK, id=record_id)
        return await self._submit(worker_id, interval, exclude_id=None, commit=commit)

    async def update_interval(
        self,
        worker_id: str,
        record_id: str,
        start: DateTime,
        end: DateTime,
        *,
        category: Optional[IntervalCategory] = None,
        commit: bool = True,
    ) -> SubmissionOutcome:
        """
        Re-validate an existing record with new bounds.

        The record keeps its category and is excluded from its own checks.

        Raises:
            RecordNotFoundError: If the worker has no record with this id
            ScheduleContractError: If ``category`` is given and differs from the record's
        """
        async with self._worker_boundary(worker_id):
            snapshot = await self._repository.get_snapshot(worker_id)
            existing = snapshot.find(record_id)
            if existing is None:
                raise RecordNotFoundError(f"No interval '{record_id}' for worker '{worker_id}'")
            if category is not None and existing.category is not category:
                raise ScheduleContractError(
                    f"Record '{record_id}' is a {existing.category.value} interval, not {category.value}"
                )

            interval = Interval(start=start, end=end, category=existing.category, id=record_id)
            return await self._validate_and_store(
                snapshot, interval, exclude_id=record_id, commit=commit, replace=True
            )

    async def check(
        self,
        worker_id: str,
        interval: Interval,
        *,
        exclude_id: Optional[str] = None,
    ) -> ValidationResult:
        """Validate a candidate without persisting it."""
        snapshot = await self._repository.get_snapshot(worker_id)
        candidate = Candidate(interval=interval, worker_id=worker_id, exclude_id=exclude_id)
        return self._validator.validate(snapshot, candidate)

    @property
    def validator(self) -> ConstraintValidator:
        return self._validator

    async def get_snapshot(self, worker_id: str) -> WorkerScheduleSnapshot:
        return await self._repository.get_snapshot(worker_id)

    async def list_workers(self) -> List[str]:
        return await self._repository.list_workers()

    async def _submit(
        self,
        worker_id: str,
        interval: Interval,
        *,
        exclude_id: Optional[str],
        commit: bool,
    ) -> SubmissionOutcome:
        async with self._worker_boundary(worker_id):
            snapshot = await self._repository.get_snapshot(worker_id)
            return await self._validate_and_store(
                snapshot, interval, exclude_id=exclude_id, commit=commit, replace=False
            )

    async def _validate_and_store(
        self,
        snapshot: WorkerScheduleSnapshot,
        interval: Interval,
        *,
        exclude_id: Optional[str],
        commit: bool,
        replace: bool,
    ) -> SubmissionOutcome:
        worker_id = snapshot.worker_id
        if not replace and interval.id is not None and snapshot.find(interval.id) is not None:
            raise ScheduleContractError(
                f"Worker '{worker_id}' already has an interval '{interval.id}'"
            )

        candidate = Candidate(interval=interval, worker_id=worker_id, exclude_id=exclude_id)
        result = self._validator.validate(snapshot, candidate)

        if not result.accepted:
            logger.info(
                "Rejected %s for worker %s: %s",
                interval,
                worker_id,
                ", ".join(result.codes()),
            )
            return SubmissionOutcome(result=result, interval=interval, persisted=False)

        if not commit:
            logger.debug("Accepted %s for worker %s (dry run)", interval, worker_id)
            return SubmissionOutcome(result=result, interval=interval, persisted=False)

        if interval.id is None:
            interval = Interval(
                start=interval.start,
                end=interval.end,
                category=interval.category,
                id=uuid.uuid4().hex,
            )

        if replace:
            await self._repository.replace_interval(worker_id, interval)
        else:
            await self._repository.add_interval(worker_id, interval)

        logger.info("Accepted %s for worker %s", interval, worker_id)
        return SubmissionOutcome(result=result, interval=interval, persisted=True)
