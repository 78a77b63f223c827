"""
Admissibility checks for rest and work candidates.

This is pure domain logic: the validator is handed a worker-scoped snapshot
and a candidate, runs every applicable rule, and returns all violations found.
It never queries storage and never mutates its inputs.
"""

from typing import List, Optional

from .daily_aggregator import DailyDurationAggregator
from .exceptions import ScheduleContractError
from .models import Candidate, IntervalCategory, WorkerScheduleSnapshot
from .violations import (
    DailyBudgetExceeded,
    InvalidInterval,
    OverlapViolation,
    RestOverlapViolation,
    ValidationResult,
    Violation,
)


DEFAULT_DAILY_REST_BUDGET_HOURS = 2.0


class ConstraintValidator:
    """
    Decides whether a candidate interval is admissible for one worker.

    Rules:
    1. REST must not overlap the worker's WORK intervals
    2. REST per calendar day (candidate included) must not exceed the budget
    3. WORK must not overlap the worker's REST intervals
    4. Optionally, REST must not overlap the worker's other REST intervals

    Checks are not short-circuited, so the result lists every violation.
    """

    def __init__(
        self,
        daily_rest_budget_hours: float = DEFAULT_DAILY_REST_BUDGET_HOURS,
        aggregator: Optional[DailyDurationAggregator] = None,
        check_rest_overlaps: bool = False,
    ):
        if daily_rest_budget_hours <= 0:
            raise ValueError(
                f"daily_rest_budget_hours must be greater than zero, got {daily_rest_budget_hours}"
            )
        self.daily_rest_budget_hours = daily_rest_budget_hours
        self.aggregator = aggregator or DailyDurationAggregator()
        self.check_rest_overlaps = check_rest_overlaps

    def validate_rest_candidate(
        self,
        snapshot: WorkerScheduleSnapshot,
        candidate: Candidate,
    ) -> ValidationResult:
        """Validate a proposed rest period against the worker's schedule."""
        self._check_contract(snapshot, candidate, IntervalCategory.REST)

        interval = candidate.interval
        if not interval.is_valid():
            return ValidationResult(violations=[self._invalid(candidate)])

        violations: List[Violation] = []

        for work in snapshot.work_excluding(candidate.exclude_id):
            if interval.overlaps(work):
                violations.append(OverlapViolation(conflicting_interval=work))

        other_rest = snapshot.rest_excluding(candidate.exclude_id)

        if self.check_rest_overlaps:
            for rest in other_rest:
                if interval.overlaps(rest):
                    violations.append(RestOverlapViolation(conflicting_interval=rest))

        for day in self.aggregator.days_touched(interval):
            total = self.aggregator.daily_rest_hours(day, other_rest, interval)
            if total > self.daily_rest_budget_hours:
                violations.append(
                    DailyBudgetExceeded(
                        day=day.date,
                        total_hours=total,
                        budget_hours=self.daily_rest_budget_hours,
                    )
                )

        return ValidationResult(violations=violations)

    def validate_work_candidate(
        self,
        snapshot: WorkerScheduleSnapshot,
        candidate: Candidate,
    ) -> ValidationResult:
        """Validate a proposed work assignment against the worker's rest periods."""
        self._check_contract(snapshot, candidate, IntervalCategory.WORK)

        interval = candidate.interval
        if not interval.is_valid():
            return ValidationResult(violations=[self._invalid(candidate)])

        violations: List[Violation] = [
            OverlapViolation(conflicting_interval=rest)
            for rest in snapshot.rest_excluding(candidate.exclude_id)
            if interval.overlaps(rest)
        ]

        return ValidationResult(violations=violations)

    def validate(
        self,
        snapshot: WorkerScheduleSnapshot,
        candidate: Candidate,
    ) -> ValidationResult:
        """Dispatch on the candidate's category."""
        if candidate is not None and candidate.interval.category is IntervalCategory.WORK:
            return self.validate_work_candidate(snapshot, candidate)
        return self.validate_rest_candidate(snapshot, candidate)

    @staticmethod
    def _check_contract(
        snapshot: WorkerScheduleSnapshot,
        candidate: Candidate,
        expected: IntervalCategory,
    ) -> None:
        if snapshot is None:
            raise ScheduleContractError("A worker schedule snapshot is required")
        if candidate is None:
            raise ScheduleContractError("A candidate is required")
        if candidate.worker_id != snapshot.worker_id:
            raise ScheduleContractError(
                f"Candidate for worker '{candidate.worker_id}' cannot be validated "
                f"against the schedule of worker '{snapshot.worker_id}'"
            )
        if candidate.interval.category is not expected:
            raise ScheduleContractError(
                f"Expected a {expected.value} candidate, got {candidate.interval.category.value}"
            )

    @staticmethod
    def _invalid(candidate: Candidate) -> InvalidInterval:
        interval = candidate.interval
        return InvalidInterval(
            reason=(
                f"end {interval.end.to_iso8601_string()} is not after "
                f"start {interval.start.to_iso8601_string()}"
            )
        )
