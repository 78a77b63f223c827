"""
Domain layer - Pure business logic without external dependencies.
"""

from .constraint_validator import ConstraintValidator
from .daily_aggregator import DailyDurationAggregator
from .models import (
    Candidate,
    DayBucket,
    Interval,
    IntervalCategory,
    WorkerScheduleSnapshot,
    overlaps,
)
from .violations import (
    DailyBudgetExceeded,
    InvalidInterval,
    OverlapViolation,
    RestOverlapViolation,
    ValidationResult,
    Violation,
)

__all__ = [
    "Candidate",
    "ConstraintValidator",
    "DailyBudgetExceeded",
    "DailyDurationAggregator",
    "DayBucket",
    "Interval",
    "IntervalCategory",
    "InvalidInterval",
    "OverlapViolation",
    "RestOverlapViolation",
    "ValidationResult",
    "Violation",
    "WorkerScheduleSnapshot",
    "overlaps",
]
