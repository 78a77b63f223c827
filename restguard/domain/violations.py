"""
Violation taxonomy and the validation result type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Tuple

from pendulum import Date

from .models import Interval


def _interval_payload(interval: Interval) -> Dict[str, Any]:
    return {
        "id": interval.id,
        "category": interval.category.value,
        "start": interval.start.to_iso8601_string(),
        "end": interval.end.to_iso8601_string(),
    }


@dataclass(frozen=True)
class Violation:
    """Base class for one independently reportable rejection reason."""
    code: ClassVar[str] = "violation"

    def describe(self) -> str:
        return self.code

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.describe()}


@dataclass(frozen=True)
class InvalidInterval(Violation):
    """End is not strictly after start."""
    code: ClassVar[str] = "invalid_interval"
    reason: str

    def describe(self) -> str:
        return f"Invalid interval: {self.reason}"


@dataclass(frozen=True)
class OverlapViolation(Violation):
    """Candidate intersects an interval of the opposing category."""
    code: ClassVar[str] = "overlap"
    conflicting_interval: Interval

    def describe(self) -> str:
        return f"Overlaps existing {self.conflicting_interval}"

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["conflicting_interval"] = _interval_payload(self.conflicting_interval)
        return payload


@dataclass(frozen=True)
class RestOverlapViolation(Violation):
    """Rest candidate intersects another rest interval (optional check)."""
    code: ClassVar[str] = "rest_overlap"
    conflicting_interval: Interval

    def describe(self) -> str:
        return f"Overlaps existing rest period {self.conflicting_interval}"

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["conflicting_interval"] = _interval_payload(self.conflicting_interval)
        return payload


@dataclass(frozen=True)
class DailyBudgetExceeded(Violation):
    """Cumulative rest on a day, candidate included, exceeds the budget."""
    code: ClassVar[str] = "daily_budget_exceeded"
    day: Date
    total_hours: float
    budget_hours: float = 2.0

    def describe(self) -> str:
        return (
            f"Rest on {self.day.format('DD.MM.YYYY')} would total "
            f"{self.total_hours:.2f}h (limit {self.budget_hours:.2f}h)"
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update(
            day=self.day.isoformat(),
            total_hours=self.total_hours,
            budget_hours=self.budget_hours,
        )
        return payload


@dataclass(frozen=True)
class ValidationResult:
    """
    Decision for one candidate: accepted iff no violation was found.
    """
    HTTP_STATUS_ACCEPTED: ClassVar[int] = 200
    HTTP_STATUS_REJECTED: ClassVar[int] = 422

    violations: Tuple[Violation, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "violations", tuple(self.violations))

    @property
    def accepted(self) -> bool:
        return not self.violations

    @property
    def http_status(self) -> int:
        """Status a web caller should answer with."""
        return self.HTTP_STATUS_ACCEPTED if self.accepted else self.HTTP_STATUS_REJECTED

    def codes(self) -> List[str]:
        """Violation codes in report order."""
        return [v.code for v in self.violations]

    def of_type(self, violation_type: type) -> List[Violation]:
        return [v for v in self.violations if isinstance(v, violation_type)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "status": self.http_status,
            "violations": [v.to_dict() for v in self.violations],
        }
