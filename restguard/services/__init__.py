"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .schedule_guard import ScheduleGuardService, ScheduleRepositoryProtocol, SubmissionOutcome

__all__ = ["ScheduleGuardService", "ScheduleRepositoryProtocol", "SubmissionOutcome"]
