"""
Domain-specific exception hierarchy for restguard.

Business rule failures are never raised; they are returned as violations.
These exceptions cover caller contract breaches and infrastructure problems.
"""


class RestGuardError(Exception):
    """Base class for all application-level errors."""


class ScheduleContractError(RestGuardError):
    """Raised when a caller breaks the validation contract (missing snapshot, wrong worker)."""


class RecordNotFoundError(RestGuardError):
    """Raised when an interval record to update does not exist for the worker."""


class ScheduleDataError(RestGuardError):
    """Raised when stored schedule data cannot be parsed into intervals."""
