"""Custom exceptions for StudyTrack."""

from typing import Optional, Dict, Any


class StudyTrackError(Exception):
    """Base exception for all StudyTrack errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(StudyTrackError):
    """Input validation failed."""
    pass


class StatsValidationError(ValidationError):
    """A computed statistics snapshot violates one of its invariants."""

    def __init__(self, message: str, field: str, values: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            error_code="STATS_INVALID",
            details={'field': field, 'values': values or {}}
        )
        self.field = field
        self.values = values or {}


class ServiceError(StudyTrackError):
    """A plan or session service call failed."""
    pass


class NotFoundError(ServiceError):
    """Requested plan, chunk or session does not exist."""
    pass


class ExportError(StudyTrackError):
    """Report rendering or writing failed."""
    pass


class ConfigurationError(StudyTrackError):
    """Configuration error."""
    pass


class ModuleRegistrationError(StudyTrackError):
    """The TUI shell was built with an invalid module set."""
    pass
