"""
Domain errors raised by the service layer.

The API and the web views translate these at the request boundary.
"""
from typing import Iterable, List, Optional


class LeadManagementError(Exception):
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthorizationError(LeadManagementError):
    default_message = "You do not have permission to perform this action"


class NotFoundError(LeadManagementError):
    default_message = "Not found"


class ConflictError(LeadManagementError):
    """Stale or missing CSRF token. Reported by authentication.views.csrf_failure."""

    default_message = "Invalid form submission. Please try again."


class PersistenceError(LeadManagementError):
    default_message = "Operation failed. Please try again."


class ValidationError(LeadManagementError):
    default_message = "Validation failed"

    def __init__(self, errors: Iterable[str] = (), message: Optional[str] = None):
        self.errors: List[str] = list(errors)
        if message is None and len(self.errors) == 1:
            message = self.errors[0]
        super().__init__(message)
        if not self.errors:
            self.errors = [self.message]


class ImportFileError(ValidationError):
    """The uploaded file cannot be imported at all."""
