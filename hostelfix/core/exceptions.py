"""
Core Exceptions
================

Exception hierarchy shared by every bounded context.

Each exception carries a user-facing ``message`` and machine-readable
``details``; `shared.api.middleware` maps the classes to HTTP status codes.
"""

from typing import Optional


class ApplicationException(Exception):
    """Root of every error the service raises on purpose."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """A business rule rejected the operation."""


class RepositoryException(ApplicationException):
    """Persistence failed or would break a storage invariant."""


class ValidationException(ApplicationException):
    """Exception for validation errors (blank title, unknown enum value)."""


class ResourceNotFoundException(ApplicationException):
    """Lookup by id found nothing."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConfigurationException(ApplicationException):
    """Missing or invalid configuration (env, policy file, provider keys)."""


class TransitionException(DomainException):
    """
    Raised when a ledger transition's precondition does not hold.

    The issue the transition was attempted on is left untouched.
    """

    def __init__(
        self,
        issue_id: str,
        action: str,
        reason: str,
        details: Optional[dict] = None
    ):
        self.issue_id = issue_id
        self.action = action
        self.reason = reason
        super().__init__(
            f"Cannot {action} issue {issue_id}: {reason}",
            details or {"issue_id": issue_id, "action": action, "reason": reason}
        )


class ConcurrentTransitionException(RepositoryException):
    """Raised when another writer appended to the same ledger first."""

    def __init__(self, issue_id: str, details: Optional[dict] = None):
        self.issue_id = issue_id
        super().__init__(
            f"Issue {issue_id} was modified concurrently, reload and retry",
            details or {"issue_id": issue_id}
        )


class ExternalServiceException(ApplicationException):
    """A collaborator outside the process failed."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class LLMException(ExternalServiceException):
    """Chat completion provider failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("LLM Service", message, details)


class AttachmentException(ExternalServiceException):
    """Evidence upload failed. Never fatal for issue creation."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Blob Store", message, details)


class SummaryNarrationException(ExternalServiceException):
    """Narration of a summary failed. Reports fall back to statistics only."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Narrator", message, details)
