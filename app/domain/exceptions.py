"""Domain exceptions for the case search service.

Defines domain-level exceptions that represent rule violations. These
exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class CaseSearchException(Exception):
    """Base exception for all case search errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, entity_type).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(CaseSearchException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class SearchInputException(ValidationException):
    """Raised when a search request is rejected before any backend call.

    Covers unknown or duplicate entity-type tags, out-of-range limits,
    and over-long query text.
    """

    def __init__(
        self, message: str, field: str, value: Any | None = None
    ) -> None:
        super().__init__(message, field=field)
        if value is not None:
            self.details["value"] = value


class AuthenticationException(CaseSearchException):
    """Raised when authentication fails (e.g. invalid or missing token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(CaseSearchException):
    """Raised when the caller may not perform the operation at all."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'search').
            action: Optional action that was attempted (e.g. 'read').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class SqlNotConfiguredException(CaseSearchException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )


class SearchIndexNotFoundError(CaseSearchException):
    """Raised by a search engine adapter when the target index does not exist.

    Expected for tenants that have not indexed any documents of a type yet.
    Never propagates past the per-type executor.
    """

    def __init__(self, index_name: str) -> None:
        super().__init__(
            f"Search index not found: {index_name}",
            "SEARCH_INDEX_NOT_FOUND",
            {"index": index_name},
        )


class SearchBackendError(CaseSearchException):
    """Raised by a search engine adapter on transport, timeout, or query faults.

    Never propagates past the per-type executor.
    """

    def __init__(
        self,
        message: str,
        index_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if index_name:
            details["index"] = index_name
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, "SEARCH_BACKEND_ERROR", details)


class SearchTimeoutError(SearchBackendError):
    """Raised by a search engine adapter when the client gives up waiting."""

    def __init__(self, message: str, index_name: str | None = None) -> None:
        super().__init__(message, index_name=index_name)
        self.error_code = "SEARCH_TIMEOUT"
