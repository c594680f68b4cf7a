"""Domain layer: exceptions shared by application and infrastructure.

No dependencies on infrastructure or presentation.
"""

from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    CaseSearchException,
    SearchBackendError,
    SearchIndexNotFoundError,
    SearchInputException,
    SearchTimeoutError,
    SqlNotConfiguredException,
    ValidationException,
)

__all__ = [
    "AuthenticationException",
    "AuthorizationException",
    "CaseSearchException",
    "SearchBackendError",
    "SearchIndexNotFoundError",
    "SearchInputException",
    "SearchTimeoutError",
    "SqlNotConfiguredException",
    "ValidationException",
]
