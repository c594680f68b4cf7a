"""Pydantic request/response schemas for the API."""

from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from app.schemas.search import (
    EntityTypeResultResponse,
    HitResponse,
    PermissionAuditResponse,
    PermissionClauseResponse,
    SuggestionResponse,
    SuggestResponse,
    UnifiedSearchResponse,
)

__all__ = [
    "EntityTypeResultResponse",
    "HealthResponse",
    "HitResponse",
    "PermissionAuditResponse",
    "PermissionClauseResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "SuggestResponse",
    "SuggestionResponse",
    "UnifiedSearchResponse",
]
