"""Application DTOs (no ORM dependency)."""

from app.application.dtos.search import (
    EngineHit,
    EngineResponse,
    EntityQuery,
    EntityTypeOutcome,
    EntityTypeResult,
    FieldEquals,
    HighlightField,
    Hit,
    IdsIn,
    MatchNone,
    PermissionAuditEntry,
    PermissionContext,
    PermissionFilterClause,
    SearchFailure,
    SearchRequest,
    Suggestion,
    UnifiedSearchResult,
    WeightedField,
)

__all__ = [
    "EngineHit",
    "EngineResponse",
    "EntityQuery",
    "EntityTypeOutcome",
    "EntityTypeResult",
    "FieldEquals",
    "HighlightField",
    "Hit",
    "IdsIn",
    "MatchNone",
    "PermissionAuditEntry",
    "PermissionContext",
    "PermissionFilterClause",
    "SearchFailure",
    "SearchRequest",
    "Suggestion",
    "UnifiedSearchResult",
    "WeightedField",
]
