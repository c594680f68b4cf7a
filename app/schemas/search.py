"""Search API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.search import (
    FieldEquals,
    IdsIn,
    MatchNone,
    PermissionAuditEntry,
    PermissionFilterClause,
)
from app.shared.enums import SearchEntityType, SearchFailureKind


class HitResponse(BaseModel):
    """Single authorized, redacted search hit."""

    model_config = ConfigDict(from_attributes=True)

    document_id: str
    entity_type: SearchEntityType
    relevance_score: float
    document: dict[str, Any]
    highlight_fragments: dict[str, list[str]] = Field(default_factory=dict)


class EntityTypeResultResponse(BaseModel):
    """Results for one entity type (authorized_count is post-permission)."""

    model_config = ConfigDict(from_attributes=True)

    entity_type: SearchEntityType
    authorized_count: int
    hits: list[HitResponse]


class PermissionClauseResponse(BaseModel):
    """One applied permission clause: ids_in | field_equals | match_none."""

    kind: str
    field: str | None = None
    values: list[str] | None = None
    value: str | None = None
    reason: str | None = None

    @classmethod
    def from_clause(cls, clause: PermissionFilterClause) -> "PermissionClauseResponse":
        if isinstance(clause, IdsIn):
            return cls(kind="ids_in", field=clause.field, values=list(clause.values))
        if isinstance(clause, FieldEquals):
            return cls(kind="field_equals", field=clause.field, value=clause.value)
        if isinstance(clause, MatchNone):
            return cls(kind="match_none", reason=clause.reason)
        raise TypeError(f"Unsupported filter clause: {clause!r}")


class PermissionAuditResponse(BaseModel):
    """Permission filters applied to one entity type for this request."""

    entity_type: SearchEntityType
    unrestricted: bool
    clauses: list[PermissionClauseResponse]
    failure_kind: SearchFailureKind | None = None

    @classmethod
    def from_entry(cls, entry: PermissionAuditEntry) -> "PermissionAuditResponse":
        return cls(
            entity_type=entry.entity_type,
            unrestricted=entry.unrestricted,
            clauses=[PermissionClauseResponse.from_clause(c) for c in entry.clauses],
            failure_kind=entry.failure_kind,
        )


class UnifiedSearchResponse(BaseModel):
    """Response for GET /search: one result block per requested entity type."""

    query_text: str
    total_authorized_hits: int
    elapsed_ms: int
    results: list[EntityTypeResultResponse]
    permissions: list[PermissionAuditResponse] = Field(default_factory=list)


class SuggestionResponse(BaseModel):
    """Prefix suggestion."""

    model_config = ConfigDict(from_attributes=True)

    entity_type: SearchEntityType
    document_id: str
    text: str
    score: float


class SuggestResponse(BaseModel):
    """Response for GET /search/suggest."""

    prefix: str
    suggestions: list[SuggestionResponse]
