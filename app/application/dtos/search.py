"""DTOs for permission-filtered search (no dependency on ORM or search client).

All types are request-scoped, immutable value objects.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from app.shared.enums import (
    QueryMode,
    SearchEntityType,
    SearchFailureKind,
    UserRole,
)


@dataclass(frozen=True)
class PermissionContext:
    """Caller identity for one request (built from the verified token)."""

    user_id: str
    tenant_id: str
    role: UserRole


@dataclass(frozen=True)
class SearchRequest:
    """Caller-supplied search parameters; validated by the orchestrator.

    entity_types and limit stay raw (strings / None) until validation so
    unknown tags can be reported back as input faults.
    """

    query_text: str = ""
    entity_types: Sequence[str] | None = None
    limit: int | None = None
    include_custom_fields: bool = True


# Permission filter clauses. Zero or more are ANDed into one entity query;
# an empty tuple means full access within the tenant.


@dataclass(frozen=True)
class IdsIn:
    """Document field value must be one of values."""

    field: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class FieldEquals:
    """Document field must equal value."""

    field: str
    value: str


@dataclass(frozen=True)
class MatchNone:
    """Always-false clause; reason is kept for the audit trail."""

    reason: str


PermissionFilterClause = Union[IdsIn, FieldEquals, MatchNone]


@dataclass(frozen=True)
class WeightedField:
    """Searchable field with relevance boost (path may end in .* for a group)."""

    path: str
    weight: float = 1.0


@dataclass(frozen=True)
class HighlightField:
    """Field eligible for excerpt highlighting."""

    path: str
    fragment_size: int = 150
    number_of_fragments: int = 2


@dataclass(frozen=True)
class EntityQuery:
    """Backend-neutral description of one bounded query against one index."""

    index: str
    mode: QueryMode
    text: str
    fields: tuple[WeightedField, ...]
    filters: tuple[PermissionFilterClause, ...]
    highlight_fields: tuple[HighlightField, ...]
    excluded_fields: frozenset[str]
    sort_field: str
    limit: int
    timeout_ms: int


@dataclass(frozen=True)
class EngineHit:
    """Raw hit as returned by a search engine adapter."""

    document_id: str
    score: float
    source: dict[str, Any]
    highlight: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class EngineResponse:
    """Engine answer: filtered total plus the returned page of hits."""

    total: int
    hits: list[EngineHit]


@dataclass(frozen=True)
class Hit:
    """Single search hit with redacted document and highlight fragments."""

    document_id: str
    entity_type: SearchEntityType
    relevance_score: float
    document: dict[str, Any]
    highlight_fragments: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class EntityTypeResult:
    """Results for one entity type.

    authorized_count is the count after permission filtering, never the
    raw match count.
    """

    entity_type: SearchEntityType
    authorized_count: int
    hits: list[Hit]

    @classmethod
    def empty(cls, entity_type: SearchEntityType) -> EntityTypeResult:
        return cls(entity_type=entity_type, authorized_count=0, hits=[])


@dataclass(frozen=True)
class SearchFailure:
    """Cause of a degraded (empty) per-type result."""

    kind: SearchFailureKind
    message: str


@dataclass(frozen=True)
class EntityTypeOutcome:
    """Success-or-empty-with-cause for one entity type branch."""

    result: EntityTypeResult
    permission_filters: tuple[PermissionFilterClause, ...]
    failure: SearchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def entity_type(self) -> SearchEntityType:
        return self.result.entity_type


@dataclass(frozen=True)
class PermissionAuditEntry:
    """Which permission clauses were applied to one entity type (and whether it degraded)."""

    entity_type: SearchEntityType
    clauses: tuple[PermissionFilterClause, ...]
    failure_kind: SearchFailureKind | None = None

    @property
    def unrestricted(self) -> bool:
        """True when the role had full tenant access (explicit empty clause set)."""
        return not self.clauses


@dataclass(frozen=True)
class UnifiedSearchResult:
    """Aggregated result: one EntityTypeResult per requested type, in request order."""

    query_text: str
    total_authorized_hits: int
    results: list[EntityTypeResult]
    elapsed_ms: int
    audit: list[PermissionAuditEntry] = field(default_factory=list)


@dataclass(frozen=True)
class Suggestion:
    """Prefix suggestion (display text of a matching, authorized document)."""

    entity_type: SearchEntityType
    document_id: str
    text: str
    score: float
