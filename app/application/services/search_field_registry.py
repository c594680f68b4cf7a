"""Static per-entity-type search configuration.

Which fields are searched (with relevance weights), which are eligible
for highlighting, which feed prefix suggestions, and which fields title a
hit. No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from app.application.dtos.search import HighlightField, WeightedField
from app.shared.enums import SearchEntityType

CUSTOM_FIELDS_GROUP = "customFields.*"
RECENCY_FIELD = "createdAt"

_CUSTOM_FIELDS_SEARCH = WeightedField(CUSTOM_FIELDS_GROUP)
_CUSTOM_FIELDS_HIGHLIGHT = HighlightField(
    CUSTOM_FIELDS_GROUP, fragment_size=100, number_of_fragments=1
)


@dataclass(frozen=True)
class EntityFieldConfig:
    """Search configuration for one entity type."""

    search_fields: tuple[WeightedField, ...]
    highlight_fields: tuple[HighlightField, ...]
    suggest_fields: tuple[str, ...]
    title_fields: tuple[str, ...]
    sort_field: str = RECENCY_FIELD


def _w(path: str, weight: float = 1.0) -> WeightedField:
    return WeightedField(path, weight)


_NARRATIVE_HIGHLIGHTS = (
    HighlightField("details"),
    HighlightField("summary"),
    HighlightField("aiSummary"),
)

FIELD_REGISTRY: MappingProxyType[SearchEntityType, EntityFieldConfig] = MappingProxyType(
    {
        SearchEntityType.CASES: EntityFieldConfig(
            search_fields=(
                _w("referenceNumber", 10),
                _w("summary", 3),
                _w("details", 2),
                _w("aiSummary", 2),
                _w("categoryName", 2),
                _w("primaryCategoryName", 2),
                _w("locationName"),
                _w("locationCity"),
                _w("assigneeName"),
                _w("createdByName"),
            ),
            highlight_fields=_NARRATIVE_HIGHLIGHTS,
            suggest_fields=("referenceNumber", "summary"),
            title_fields=("referenceNumber",),
        ),
        SearchEntityType.RIUS: EntityFieldConfig(
            search_fields=(
                _w("referenceNumber", 10),
                _w("summary", 3),
                _w("details", 2),
                _w("aiSummary", 2),
                _w("categoryName", 2),
                _w("locationName"),
                _w("locationCity"),
                _w("createdByName"),
            ),
            highlight_fields=_NARRATIVE_HIGHLIGHTS,
            suggest_fields=("referenceNumber", "summary"),
            title_fields=("referenceNumber",),
        ),
        SearchEntityType.INVESTIGATIONS: EntityFieldConfig(
            search_fields=(
                _w("referenceNumber", 10),
                _w("title", 3),
                _w("description", 2),
                _w("findings", 2),
                _w("notes"),
                _w("primaryInvestigatorName"),
            ),
            highlight_fields=(
                HighlightField("description"),
                HighlightField("findings"),
                HighlightField("notes"),
            ),
            suggest_fields=("referenceNumber", "title"),
            title_fields=("title",),
        ),
        SearchEntityType.PERSONS: EntityFieldConfig(
            search_fields=(
                _w("employeeId", 5),
                _w("firstName", 3),
                _w("lastName", 3),
                _w("email", 2),
                _w("jobTitle"),
                _w("department"),
                _w("businessUnitName"),
                _w("locationName"),
            ),
            highlight_fields=(),
            suggest_fields=("firstName", "lastName", "employeeId"),
            title_fields=("firstName", "lastName"),
        ),
        SearchEntityType.POLICIES: EntityFieldConfig(
            search_fields=(
                _w("title", 5),
                _w("policyNumber", 5),
                _w("summary", 3),
                _w("content", 2),
                _w("categoryName"),
                _w("ownerName"),
            ),
            highlight_fields=(
                HighlightField("summary"),
                HighlightField("content"),
            ),
            suggest_fields=("title", "policyNumber"),
            title_fields=("title",),
        ),
    }
)


def get_field_config(entity_type: SearchEntityType) -> EntityFieldConfig:
    """Return the static configuration for entity_type."""
    return FIELD_REGISTRY[entity_type]


def get_search_fields(
    entity_type: SearchEntityType, include_custom_fields: bool
) -> tuple[WeightedField, ...]:
    """Weighted search fields, with the custom-field wildcard group appended when enabled."""
    fields = FIELD_REGISTRY[entity_type].search_fields
    if include_custom_fields:
        return fields + (_CUSTOM_FIELDS_SEARCH,)
    return fields


def get_highlight_fields(
    entity_type: SearchEntityType, include_custom_fields: bool
) -> tuple[HighlightField, ...]:
    """Highlight-eligible fields for entity_type."""
    fields = FIELD_REGISTRY[entity_type].highlight_fields
    if include_custom_fields:
        return fields + (_CUSTOM_FIELDS_HIGHLIGHT,)
    return fields
