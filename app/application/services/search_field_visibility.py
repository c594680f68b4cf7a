"""Field-level redaction for search results (orthogonal to row-level filters)."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from app.application.dtos.search import HighlightField, PermissionContext, WeightedField
from app.shared.enums import SearchEntityType, UserRole

F = TypeVar("F", WeightedField, HighlightField)


@dataclass(frozen=True)
class FieldVisibilityRule:
    """fields of entity_types are hidden from every role not in allowed_roles."""

    entity_types: frozenset[SearchEntityType]
    fields: frozenset[str]
    allowed_roles: frozenset[UserRole]


_PII_REVIEWERS = frozenset(
    {
        UserRole.SYSTEM_ADMIN,
        UserRole.CCO,
        UserRole.COMPLIANCE_OFFICER,
        UserRole.TRIAGE_LEAD,
    }
)

FIELD_VISIBILITY_RULES: tuple[FieldVisibilityRule, ...] = (
    FieldVisibilityRule(
        entity_types=frozenset({SearchEntityType.CASES}),
        fields=frozenset(
            {
                "reporterName",
                "reporterEmail",
                "reporterPhone",
                "associations.persons.personEmail",
            }
        ),
        allowed_roles=_PII_REVIEWERS,
    ),
    # Operators take the hotline call and already know the reporter.
    FieldVisibilityRule(
        entity_types=frozenset({SearchEntityType.RIUS}),
        fields=frozenset({"reporterName", "reporterEmail", "reporterPhone"}),
        allowed_roles=_PII_REVIEWERS | {UserRole.OPERATOR},
    ),
    FieldVisibilityRule(
        entity_types=frozenset({SearchEntityType.PERSONS}),
        fields=frozenset({"email", "phone", "homeAddress", "dateOfBirth"}),
        allowed_roles=frozenset(
            {
                UserRole.SYSTEM_ADMIN,
                UserRole.CCO,
                UserRole.COMPLIANCE_OFFICER,
                UserRole.HR_PARTNER,
            }
        ),
    ),
    FieldVisibilityRule(
        entity_types=frozenset({SearchEntityType.INVESTIGATIONS}),
        fields=frozenset({"privilegedNotes"}),
        allowed_roles=frozenset(
            {UserRole.SYSTEM_ADMIN, UserRole.CCO, UserRole.LEGAL_COUNSEL}
        ),
    ),
)


class FieldVisibilityFilter:
    """Computes and applies per-role field exclusions. Pure; no I/O."""

    def __init__(
        self, rules: Iterable[FieldVisibilityRule] = FIELD_VISIBILITY_RULES
    ) -> None:
        self.rules = tuple(rules)

    def excluded_fields(
        self, ctx: PermissionContext, entity_type: SearchEntityType
    ) -> frozenset[str]:
        """Return dotted field paths that must not reach this caller."""
        excluded: set[str] = set()
        for rule in self.rules:
            if entity_type in rule.entity_types and ctx.role not in rule.allowed_roles:
                excluded |= rule.fields
        return frozenset(excluded)


def strip_fields(document: Mapping[str, Any], excluded: Iterable[str]) -> dict[str, Any]:
    """Return a copy of document without the dotted paths in excluded.

    Paths descend through nested dicts and through every element of lists
    (associations.persons.personEmail removes personEmail from each person).
    """
    result = _copy(document)
    for path in excluded:
        _remove_path(result, path.split("."))
    return result


def strip_highlights(
    highlight: Mapping[str, list[str]], excluded: Iterable[str]
) -> dict[str, list[str]]:
    """Drop highlight fragments for excluded fields or anything nested under them."""
    excluded = tuple(excluded)
    return {
        field: list(fragments)
        for field, fragments in highlight.items()
        if not any(field == path or field.startswith(f"{path}.") for path in excluded)
    }


def drop_excluded_fields(fields: Iterable[F], excluded: Iterable[str]) -> tuple[F, ...]:
    """Remove query fields (anything with a .path) that are excluded or nested under one.

    Callers never match on a field that is hidden from them.
    """
    excluded = tuple(excluded)
    return tuple(
        f
        for f in fields
        if not any(f.path == path or f.path.startswith(f"{path}.") for path in excluded)
    )


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _copy(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_copy(item) for item in value]
    return value


def _remove_path(node: Any, parts: list[str]) -> None:
    if isinstance(node, list):
        for item in node:
            _remove_path(item, parts)
        return
    if not isinstance(node, dict) or not parts:
        return
    head, rest = parts[0], parts[1:]
    if not rest:
        node.pop(head, None)
    elif head in node:
        _remove_path(node[head], rest)
