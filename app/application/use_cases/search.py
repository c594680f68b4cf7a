"""Unified search use case: validates, fans out per entity type, aggregates."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence

from app.application.dtos.search import (
    EntityTypeOutcome,
    EntityTypeResult,
    PermissionAuditEntry,
    PermissionContext,
    SearchRequest,
    Suggestion,
    UnifiedSearchResult,
)
from app.application.services.search_field_registry import get_field_config
from app.application.use_cases.entity_type_search import EntityTypeSearchExecutor
from app.core.tenant_validation import is_valid_tenant_id_format
from app.domain.exceptions import SearchInputException
from app.shared.enums import SearchEntityType
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

DEFAULT_ENTITY_TYPES: tuple[SearchEntityType, ...] = tuple(SearchEntityType)
DEFAULT_LIMIT = 10
DEFAULT_SUGGEST_LIMIT = 5
MAX_LIMIT = 100
MAX_QUERY_LENGTH = 500


class UnifiedSearchService:
    """Permission-filtered search across entity types for one tenant.

    Input faults raise SearchInputException before any backend call. After
    validation nothing raises: a failing entity type comes back empty and
    its failure kind is recorded in the audit trail.
    """

    def __init__(
        self,
        executor: EntityTypeSearchExecutor,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        max_query_length: int = MAX_QUERY_LENGTH,
    ) -> None:
        self.executor = executor
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.max_query_length = max_query_length

    @traced("search.unified")
    async def search(
        self, ctx: PermissionContext, request: SearchRequest
    ) -> UnifiedSearchResult:
        """Search every requested entity type concurrently.

        Results are returned in request order (or the default type order)
        regardless of which branch finishes first.
        """
        self._check_context(ctx)
        entity_types = self._resolve_types(request.entity_types)
        limit = self._resolve_limit(request.limit, self.default_limit)
        query_text = self._check_text(request.query_text, "query_text")
        add_span_attributes(
            **{
                "search.entity_types": ",".join(t.value for t in entity_types),
                "search.limit": limit,
            }
        )

        started = time.monotonic()
        outcomes = await _fan_out(
            entity_types,
            lambda entity_type: self.executor.execute(
                ctx,
                entity_type,
                query_text,
                limit,
                request.include_custom_fields,
            ),
        )
        elapsed_ms = int((time.monotonic() - started) * 1000)

        results = [outcome.result for outcome in outcomes]
        total = sum(result.authorized_count for result in results)
        audit = [_audit_entry(outcome) for outcome in outcomes]
        failed = [o.entity_type.value for o in outcomes if not o.ok]

        add_span_attributes(
            **{"search.total_authorized_hits": total, "search.elapsed_ms": elapsed_ms}
        )
        logger.info(
            "Search tenant=%s user=%s role=%s types=%s total=%d elapsed_ms=%d failed=%s",
            ctx.tenant_id,
            ctx.user_id,
            ctx.role.value,
            ",".join(t.value for t in entity_types),
            total,
            elapsed_ms,
            ",".join(failed) or "-",
        )
        return UnifiedSearchResult(
            query_text=query_text,
            total_authorized_hits=total,
            results=results,
            elapsed_ms=elapsed_ms,
            audit=audit,
        )

    @traced("search.entity_type")
    async def search_entity_type(
        self,
        ctx: PermissionContext,
        entity_type: str,
        query_text: str = "",
        limit: int | None = None,
        include_custom_fields: bool = True,
    ) -> EntityTypeResult:
        """Single-type search; same validation and fail-soft contract as search()."""
        self._check_context(ctx)
        (resolved,) = self._resolve_types([entity_type])
        outcome = await self.executor.execute(
            ctx,
            resolved,
            self._check_text(query_text, "query_text"),
            self._resolve_limit(limit, self.default_limit),
            include_custom_fields,
        )
        if not outcome.ok:
            logger.info(
                "Search tenant=%s type=%s degraded: %s",
                ctx.tenant_id,
                resolved.value,
                outcome.failure.kind.value,
            )
        return outcome.result

    @traced("search.suggest")
    async def suggest(
        self,
        ctx: PermissionContext,
        prefix: str,
        entity_types: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Suggestion]:
        """Prefix suggestions, at most limit per type, grouped in type order."""
        self._check_context(ctx)
        types = self._resolve_types(entity_types)
        per_type = self._resolve_limit(limit, DEFAULT_SUGGEST_LIMIT)
        prefix = self._check_text(prefix, "prefix")
        if not prefix:
            return []

        outcomes = await _fan_out(
            types,
            lambda entity_type: self.executor.suggest(ctx, entity_type, prefix, per_type),
        )
        suggestions: list[Suggestion] = []
        for outcome in outcomes:
            title_fields = get_field_config(outcome.entity_type).title_fields
            for hit in outcome.result.hits:
                text = " ".join(
                    str(hit.document[f]) for f in title_fields if hit.document.get(f)
                )
                suggestions.append(
                    Suggestion(
                        entity_type=hit.entity_type,
                        document_id=hit.document_id,
                        text=text or hit.document_id,
                        score=hit.relevance_score,
                    )
                )
        return suggestions

    def _check_context(self, ctx: PermissionContext) -> None:
        if not is_valid_tenant_id_format(ctx.tenant_id):
            raise SearchInputException(
                "Invalid tenant id", field="tenant_id", value=ctx.tenant_id
            )

    def _resolve_types(
        self, requested: Sequence[str] | None
    ) -> tuple[SearchEntityType, ...]:
        if not requested:
            return DEFAULT_ENTITY_TYPES
        resolved: list[SearchEntityType] = []
        for tag in requested:
            try:
                entity_type = SearchEntityType(tag)
            except ValueError:
                raise SearchInputException(
                    f"Unknown entity type: {tag}. Allowed: {', '.join(SearchEntityType.values())}",
                    field="entity_types",
                    value=tag,
                ) from None
            if entity_type in resolved:
                raise SearchInputException(
                    f"Duplicate entity type: {tag}", field="entity_types", value=tag
                )
            resolved.append(entity_type)
        return tuple(resolved)

    def _resolve_limit(self, limit: int | None, default: int) -> int:
        if limit is None:
            return default
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise SearchInputException("limit must be an integer", field="limit", value=limit)
        if limit <= 0 or limit > self.max_limit:
            raise SearchInputException(
                f"limit must be between 1 and {self.max_limit}",
                field="limit",
                value=limit,
            )
        return limit

    def _check_text(self, text: str | None, field: str) -> str:
        text = text or ""
        if len(text) > self.max_query_length:
            raise SearchInputException(
                f"{field} must be at most {self.max_query_length} characters",
                field=field,
            )
        return text.strip()


async def _fan_out(
    entity_types: Sequence[SearchEntityType],
    run: Callable[[SearchEntityType], Awaitable[EntityTypeOutcome]],
) -> list[EntityTypeOutcome]:
    """Run one branch per type concurrently; results follow entity_types order."""
    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(run(entity_type)) for entity_type in entity_types]
    return [task.result() for task in tasks]


def _audit_entry(outcome: EntityTypeOutcome) -> PermissionAuditEntry:
    return PermissionAuditEntry(
        entity_type=outcome.entity_type,
        clauses=outcome.permission_filters,
        failure_kind=outcome.failure.kind if outcome.failure else None,
    )
