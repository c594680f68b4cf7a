"""Per-entity-type query executor.

Runs one bounded, permission-filtered query against one tenant-scoped
index and turns every outcome (hits, absent index, timeout, backend or
lookup fault) into an EntityTypeOutcome value. Nothing raises past
execute() / suggest().
"""

from __future__ import annotations

import asyncio
import logging

from app.application.dtos.search import (
    EngineHit,
    EngineResponse,
    EntityQuery,
    EntityTypeOutcome,
    EntityTypeResult,
    HighlightField,
    Hit,
    MatchNone,
    PermissionContext,
    PermissionFilterClause,
    SearchFailure,
    WeightedField,
)
from app.application.interfaces.services import ISearchEngine
from app.application.services.index_resolver import IndexResolver
from app.application.services.search_field_registry import (
    get_field_config,
    get_highlight_fields,
    get_search_fields,
)
from app.application.services.search_field_visibility import (
    FieldVisibilityFilter,
    drop_excluded_fields,
    strip_fields,
    strip_highlights,
)
from app.application.services.search_permission_filter import PermissionFilterBuilder
from app.domain.exceptions import (
    SearchBackendError,
    SearchIndexNotFoundError,
    SearchTimeoutError,
    ValidationException,
)
from app.shared.enums import QueryMode, SearchEntityType, SearchFailureKind
from app.shared.telemetry.tracing import add_span_attributes, set_span_error, traced

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT_MS = 500
DEFAULT_LOOKUP_TIMEOUT_MS = 1000


class EntityTypeSearchExecutor:
    """Builds and issues one query per call; see module docstring for the contract."""

    def __init__(
        self,
        search_engine: ISearchEngine,
        index_resolver: IndexResolver,
        filter_builder: PermissionFilterBuilder,
        visibility_filter: FieldVisibilityFilter,
        timeout_ms: int = DEFAULT_QUERY_TIMEOUT_MS,
        lookup_timeout_ms: int = DEFAULT_LOOKUP_TIMEOUT_MS,
    ) -> None:
        self.search_engine = search_engine
        self.index_resolver = index_resolver
        self.filter_builder = filter_builder
        self.visibility_filter = visibility_filter
        self.timeout_ms = timeout_ms
        self.lookup_timeout_ms = lookup_timeout_ms

    @traced("search.entity_type.execute")
    async def execute(
        self,
        ctx: PermissionContext,
        entity_type: SearchEntityType,
        query_text: str,
        limit: int,
        include_custom_fields: bool = True,
    ) -> EntityTypeOutcome:
        """Weighted fuzzy search (or match-everything for blank text) on one entity type."""
        text = (query_text or "").strip()
        return await self._run(
            ctx,
            entity_type,
            mode=QueryMode.MATCH if text else QueryMode.MATCH_ALL,
            text=text,
            fields=get_search_fields(entity_type, include_custom_fields),
            highlight_fields=get_highlight_fields(entity_type, include_custom_fields),
            limit=limit,
        )

    @traced("search.entity_type.suggest")
    async def suggest(
        self,
        ctx: PermissionContext,
        entity_type: SearchEntityType,
        prefix: str,
        limit: int,
    ) -> EntityTypeOutcome:
        """Prefix match over the type's suggestion fields (no highlighting)."""
        config = get_field_config(entity_type)
        return await self._run(
            ctx,
            entity_type,
            mode=QueryMode.PREFIX,
            text=prefix.strip(),
            fields=tuple(WeightedField(path) for path in config.suggest_fields),
            highlight_fields=(),
            limit=limit,
        )

    async def _run(
        self,
        ctx: PermissionContext,
        entity_type: SearchEntityType,
        *,
        mode: QueryMode,
        text: str,
        fields: tuple[WeightedField, ...],
        highlight_fields: tuple[HighlightField, ...],
        limit: int,
    ) -> EntityTypeOutcome:
        try:
            index = self.index_resolver.resolve(ctx.tenant_id, entity_type)
            excluded = self.visibility_filter.excluded_fields(ctx, entity_type)
            sort_field = get_field_config(entity_type).sort_field
        except ValidationException as e:
            logger.warning(
                "No index for %s (tenant=%r): %s", entity_type.value, ctx.tenant_id, e.message
            )
            set_span_error(e)
            return _degraded(
                entity_type,
                (MatchNone("index unresolved"),),
                SearchFailureKind.INDEX_NOT_FOUND,
                e.message,
            )
        except Exception as e:
            logger.exception(
                "Could not prepare %s query (tenant=%r)", entity_type.value, ctx.tenant_id
            )
            set_span_error(e)
            return _degraded(
                entity_type,
                (MatchNone("query preparation failed"),),
                SearchFailureKind.BACKEND_ERROR,
                str(e),
            )

        add_span_attributes(
            **{
                "search.entity_type": entity_type.value,
                "search.index": index,
                "search.mode": mode.value,
                "search.limit": limit,
            }
        )

        try:
            filters = await asyncio.wait_for(
                self.filter_builder.build_filter(ctx, entity_type),
                timeout=self.lookup_timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            logger.warning(
                "Permission lookup timed out after %sms for %s (tenant=%s); returning empty results",
                self.lookup_timeout_ms,
                entity_type.value,
                ctx.tenant_id,
            )
            set_span_error(e)
            return _degraded(
                entity_type,
                (MatchNone("permission lookup timed out"),),
                SearchFailureKind.POLICY_LOOKUP_ERROR,
                f"permission lookup timed out after {self.lookup_timeout_ms}ms",
            )
        except Exception as e:
            logger.exception(
                "Permission lookup failed for %s (tenant=%s); returning empty results",
                entity_type.value,
                ctx.tenant_id,
            )
            set_span_error(e)
            return _degraded(
                entity_type,
                (MatchNone("permission lookup failed"),),
                SearchFailureKind.POLICY_LOOKUP_ERROR,
                str(e),
            )

        # An always-false clause can only produce zero rows.
        if any(isinstance(clause, MatchNone) for clause in filters):
            return EntityTypeOutcome(EntityTypeResult.empty(entity_type), filters)

        fields = drop_excluded_fields(fields, excluded)
        if not fields and mode is not QueryMode.MATCH_ALL:
            return EntityTypeOutcome(EntityTypeResult.empty(entity_type), filters)

        query = EntityQuery(
            index=index,
            mode=mode,
            text=text,
            fields=fields,
            filters=filters,
            highlight_fields=drop_excluded_fields(highlight_fields, excluded),
            excluded_fields=excluded,
            sort_field=sort_field,
            limit=limit,
            timeout_ms=self.timeout_ms,
        )

        try:
            response = await asyncio.wait_for(
                self.search_engine.search(query), timeout=self.timeout_ms / 1000
            )
        except SearchIndexNotFoundError:
            logger.debug("Index %s not found - returning empty results", index)
            return _degraded(
                entity_type, filters, SearchFailureKind.INDEX_NOT_FOUND, index
            )
        except (asyncio.TimeoutError, SearchTimeoutError) as e:
            logger.warning(
                "Search timed out after %sms for %s (tenant=%s)",
                self.timeout_ms,
                entity_type.value,
                ctx.tenant_id,
            )
            set_span_error(e)
            return _degraded(
                entity_type,
                filters,
                SearchFailureKind.TIMEOUT,
                f"timed out after {self.timeout_ms}ms",
            )
        except SearchBackendError as e:
            logger.error(
                "Search failed for %s (tenant=%s): %s",
                entity_type.value,
                ctx.tenant_id,
                e.message,
            )
            set_span_error(e)
            return _degraded(
                entity_type, filters, SearchFailureKind.BACKEND_ERROR, e.message
            )
        except Exception as e:
            logger.exception(
                "Unexpected search failure for %s (tenant=%s)",
                entity_type.value,
                ctx.tenant_id,
            )
            set_span_error(e)
            return _degraded(
                entity_type, filters, SearchFailureKind.BACKEND_ERROR, str(e)
            )

        result = _to_result(entity_type, response, excluded, query.sort_field, limit)
        add_span_attributes(**{"search.authorized_count": result.authorized_count})
        return EntityTypeOutcome(result, filters)


def _degraded(
    entity_type: SearchEntityType,
    filters: tuple[PermissionFilterClause, ...],
    kind: SearchFailureKind,
    message: str,
) -> EntityTypeOutcome:
    return EntityTypeOutcome(
        EntityTypeResult.empty(entity_type),
        filters,
        SearchFailure(kind=kind, message=message),
    )


def _to_result(
    entity_type: SearchEntityType,
    response: EngineResponse,
    excluded: frozenset[str],
    sort_field: str,
    limit: int,
) -> EntityTypeResult:
    """Redact, order (score desc, then recency desc) and truncate engine hits."""
    ordered: list[EngineHit] = sorted(
        response.hits, key=lambda h: str(h.source.get(sort_field) or ""), reverse=True
    )
    ordered.sort(key=lambda h: h.score, reverse=True)
    hits = [
        Hit(
            document_id=raw.document_id,
            entity_type=entity_type,
            relevance_score=raw.score,
            document=strip_fields(raw.source, excluded),
            highlight_fragments=strip_highlights(raw.highlight, excluded),
        )
        for raw in ordered[:limit]
    ]
    return EntityTypeResult(
        entity_type=entity_type,
        authorized_count=response.total,
        hits=hits,
    )
