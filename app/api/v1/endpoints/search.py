"""Search API: permission-filtered search across cases, RIUs, investigations, persons, policies."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import CurrentPermissionContext, get_unified_search_service
from app.application.dtos.search import SearchRequest
from app.application.use_cases.search import UnifiedSearchService
from app.core.limiter import limit_search
from app.schemas.search import (
    EntityTypeResultResponse,
    PermissionAuditResponse,
    SuggestionResponse,
    SuggestResponse,
    UnifiedSearchResponse,
)

router = APIRouter()

SearchServiceDep = Annotated[UnifiedSearchService, Depends(get_unified_search_service)]


def _split_types(types: str | None) -> list[str] | None:
    """Parse comma-separated entity types; blanks are dropped, None means all."""
    if types is None:
        return None
    parsed = [t.strip() for t in types.split(",") if t.strip()]
    return parsed or None


@router.get("", response_model=UnifiedSearchResponse)
@limit_search
async def search(
    request: Request,
    ctx: CurrentPermissionContext,
    search_svc: SearchServiceDep,
    q: str = Query("", description="Free text; empty matches everything"),
    types: str | None = Query(
        None, description="Comma-separated entity types (default: all)"
    ),
    limit: int | None = Query(None, description="Max hits per entity type"),
    include_custom_fields: bool = Query(True),
) -> UnifiedSearchResponse:
    """Search every requested entity type the caller may see."""
    result = await search_svc.search(
        ctx,
        SearchRequest(
            query_text=q,
            entity_types=_split_types(types),
            limit=limit,
            include_custom_fields=include_custom_fields,
        ),
    )
    return UnifiedSearchResponse(
        query_text=result.query_text,
        total_authorized_hits=result.total_authorized_hits,
        elapsed_ms=result.elapsed_ms,
        results=[EntityTypeResultResponse.model_validate(r) for r in result.results],
        permissions=[PermissionAuditResponse.from_entry(e) for e in result.audit],
    )


@router.get("/suggest", response_model=SuggestResponse)
@limit_search
async def suggest(
    request: Request,
    ctx: CurrentPermissionContext,
    search_svc: SearchServiceDep,
    prefix: str = Query("", description="Typed prefix"),
    types: str | None = Query(None),
    limit: int = Query(5, description="Max suggestions per entity type"),
) -> SuggestResponse:
    """Prefix suggestions for type-ahead."""
    suggestions = await search_svc.suggest(ctx, prefix, _split_types(types), limit)
    return SuggestResponse(
        prefix=prefix,
        suggestions=[SuggestionResponse.model_validate(s) for s in suggestions],
    )


@router.get("/{entity_type}", response_model=EntityTypeResultResponse)
@limit_search
async def search_entity_type(
    request: Request,
    entity_type: str,
    ctx: CurrentPermissionContext,
    search_svc: SearchServiceDep,
    q: str = Query(""),
    limit: int | None = Query(None),
    include_custom_fields: bool = Query(True),
) -> EntityTypeResultResponse:
    """Search a single entity type."""
    result = await search_svc.search_entity_type(
        ctx, entity_type, q, limit, include_custom_fields
    )
    return EntityTypeResultResponse.model_validate(result)
