"""Search service dependencies (composition root).

Long-lived clients (search engine, cache) live on app.state and are
created in the lifespan; per-request objects are cheap to build.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from app.application.interfaces.services import ICacheService, ISearchEngine
from app.application.services.index_resolver import IndexResolver
from app.application.services.search_field_visibility import FieldVisibilityFilter
from app.application.services.search_permission_filter import PermissionFilterBuilder
from app.application.use_cases.entity_type_search import EntityTypeSearchExecutor
from app.application.use_cases.search import UnifiedSearchService
from app.core.config import get_settings
from app.infrastructure.persistence.repositories.search_assignment_repo import (
    SearchAssignmentRepository,
)


def get_search_engine(request: Request) -> ISearchEngine:
    """Shared search engine adapter from app.state; 503 before startup completes."""
    engine = getattr(request.app.state, "search_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Search engine not available")
    return engine


def get_cache(request: Request) -> ICacheService | None:
    """Redis cache from app.state (None when disabled)."""
    return getattr(request.app.state, "cache", None)


def get_assignment_repository() -> SearchAssignmentRepository:
    """Assignment lookups over the shared session factory (one session per lookup).

    The factory is resolved on first lookup, so roles with full access
    never need DATABASE_URL.
    """
    return SearchAssignmentRepository()


def get_permission_filter_builder(
    repo: Annotated[SearchAssignmentRepository, Depends(get_assignment_repository)],
    cache: Annotated[ICacheService | None, Depends(get_cache)],
) -> PermissionFilterBuilder:
    """Permission filter builder with optional assignment cache."""
    return PermissionFilterBuilder(
        repo,
        cache=cache,
        cache_ttl=get_settings().cache_ttl_search_assignments,
    )


def get_unified_search_service(
    engine: Annotated[ISearchEngine, Depends(get_search_engine)],
    filter_builder: Annotated[
        PermissionFilterBuilder, Depends(get_permission_filter_builder)
    ],
) -> UnifiedSearchService:
    """Build UnifiedSearchService from settings and request-scoped collaborators."""
    settings = get_settings()
    executor = EntityTypeSearchExecutor(
        search_engine=engine,
        index_resolver=IndexResolver(settings.search_index_prefix),
        filter_builder=filter_builder,
        visibility_filter=FieldVisibilityFilter(),
        timeout_ms=settings.search_query_timeout_ms,
        lookup_timeout_ms=settings.search_lookup_timeout_ms,
    )
    return UnifiedSearchService(
        executor,
        default_limit=settings.search_default_limit,
        max_limit=settings.search_max_limit,
        max_query_length=settings.search_max_query_length,
    )
