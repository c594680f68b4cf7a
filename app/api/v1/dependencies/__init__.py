"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, not on infrastructure directly.
"""

from app.api.v1.dependencies.auth import (
    CurrentPermissionContext,
    get_permission_context,
)
from app.api.v1.dependencies.search import (
    get_assignment_repository,
    get_cache,
    get_permission_filter_builder,
    get_search_engine,
    get_unified_search_service,
)

__all__ = [
    "CurrentPermissionContext",
    "get_assignment_repository",
    "get_cache",
    "get_permission_context",
    "get_permission_filter_builder",
    "get_search_engine",
    "get_unified_search_service",
]
