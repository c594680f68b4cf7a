"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (search engine, assignment repo, cache).
"""

from app.application.interfaces import (
    ICacheService,
    ISearchAssignmentRepository,
    ISearchEngine,
)
from app.application.services.search_permission_filter import PermissionFilterBuilder
from app.application.use_cases.entity_type_search import EntityTypeSearchExecutor
from app.application.use_cases.search import UnifiedSearchService

__all__ = [
    "EntityTypeSearchExecutor",
    "ICacheService",
    "ISearchAssignmentRepository",
    "ISearchEngine",
    "PermissionFilterBuilder",
    "UnifiedSearchService",
]
