"""Application use cases: one entry point per workflow."""

from app.application.use_cases.entity_type_search import EntityTypeSearchExecutor
from app.application.use_cases.search import UnifiedSearchService

__all__ = [
    "EntityTypeSearchExecutor",
    "UnifiedSearchService",
]
