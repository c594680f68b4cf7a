"""Search engine adapter (Elasticsearch)."""

from app.infrastructure.search.client import create_es_client
from app.infrastructure.search.elasticsearch_engine import (
    ElasticsearchSearchEngine,
    build_search_body,
)

__all__ = [
    "ElasticsearchSearchEngine",
    "build_search_body",
    "create_es_client",
]
