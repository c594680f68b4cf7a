"""Elasticsearch async client factory."""

from __future__ import annotations

from elasticsearch import AsyncElasticsearch

from app.core.config import Settings


def create_es_client(settings: Settings) -> AsyncElasticsearch:
    """Create the shared AsyncElasticsearch client.

    Args:
        settings: Application settings (URL, credentials, TLS, transport timeout).

    Returns:
        AsyncElasticsearch instance. Close it on shutdown.

    Raises:
        ValueError: If ELASTICSEARCH_URL is not set.
    """
    if not settings.elasticsearch_url:
        raise ValueError("ELASTICSEARCH_URL is required.")

    if settings.elasticsearch_username and settings.elasticsearch_password:
        return AsyncElasticsearch(
            hosts=[settings.elasticsearch_url],
            basic_auth=(
                settings.elasticsearch_username,
                settings.elasticsearch_password.get_secret_value(),
            ),
            verify_certs=settings.elasticsearch_verify_certs,
            request_timeout=settings.elasticsearch_request_timeout_seconds,
        )

    # No auth (local development)
    return AsyncElasticsearch(
        hosts=[settings.elasticsearch_url],
        verify_certs=settings.elasticsearch_verify_certs,
        request_timeout=settings.elasticsearch_request_timeout_seconds,
    )
