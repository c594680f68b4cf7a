"""Elasticsearch implementation of ISearchEngine.

Translates a backend-neutral EntityQuery into query DSL and maps client
errors onto SearchIndexNotFoundError, SearchTimeoutError and
SearchBackendError.
"""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import (
    ApiError,
    AsyncElasticsearch,
    ConnectionTimeout,
    NotFoundError,
    TransportError,
)

from app.application.dtos.search import (
    EngineHit,
    EngineResponse,
    EntityQuery,
    FieldEquals,
    IdsIn,
    MatchNone,
    PermissionFilterClause,
    WeightedField,
)
from app.domain.exceptions import (
    SearchBackendError,
    SearchIndexNotFoundError,
    SearchTimeoutError,
)
from app.shared.enums import QueryMode

logger = logging.getLogger(__name__)

HIGHLIGHT_PRE_TAG = "<mark>"
HIGHLIGHT_POST_TAG = "</mark>"


def _field_spec(field: WeightedField) -> str:
    if field.weight == 1:
        return field.path
    return f"{field.path}^{field.weight:g}"


def _clause_to_dsl(clause: PermissionFilterClause) -> dict[str, Any]:
    if isinstance(clause, IdsIn):
        return {"terms": {clause.field: list(clause.values)}}
    if isinstance(clause, FieldEquals):
        return {"term": {clause.field: clause.value}}
    if isinstance(clause, MatchNone):
        return {"match_none": {}}
    raise TypeError(f"Unsupported filter clause: {clause!r}")


def _text_query(query: EntityQuery) -> dict[str, Any]:
    fields = [_field_spec(f) for f in query.fields]
    if query.mode is QueryMode.MATCH_ALL or not query.text:
        return {"match_all": {}}
    if query.mode is QueryMode.PREFIX:
        return {
            "multi_match": {
                "query": query.text,
                "fields": fields,
                "type": "bool_prefix",
            }
        }
    return {
        "multi_match": {
            "query": query.text,
            "fields": fields,
            "fuzziness": "AUTO",
            "operator": "and",
            "type": "best_fields",
        }
    }


def build_search_body(query: EntityQuery) -> dict[str, Any]:
    """Return keyword arguments for AsyncElasticsearch.search (minus index)."""
    body: dict[str, Any] = {
        "query": {
            "bool": {
                "must": [_text_query(query)],
                "filter": [_clause_to_dsl(c) for c in query.filters],
            }
        },
        "size": query.limit,
        "sort": [
            {"_score": {"order": "desc"}},
            {query.sort_field: {"order": "desc", "unmapped_type": "date"}},
        ],
        "track_total_hits": True,
        "timeout": f"{query.timeout_ms}ms",
    }
    if query.excluded_fields:
        body["source"] = {"excludes": sorted(query.excluded_fields)}
    if query.highlight_fields:
        body["highlight"] = {
            "pre_tags": [HIGHLIGHT_PRE_TAG],
            "post_tags": [HIGHLIGHT_POST_TAG],
            "fields": {
                h.path: {
                    "fragment_size": h.fragment_size,
                    "number_of_fragments": h.number_of_fragments,
                }
                for h in query.highlight_fields
            },
        }
    return body


def _parse_total(hits: dict[str, Any]) -> int:
    total = hits.get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total or 0)


class ElasticsearchSearchEngine:
    """ISearchEngine backed by a shared AsyncElasticsearch client."""

    def __init__(self, client: AsyncElasticsearch) -> None:
        self.client = client

    async def search(self, query: EntityQuery) -> EngineResponse:
        body = build_search_body(query)
        try:
            resp = await self.client.options(
                request_timeout=query.timeout_ms / 1000
            ).search(index=query.index, **body)
        except NotFoundError as e:
            raise SearchIndexNotFoundError(query.index) from e
        except ApiError as e:
            raise SearchBackendError(
                f"Search request failed: {e.message}",
                index_name=query.index,
                status_code=e.meta.status,
            ) from e
        except ConnectionTimeout as e:
            raise SearchTimeoutError(
                f"Search request timed out: {e}", index_name=query.index
            ) from e
        except TransportError as e:
            raise SearchBackendError(
                f"Search engine unreachable: {e}", index_name=query.index
            ) from e

        if resp.get("timed_out"):
            logger.warning("Search on %s timed out server-side; partial hits", query.index)

        hits = resp.get("hits", {})
        return EngineResponse(
            total=_parse_total(hits),
            hits=[
                EngineHit(
                    document_id=str(h["_id"]),
                    score=float(h.get("_score") or 0.0),
                    source=dict(h.get("_source") or {}),
                    highlight=dict(h.get("highlight") or {}),
                )
                for h in hits.get("hits", [])
            ],
        )

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (ApiError, TransportError):
            logger.warning("Search engine ping failed", exc_info=True)
            return False
