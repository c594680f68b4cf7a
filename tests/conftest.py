"""Pytest configuration and fixtures for case search.

Settings are read from the environment, so required values are set before
app.main is imported. The search engine and assignment store are replaced
by in-memory fakes; no Elasticsearch, Postgres or Redis is needed.
"""

import asyncio
import os
from collections.abc import Callable
from typing import Any

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-case-search-tests")
os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from app.application.dtos.search import (
    EngineHit,
    EngineResponse,
    EntityQuery,
    FieldEquals,
    IdsIn,
    MatchNone,
    PermissionContext,
)
from app.application.services.index_resolver import IndexResolver
from app.application.services.search_field_visibility import FieldVisibilityFilter
from app.application.services.search_permission_filter import PermissionFilterBuilder
from app.application.use_cases.entity_type_search import EntityTypeSearchExecutor
from app.application.use_cases.search import UnifiedSearchService
from app.core.limiter import limiter
from app.domain.exceptions import SearchBackendError, SearchIndexNotFoundError
from app.main import app
from app.shared.enums import QueryMode, UserRole


class FakeSearchEngine:
    """In-memory ISearchEngine keyed by index name.

    Documents are plain dicts with an "id"; an optional "_score" sets the
    relevance score. Filters are applied the way the engine would.
    """

    def __init__(self) -> None:
        self.indices: dict[str, list[dict[str, Any]]] = {}
        self.failing: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.queries: list[EntityQuery] = []
        self.reachable = True

    def add(self, index: str, *documents: dict[str, Any]) -> None:
        self.indices.setdefault(index, []).extend(documents)

    async def search(self, query: EntityQuery) -> EngineResponse:
        self.queries.append(query)
        delay = self.delays.get(query.index)
        if delay:
            await asyncio.sleep(delay)
        if query.index in self.failing:
            raise self.failing[query.index]
        if query.index not in self.indices:
            raise SearchIndexNotFoundError(query.index)
        matched = [
            doc
            for doc in self.indices[query.index]
            if _passes_filters(doc, query) and _matches_text(doc, query)
        ]
        hits = [
            EngineHit(
                document_id=doc["id"],
                score=float(doc.get("_score", 1.0)),
                source={k: v for k, v in doc.items() if not k.startswith("_")},
                highlight=dict(doc.get("_highlight", {})),
            )
            for doc in matched[: query.limit]
        ]
        return EngineResponse(total=len(matched), hits=hits)

    async def ping(self) -> bool:
        return self.reachable


def _passes_filters(doc: dict[str, Any], query: EntityQuery) -> bool:
    for clause in query.filters:
        if isinstance(clause, MatchNone):
            return False
        if isinstance(clause, IdsIn) and doc.get(clause.field) not in clause.values:
            return False
        if isinstance(clause, FieldEquals) and doc.get(clause.field) != clause.value:
            return False
    return True


def _matches_text(doc: dict[str, Any], query: EntityQuery) -> bool:
    if query.mode is QueryMode.MATCH_ALL or not query.text:
        return True
    needle = query.text.lower()
    for field in query.fields:
        value = doc.get(field.path)
        if not isinstance(value, str):
            continue
        if query.mode is QueryMode.PREFIX and value.lower().startswith(needle):
            return True
        if query.mode is QueryMode.MATCH and needle in value.lower():
            return True
    return False


class FakeAssignmentRepository:
    """In-memory ISearchAssignmentRepository.

    investigations: (tenant_id, investigation_id, case_id, assignee user ids).
    riu_links / person_links: (tenant_id, case_id, linked id).
    """

    def __init__(self) -> None:
        self.investigations: list[tuple[str, str, str, tuple[str, ...]]] = []
        self.riu_links: list[tuple[str, str, str]] = []
        self.person_links: list[tuple[str, str, str]] = []
        self.error: Exception | None = None
        self.delay = 0.0
        self.calls: list[str] = []

    async def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def get_assigned_investigation_ids(self, tenant_id: str, user_id: str) -> list[str]:
        await self._check("investigations")
        return [i for t, i, _, users in self.investigations if t == tenant_id and user_id in users]

    async def get_assigned_case_ids(self, tenant_id: str, user_id: str) -> list[str]:
        await self._check("cases")
        return sorted(
            {c for t, _, c, users in self.investigations if t == tenant_id and user_id in users}
        )

    async def get_riu_ids_for_cases(self, tenant_id, case_ids) -> list[str]:
        await self._check("rius")
        return [r for t, c, r in self.riu_links if t == tenant_id and c in case_ids]

    async def get_person_ids_for_cases(self, tenant_id, case_ids) -> list[str]:
        await self._check("persons")
        return [p for t, c, p in self.person_links if t == tenant_id and c in case_ids]


class FakeCache:
    """Dict-backed ICacheService."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> Any:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True


@pytest.fixture
def search_engine() -> FakeSearchEngine:
    return FakeSearchEngine()


@pytest.fixture
def assignment_repo() -> FakeAssignmentRepository:
    return FakeAssignmentRepository()


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def make_ctx() -> Callable[..., PermissionContext]:
    """Factory for PermissionContext (defaults: user u1 in tenant acme as SYSTEM_ADMIN)."""

    def _make(
        role: UserRole = UserRole.SYSTEM_ADMIN,
        tenant_id: str = "acme",
        user_id: str = "u1",
    ) -> PermissionContext:
        return PermissionContext(user_id=user_id, tenant_id=tenant_id, role=role)

    return _make


@pytest.fixture
def executor(
    search_engine: FakeSearchEngine, assignment_repo: FakeAssignmentRepository
) -> EntityTypeSearchExecutor:
    return EntityTypeSearchExecutor(
        search_engine=search_engine,
        index_resolver=IndexResolver(),
        filter_builder=PermissionFilterBuilder(assignment_repo),
        visibility_filter=FieldVisibilityFilter(),
        timeout_ms=200,
        lookup_timeout_ms=200,
    )


@pytest.fixture
def search_service(executor: EntityTypeSearchExecutor) -> UnifiedSearchService:
    return UnifiedSearchService(executor)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Rate limits reset per test."""
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def backend_error() -> Callable[[str], SearchBackendError]:
    return lambda index: SearchBackendError("shard failure", index_name=index, status_code=500)
