"""Search API: authentication, tenant binding, validation and response shape."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_unified_search_service
from app.infrastructure.security.jwt import create_access_token
from app.main import app


def _auth(role: str = "SYSTEM_ADMIN", tenant_id: str = "acme", sub: str = "u1", **headers) -> dict:
    token = create_access_token({"sub": sub, "tenant_id": tenant_id, "role": role})
    return {"Authorization": f"Bearer {token}", **headers}


@pytest.fixture
def seeded(search_service, search_engine):
    """Override the service dependency with one backed by in-memory fakes."""
    search_engine.add(
        "org_acme_cases",
        {
            "id": "c1",
            "referenceNumber": "CASE-1",
            "summary": "expense fraud",
            "reporterName": "Pat",
            "createdById": "u1",
        },
        {"id": "c2", "referenceNumber": "CASE-2", "summary": "harassment", "createdById": "u2"},
    )
    search_engine.add("org_acme_policies", {"id": "pol1", "title": "Fraud policy"})
    app.dependency_overrides[get_unified_search_service] = lambda: search_service
    return search_engine


class TestAuthentication:
    async def test_missing_token_is_401(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/api/v1/search", params={"q": "fraud"})
        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_ERROR"
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["request_id"]
        assert seeded.queries == []

    async def test_invalid_token_is_401(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/api/v1/search", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["message"] == "Invalid or expired token"

    async def test_expired_token_is_401(self, client: AsyncClient, seeded) -> None:
        token = create_access_token(
            {"sub": "u1", "tenant_id": "acme", "role": "CCO"},
            expires_delta=timedelta(seconds=-5),
        )
        response = await client.get(
            "/api/v1/search", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_token_without_tenant_is_401(self, client: AsyncClient, seeded) -> None:
        token = create_access_token({"sub": "u1", "role": "CCO"})
        response = await client.get(
            "/api/v1/search", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_tenant_header_mismatch_is_403(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/api/v1/search", headers=_auth(**{"X-Tenant-ID": "globex"})
        )
        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"
        assert seeded.queries == []

    async def test_matching_tenant_header_accepted(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/api/v1/search", headers=_auth(**{"X-Tenant-ID": "acme"})
        )
        assert response.status_code == 200

    async def test_unknown_role_is_403(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/api/v1/search", headers=_auth(role="SUPERUSER"))
        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"


class TestUnifiedSearch:
    async def test_response_shape(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/api/v1/search", params={"q": "fraud", "types": "cases,policies"}, headers=_auth()
        )
        assert response.status_code == 200
        data = response.json()
        assert data["query_text"] == "fraud"
        assert data["total_authorized_hits"] == 2
        assert [r["entity_type"] for r in data["results"]] == ["cases", "policies"]
        hit = data["results"][0]["hits"][0]
        assert hit["document_id"] == "c1"
        assert hit["document"]["reporterName"] == "Pat"
        assert [p["unrestricted"] for p in data["permissions"]] == [True, True]

    async def test_restricted_role_sees_own_documents_redacted(
        self, client: AsyncClient, seeded
    ) -> None:
        response = await client.get(
            "/api/v1/search", params={"types": "cases"}, headers=_auth(role="EMPLOYEE")
        )
        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["authorized_count"] == 1
        assert result["hits"][0]["document_id"] == "c1"
        assert "reporterName" not in result["hits"][0]["document"]
        clause = response.json()["permissions"][0]["clauses"][0]
        assert clause == {
            "kind": "field_equals",
            "field": "createdById",
            "value": "u1",
            "values": None,
            "reason": None,
        }

    async def test_missing_index_reported_in_permissions(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/api/v1/search", params={"types": "rius"}, headers=_auth()
        )
        assert response.status_code == 200
        assert response.json()["results"][0]["hits"] == []
        assert response.json()["permissions"][0]["failure_kind"] == "index_not_found"

    @pytest.mark.parametrize(
        "params",
        [
            {"types": "cases,users"},
            {"types": "cases,cases"},
            {"limit": 0},
            {"limit": 101},
            {"q": "x" * 501},
        ],
    )
    async def test_invalid_input_is_400(self, client: AsyncClient, seeded, params) -> None:
        response = await client.get("/api/v1/search", params=params, headers=_auth())
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert seeded.queries == []


class TestSingleTypeAndSuggest:
    async def test_single_entity_type(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/api/v1/search/policies", params={"q": "fraud"}, headers=_auth()
        )
        assert response.status_code == 200
        data = response.json()
        assert data["entity_type"] == "policies"
        assert data["authorized_count"] == 1

    async def test_unknown_entity_type_is_400(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/api/v1/search/users", headers=_auth())
        assert response.status_code == 400

    async def test_suggest(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/api/v1/search/suggest", params={"prefix": "case-"}, headers=_auth()
        )
        assert response.status_code == 200
        data = response.json()
        assert data["prefix"] == "case-"
        assert [s["text"] for s in data["suggestions"]] == ["CASE-1", "CASE-2"]
        assert all(s["entity_type"] == "cases" for s in data["suggestions"])

    async def test_suggest_empty_prefix(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/api/v1/search/suggest", headers=_auth())
        assert response.status_code == 200
        assert response.json()["suggestions"] == []


async def test_search_rate_limited(client: AsyncClient, seeded) -> None:
    headers = _auth()
    for _ in range(60):
        response = await client.get("/api/v1/search", params={"types": "policies"}, headers=headers)
        assert response.status_code == 200
    response = await client.get("/api/v1/search", params={"types": "policies"}, headers=headers)
    assert response.status_code == 429
    assert response.json()["error"] == "RATE_LIMITED"
