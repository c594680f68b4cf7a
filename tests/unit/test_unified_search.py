"""UnifiedSearchService: validation, concurrent fan-out, aggregation, audit."""

import time

import pytest

from app.application.dtos.search import MatchNone, PermissionContext, SearchRequest
from app.domain.exceptions import SearchInputException
from app.shared.enums import QueryMode, SearchEntityType, SearchFailureKind, UserRole


def _seed_all(search_engine, tenant: str = "acme") -> None:
    search_engine.add(
        f"org_{tenant}_cases",
        {"id": f"{tenant}-c1", "referenceNumber": "CASE-1", "summary": "harassment claim"},
        {"id": f"{tenant}-c2", "referenceNumber": "CASE-2", "summary": "expense fraud"},
    )
    search_engine.add(
        f"org_{tenant}_rius",
        {"id": f"{tenant}-r1", "referenceNumber": "RIU-1", "summary": "fraud tip"},
    )
    search_engine.add(
        f"org_{tenant}_investigations",
        {"id": f"{tenant}-i1", "title": "Fraud inquiry", "referenceNumber": "INV-1"},
    )
    search_engine.add(
        f"org_{tenant}_persons",
        {"id": f"{tenant}-p1", "firstName": "Dana", "lastName": "Fraudstein"},
    )
    search_engine.add(
        f"org_{tenant}_policies",
        {"id": f"{tenant}-pol1", "title": "Anti-fraud policy"},
    )


class TestSearch:
    async def test_results_follow_default_type_order(self, search_service, search_engine, make_ctx) -> None:
        _seed_all(search_engine)
        result = await search_service.search(make_ctx(), SearchRequest(query_text="fraud"))

        assert [r.entity_type for r in result.results] == list(SearchEntityType)
        assert result.total_authorized_hits == 5
        assert result.total_authorized_hits == sum(r.authorized_count for r in result.results)
        assert result.query_text == "fraud"
        assert result.elapsed_ms >= 0

    async def test_order_independent_of_completion_time(
        self, search_service, search_engine, make_ctx
    ) -> None:
        _seed_all(search_engine)
        search_engine.delays["org_acme_policies"] = 0.05
        search_engine.delays["org_acme_cases"] = 0.1
        result = await search_service.search(
            make_ctx(),
            SearchRequest(query_text="fraud", entity_types=["cases", "policies", "rius"]),
        )

        assert [r.entity_type.value for r in result.results] == ["cases", "policies", "rius"]
        assert [a.entity_type.value for a in result.audit] == ["cases", "policies", "rius"]

    async def test_types_are_searched_concurrently(
        self, search_service, search_engine, make_ctx
    ) -> None:
        _seed_all(search_engine)
        for entity_type in SearchEntityType:
            search_engine.delays[f"org_acme_{entity_type.value}"] = 0.1

        started = time.monotonic()
        result = await search_service.search(make_ctx(), SearchRequest(query_text="fraud"))
        elapsed = time.monotonic() - started

        assert all(a.failure_kind is None for a in result.audit)
        assert result.total_authorized_hits == 5
        # Five sequential branches would take at least 0.5s.
        assert elapsed < 0.3
        assert result.elapsed_ms < 300

    async def test_partial_failure_degrades_one_type(
        self, search_service, search_engine, make_ctx, backend_error
    ) -> None:
        _seed_all(search_engine)
        search_engine.failing["org_acme_rius"] = backend_error("org_acme_rius")
        result = await search_service.search(make_ctx(), SearchRequest(query_text="fraud"))

        by_type = {r.entity_type: r for r in result.results}
        assert by_type[SearchEntityType.RIUS].hits == []
        assert by_type[SearchEntityType.RIUS].authorized_count == 0
        assert by_type[SearchEntityType.CASES].authorized_count == 1
        assert result.total_authorized_hits == 4
        kinds = {a.entity_type: a.failure_kind for a in result.audit}
        assert kinds[SearchEntityType.RIUS] is SearchFailureKind.BACKEND_ERROR
        assert kinds[SearchEntityType.CASES] is None

    async def test_missing_indices_return_empty(self, search_service, make_ctx) -> None:
        result = await search_service.search(make_ctx(), SearchRequest(query_text="x"))

        assert result.total_authorized_hits == 0
        assert all(r.hits == [] for r in result.results)
        assert {a.failure_kind for a in result.audit} == {SearchFailureKind.INDEX_NOT_FOUND}

    async def test_tenant_isolation(self, search_service, search_engine, make_ctx) -> None:
        _seed_all(search_engine, "acme")
        _seed_all(search_engine, "globex")
        result = await search_service.search(
            make_ctx(tenant_id="globex"), SearchRequest(query_text="fraud")
        )

        assert {q.index for q in search_engine.queries} == {
            f"org_globex_{t.value}" for t in SearchEntityType
        }
        doc_ids = [h.document_id for r in result.results for h in r.hits]
        assert doc_ids
        assert all(d.startswith("globex-") for d in doc_ids)

    async def test_empty_query_lists_recent_documents(
        self, search_service, search_engine, make_ctx
    ) -> None:
        _seed_all(search_engine)
        result = await search_service.search(
            make_ctx(), SearchRequest(query_text="", entity_types=["cases"], limit=5)
        )

        assert result.results[0].authorized_count == 2
        query = search_engine.queries[0]
        assert query.mode is QueryMode.MATCH_ALL
        assert query.limit == 5

    async def test_default_limit_applied(self, search_service, search_engine, make_ctx) -> None:
        _seed_all(search_engine)
        await search_service.search(make_ctx(), SearchRequest(entity_types=["cases"]))
        assert search_engine.queries[0].limit == 10

    async def test_elevated_audit_is_unrestricted(self, search_service, search_engine, make_ctx) -> None:
        _seed_all(search_engine)
        result = await search_service.search(
            make_ctx(role=UserRole.CCO), SearchRequest(query_text="fraud")
        )
        assert all(entry.unrestricted for entry in result.audit)

    async def test_investigator_scoped_by_assignment(
        self, search_service, search_engine, assignment_repo, make_ctx
    ) -> None:
        _seed_all(search_engine)
        assignment_repo.investigations = [("acme", "acme-i1", "acme-c2", ("u1",))]
        assignment_repo.riu_links = [("acme", "acme-c2", "acme-r1")]
        result = await search_service.search(
            make_ctx(role=UserRole.INVESTIGATOR), SearchRequest(query_text="fraud")
        )

        by_type = {r.entity_type: r for r in result.results}
        assert [h.document_id for h in by_type[SearchEntityType.CASES].hits] == ["acme-c2"]
        assert [h.document_id for h in by_type[SearchEntityType.RIUS].hits] == ["acme-r1"]
        assert by_type[SearchEntityType.PERSONS].hits == []
        audit = {a.entity_type: a for a in result.audit}
        assert isinstance(audit[SearchEntityType.PERSONS].clauses[0], MatchNone)
        assert audit[SearchEntityType.POLICIES].unrestricted


class TestInputValidation:
    @pytest.mark.parametrize(
        "request_kwargs, field",
        [
            ({"entity_types": ["cases", "users"]}, "entity_types"),
            ({"entity_types": ["cases", "cases"]}, "entity_types"),
            ({"limit": 0}, "limit"),
            ({"limit": 101}, "limit"),
            ({"limit": -3}, "limit"),
            ({"limit": True}, "limit"),
            ({"query_text": "x" * 501}, "query_text"),
        ],
    )
    async def test_rejected_before_any_query(
        self, search_service, search_engine, make_ctx, request_kwargs, field
    ) -> None:
        with pytest.raises(SearchInputException) as exc_info:
            await search_service.search(make_ctx(), SearchRequest(**request_kwargs))

        assert exc_info.value.details["field"] == field
        assert search_engine.queries == []

    async def test_boundary_values_accepted(self, search_service, search_engine, make_ctx) -> None:
        _seed_all(search_engine)
        result = await search_service.search(
            make_ctx(),
            SearchRequest(query_text="x" * 500, entity_types=["cases"], limit=100),
        )
        assert search_engine.queries[0].limit == 100
        assert result.results[0].hits == []

    async def test_invalid_tenant_rejected(self, search_service, search_engine) -> None:
        ctx = PermissionContext(user_id="u1", tenant_id="acme;drop", role=UserRole.CCO)
        with pytest.raises(SearchInputException) as exc_info:
            await search_service.search(ctx, SearchRequest(query_text="x"))

        assert exc_info.value.details["field"] == "tenant_id"
        assert search_engine.queries == []


class TestSearchEntityType:
    async def test_single_type(self, search_service, search_engine, make_ctx) -> None:
        _seed_all(search_engine)
        result = await search_service.search_entity_type(make_ctx(), "policies", "fraud")

        assert result.entity_type is SearchEntityType.POLICIES
        assert [h.document_id for h in result.hits] == ["acme-pol1"]

    async def test_unknown_type_rejected(self, search_service, search_engine, make_ctx) -> None:
        with pytest.raises(SearchInputException):
            await search_service.search_entity_type(make_ctx(), "users", "x")
        assert search_engine.queries == []


class TestSuggest:
    async def test_empty_prefix_returns_nothing(self, search_service, search_engine, make_ctx) -> None:
        assert await search_service.suggest(make_ctx(), "  ") == []
        assert search_engine.queries == []

    async def test_suggestion_text_from_title_fields(
        self, search_service, search_engine, make_ctx
    ) -> None:
        search_engine.add(
            "org_acme_persons",
            {"id": "p1", "firstName": "Dana", "lastName": "Ortiz", "_score": 3.0},
        )
        search_engine.add(
            "org_acme_policies",
            {"id": "pol1", "title": "Data retention", "_score": 1.0},
        )
        suggestions = await search_service.suggest(
            make_ctx(), "da", entity_types=["persons", "policies"]
        )

        assert [(s.entity_type.value, s.document_id, s.text) for s in suggestions] == [
            ("persons", "p1", "Dana Ortiz"),
            ("policies", "pol1", "Data retention"),
        ]
        assert search_engine.queries[0].limit == 5

    async def test_falls_back_to_document_id(self, search_service, search_engine, make_ctx) -> None:
        search_engine.add("org_acme_cases", {"id": "c1", "summary": "Dangerous equipment"})
        suggestions = await search_service.suggest(make_ctx(), "dang", entity_types=["cases"])
        assert [s.text for s in suggestions] == ["c1"]

    async def test_limit_validated(self, search_service, make_ctx) -> None:
        with pytest.raises(SearchInputException):
            await search_service.suggest(make_ctx(), "da", limit=500)
