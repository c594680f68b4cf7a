"""SearchAssignmentRepository and tenant-scoped sessions (no database needed)."""

from contextlib import asynccontextmanager
from unittest.mock import MagicMock

import pytest

from app.domain.exceptions import ValidationException
from app.infrastructure.persistence.database import _set_tenant_context, tenant_session
from app.infrastructure.persistence.repositories.search_assignment_repo import (
    SearchAssignmentRepository,
)


class _Session:
    """Records executed statements; returns rows for the first non-SET statement."""

    def __init__(self, rows: list) -> None:
        self.rows = rows
        self.statements: list = []

    @asynccontextmanager
    async def begin(self):
        yield self

    async def execute(self, stmt):
        self.statements.append(stmt)
        result = MagicMock()
        result.scalars.return_value.all.return_value = self.rows
        return result


def _factory(session: _Session):
    @asynccontextmanager
    async def _open():
        yield session

    return _open


async def test_set_tenant_context_issues_set_local() -> None:
    session = _Session([])
    await _set_tenant_context(session, "cl9x2k")
    assert str(session.statements[0]) == "SET LOCAL app.current_organization = 'cl9x2k'"


async def test_set_tenant_context_rejects_malformed_tenant() -> None:
    session = _Session([])
    with pytest.raises(ValidationException):
        await _set_tenant_context(session, "x'; RESET ALL; --")
    assert session.statements == []


async def test_tenant_session_sets_context_before_use() -> None:
    session = _Session([])
    async with tenant_session(_factory(session), "acme") as opened:
        assert opened is session
    assert len(session.statements) == 1


async def test_assigned_case_ids_query() -> None:
    session = _Session([1, "case-b"])
    repo = SearchAssignmentRepository(_factory(session))

    ids = await repo.get_assigned_case_ids("acme", "u1")

    assert ids == ["1", "case-b"]
    sql = str(session.statements[1])
    assert "investigations" in sql
    assert "DISTINCT" in sql
    assert "primary_investigator_id" in sql


async def test_person_lookup_excludes_ended_associations() -> None:
    session = _Session(["p1"])
    repo = SearchAssignmentRepository(_factory(session))

    assert await repo.get_person_ids_for_cases("acme", ["case-a"]) == ["p1"]
    assert "ended_at IS NULL" in str(session.statements[1])


async def test_linked_lookups_skip_query_without_cases() -> None:
    session = _Session(["r1"])
    repo = SearchAssignmentRepository(_factory(session))

    assert await repo.get_riu_ids_for_cases("acme", []) == []
    assert await repo.get_person_ids_for_cases("acme", []) == []
    assert session.statements == []
