"""Assignment and case-linkage lookups for search permission filters.

Read-only. Each call opens its own tenant-scoped session from the
factory, so sibling search branches can call concurrently.
"""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.infrastructure.persistence.database import get_session_factory, tenant_session
from app.infrastructure.persistence.models.case_association import (
    PersonCaseAssociation,
    RiuCaseAssociation,
)
from app.infrastructure.persistence.models.investigation import Investigation


class SearchAssignmentRepository:
    """ISearchAssignmentRepository over investigations and case association tables."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        """session_factory defaults to the shared factory, resolved on first lookup."""
        self.session_factory = session_factory

    async def _scalars(self, tenant_id: str, stmt: Select) -> list[str]:
        factory = self.session_factory or get_session_factory()
        async with tenant_session(factory, tenant_id) as session:
            result = await session.execute(stmt)
            return [str(v) for v in result.scalars().all()]

    @staticmethod
    def _assigned_to(user_id: str):
        return or_(
            Investigation.primary_investigator_id == user_id,
            Investigation.assigned_to.any(user_id),
        )

    async def get_assigned_investigation_ids(
        self, tenant_id: str, user_id: str
    ) -> list[str]:
        stmt = select(Investigation.id).where(
            Investigation.organization_id == tenant_id,
            self._assigned_to(user_id),
        )
        return await self._scalars(tenant_id, stmt)

    async def get_assigned_case_ids(self, tenant_id: str, user_id: str) -> list[str]:
        stmt = (
            select(Investigation.case_id)
            .where(
                Investigation.organization_id == tenant_id,
                self._assigned_to(user_id),
            )
            .distinct()
        )
        return await self._scalars(tenant_id, stmt)

    async def get_riu_ids_for_cases(
        self, tenant_id: str, case_ids: Collection[str]
    ) -> list[str]:
        if not case_ids:
            return []
        stmt = (
            select(RiuCaseAssociation.riu_id)
            .where(
                RiuCaseAssociation.organization_id == tenant_id,
                RiuCaseAssociation.case_id.in_(list(case_ids)),
            )
            .distinct()
        )
        return await self._scalars(tenant_id, stmt)

    async def get_person_ids_for_cases(
        self, tenant_id: str, case_ids: Collection[str]
    ) -> list[str]:
        """Active associations only (ended_at IS NULL)."""
        if not case_ids:
            return []
        stmt = (
            select(PersonCaseAssociation.person_id)
            .where(
                PersonCaseAssociation.organization_id == tenant_id,
                PersonCaseAssociation.case_id.in_(list(case_ids)),
                PersonCaseAssociation.ended_at.is_(None),
            )
            .distinct()
        )
        return await self._scalars(tenant_id, stmt)
