"""Permission filter builder: interprets the declarative role policy.

The only search component allowed to block on the relational store
(assignment and linkage lookups). Every decision, including "no
restriction", comes back as an explicit tuple of clauses.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from app.application.dtos.search import (
    FieldEquals,
    IdsIn,
    MatchNone,
    PermissionContext,
    PermissionFilterClause,
)
from app.application.interfaces.repositories import ISearchAssignmentRepository
from app.application.interfaces.services import ICacheService
from app.application.services.search_permission_policy import (
    ROLE_POLICIES,
    EntityPolicy,
    EntityPolicyMap,
    lookup_policy,
)
from app.shared.enums import (
    AssignmentLink,
    AssignmentParent,
    PermissionScope,
    SearchEntityType,
    UserRole,
)

logger = logging.getLogger(__name__)

ID_FIELD = "id"
CREATED_BY_FIELD = "createdById"


class PermissionFilterBuilder:
    """Builds row-level filter clauses for one (caller, entity type).

    Fails closed: undefined policies and empty assignment lookups both
    yield a MatchNone clause, never an empty clause set.
    """

    def __init__(
        self,
        assignment_repo: ISearchAssignmentRepository,
        cache: ICacheService | None = None,
        cache_ttl: int = 30,
        policies: Mapping[UserRole, EntityPolicyMap] = ROLE_POLICIES,
    ) -> None:
        self.assignment_repo = assignment_repo
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.policies = policies

    async def build_filter(
        self, ctx: PermissionContext, entity_type: SearchEntityType
    ) -> tuple[PermissionFilterClause, ...]:
        """Return the clauses to AND into entity_type's query (empty = full tenant access)."""
        policy = lookup_policy(ctx.role, entity_type, self.policies)
        if policy is None:
            logger.warning(
                "No search policy for role %s on %s (tenant=%s); failing closed",
                ctx.role.value,
                entity_type.value,
                ctx.tenant_id,
            )
            return (
                MatchNone(f"no policy for {ctx.role.value} on {entity_type.value}"),
            )
        return await self._apply(ctx, entity_type, policy)

    async def _apply(
        self,
        ctx: PermissionContext,
        entity_type: SearchEntityType,
        policy: EntityPolicy,
    ) -> tuple[PermissionFilterClause, ...]:
        if policy.scope is PermissionScope.FULL:
            return ()
        if policy.scope is PermissionScope.DENY:
            return (MatchNone(f"{ctx.role.value} denied on {entity_type.value}"),)
        if policy.scope is PermissionScope.CREATED_BY:
            return (FieldEquals(CREATED_BY_FIELD, ctx.user_id),)

        # EntityPolicy guarantees parent here, and link when LINKED.
        ids = await self._assigned_ids(ctx, policy.parent)
        if ids and policy.scope is PermissionScope.LINKED:
            ids = await self._linked_ids(ctx, policy.link, ids)
        if not ids:
            return (MatchNone(f"no assigned {entity_type.value}"),)
        return (IdsIn(ID_FIELD, tuple(sorted(set(ids)))),)

    async def _assigned_ids(
        self, ctx: PermissionContext, parent: AssignmentParent
    ) -> list[str]:
        key = self._cache_key(ctx, f"assigned-{parent.value}")
        cached = await self._cache_get(key)
        if cached is not None:
            return cached
        if parent is AssignmentParent.INVESTIGATION:
            ids = await self.assignment_repo.get_assigned_investigation_ids(
                ctx.tenant_id, ctx.user_id
            )
        else:
            ids = await self.assignment_repo.get_assigned_case_ids(
                ctx.tenant_id, ctx.user_id
            )
        await self._cache_set(key, ids)
        return ids

    async def _linked_ids(
        self,
        ctx: PermissionContext,
        link: AssignmentLink,
        case_ids: list[str],
    ) -> list[str]:
        key = self._cache_key(ctx, f"linked-{link.value}")
        cached = await self._cache_get(key)
        if cached is not None:
            return cached
        if link is AssignmentLink.RIU_CASE:
            ids = await self.assignment_repo.get_riu_ids_for_cases(
                ctx.tenant_id, case_ids
            )
        else:
            ids = await self.assignment_repo.get_person_ids_for_cases(
                ctx.tenant_id, case_ids
            )
        await self._cache_set(key, ids)
        return ids

    @staticmethod
    def _cache_key(ctx: PermissionContext, kind: str) -> str:
        return f"search-assignment:{ctx.tenant_id}:{ctx.user_id}:{kind}"

    async def _cache_get(self, key: str) -> list[str] | None:
        if self.cache and self.cache.is_available():
            cached = await self.cache.get(key)
            if cached is not None:
                return list(cached)
        return None

    async def _cache_set(self, key: str, ids: list[str]) -> None:
        if self.cache and self.cache.is_available():
            await self.cache.set(key, list(ids), ttl=self.cache_ttl)
