"""Declarative row-level search policy: role -> entity type -> EntityPolicy.

Adding a role or changing its reach is a data change here. Any (role,
entity type) pair without an entry is a configuration fault and the
filter builder fails closed for it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from app.shared.enums import (
    AssignmentLink,
    AssignmentParent,
    PermissionScope,
    SearchEntityType,
    UserRole,
)


@dataclass(frozen=True)
class EntityPolicy:
    """How one role may see one entity type.

    parent is required for ASSIGNED and LINKED; link only for LINKED.
    """

    scope: PermissionScope
    parent: AssignmentParent | None = None
    link: AssignmentLink | None = None
    note: str = ""

    def __post_init__(self) -> None:
        if self.scope in (PermissionScope.ASSIGNED, PermissionScope.LINKED):
            if self.parent is None:
                raise ValueError(f"{self.scope.value} policy requires a parent")
        if self.scope is PermissionScope.LINKED:
            if self.link is None or self.parent is not AssignmentParent.CASE:
                raise ValueError("linked policy requires a link table on assigned cases")


FULL = EntityPolicy(PermissionScope.FULL)
DENY = EntityPolicy(PermissionScope.DENY)
CREATED_BY = EntityPolicy(PermissionScope.CREATED_BY)
POLICY_LIBRARY = EntityPolicy(
    PermissionScope.FULL, note="published policy library is readable by all staff"
)
ASSIGNED_CASES = EntityPolicy(PermissionScope.ASSIGNED, parent=AssignmentParent.CASE)
ASSIGNED_INVESTIGATIONS = EntityPolicy(
    PermissionScope.ASSIGNED, parent=AssignmentParent.INVESTIGATION
)
CASE_LINKED_RIUS = EntityPolicy(
    PermissionScope.LINKED,
    parent=AssignmentParent.CASE,
    link=AssignmentLink.RIU_CASE,
)
CASE_LINKED_PERSONS = EntityPolicy(
    PermissionScope.LINKED,
    parent=AssignmentParent.CASE,
    link=AssignmentLink.PERSON_CASE,
)

EntityPolicyMap = Mapping[SearchEntityType, EntityPolicy]


def _full_access() -> EntityPolicyMap:
    return MappingProxyType({entity: FULL for entity in SearchEntityType})


def _assignment_scoped(persons: EntityPolicy) -> EntityPolicyMap:
    return MappingProxyType(
        {
            SearchEntityType.CASES: ASSIGNED_CASES,
            SearchEntityType.INVESTIGATIONS: ASSIGNED_INVESTIGATIONS,
            SearchEntityType.RIUS: CASE_LINKED_RIUS,
            SearchEntityType.PERSONS: persons,
            SearchEntityType.POLICIES: POLICY_LIBRARY,
        }
    )


def _self_scoped() -> EntityPolicyMap:
    return MappingProxyType(
        {
            SearchEntityType.CASES: CREATED_BY,
            SearchEntityType.RIUS: CREATED_BY,
            SearchEntityType.INVESTIGATIONS: DENY,
            SearchEntityType.PERSONS: DENY,
            SearchEntityType.POLICIES: POLICY_LIBRARY,
        }
    )


ELEVATED_ROLES = frozenset(
    {
        UserRole.SYSTEM_ADMIN,
        UserRole.CCO,
        UserRole.COMPLIANCE_OFFICER,
        UserRole.TRIAGE_LEAD,
    }
)

ROLE_POLICIES: Mapping[UserRole, EntityPolicyMap] = MappingProxyType(
    {
        **{role: _full_access() for role in ELEVATED_ROLES},
        UserRole.LEGAL_COUNSEL: MappingProxyType(
            {
                SearchEntityType.CASES: FULL,
                SearchEntityType.INVESTIGATIONS: FULL,
                SearchEntityType.POLICIES: POLICY_LIBRARY,
                SearchEntityType.RIUS: DENY,
                SearchEntityType.PERSONS: DENY,
            }
        ),
        UserRole.INVESTIGATOR: _assignment_scoped(persons=CASE_LINKED_PERSONS),
        UserRole.HR_PARTNER: _assignment_scoped(persons=FULL),
        UserRole.EMPLOYEE: _self_scoped(),
        UserRole.MANAGER: _self_scoped(),
        UserRole.DEPARTMENT_ADMIN: _self_scoped(),
        UserRole.OPERATOR: MappingProxyType(
            {
                SearchEntityType.RIUS: CREATED_BY,
                SearchEntityType.POLICIES: POLICY_LIBRARY,
                SearchEntityType.CASES: DENY,
                SearchEntityType.INVESTIGATIONS: DENY,
                SearchEntityType.PERSONS: DENY,
            }
        ),
        # Only the policy library is defined; every other type fails closed.
        UserRole.READ_ONLY: MappingProxyType(
            {SearchEntityType.POLICIES: POLICY_LIBRARY}
        ),
    }
)


def lookup_policy(
    role: UserRole,
    entity_type: SearchEntityType,
    policies: Mapping[UserRole, EntityPolicyMap] = ROLE_POLICIES,
) -> EntityPolicy | None:
    """Return the policy for (role, entity_type), or None when undefined."""
    return policies.get(role, {}).get(entity_type)
