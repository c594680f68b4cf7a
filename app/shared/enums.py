"""Shared enumerations for the case search service.

Cross-cutting enums used by application and infrastructure (roles,
searchable entity types, permission scope kinds).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class UserRole(_ValuesMixin, str, Enum):
    """Platform role carried in the caller's token."""

    SYSTEM_ADMIN = "SYSTEM_ADMIN"
    CCO = "CCO"
    COMPLIANCE_OFFICER = "COMPLIANCE_OFFICER"
    TRIAGE_LEAD = "TRIAGE_LEAD"
    INVESTIGATOR = "INVESTIGATOR"
    HR_PARTNER = "HR_PARTNER"
    LEGAL_COUNSEL = "LEGAL_COUNSEL"
    DEPARTMENT_ADMIN = "DEPARTMENT_ADMIN"
    MANAGER = "MANAGER"
    READ_ONLY = "READ_ONLY"
    EMPLOYEE = "EMPLOYEE"
    OPERATOR = "OPERATOR"


class SearchEntityType(_ValuesMixin, str, Enum):
    """Searchable entity collections, in default result order."""

    CASES = "cases"
    RIUS = "rius"
    INVESTIGATIONS = "investigations"
    PERSONS = "persons"
    POLICIES = "policies"


class PermissionScope(_ValuesMixin, str, Enum):
    """How a role's access to one entity type is scoped."""

    FULL = "full"
    ASSIGNED = "assigned"
    LINKED = "linked"
    CREATED_BY = "created_by"
    DENY = "deny"


class AssignmentParent(_ValuesMixin, str, Enum):
    """Parent entity whose assignment drives ASSIGNED and LINKED scopes."""

    CASE = "case"
    INVESTIGATION = "investigation"


class AssignmentLink(_ValuesMixin, str, Enum):
    """Link table resolved from assigned cases for LINKED scopes."""

    RIU_CASE = "riu_case"
    PERSON_CASE = "person_case"


class SearchFailureKind(_ValuesMixin, str, Enum):
    """Why a per-type branch degraded to an empty result."""

    INDEX_NOT_FOUND = "index_not_found"
    TIMEOUT = "timeout"
    BACKEND_ERROR = "backend_error"
    POLICY_LOOKUP_ERROR = "policy_lookup_error"


class QueryMode(_ValuesMixin, str, Enum):
    """Shape of the text part of an entity query."""

    MATCH = "match"
    MATCH_ALL = "match_all"
    PREFIX = "prefix"
