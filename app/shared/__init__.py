"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.enums import (
    AssignmentLink,
    AssignmentParent,
    PermissionScope,
    QueryMode,
    SearchEntityType,
    SearchFailureKind,
    UserRole,
)

__all__ = [
    "AssignmentLink",
    "AssignmentParent",
    "PermissionScope",
    "QueryMode",
    "SearchEntityType",
    "SearchFailureKind",
    "UserRole",
]
