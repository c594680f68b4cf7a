"""Application services: index resolution, field registry, permission and visibility filters."""

from app.application.services.index_resolver import IndexResolver, encode_tenant_id
from app.application.services.search_field_registry import (
    FIELD_REGISTRY,
    EntityFieldConfig,
    get_field_config,
)
from app.application.services.search_field_visibility import (
    FIELD_VISIBILITY_RULES,
    FieldVisibilityFilter,
    FieldVisibilityRule,
)
from app.application.services.search_permission_filter import PermissionFilterBuilder
from app.application.services.search_permission_policy import (
    ROLE_POLICIES,
    EntityPolicy,
    lookup_policy,
)

__all__ = [
    "FIELD_REGISTRY",
    "FIELD_VISIBILITY_RULES",
    "ROLE_POLICIES",
    "EntityFieldConfig",
    "EntityPolicy",
    "FieldVisibilityFilter",
    "FieldVisibilityRule",
    "IndexResolver",
    "PermissionFilterBuilder",
    "encode_tenant_id",
    "get_field_config",
    "lookup_policy",
]
