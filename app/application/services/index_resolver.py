"""Index resolver: (tenant, entity type) -> physical search index name.

Tenant isolation for search is anchored here: executors only ever query
names produced by resolve(), never caller-supplied index strings.
"""

from __future__ import annotations

from app.core.tenant_validation import is_valid_tenant_id_format
from app.domain.exceptions import ValidationException
from app.shared.enums import SearchEntityType

DEFAULT_INDEX_PREFIX = "org"

# Index names must be lowercase; uppercase letters are escaped so that
# tenant ids differing only in case still map to different indices.
_UPPERCASE_ESCAPE = "."


def encode_tenant_id(tenant_id: str) -> str:
    """Encode a valid tenant id into a lowercase, injective index-name segment."""
    return "".join(
        f"{_UPPERCASE_ESCAPE}{ch.lower()}" if ch.isupper() else ch
        for ch in tenant_id
    )


class IndexResolver:
    """Pure, deterministic mapping from tenant and entity type to index name."""

    def __init__(self, prefix: str = DEFAULT_INDEX_PREFIX) -> None:
        if not prefix or prefix != prefix.lower() or _UPPERCASE_ESCAPE in prefix:
            raise ValueError(f"Invalid search index prefix: {prefix!r}")
        self.prefix = prefix

    def resolve(self, tenant_id: str, entity_type: SearchEntityType | str) -> str:
        """Return the index name, e.g. org_cl9x2k_cases.

        Raises:
            ValidationException: tenant_id is not a valid tenant id or
                entity_type is not a supported tag.
        """
        if not is_valid_tenant_id_format(tenant_id):
            raise ValidationException("Invalid tenant ID format", field="tenant_id")
        try:
            entity = SearchEntityType(entity_type)
        except ValueError:
            raise ValidationException(
                f"Unsupported entity type: {entity_type}", field="entity_type"
            ) from None
        return f"{self.prefix}_{encode_tenant_id(tenant_id)}_{entity.value}"
