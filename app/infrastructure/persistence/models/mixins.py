"""SQLAlchemy mixins shared by the read-only case-management models (DRY)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column


class IdMixin:
    """Text primary key (ids are issued by the case-management service)."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True)


class OrganizationMixin:
    """Tenant column. The RLS policies on these tables filter by it."""

    @declared_attr
    def organization_id(cls) -> Mapped[str]:
        return mapped_column(String, nullable=False, index=True)


class TenantScopedModel(IdMixin, OrganizationMixin):
    """id + organization_id."""
