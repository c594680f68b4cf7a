"""Persistence models: read-only mappings of the case-management tables search consults."""

from app.infrastructure.persistence.models.case_association import (
    PersonCaseAssociation,
    RiuCaseAssociation,
)
from app.infrastructure.persistence.models.investigation import Investigation
from app.infrastructure.persistence.models.mixins import (
    IdMixin,
    OrganizationMixin,
    TenantScopedModel,
)

__all__ = [
    "IdMixin",
    "Investigation",
    "OrganizationMixin",
    "PersonCaseAssociation",
    "RiuCaseAssociation",
    "TenantScopedModel",
]
