"""RIU-case and person-case association ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TenantScopedModel


class RiuCaseAssociation(TenantScopedModel, Base):
    """Links an intake record (RIU) to a case. Table: riu_case_associations."""

    __tablename__ = "riu_case_associations"

    riu_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    case_id: Mapped[str] = mapped_column(String, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("riu_id", "case_id", name="riu_case_associations_riu_id_case_id_key"),
    )


class PersonCaseAssociation(TenantScopedModel, Base):
    """Person's role on a case. Table: person_case_associations.

    ended_at set means the association is historical.
    """

    __tablename__ = "person_case_associations"

    person_id: Mapped[str] = mapped_column(String, nullable=False)
    case_id: Mapped[str] = mapped_column(String, nullable=False)
    label: Mapped[str] = mapped_column(String, nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
