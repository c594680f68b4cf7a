"""Investigation ORM model (assignment columns only)."""

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TenantScopedModel


class Investigation(TenantScopedModel, Base):
    """Investigation of a case. Table: investigations.

    A user is assigned when they are the primary investigator or appear
    in assigned_to.
    """

    __tablename__ = "investigations"

    case_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    assigned_to: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=list
    )
    primary_investigator_id: Mapped[str | None] = mapped_column(
        String, nullable=True
    )
