"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types are plain Python values; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Protocol


class ISearchAssignmentRepository(Protocol):
    """Protocol for read-only assignment and linkage lookups (permission filters).

    Every method is tenant-scoped and must be safe to call concurrently
    from sibling search branches.
    """

    async def get_assigned_investigation_ids(
        self, tenant_id: str, user_id: str
    ) -> list[str]:
        """Return investigation ids where user is primary investigator or in assigned_to."""

    async def get_assigned_case_ids(self, tenant_id: str, user_id: str) -> list[str]:
        """Return distinct case ids of the user's assigned investigations."""

    async def get_riu_ids_for_cases(
        self, tenant_id: str, case_ids: Collection[str]
    ) -> list[str]:
        """Return RIU ids linked to any of case_ids (riu_case_associations)."""

    async def get_person_ids_for_cases(
        self, tenant_id: str, case_ids: Collection[str]
    ) -> list[str]:
        """Return person ids with an active association to any of case_ids."""
