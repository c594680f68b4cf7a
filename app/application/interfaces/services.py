"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.search import EngineResponse, EntityQuery


class ISearchEngine(Protocol):
    """Protocol for the document search engine (one bounded query per call).

    Implementations raise SearchIndexNotFoundError when the index is absent
    and SearchBackendError for any other engine fault.
    """

    async def search(self, query: EntityQuery) -> EngineResponse:
        """Run query against query.index and return filtered total plus hits."""

    async def ping(self) -> bool:
        """Return True if the engine is reachable."""


class ICacheService(Protocol):
    """Minimal cache protocol for assignment-lookup caching (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""
