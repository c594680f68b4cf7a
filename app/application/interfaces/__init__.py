"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import ISearchAssignmentRepository
from app.application.interfaces.services import ICacheService, ISearchEngine

__all__ = [
    "ICacheService",
    "ISearchAssignmentRepository",
    "ISearchEngine",
]
