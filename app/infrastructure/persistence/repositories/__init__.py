"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.search_assignment_repo import (
    SearchAssignmentRepository,
)

__all__ = ["SearchAssignmentRepository"]
