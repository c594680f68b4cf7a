"""Cache: optional Redis service for short-lived permission lookups."""

from app.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService"]
