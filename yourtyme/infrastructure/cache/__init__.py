"""
Cache infrastructure module.
Redis-backed JSON cache used for one-time OAuth state values.
"""

from .redis_client import RedisClient, redis_client, get_redis_client
from .cache_service import CacheService, cache_service

__all__ = [
    "RedisClient",
    "redis_client",
    "get_redis_client",
    "CacheService",
    "cache_service"
]
