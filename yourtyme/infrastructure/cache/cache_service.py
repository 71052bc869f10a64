"""
Cache service for high-level caching operations.
Used to hold OAuth `state` values between the install redirect and the
callback.
"""

from datetime import timedelta
from typing import Any, Optional, Union

from yourtyme.core.logging import get_logger
from yourtyme.infrastructure.cache.redis_client import get_redis_client

logger = get_logger(__name__)


class CacheService:
    """High-level cache service with common caching patterns."""

    def __init__(self):
        """Initialize cache service."""
        self._redis_client = None

    async def _get_client(self):
        """Get Redis client instance."""
        if not self._redis_client:
            self._redis_client = await get_redis_client()
        return self._redis_client

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        client = await self._get_client()
        return await client.get(key)

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[Union[int, timedelta]] = None
    ) -> bool:
        """
        Set value in cache.

        Args:
            key (str): Cache key
            value (Any): Value to cache
            expire (Optional[Union[int, timedelta]]): Expiration time

        Returns:
            bool: True if successful
        """
        client = await self._get_client()
        return await client.set(key, value, expire)

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        client = await self._get_client()
        return await client.delete(key)

    async def pop(self, key: str) -> Optional[Any]:
        """
        Read a value and remove it, so it can be used only once.

        Args:
            key (str): Cache key

        Returns:
            Optional[Any]: The cached value or None
        """
        value = await self.get(key)
        if value is not None:
            await self.delete(key)
        return value

    def generate_key(self, prefix: str, *args) -> str:
        """Join a prefix and arguments into a cache key."""
        return ":".join([prefix, *(str(arg) for arg in args)])


# Global cache service instance
cache_service = CacheService()
