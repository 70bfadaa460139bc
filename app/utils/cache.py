import json
import logging
import redis
from typing import Optional, Any

from app.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Create Redis client
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

CATALOG_PREFIX = "catalog"
CATALOG_AVAILABLE_KEY = "available"


class CacheService:
    """
    Redis cache for the public catalog.

    A cache failure never fails the caller: reads return None and
    writes report False, so the database stays the source of truth.
    """

    def __init__(self, client: redis.Redis = None, ttl: int = None):
        self.client = client or redis_client
        self.ttl = ttl or settings.CACHE_TTL

    def _make_key(self, prefix: str, key: str) -> str:
        """Create a namespaced cache key."""
        return f"{prefix}:{key}"

    def get(self, prefix: str, key: str) -> Optional[Any]:
        """
        Get a JSON value from cache.

        Returns:
            Cached value or None if missing or unreadable
        """
        cache_key = self._make_key(prefix, key)
        try:
            value = self.client.get(cache_key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            return None

    def set(self, prefix: str, key: str, value: Any, ttl: int = None) -> bool:
        """Store a JSON-serializable value with a TTL (default from settings)."""
        cache_key = self._make_key(prefix, key)
        try:
            serialized = json.dumps(value, default=str)
            self.client.setex(cache_key, ttl or self.ttl, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache write failed for {cache_key}: {e}")
            return False

    def delete(self, prefix: str, key: str) -> bool:
        cache_key = self._make_key(prefix, key)
        try:
            self.client.delete(cache_key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {cache_key}: {e}")
            return False

    def invalidate_catalog(self) -> bool:
        """Drop the cached public catalog after a product change."""
        return self.delete(CATALOG_PREFIX, CATALOG_AVAILABLE_KEY)

    def ping(self) -> bool:
        return bool(self.client.ping())

    def stats(self) -> dict:
        """Basic Redis server statistics."""
        info = self.client.info()
        return {
            "connected_clients": info.get("connected_clients"),
            "used_memory": info.get("used_memory_human"),
            "total_keys": self.client.dbsize(),
            "uptime_seconds": info.get("uptime_in_seconds"),
        }


# Singleton cache service instance
cache_service = CacheService()
