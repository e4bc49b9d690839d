import redis
import json
import logging
from typing import Any, Optional
from storefront.core.config import settings

logger = logging.getLogger("cache")

class CatalogCache:
    """Redis cache for catalog reads. Disabled when no REDIS_URL is configured."""

    def __init__(self, url: Optional[str] = None, prefix: str = "catalog"):
        self.prefix = prefix
        self.redis_client = None
        if url:
            self.redis_client = redis.Redis.from_url(
                url,
                decode_responses=True,
                max_connections=20,
                retry_on_timeout=True,
            )

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        if not self.enabled:
            return None
        try:
            value = self.redis_client.get(f"{self.prefix}:{key}")
            if value:
                return json.loads(value)
            return None
        except redis.RedisError as e:
            logger.warning(f"Cache GET failed for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Set value in cache with TTL (default 5 minutes)"""
        if not self.enabled:
            return False
        try:
            serialized = json.dumps(value, default=str)
            return bool(self.redis_client.setex(f"{self.prefix}:{key}", ttl, serialized))
        except redis.RedisError as e:
            logger.error(f"Cache SET failed for {key}: {e}")
            return False

# Global cache instance
cache = CatalogCache(settings.REDIS_URL)
