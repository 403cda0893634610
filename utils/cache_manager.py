import json
from typing import Any, Optional

from redis.exceptions import RedisError


class CacheManager:
    """JSON-over-Redis cache. An unreachable Redis reads as a miss."""

    def __init__(self, redis_client, prefix: str = 'kindred'):
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        try:
            data = self.redis.get(self._key(key))
            if data:
                return json.loads(data)
            return None
        except (RedisError, ValueError, TypeError):
            return None

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Set value in cache with TTL"""
        try:
            self.redis.setex(self._key(key), ttl, json.dumps(value))
            return True
        except (RedisError, TypeError):
            return False

    def delete(self, key: str) -> bool:
        """Delete key from cache"""
        try:
            self.redis.delete(self._key(key))
            return True
        except RedisError:
            return False
