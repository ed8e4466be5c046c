"""Redis connection and utilities."""

import json
from typing import Any

import redis

from salon.config import CACHE_TTL, REDIS_CONFIG


class RedisClient:
    def __init__(self):
        self.client = redis.Redis(**REDIS_CONFIG)

    def get_json(self, key: str) -> Any | None:
        """Get JSON data from Redis."""
        data = self.client.get(key)
        return json.loads(data.decode("utf-8")) if data else None

    def set_json(self, key: str, value: Any, ttl: int | None = CACHE_TTL) -> bool:
        """Set JSON data in Redis. A ttl of None stores the value without expiry."""
        payload = json.dumps(value, default=str)
        if ttl is None:
            return bool(self.client.set(key, payload))
        return bool(self.client.setex(key, ttl, payload))

    def delete_pattern(self, *patterns: str) -> int:
        """Delete every key matching any of the given glob patterns."""
        keys = []
        for pattern in patterns:
            keys.extend(self.client.keys(pattern))
        if not keys:
            return 0
        return self.client.delete(*keys)


# Singleton instance
redis_client = RedisClient()
