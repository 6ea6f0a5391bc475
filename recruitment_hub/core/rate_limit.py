from collections import defaultdict
from time import time

import redis

from recruitment_hub.core.config import Settings, get_settings
from recruitment_hub.core.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._memory_store: dict[str, list[float]] = defaultdict(list)
        self._redis = None
        if self.settings.redis_url:
            try:
                self._redis = redis.from_url(self.settings.redis_url, decode_responses=True)
                self._redis.ping()
            except redis.RedisError as exc:
                logger.warning(
                    "Redis unavailable, using in-memory rate limiting",
                    extra={"extra": {"error": str(exc)}},
                )
                self._redis = None

    def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        if self._redis:
            current = self._redis.incr(key)
            if current == 1:
                self._redis.expire(key, window_seconds)
            return current <= limit

        now = time()
        bucket = [ts for ts in self._memory_store[key] if now - ts <= window_seconds]
        bucket.append(now)
        self._memory_store[key] = bucket
        return len(bucket) <= limit
