import json
from typing import Any, Optional

import redis
import structlog

from ..config import settings

logger = structlog.get_logger()

_redis_client: Optional[redis.Redis] = None


def get_redis() -> Optional[redis.Redis]:
    global _redis_client
    if not settings.REDIS_URL:
        return None
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client


def get_cache(key: str) -> Optional[Any]:
    """Cached value, or None when missing or Redis is unavailable."""
    try:
        client = get_redis()
        if client is None:
            return None
        value = client.get(key)
        if value:
            return json.loads(value)
    except Exception as e:
        logger.warning("cache_get_failed", key=key, error=str(e))
    return None


def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    try:
        client = get_redis()
        if client is None:
            return False
        ttl = ttl or settings.CACHE_TTL
        client.setex(key, ttl, json.dumps(value, ensure_ascii=False, default=str))
        return True
    except Exception as e:
        logger.warning("cache_set_failed", key=key, error=str(e))
        return False


def delete_cache_pattern(pattern: str) -> int:
    """Delete every key matching the pattern."""
    try:
        client = get_redis()
        if client is None:
            return 0
        keys = client.keys(pattern)
        if keys:
            return client.delete(*keys)
        return 0
    except Exception as e:
        logger.warning("cache_delete_failed", pattern=pattern, error=str(e))
        return 0
