# ============================================================================
# FILE: songshare/core/cache.py
# ============================================================================
import redis
import json
from typing import Optional, Any
from songshare.config import settings
import logging

logger = logging.getLogger(__name__)

class RedisCache:
    """Redis JSON cache; every call is a no-op when Redis is unavailable"""

    def __init__(self, url: Optional[str] = None):
        url = settings.REDIS_URL if url is None else url
        self.redis_client = None
        if not url:
            logger.info("Redis URL not configured. Caching disabled.")
            return
        try:
            self.redis_client = redis.from_url(url, decode_responses=True, socket_connect_timeout=2)
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {e}. Caching disabled.")
            self.redis_client = None

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    def set_cache(self, key: str, value: Any, expire: int = None) -> bool:
        """Set a cache value with optional expiration"""
        if not self.redis_client:
            return False

        try:
            serialized = json.dumps(value)
            if expire:
                self.redis_client.setex(key, expire, serialized)
            else:
                self.redis_client.set(key, serialized)
            return True
        except Exception as e:
            logger.error(f"Cache set error: {e}")
            return False

    def get_cache(self, key: str) -> Optional[Any]:
        """Get a cache value"""
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Cache get error: {e}")
            return None

    def delete_cache(self, key: str) -> bool:
        """Delete a cache value"""
        if not self.redis_client:
            return False

        try:
            self.redis_client.delete(key)
            return True
        except Exception as e:
            logger.error(f"Cache delete error: {e}")
            return False

def public_user_key(user_id: int) -> str:
    return f"user:{user_id}:public"

# Singleton instance
cache = RedisCache()
