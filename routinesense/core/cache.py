"""
Local cache: a synchronous key-value store holding serialized routine data.

Production deployments keep one namespace per user and device in Redis.
When Redis is unreachable each session gets an empty in-memory cache that
lives only as long as the session, so nothing accumulates in the process;
signed-in users still have the remote store.
"""
import json
import redis
from typing import Optional, Any, Dict, List, Protocol
import logging
from routinesense.core.config import settings

logger = logging.getLogger(__name__)

# Redis client instance
redis_client = None


def get_redis():
    """Get Redis client instance, or None when Redis is unreachable"""
    global redis_client

    if redis_client is None:
        try:
            redis_client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            redis_client.ping()
            logger.info("Connected to Redis successfully")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis: {e}. Using in-memory fallback.")
            redis_client = None

    return redis_client


def close_redis():
    """Close Redis connection"""
    global redis_client
    if redis_client:
        redis_client.close()
        redis_client = None
        logger.info("Disconnected from Redis")


class LocalCache(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> bool: ...

    def delete(self, key: str) -> bool: ...


class RedisLocalCache:
    """Local cache stored in Redis under a per-device namespace"""

    def __init__(self, client: "redis.Redis", namespace: str,
                 ttl_seconds: Optional[int] = settings.LOCAL_CACHE_TTL_SECONDS):
        self.redis_client = client
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds

    def _get_key(self, key: str) -> str:
        return f"{settings.LOCAL_CACHE_PREFIX}:{self.namespace}:{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            return self.redis_client.get(self._get_key(key))
        except Exception as e:
            logger.error(f"Cache get error: {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        try:
            if self.ttl_seconds:
                self.redis_client.setex(self._get_key(key), self.ttl_seconds, value)
            else:
                self.redis_client.set(self._get_key(key), value)
            return True
        except Exception as e:
            logger.error(f"Cache set error: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            self.redis_client.delete(self._get_key(key))
            return True
        except Exception as e:
            logger.error(f"Cache delete error: {e}")
            return False


class MemoryLocalCache:
    """Dict-backed local cache"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def delete(self, key: str) -> bool:
        self._data.pop(key, None)
        return True


def get_local_cache(namespace: str) -> LocalCache:
    """Local cache for a namespace; a throwaway in-memory cache while Redis is down"""
    client = get_redis()
    if client is not None:
        return RedisLocalCache(client, namespace)
    logger.debug(f"[LocalCache] Redis unavailable, session cache for {namespace} is not persisted")
    return MemoryLocalCache()


def read_json_list(cache: LocalCache, key: str) -> List[Any]:
    """Read a JSON array; missing or malformed data reads as an empty list"""
    raw = cache.get(key)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error(f"[LocalCache] Corrupt data under '{key}', ignoring: {e}")
        return []
    if not isinstance(data, list):
        logger.error(f"[LocalCache] Expected a list under '{key}', got {type(data).__name__}")
        return []
    return data


def write_json_list(cache: LocalCache, key: str, items: List[Any]) -> bool:
    try:
        payload = json.dumps(items)
    except (TypeError, ValueError) as e:
        logger.error(f"[LocalCache] Could not serialize '{key}': {e}")
        return False
    return cache.set(key, payload)
