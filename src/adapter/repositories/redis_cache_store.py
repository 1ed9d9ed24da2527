"""
Redis Cache Store

Cache store implementation over redis.asyncio. Every value is JSON-encoded
on the way in and decoded on the way out.
"""

import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.app.repositories.cache_store import ICacheStore
from src.domain.base import utcnow
from src.domain.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# KEYS[1]=counter ARGV[1]=limit ARGV[2]=ttl
INCREMENT_IF_BELOW_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[1]) or '0')
if current >= tonumber(ARGV[1]) then
    return -1
end
current = current + 1
redis.call('SET', KEYS[1], current, 'EX', ARGV[2])
return current
"""


def _dumps(value: Any) -> str:
    return json.dumps(value)


def _loads(value: Optional[str]) -> Optional[Any]:
    if value is None:
        return None
    return json.loads(value)


class RedisCacheStore(ICacheStore):
    """Cache store implementation using redis.asyncio"""

    def __init__(self, redis_url: str = "redis://localhost:6379/0", socket_timeout: float = 5.0):
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self.client: Optional[redis.Redis] = None
        self._increment_script = None

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    async def connect(self) -> None:
        try:
            client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=self.socket_timeout,
            )
            await client.ping()
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StoreUnavailableError(f"Redis connection failed: {e}") from e

        self.client = client
        self._increment_script = client.register_script(INCREMENT_IF_BELOW_SCRIPT)
        logger.info("Connected to Redis")

    async def disconnect(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
            self._increment_script = None
            logger.info("Disconnected from Redis")

    def _require_client(self) -> redis.Redis:
        if self.client is None:
            raise StoreUnavailableError("Redis not connected")
        return self.client

    @contextmanager
    def _translate_errors(self, operation: str, key: str = ""):
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(f"Redis {operation} error for key {key}: {e}")
            raise StoreUnavailableError(f"Redis {operation} failed: {e}") from e

    async def ping(self) -> bool:
        client = self._require_client()
        with self._translate_errors("PING"):
            return bool(await client.ping())

    # Key/value

    async def get(self, key: str) -> Optional[Any]:
        client = self._require_client()
        with self._translate_errors("GET", key):
            return _loads(await client.get(key))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        client = self._require_client()
        with self._translate_errors("SET", key):
            if ttl:
                await client.set(key, _dumps(value), ex=int(ttl))
            else:
                await client.set(key, _dumps(value))
        return True

    async def delete(self, key: str) -> int:
        client = self._require_client()
        with self._translate_errors("DEL", key):
            return await client.delete(key)

    async def exists(self, key: str) -> bool:
        client = self._require_client()
        with self._translate_errors("EXISTS", key):
            return await client.exists(key) > 0

    async def expire(self, key: str, ttl: int) -> bool:
        client = self._require_client()
        with self._translate_errors("EXPIRE", key):
            return bool(await client.expire(key, int(ttl)))

    async def increment_if_below(self, key: str, limit: int, ttl: int) -> Optional[int]:
        self._require_client()
        with self._translate_errors("EVALSHA", key):
            count = await self._increment_script(keys=[key], args=[limit, int(ttl)])
        count = int(count)
        return None if count < 0 else count

    # Hash

    async def hget(self, key: str, field: str) -> Optional[Any]:
        client = self._require_client()
        with self._translate_errors("HGET", key):
            return _loads(await client.hget(key, field))

    async def hset(self, key: str, field: str, value: Any) -> int:
        client = self._require_client()
        with self._translate_errors("HSET", key):
            return await client.hset(key, field, _dumps(value))

    async def hgetall(self, key: str) -> Dict[str, Any]:
        client = self._require_client()
        with self._translate_errors("HGETALL", key):
            raw = await client.hgetall(key)
        return {field: _loads(value) for field, value in raw.items()}

    async def hdel(self, key: str, field: str) -> int:
        client = self._require_client()
        with self._translate_errors("HDEL", key):
            return await client.hdel(key, field)

    # List

    async def lpush(self, key: str, value: Any) -> int:
        client = self._require_client()
        with self._translate_errors("LPUSH", key):
            return await client.lpush(key, _dumps(value))

    async def rpop(self, key: str) -> Optional[Any]:
        client = self._require_client()
        with self._translate_errors("RPOP", key):
            return _loads(await client.rpop(key))

    async def llen(self, key: str) -> int:
        client = self._require_client()
        with self._translate_errors("LLEN", key):
            return await client.llen(key)

    async def lrange(self, key: str, start: int, stop: int) -> List[Any]:
        client = self._require_client()
        with self._translate_errors("LRANGE", key):
            items = await client.lrange(key, start, stop)
        return [_loads(item) for item in items]

    async def ltrim(self, key: str, start: int, stop: int) -> bool:
        client = self._require_client()
        with self._translate_errors("LTRIM", key):
            return bool(await client.ltrim(key, start, stop))

    # Set

    async def sadd(self, key: str, member: Any) -> int:
        client = self._require_client()
        with self._translate_errors("SADD", key):
            return await client.sadd(key, _dumps(member))

    async def smembers(self, key: str) -> List[Any]:
        client = self._require_client()
        with self._translate_errors("SMEMBERS", key):
            members = await client.smembers(key)
        return [_loads(member) for member in members]

    async def srem(self, key: str, member: Any) -> int:
        client = self._require_client()
        with self._translate_errors("SREM", key):
            return await client.srem(key, _dumps(member))

    # Administration

    async def keys(self, pattern: str) -> List[str]:
        client = self._require_client()
        with self._translate_errors("SCAN", pattern):
            return [key async for key in client.scan_iter(match=pattern)]

    async def health_check(self) -> Dict[str, Any]:
        timestamp = utcnow().isoformat()
        if self.client is None:
            return {"status": "unhealthy", "error": "Not connected", "is_connected": False, "timestamp": timestamp}

        start = time.perf_counter()
        try:
            await self.ping()
        except StoreUnavailableError as e:
            return {"status": "unhealthy", "error": str(e), "is_connected": False, "timestamp": timestamp}

        return {
            "status": "healthy",
            "is_connected": True,
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "timestamp": timestamp,
        }

    async def memory_usage(self) -> Dict[str, Any]:
        client = self._require_client()
        with self._translate_errors("INFO"):
            info = await client.info("memory")
        return {
            "used_memory": info.get("used_memory"),
            "peak_memory": info.get("used_memory_peak"),
            "rss_memory": info.get("used_memory_rss"),
        }
