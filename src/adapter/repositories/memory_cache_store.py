"""
In-Memory Cache Store

Process-local cache store with the same semantics as the Redis store.
Selected with CACHE_BACKEND=memory; used for local development and tests.
Expiry is evaluated lazily against the injected clock.
"""

import fnmatch
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from src.app.repositories.cache_store import ICacheStore
from src.domain.base import Clock, utcnow
from src.domain.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("kind", "value", "expires_at")

    def __init__(self, kind: str, value: Any, expires_at: Optional[datetime] = None):
        self.kind = kind
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


def _slice(items: List[str], start: int, stop: int) -> List[str]:
    size = len(items)
    if start < 0:
        start = max(size + start, 0)
    if stop < 0:
        stop = size + stop
    if start >= size or start > stop:
        return []
    return items[start : stop + 1]


class InMemoryCacheStore(ICacheStore):
    """Cache store implementation backed by a dict"""

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock
        self._data: Dict[str, _Entry] = {}
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        logger.info("In-memory cache store ready")

    async def disconnect(self) -> None:
        self._connected = False
        logger.info("In-memory cache store closed")

    def _require_connection(self) -> None:
        if not self._connected:
            raise StoreUnavailableError("Cache store not connected")

    def _entry(self, key: str, kind: str) -> Optional[_Entry]:
        self._require_connection()
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self._data[key]
            return None
        if entry.kind != kind:
            raise TypeError(f"WRONGTYPE key {key} holds a {entry.kind}, not a {kind}")
        return entry

    def _expiry(self, ttl: Optional[int]) -> Optional[datetime]:
        if not ttl:
            return None
        return self.clock() + timedelta(seconds=ttl)

    async def ping(self) -> bool:
        self._require_connection()
        return True

    # Key/value

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entry(key, "string")
        return json.loads(entry.value) if entry else None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        self._require_connection()
        self._data[key] = _Entry("string", json.dumps(value), self._expiry(ttl))
        return True

    async def delete(self, key: str) -> int:
        self._require_connection()
        entry = self._data.pop(key, None)
        if entry is None or entry.is_expired(self.clock()):
            return 0
        return 1

    async def exists(self, key: str) -> bool:
        self._require_connection()
        entry = self._data.get(key)
        return entry is not None and not entry.is_expired(self.clock())

    async def expire(self, key: str, ttl: int) -> bool:
        if not await self.exists(key):
            return False
        self._data[key].expires_at = self._expiry(ttl)
        return True

    async def increment_if_below(self, key: str, limit: int, ttl: int) -> Optional[int]:
        entry = self._entry(key, "string")
        current = int(json.loads(entry.value)) if entry else 0
        if current >= limit:
            return None
        current += 1
        self._data[key] = _Entry("string", json.dumps(current), self._expiry(ttl))
        return current

    # Hash

    async def hget(self, key: str, field: str) -> Optional[Any]:
        entry = self._entry(key, "hash")
        if entry is None or field not in entry.value:
            return None
        return json.loads(entry.value[field])

    async def hset(self, key: str, field: str, value: Any) -> int:
        entry = self._entry(key, "hash")
        if entry is None:
            entry = self._data[key] = _Entry("hash", {})
        added = 0 if field in entry.value else 1
        entry.value[field] = json.dumps(value)
        return added

    async def hgetall(self, key: str) -> Dict[str, Any]:
        entry = self._entry(key, "hash")
        if entry is None:
            return {}
        return {field: json.loads(value) for field, value in entry.value.items()}

    async def hdel(self, key: str, field: str) -> int:
        entry = self._entry(key, "hash")
        if entry is None or field not in entry.value:
            return 0
        del entry.value[field]
        if not entry.value:
            del self._data[key]
        return 1

    # List

    async def lpush(self, key: str, value: Any) -> int:
        entry = self._entry(key, "list")
        if entry is None:
            entry = self._data[key] = _Entry("list", [])
        entry.value.insert(0, json.dumps(value))
        return len(entry.value)

    async def rpop(self, key: str) -> Optional[Any]:
        entry = self._entry(key, "list")
        if entry is None:
            return None
        value = entry.value.pop()
        if not entry.value:
            del self._data[key]
        return json.loads(value)

    async def llen(self, key: str) -> int:
        entry = self._entry(key, "list")
        return len(entry.value) if entry else 0

    async def lrange(self, key: str, start: int, stop: int) -> List[Any]:
        entry = self._entry(key, "list")
        if entry is None:
            return []
        return [json.loads(item) for item in _slice(entry.value, start, stop)]

    async def ltrim(self, key: str, start: int, stop: int) -> bool:
        entry = self._entry(key, "list")
        if entry is None:
            return True
        entry.value = _slice(entry.value, start, stop)
        if not entry.value:
            del self._data[key]
        return True

    # Set

    async def sadd(self, key: str, member: Any) -> int:
        entry = self._entry(key, "set")
        if entry is None:
            entry = self._data[key] = _Entry("set", set())
        serialized = json.dumps(member)
        if serialized in entry.value:
            return 0
        entry.value.add(serialized)
        return 1

    async def smembers(self, key: str) -> List[Any]:
        entry = self._entry(key, "set")
        if entry is None:
            return []
        return [json.loads(member) for member in sorted(entry.value)]

    async def srem(self, key: str, member: Any) -> int:
        entry = self._entry(key, "set")
        serialized = json.dumps(member)
        if entry is None or serialized not in entry.value:
            return 0
        entry.value.remove(serialized)
        if not entry.value:
            del self._data[key]
        return 1

    # Administration

    async def keys(self, pattern: str) -> List[str]:
        self._require_connection()
        now = self.clock()
        return [
            key
            for key, entry in list(self._data.items())
            if not entry.is_expired(now) and fnmatch.fnmatchcase(key, pattern)
        ]

    async def health_check(self) -> Dict[str, Any]:
        timestamp = utcnow().isoformat()
        if not self._connected:
            return {"status": "unhealthy", "error": "Not connected", "is_connected": False, "timestamp": timestamp}
        return {"status": "healthy", "is_connected": True, "latency_ms": 0.0, "timestamp": timestamp}

    async def memory_usage(self) -> Dict[str, Any]:
        self._require_connection()
        used = 0
        for key, entry in self._data.items():
            used += len(key)
            if entry.kind == "string":
                used += len(entry.value)
            elif entry.kind == "hash":
                used += sum(len(f) + len(v) for f, v in entry.value.items())
            else:
                used += sum(len(item) for item in entry.value)
        return {"used_memory": used, "peak_memory": None, "rss_memory": None}
