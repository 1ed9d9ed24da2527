from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

# Key namespaces shared by all components
SESSION_PREFIX = "session:"
USER_SESSIONS_PREFIX = "user_sessions:"
RATE_LIMIT_PREFIX = "rate_limit:"
QUEUE_PREFIX = "queue:"
JOB_RESULT_PREFIX = "job_result:"
USER_NOTIFICATIONS_PREFIX = "user_notifications:"


class ICacheStore(ABC):
    """
    Cache store interface - application layer.

    Values, hash fields, list items and set members are arbitrary
    JSON-serializable data. Every operation raises StoreUnavailableError
    when the store is not connected.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass

    # Key/value

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get value, None when absent"""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value, optionally expiring after ttl seconds"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> int:
        """Delete key. Returns count of removed keys."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def expire(self, key: str, ttl: int) -> bool:
        pass

    @abstractmethod
    async def increment_if_below(self, key: str, limit: int, ttl: int) -> Optional[int]:
        """
        Atomically increment a counter if it is below limit.

        An absent counter counts as 0. On success the counter TTL is re-set
        to ttl and the new count returned; otherwise the key is left
        untouched and None returned.
        """
        pass

    # Hash

    @abstractmethod
    async def hget(self, key: str, field: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def hset(self, key: str, field: str, value: Any) -> int:
        pass

    @abstractmethod
    async def hgetall(self, key: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def hdel(self, key: str, field: str) -> int:
        pass

    # List

    @abstractmethod
    async def lpush(self, key: str, value: Any) -> int:
        """Push to the head. Returns new list length."""
        pass

    @abstractmethod
    async def rpop(self, key: str) -> Optional[Any]:
        """Pop from the tail, None when empty"""
        pass

    @abstractmethod
    async def llen(self, key: str) -> int:
        pass

    @abstractmethod
    async def lrange(self, key: str, start: int, stop: int) -> List[Any]:
        """Items from start to stop inclusive (negative indexes count from the tail)"""
        pass

    @abstractmethod
    async def ltrim(self, key: str, start: int, stop: int) -> bool:
        pass

    # Set

    @abstractmethod
    async def sadd(self, key: str, member: Any) -> int:
        pass

    @abstractmethod
    async def smembers(self, key: str) -> List[Any]:
        pass

    @abstractmethod
    async def srem(self, key: str, member: Any) -> int:
        pass

    # Administration

    @abstractmethod
    async def keys(self, pattern: str) -> List[str]:
        """Keys matching a glob-style pattern"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def memory_usage(self) -> Dict[str, Any]:
        pass
