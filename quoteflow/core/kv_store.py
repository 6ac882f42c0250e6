from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from redis import Redis


class KeyValueStore(Protocol):
    """
    Lock / session / cache store used by the notification gate and cache helper.
    """

    def check_and_set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool: ...

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None: ...

    def delete(self, key: str) -> None: ...


class RedisKeyValueStore:
    """
    Redis-backed store. check_and_set_if_absent is one SET NX EX round-trip,
    so two concurrent callers can never both observe "absent".
    """

    def __init__(self, client: Redis):
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisKeyValueStore":
        return cls(Redis.from_url(url, decode_responses=True))

    def check_and_set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        return bool(self._redis.set(key, value, nx=True, ex=ttl_seconds))

    def get(self, key: str) -> Optional[str]:
        return self._redis.get(key)

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self._redis.set(key, value, ex=ttl_seconds)

    def delete(self, key: str) -> None:
        self._redis.delete(key)


@dataclass
class _Entry:
    value: str
    expires_at: Optional[float]


class InMemoryKeyValueStore:
    """
    Single-process store with TTL.
    Only correct when one worker process serves all requests (dev, tests).
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> Optional[_Entry]:
        e = self._entries.get(key)
        if e is None:
            return None
        if e.expires_at is not None and e.expires_at <= self._clock():
            del self._entries[key]
            return None
        return e

    def check_and_set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        with self._lock:
            if self._live(key) is not None:
                return False
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)
            return True

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            e = self._live(key)
            return e.value if e else None

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        with self._lock:
            expires_at = self._clock() + ttl_seconds if ttl_seconds else None
            self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
