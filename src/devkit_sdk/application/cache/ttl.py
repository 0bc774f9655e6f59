"""Application cache – TtlCache with lazy expiry."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from devkit_sdk.kernel.time import Clock, SystemClock

__all__ = ["CacheEntry", "TtlCache"]

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    expires_at_ms: int


class TtlCache(Generic[V]):
    """In-memory key → value store with one fixed TTL per instance.

    Expired entries are evicted lazily, on the read that finds them; there is
    no background sweep, so :attr:`size` may count entries that have expired
    but were not read since.

    Not thread-safe: intended for a single asyncio event loop, where the
    synchronous methods cannot interleave.
    """

    def __init__(self, ttl_ms: int, clock: Clock | None = None) -> None:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        self._ttl_ms = ttl_ms
        self._clock: Clock = clock or SystemClock()
        self._entries: dict[str, CacheEntry[V]] = {}

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def set(self, key: str, value: V) -> None:
        self._entries[key] = CacheEntry(value, self._clock.timestamp_ms() + self._ttl_ms)

    def get(self, key: str) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock.timestamp_ms() >= entry.expires_at_ms:
            del self._entries[key]
            return None
        return entry.value

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        """Physically resident entries, including expired ones not yet read."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
