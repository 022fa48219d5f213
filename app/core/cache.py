from __future__ import annotations

import threading
import time
from typing import Callable, Generic, Protocol, TypeVar

V = TypeVar("V")


class TTLCache(Protocol[V]):
    def get(self, key: str) -> V | None: ...

    def set(self, key: str, value: V) -> None: ...

    def clear(self) -> None: ...


class InMemoryTTLCache(Generic[V]):
    """Process-local map whose entries expire ``ttl_s`` seconds after they were written.

    Expiry is checked on read only; concurrent writers for the same key follow
    last-write-wins.
    """

    def __init__(self, ttl_s: float, clock: Callable[[], float] = time.monotonic):
        if ttl_s <= 0:
            raise ValueError("ttl_s must be positive")
        self._ttl_s = ttl_s
        self._clock = clock
        self._entries: dict[str, tuple[float, V]] = {}
        self._lock = threading.Lock()

    @property
    def ttl_s(self) -> float:
        return self._ttl_s

    def get(self, key: str) -> V | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self._ttl_s:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
