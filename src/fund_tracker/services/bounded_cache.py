"""Small insertion-ordered cache with batch eviction."""

import threading
from typing import Generic, Hashable, Optional, TypeVar

from fund_tracker.core.exceptions import ValidationError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """
    Memo cache for computed views.

    When an insert pushes the size past `capacity`, the `evict_count`
    oldest entries are dropped in one go.
    """

    def __init__(self, capacity: int = 20, evict_count: int = 10):
        if capacity < 1:
            raise ValidationError("capacity must be at least 1")
        if evict_count < 1:
            raise ValidationError("evict_count must be at least 1")
        self._capacity = capacity
        self._evict_count = evict_count
        self._entries: dict[K, V] = {}
        self._lock = threading.Lock()

    def get(self, key: K) -> Optional[V]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = value
            if len(self._entries) > self._capacity:
                for old_key in list(self._entries)[: self._evict_count]:
                    del self._entries[old_key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
