# projectmap/bounded_cache.py
"""Capacity-bounded mapping with first-in-first-out eviction."""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """Cached value plus the metadata it was computed against."""

    value: V
    mtime_ns: int
    size: Optional[int] = None

    def matches(self, mtime_ns: int, size: Optional[int] = None) -> bool:
        if self.mtime_ns != mtime_ns:
            return False
        if self.size is not None and self.size != size:
            return False
        return True


class BoundedCache:
    """Mapping that evicts the oldest *inserted* keys once over capacity.

    Reads never refresh a key's position. Overwriting an existing key keeps
    its original insertion slot.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: OrderedDict[str, Any] = OrderedDict()

    def get(self, key: str, default=None):
        return self._entries.get(key, default)

    def set(self, key: str, value) -> None:
        self._entries[key] = value
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def pop(self, key: str, default=None):
        return self._entries.pop(key, default)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self):
        return list(self._entries.keys())

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
