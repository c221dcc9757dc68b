"""
Append-only memoization for derivation results.

Entries are immutable once inserted and are never evicted; when the cache is
full, new results are returned without being stored. Keys must be the exact
input bytes (plus slot where relevant), never a re-rendered string.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, Hashable, TypeVar

from .config import MAX_CACHE_ENTRIES

V = TypeVar("V")


class DerivationCache(Generic[V]):
    """
    Bounded append-only cache.

    Example:
        >>> cache = DerivationCache(max_entries=2)
        >>> cache.get_or_compute(b"k", lambda: 1)
        1
    """

    def __init__(self, max_entries: int = MAX_CACHE_ENTRIES):
        if max_entries < 0:
            raise ValueError("max_entries must be non-negative")
        self._max_entries = max_entries
        self._entries: Dict[Hashable, V] = {}

    def get_or_compute(self, key: Hashable, compute: Callable[[], V]) -> V:
        try:
            return self._entries[key]
        except KeyError:
            pass

        value = compute()
        if len(self._entries) < self._max_entries:
            # setdefault keeps the first writer's value if two threads race
            value = self._entries.setdefault(key, value)
        return value

    def clear(self) -> None:
        """Drop all entries (testing only)."""
        self._entries = {}

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
