# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""In-memory key/value store with a per-item size ceiling.

Behaves like a single memcache node: items larger than ``max_item_size``
are rejected, items expire after their TTL, and when a byte budget is set
the least recently used items are evicted independently of one another.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from blobcache.domain.errors import CacheMissError, StoreFailureError
from blobcache.domain.value_objects import CacheItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEM_SIZE = 1024 * 1024


@dataclass
class _Slot:
    item: CacheItem
    expires_at: float | None


class InMemoryKeyValueStore:
    """Dict-based store for development and testing.

    Thread-safe: all operations hold a single lock.
    """

    def __init__(
        self,
        max_item_size: int = DEFAULT_MAX_ITEM_SIZE,
        max_total_bytes: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty store.

        Args:
            max_item_size: Largest value accepted by set(), in bytes.
            max_total_bytes: Byte budget across all values; LRU items are
                evicted to stay within it. None disables eviction.
            clock: Monotonic time source used for expiration.
        """
        if max_item_size <= 0:
            raise ValueError(f"max_item_size must be positive, got {max_item_size}")
        self._max_item_size = max_item_size
        self._max_total_bytes = max_total_bytes
        self._clock = clock
        self._slots: OrderedDict[str, _Slot] = OrderedDict()
        self._total_bytes = 0
        self._lock = threading.Lock()

    @property
    def max_item_size(self) -> int:
        """Largest value accepted by set()."""
        return self._max_item_size

    @property
    def total_bytes(self) -> int:
        """Sum of stored value sizes."""
        with self._lock:
            return self._total_bytes

    def get(self, key: str) -> CacheItem:
        """Return the item under key."""
        with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                raise CacheMissError(key)
            if slot.expires_at is not None and self._clock() >= slot.expires_at:
                self._remove(key)
                raise CacheMissError(key, "expired")
            self._slots.move_to_end(key)
            return slot.item

    def set(self, item: CacheItem) -> None:
        """Store item, replacing any existing value under its key."""
        size = len(item.value)
        if size > self._max_item_size:
            raise StoreFailureError(
                f"Item too large for key={item.key}: {size} bytes (max {self._max_item_size})",
                key=item.key,
            )

        expires_at = None
        if item.expiration:
            expires_at = self._clock() + item.expiration

        with self._lock:
            self._remove(item.key)
            self._slots[item.key] = _Slot(item=item, expires_at=expires_at)
            self._total_bytes += size
            self._evict()

    def delete(self, key: str) -> bool:
        """Delete key. Return True when something was removed."""
        with self._lock:
            return self._remove(key)

    def keys(self) -> list[str]:
        """List stored keys, least recently used first."""
        with self._lock:
            return list(self._slots)

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._slots

    def _remove(self, key: str) -> bool:
        slot = self._slots.pop(key, None)
        if slot is None:
            return False
        self._total_bytes -= len(slot.item.value)
        return True

    def _evict(self) -> None:
        if self._max_total_bytes is None:
            return
        while self._total_bytes > self._max_total_bytes and self._slots:
            key, slot = self._slots.popitem(last=False)
            self._total_bytes -= len(slot.item.value)
            logger.debug(f"Evicted key={key} ({len(slot.item.value)} bytes)")
