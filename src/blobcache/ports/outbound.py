# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Outbound port interfaces (driven adapters).

These ports define the contracts for the application core to interact
with the backing key/value store. Implementations are provided by
outbound adapters (in-memory, disk, or a memcache-style server client).

All interfaces use Protocol (PEP 544) for structural typing, allowing
implicit implementation without inheritance.
"""

from typing import Protocol

from blobcache.domain.value_objects import CacheItem


class KeyValueStorePort(Protocol):
    """Port for a size-limited key/value cache store.

    The store enforces a per-item size ceiling, evicts keys independently,
    and offers no cross-key atomicity.
    """

    @property
    def max_item_size(self) -> int:
        """Largest value, in bytes, the store accepts for a single item."""
        ...

    def get(self, key: str) -> CacheItem:
        """Read one item.

        Args:
            key: Store key.

        Returns:
            The stored CacheItem.

        Raises:
            CacheMissError: If the key is absent or expired.
            StoreFailureError: If the store call itself fails.
        """
        ...

    def set(self, item: CacheItem) -> None:
        """Write one item, replacing any existing value.

        Args:
            item: Item to store.

        Raises:
            StoreFailureError: If the write fails (including values larger
                than max_item_size).
        """
        ...
