# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Inbound port interfaces (driving adapters).

These ports define the use cases the application core exposes to callers
(an image-serving handler, the CLI, metrics decorators).
"""

from typing import Protocol

from blobcache.domain.value_objects import CacheItem


class BlobCachePort(Protocol):
    """Port for storing and retrieving blobs of any size."""

    def set(self, item: CacheItem) -> None:
        """Store a blob under item.key.

        Raises:
            InvalidKeyError: If item.key is empty.
            StoreFailureError: If any underlying write fails.
        """
        ...

    def get(self, key: str) -> CacheItem:
        """Retrieve a blob.

        Raises:
            CacheMissError: If the blob is absent or cannot be reconstructed.
            StoreFailureError: If reading the master entry fails.
        """
        ...
