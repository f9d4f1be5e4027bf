# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Metrics-recording wrapper around a BlobCachePort."""

from blobcache.adapters.inbound.metrics import operation_total, value_bytes
from blobcache.domain.errors import BlobCacheError, CacheMissError
from blobcache.domain.value_objects import CacheItem
from blobcache.ports.inbound import BlobCachePort


class MeteredBlobCache:
    """Decorate a blob cache with Prometheus counters.

    Collects:
    - operation_total (counter by operation, result)
    - value_bytes (histogram of stored value sizes)

    Exceptions from the wrapped cache are recorded and re-raised unchanged.

    Example:
        cache = MeteredBlobCache(ChunkedBlobCache(store))
    """

    def __init__(self, inner: BlobCachePort) -> None:
        self._inner = inner

    def set(self, item: CacheItem) -> None:
        try:
            self._inner.set(item)
        except BlobCacheError:
            operation_total.labels(operation="set", result="failure").inc()
            raise
        operation_total.labels(operation="set", result="stored").inc()
        value_bytes.observe(len(item.value))

    def get(self, key: str) -> CacheItem:
        try:
            item = self._inner.get(key)
        except CacheMissError:
            operation_total.labels(operation="get", result="miss").inc()
            raise
        except BlobCacheError:
            operation_total.labels(operation="get", result="failure").inc()
            raise
        operation_total.labels(operation="get", result="hit").inc()
        return item
