"""Pytest configuration and shared fixtures.

This module defines:
- Test markers (unit, property)
- Shared fixtures for stores and caches
- A store double that fails on chosen keys
"""

import pytest

from blobcache.adapters.outbound.memory_store import InMemoryKeyValueStore
from blobcache.application.chunked_blob_cache import ChunkedBlobCache
from blobcache.domain.errors import StoreFailureError
from blobcache.domain.value_objects import CacheItem

# Small chunk size keeps chunked-path tests fast (CRC-64 runs in pure Python)
SMALL_CHUNK_SIZE = 64


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: Fast unit tests with in-memory or temp-dir stores",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (hypothesis)",
    )


class RecordingStore(InMemoryKeyValueStore):
    """In-memory store that records writes and can fail on demand."""

    def __init__(self, max_item_size: int = 1024 * 1024) -> None:
        super().__init__(max_item_size=max_item_size)
        self.writes: list[str] = []
        self.reads: list[str] = []
        self.fail_set_keys: set[str] = set()
        self.fail_get_keys: set[str] = set()
        self.fail_set_after: int | None = None

    def set(self, item: CacheItem) -> None:
        if item.key in self.fail_set_keys or (
            self.fail_set_after is not None and len(self.writes) >= self.fail_set_after
        ):
            raise StoreFailureError(f"injected write failure for {item.key}", key=item.key)
        self.writes.append(item.key)
        super().set(item)

    def get(self, key: str) -> CacheItem:
        self.reads.append(key)
        if key in self.fail_get_keys:
            raise StoreFailureError(f"injected read failure for {key}", key=key)
        return super().get(key)


@pytest.fixture
def store() -> RecordingStore:
    """Fresh recording in-memory store."""
    return RecordingStore()


@pytest.fixture
def cache(store: RecordingStore) -> ChunkedBlobCache:
    """ChunkedBlobCache with a small chunk size over the recording store."""
    return ChunkedBlobCache(store, max_chunk_size=SMALL_CHUNK_SIZE)

