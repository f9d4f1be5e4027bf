"""Property-based tests for ChunkedBlobCache round trips and write counts."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from blobcache.adapters.outbound.memory_store import InMemoryKeyValueStore
from blobcache.application.chunked_blob_cache import ChunkedBlobCache
from blobcache.domain.errors import CacheMissError
from blobcache.domain.services import chunk_count, is_small
from blobcache.domain.value_objects import CacheItem

pytestmark = [pytest.mark.unit, pytest.mark.property]

valid_key = st.text(min_size=1, max_size=40)
chunk_sizes = st.integers(min_value=32, max_value=96)


@settings(max_examples=75, deadline=None)
@given(key=valid_key, value=st.binary(max_size=500), max_chunk_size=chunk_sizes)
def test_get_returns_what_was_set(key: str, value: bytes, max_chunk_size: int) -> None:
    cache = ChunkedBlobCache(InMemoryKeyValueStore(), max_chunk_size=max_chunk_size)

    cache.set(CacheItem(key=key, value=value))

    assert cache.get(key).value == value


@settings(max_examples=75, deadline=None)
@given(value=st.binary(max_size=500), max_chunk_size=chunk_sizes)
def test_entry_count_matches_layout(value: bytes, max_chunk_size: int) -> None:
    store = InMemoryKeyValueStore()
    cache = ChunkedBlobCache(store, max_chunk_size=max_chunk_size)

    cache.set(CacheItem(key="k", value=value))

    if is_small(len(value), max_chunk_size):
        assert len(store) == 1
        assert store.get("k").value == value
    else:
        assert len(store) == chunk_count(len(value), max_chunk_size) + 1


@settings(max_examples=50, deadline=None)
@given(
    value=st.binary(min_size=97, max_size=400),
    data=st.data(),
)
def test_removing_any_entry_is_a_miss(value: bytes, data: st.DataObject) -> None:
    store = InMemoryKeyValueStore()
    cache = ChunkedBlobCache(store, max_chunk_size=48)
    cache.set(CacheItem(key="k", value=value))

    victim = data.draw(st.sampled_from(store.keys()))
    store.delete(victim)

    with pytest.raises(CacheMissError):
        cache.get("k")
