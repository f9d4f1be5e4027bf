# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Chunked blob cache layered on a size-limited key/value store."""

from dataclasses import dataclass, field

import structlog

from blobcache.domain.errors import (
    CacheMissError,
    InvalidKeyError,
    MasterRecordFormatError,
    StoreFailureError,
)
from blobcache.domain.services import (
    DEFAULT_MAX_CHUNK_SIZE,
    chunk_count,
    chunk_key,
    crc64_ecma,
    is_small,
    plan_chunks,
)
from blobcache.domain.value_objects import MASTER_RECORD_SIZE, CacheItem, MasterRecord
from blobcache.ports.outbound import KeyValueStorePort

logger = structlog.get_logger(__name__)

# Bounds describe() when a master record claims an implausible total size.
DEFAULT_DESCRIBE_LIMIT = 10_000


@dataclass(frozen=True)
class ChunkStatus:
    """Presence of one chunk entry, as seen by describe()."""

    key: str
    offset: int
    expected_length: int
    actual_length: int | None = None

    @property
    def ok(self) -> bool:
        """True when the chunk exists and has the expected length."""
        return self.actual_length == self.expected_length


@dataclass(frozen=True)
class BlobLayout:
    """Physical layout of one logical key in the store.

    Attributes:
        key: Logical key
        stored_size: Length of the entry stored under the logical key
        passthrough: True when the value is stored verbatim
        record: Decoded master record (None for passthrough or bad format)
        chunks: Status of each scanned chunk, in offset order
        error: Why the master record could not be decoded, if it could not
        truncated: True when the scan stopped before the last expected chunk
    """

    key: str
    stored_size: int
    passthrough: bool
    record: MasterRecord | None = None
    chunks: tuple[ChunkStatus, ...] = field(default_factory=tuple)
    error: str | None = None
    truncated: bool = False

    @property
    def complete(self) -> bool:
        """True when get() would reconstruct this blob."""
        if self.passthrough:
            return True
        if self.record is None or self.truncated:
            return False
        return all(chunk.ok for chunk in self.chunks)


class ChunkedBlobCache:
    """Store blobs of any size in a store that caps item size.

    Values that fit in one item (and are not exactly 32 bytes long) pass
    through unchanged. Larger values are split into ``max_chunk_size``
    chunks stored under keys derived from the value's CRC-64 and the chunk
    offset; the logical key then holds a 32-character master record
    pointing at them. The master is written last, so a reader never sees
    a master for a set() that did not finish writing its chunks.

    The cache holds no mutable state. Each call is a sequential series of
    store calls with no retries; partial writes leave orphaned chunks that
    the store's own eviction reclaims.

    Example:
        >>> cache = ChunkedBlobCache(InMemoryKeyValueStore())
        >>> cache.set(CacheItem(key="thumb", value=data))
        >>> cache.get("thumb").value == data
        True
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        verify_checksum: bool = False,
        describe_limit: int = DEFAULT_DESCRIBE_LIMIT,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Backing key/value store.
            max_chunk_size: Largest chunk written to the store. Must hold a
                master record, so at least 32 bytes.
            verify_checksum: Recompute the CRC-64 of reconstructed blobs and
                treat a mismatch as a miss.
            describe_limit: Most chunk entries describe() reads for one key.

        Raises:
            ValueError: If max_chunk_size is below the master record width,
                or describe_limit is not positive.
        """
        if max_chunk_size < MASTER_RECORD_SIZE:
            raise ValueError(
                f"max_chunk_size must be >= {MASTER_RECORD_SIZE}, got {max_chunk_size}"
            )
        if describe_limit < 1:
            raise ValueError(f"describe_limit must be positive, got {describe_limit}")
        self._store = store
        self._max_chunk_size = max_chunk_size
        self._verify_checksum = verify_checksum
        self._describe_limit = describe_limit

    @property
    def max_chunk_size(self) -> int:
        """Largest chunk written to the backing store."""
        return self._max_chunk_size

    def set(self, item: CacheItem) -> None:
        """Store item.value under item.key, chunking it if needed.

        Args:
            item: Blob and metadata. Flags and expiration are copied onto
                every chunk entry and onto the master entry.

        Raises:
            InvalidKeyError: If item.key is empty.
            StoreFailureError: If a write fails. Chunks written before the
                failure are left in place.
        """
        if not item.key:
            raise InvalidKeyError("key cannot be empty")

        value_size = len(item.value)
        if is_small(value_size, self._max_chunk_size):
            self._write(item, phase="passthrough")
            return

        checksum = crc64_ecma(item.value)
        for span in plan_chunks(value_size, self._max_chunk_size):
            chunk_item = item.with_entry(
                chunk_key(checksum, span.offset, item.key),
                item.value[span.offset : span.end],
            )
            self._write(chunk_item, phase=f"chunk[{span.index}]", span=(span.offset, span.end))

        record = MasterRecord(checksum=checksum, total_size=value_size)
        self._write(item.with_value(record.encode()), phase="master")
        logger.debug(
            f"Stored {value_size} bytes under key={item.key} "
            f"as {chunk_count(value_size, self._max_chunk_size)} chunks (checksum={checksum:016X})"
        )

    def get(self, key: str) -> CacheItem:
        """Retrieve and, if chunked, reassemble the blob stored under key.

        Returns:
            The master item with its value replaced by the full blob, so a
            chunked hit carries the same metadata as a passthrough hit.

        Raises:
            CacheMissError: If the key is absent, the master record is
                malformed, or any chunk is missing or has the wrong length.
            StoreFailureError: If reading the master entry fails.
        """
        master = self._read_master(key)
        if is_small(len(master.value), self._max_chunk_size):
            return master

        try:
            record = MasterRecord.decode(master.value)
        except MasterRecordFormatError as e:
            logger.error(f"Error when parsing master record for key={key}: {e}")
            raise CacheMissError(key, "malformed master record") from e

        chunks: list[bytes] = []
        for span in plan_chunks(record.total_size, self._max_chunk_size):
            ck = chunk_key(record.checksum, span.offset, key)
            try:
                chunk = self._store.get(ck)
            except (CacheMissError, StoreFailureError) as e:
                logger.error(
                    f"Error when obtaining chunk[{span.offset:016X}:{span.end:016X}] "
                    f"for key={key} under chunk key={ck}: {e}"
                )
                raise CacheMissError(key, f"chunk {span.index} unavailable") from e
            if len(chunk.value) != span.length:
                logger.error(
                    f"Unexpected length for chunk[{span.offset:016X}:{span.end:016X}] "
                    f"for key={key}: {len(chunk.value)}. Expected {span.length}"
                )
                raise CacheMissError(key, f"chunk {span.index} has wrong length")
            chunks.append(chunk.value)

        value = b"".join(chunks)
        if self._verify_checksum:
            actual = crc64_ecma(value)
            if actual != record.checksum:
                logger.error(
                    f"Checksum mismatch for key={key}: "
                    f"expected {record.checksum:016X}, got {actual:016X}"
                )
                raise CacheMissError(key, "checksum mismatch")

        return master.with_value(value)

    def describe(self, key: str) -> BlobLayout:
        """Report how key is laid out in the store without reconstructing it.

        At most describe_limit chunk entries are read; the layout is marked
        truncated when the master record names more.

        Raises:
            CacheMissError: If there is no entry under key.
            StoreFailureError: If reading the master entry fails.
        """
        master = self._read_master(key)
        stored_size = len(master.value)
        if is_small(stored_size, self._max_chunk_size):
            return BlobLayout(key=key, stored_size=stored_size, passthrough=True)

        try:
            record = MasterRecord.decode(master.value)
        except MasterRecordFormatError as e:
            return BlobLayout(key=key, stored_size=stored_size, passthrough=False, error=str(e))

        statuses = []
        truncated = False
        for span in plan_chunks(record.total_size, self._max_chunk_size):
            if span.index >= self._describe_limit:
                truncated = True
                break
            ck = chunk_key(record.checksum, span.offset, key)
            try:
                actual_length: int | None = len(self._store.get(ck).value)
            except (CacheMissError, StoreFailureError):
                actual_length = None
            statuses.append(
                ChunkStatus(
                    key=ck,
                    offset=span.offset,
                    expected_length=span.length,
                    actual_length=actual_length,
                )
            )
        return BlobLayout(
            key=key,
            stored_size=stored_size,
            passthrough=False,
            record=record,
            chunks=tuple(statuses),
            truncated=truncated,
        )

    def _read_master(self, key: str) -> CacheItem:
        try:
            return self._store.get(key)
        except StoreFailureError as e:
            logger.error(f"Error obtaining master item under key={key}: {e}")
            raise StoreFailureError(
                f"Failed to read master item for key={key}: {e}",
                key=key,
                phase="master",
            ) from e

    def _write(
        self,
        item: CacheItem,
        phase: str,
        span: tuple[int, int] | None = None,
    ) -> None:
        try:
            self._store.set(item)
        except StoreFailureError as e:
            where = f"[{span[0]:016X}:{span[1]:016X}] " if span is not None else ""
            logger.error(f"Error storing {phase} item {where}under key={item.key}: {e}")
            raise StoreFailureError(
                f"Failed to store {phase} item under key={item.key}: {e}",
                key=item.key,
                phase=phase,
            ) from e
