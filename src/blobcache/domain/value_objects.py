# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain value objects (immutable data structures).

Value objects are immutable data structures that represent concepts
from the domain model. They have no identity - two instances with
the same values are considered equal.
"""

import re
from dataclasses import dataclass, replace

from blobcache.domain.errors import MasterRecordFormatError

# Width of an encoded chunked-pointer master record: two 16-digit hex fields.
MASTER_RECORD_SIZE = 32

_HEX_FIELD = 16
_MAX_U64 = (1 << 64) - 1
_MASTER_RECORD_PATTERN = re.compile(rb"[0-9A-Fa-f]{32}")


@dataclass(frozen=True)
class CacheItem:
    """One key/value entry plus memcache-style item metadata.

    This is both the unit the backing store holds and the record callers
    get back from the cache. Metadata set by the caller is copied onto every
    physical entry of a chunked blob.

    Attributes:
        key: Store key (logical key for callers, derived key for chunks)
        value: Raw bytes
        flags: Opaque caller-defined flags
        expiration: Relative TTL in seconds (None or 0 = never expires)
    """

    key: str
    value: bytes
    flags: int = 0
    expiration: float | None = None

    def with_entry(self, key: str, value: bytes) -> "CacheItem":
        """Copy this item's metadata onto a different key/value pair."""
        return replace(self, key=key, value=value)

    def with_value(self, value: bytes) -> "CacheItem":
        """Return a copy carrying a different value."""
        return replace(self, value=value)


@dataclass(frozen=True)
class MasterRecord:
    """Pointer stored under a logical key when its value was chunked.

    Attributes:
        checksum: CRC-64 of the whole original value
        total_size: Length of the original value in bytes

    Example:
        >>> MasterRecord(checksum=0xAB, total_size=1_000_000).encode()
        b'00000000000000AB00000000000F4240'
    """

    checksum: int
    total_size: int

    def __post_init__(self) -> None:
        if not 0 <= self.checksum <= _MAX_U64:
            raise MasterRecordFormatError(f"checksum out of 64-bit range: {self.checksum}")
        if not 0 <= self.total_size <= _MAX_U64:
            raise MasterRecordFormatError(f"total_size out of 64-bit range: {self.total_size}")

    def encode(self) -> bytes:
        """Encode as 32 uppercase, zero-padded hex ASCII characters."""
        return f"{self.checksum:016X}{self.total_size:016X}".encode("ascii")

    @classmethod
    def decode(cls, raw: bytes) -> "MasterRecord":
        """Parse a stored master record strictly.

        Raises:
            MasterRecordFormatError: Wrong length or non-hex characters
        """
        if len(raw) != MASTER_RECORD_SIZE:
            raise MasterRecordFormatError(
                f"master record must be {MASTER_RECORD_SIZE} bytes, got {len(raw)}"
            )
        if not _MASTER_RECORD_PATTERN.fullmatch(raw):
            raise MasterRecordFormatError(f"master record is not hex: {raw!r}")
        text = raw.decode("ascii")
        return cls(
            checksum=int(text[:_HEX_FIELD], 16),
            total_size=int(text[_HEX_FIELD:], 16),
        )


@dataclass(frozen=True)
class ChunkSpan:
    """Byte range of one chunk within the original value.

    Chunks are addressed by byte offset, not by sequence index, so any
    chunk can be located without knowing the chunk count.
    """

    index: int
    offset: int
    end: int

    @property
    def length(self) -> int:
        """Expected length of the chunk in bytes."""
        return self.end - self.offset
