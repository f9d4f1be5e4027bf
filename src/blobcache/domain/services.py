# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain services: checksum, chunk addressing, and chunk planning.

Pure functions with no I/O. Everything here is deterministic across
processes so chunk keys written by one process resolve in another.
"""

from collections.abc import Iterator

from blobcache.domain.value_objects import MASTER_RECORD_SIZE, ChunkSpan

# Memcache per-item ceiling (1 MB) minus headroom for key and item overhead.
DEFAULT_MAX_CHUNK_SIZE = 900 * 1000

# ECMA-182 polynomial, bit-reversed (same table as Go's crc64.ECMA).
CRC64_ECMA_POLY = 0xC96C5795D7870F42
_MASK64 = (1 << 64) - 1


def _make_crc64_table(poly: int) -> tuple[int, ...]:
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ poly
            else:
                crc >>= 1
        table.append(crc)
    return tuple(table)


_CRC64_TABLE = _make_crc64_table(CRC64_ECMA_POLY)


def crc64_ecma(data: bytes, crc: int = 0) -> int:
    """Compute the 64-bit CRC of data with the ECMA polynomial.

    Initial value and final XOR are all ones (the CRC-64/XZ variant), so the
    check value of b"123456789" is 0x995DC9BBDF1939FA. Pass a previous result
    as ``crc`` to continue a checksum over several buffers.
    """
    table = _CRC64_TABLE
    crc = ~crc & _MASK64
    for byte in data:
        crc = table[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return ~crc & _MASK64


def is_small(size: int, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> bool:
    """Return True when a value of this size is stored verbatim.

    A 32-byte value is never small: on read it would be indistinguishable
    from an encoded master record, so it always takes the chunked path.
    """
    return size <= max_chunk_size and size != MASTER_RECORD_SIZE


def chunk_key(checksum: int, offset: int, logical_key: str) -> str:
    """Derive the store key of the chunk starting at ``offset``.

    Example:
        >>> chunk_key(0xAB, 900000, "img")
        '00000000000000AB00000000000DBBA0img'
    """
    return f"{checksum:016X}{offset:016X}{logical_key}"


def plan_chunks(total_size: int, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> Iterator[ChunkSpan]:
    """Yield the byte ranges a value of ``total_size`` is split into.

    Every span is ``max_chunk_size`` long except possibly the last, which
    holds the remainder (or a full chunk when the size is an exact multiple).
    A size of 0 yields nothing.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
    for index, offset in enumerate(range(0, total_size, max_chunk_size)):
        yield ChunkSpan(
            index=index,
            offset=offset,
            end=min(offset + max_chunk_size, total_size),
        )


def chunk_count(total_size: int, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> int:
    """Number of chunks a value of ``total_size`` occupies."""
    return -(-total_size // max_chunk_size)
