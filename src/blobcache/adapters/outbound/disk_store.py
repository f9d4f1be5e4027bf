# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Disk-backed key/value store with a per-item size ceiling.

Each item is one file named by the SHA-256 of its key. File layout:
8-byte little-endian header size, JSON header (key, flags, expiration,
expires_at), then the raw value bytes.
"""

import hashlib
import json
import logging
import os
import struct
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from blobcache.domain.errors import CacheMissError, StoreFailureError
from blobcache.domain.value_objects import CacheItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEM_SIZE = 1024 * 1024

_ITEM_SUFFIX = ".item"
_TMP_SUFFIX = ".tmp"
_HEADER_SIZE = struct.Struct("<Q")


class DiskKeyValueStore:
    """Adapter for item persistence as one file per key."""

    def __init__(
        self,
        data_dir: Path | str,
        max_item_size: int = DEFAULT_MAX_ITEM_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize store with data directory, creating it if needed."""
        if max_item_size <= 0:
            raise ValueError(f"max_item_size must be positive, got {max_item_size}")
        self.data_dir = Path(data_dir).expanduser().resolve()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreFailureError(f"Failed to create data directory {self.data_dir}: {e}") from e
        self._max_item_size = max_item_size
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def max_item_size(self) -> int:
        """Largest value accepted by set()."""
        return self._max_item_size

    def _item_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.data_dir / f"{digest}{_ITEM_SUFFIX}"

    def get(self, key: str) -> CacheItem:
        """Read the item stored under key."""
        path = self._item_path(key)
        with self._lock:
            header, value = self._read_file(path, key)

            if header.get("key") != key:
                raise CacheMissError(key, "key hash collision")

            expires_at = header.get("expires_at")
            if expires_at is not None and self._clock() >= expires_at:
                self._unlink(path)
                raise CacheMissError(key, "expired")

        return CacheItem(
            key=key,
            value=value,
            flags=header.get("flags", 0),
            expiration=header.get("expiration"),
        )

    def set(self, item: CacheItem) -> None:
        """Write item atomically (tmp file + rename)."""
        size = len(item.value)
        if size > self._max_item_size:
            raise StoreFailureError(
                f"Item too large for key={item.key}: {size} bytes (max {self._max_item_size})",
                key=item.key,
            )

        header = {
            "key": item.key,
            "flags": item.flags,
            "expiration": item.expiration,
            "expires_at": self._clock() + item.expiration if item.expiration else None,
        }
        header_bytes = json.dumps(header).encode("utf-8")

        path = self._item_path(item.key)
        tmp_path = path.with_suffix(_TMP_SUFFIX)
        with self._lock:
            try:
                with tmp_path.open("wb") as f:
                    f.write(_HEADER_SIZE.pack(len(header_bytes)))
                    f.write(header_bytes)
                    f.write(item.value)
                os.replace(tmp_path, path)
            except OSError as e:
                self._unlink(tmp_path)
                raise StoreFailureError(
                    f"Failed to write item for key={item.key}: {e}", key=item.key
                ) from e

    def delete(self, key: str) -> bool:
        """Delete the item under key. Return True when a file was removed."""
        with self._lock:
            return self._unlink(self._item_path(key))

    def keys(self) -> list[str]:
        """List keys of all readable items, sorted."""
        found = []
        with self._lock:
            for path in self.data_dir.glob(f"*{_ITEM_SUFFIX}"):
                try:
                    header, _ = self._read_file(path)
                except (CacheMissError, StoreFailureError) as e:
                    logger.warning(f"Skipping unreadable item file {path.name}: {e}")
                    continue
                key = header.get("key")
                if isinstance(key, str):
                    found.append(key)
        return sorted(found)

    def _read_file(self, path: Path, key: str | None = None) -> tuple[dict[str, Any], bytes]:
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise CacheMissError(key or path.stem) from e
        except OSError as e:
            raise StoreFailureError(f"Failed to read item file {path}: {e}") from e

        if len(raw) < _HEADER_SIZE.size:
            raise StoreFailureError(f"Invalid item file (truncated header): {path}")
        (header_size,) = _HEADER_SIZE.unpack_from(raw)
        body_start = _HEADER_SIZE.size + header_size
        if body_start > len(raw):
            raise StoreFailureError(f"Invalid item file (truncated header): {path}")

        try:
            header = json.loads(raw[_HEADER_SIZE.size : body_start].decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StoreFailureError(f"Corrupted item header for {path}: {e}") from e
        if not isinstance(header, dict):
            raise StoreFailureError(f"Corrupted item header for {path}: not an object")

        return header, raw[body_start:]

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Failed to remove {path}: {e}")
            return False
        return True
