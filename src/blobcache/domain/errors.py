# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain exception hierarchy.

All domain-level errors inherit from BlobCacheError.
This allows clean exception handling at adapter boundaries.
"""


class BlobCacheError(Exception):
    """Base exception for all domain errors."""


class CacheMissError(BlobCacheError):
    """Key is absent, or present but unusable (bad master record, missing or short chunk).

    Corrupt and incomplete chunk sets are reported as misses: the only
    recovery for a cache is to regenerate the value from its source.
    """

    def __init__(self, key: str, reason: str | None = None) -> None:
        self.key = key
        self.reason = reason
        message = f"Cache miss: {key}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class StoreFailureError(BlobCacheError):
    """The backing store's read or write call itself failed."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        phase: str | None = None,
    ) -> None:
        self.key = key
        self.phase = phase
        super().__init__(message)


class InvalidKeyError(BlobCacheError):
    """Logical key rejected (empty key)."""


class MasterRecordFormatError(BlobCacheError):
    """Master record is not a 32-character checksum/size pointer."""
