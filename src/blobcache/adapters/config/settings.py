# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from blobcache.application.chunked_blob_cache import DEFAULT_DESCRIBE_LIMIT
from blobcache.domain.services import DEFAULT_MAX_CHUNK_SIZE
from blobcache.domain.value_objects import MASTER_RECORD_SIZE


class CacheSettings(BaseSettings):
    """Chunked cache behaviour.

    Controls chunk size, integrity checking, and default item lifetime.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOBCACHE_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_chunk_size: int = Field(
        default=DEFAULT_MAX_CHUNK_SIZE,
        ge=MASTER_RECORD_SIZE,
        description="Largest value written to a single store item, in bytes",
    )

    verify_checksum: bool = Field(
        default=False,
        description="Verify the CRC-64 of reassembled blobs (mismatch = miss)",
    )

    describe_limit: int = Field(
        default=DEFAULT_DESCRIBE_LIMIT,
        ge=1,
        description="Most chunk entries `inspect` reads for one key",
    )

    default_ttl_seconds: float | None = Field(
        default=None,
        ge=0,
        description="Expiration applied when the caller gives none (None = never)",
    )


class StoreSettings(BaseSettings):
    """Backing key/value store selection."""

    model_config = SettingsConfigDict(
        env_prefix="BLOBCACHE_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["memory", "disk"] = Field(
        default="disk",
        description=(
            "Store implementation. memory lives only as long as the process that "
            "created it, so the CLI rejects it"
        ),
    )

    data_dir: str = Field(
        default="~/.blobcache/store",
        description="Directory for the disk store",
    )

    max_item_size: int = Field(
        default=1024 * 1024,
        ge=MASTER_RECORD_SIZE,
        description="Per-item ceiling enforced by the store, in bytes",
    )

    @property
    def data_path(self) -> Path:
        """Expanded data directory."""
        return Path(self.data_dir).expanduser()


class LoggingSettings(BaseSettings):
    """Logging output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BLOBCACHE_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    json_output: bool = Field(
        default=False,
        description="Render logs as JSON lines instead of console output",
    )


class Settings(BaseSettings):
    """Root settings container.

    Aggregates all subsettings into a single object.

    Example:
        >>> settings = Settings()
        >>> settings.cache.max_chunk_size
        900000
        >>> settings.store.backend
        'disk'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings singleton.

    Loads configuration from environment variables and .env file.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings (for testing).

    Forces reload of configuration from environment.
    """
    global _settings
    _settings = Settings()
    return _settings
