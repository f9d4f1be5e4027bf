"""Fixtures for CLI tests."""

from pathlib import Path

import pytest

from blobcache.adapters.config.settings import reload_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point settings at a temp data dir and reset the singleton per test."""
    data_dir = tmp_path / "store"
    monkeypatch.setenv("BLOBCACHE_STORE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("BLOBCACHE_CACHE_MAX_CHUNK_SIZE", "64")
    monkeypatch.chdir(tmp_path)
    reload_settings()
    return data_dir
