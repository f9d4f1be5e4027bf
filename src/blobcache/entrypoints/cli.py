# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""CLI entrypoint for the chunked blob cache.

Usage:
    blobcache put thumbnails/cat.jpg ./cat.jpg --ttl 3600
    blobcache get thumbnails/cat.jpg --output ./copy.jpg
    blobcache inspect thumbnails/cat.jpg
"""

from pathlib import Path

import typer

from blobcache import __version__
from blobcache.adapters.config.logging import configure_logging, get_logger
from blobcache.adapters.config.settings import Settings, get_settings
from blobcache.adapters.inbound.metered_cache import MeteredBlobCache
from blobcache.adapters.outbound.disk_store import DiskKeyValueStore
from blobcache.adapters.outbound.memory_store import InMemoryKeyValueStore
from blobcache.application.chunked_blob_cache import ChunkedBlobCache
from blobcache.domain.errors import BlobCacheError, CacheMissError
from blobcache.domain.services import chunk_count
from blobcache.domain.value_objects import CacheItem
from blobcache.ports.outbound import KeyValueStorePort

app = typer.Typer(
    name="blobcache",
    help="Store and retrieve blobs of any size in a size-limited cache",
    add_completion=False,
)


def build_store(settings: Settings) -> KeyValueStorePort:
    """Create the backing store selected in settings."""
    if settings.store.backend == "memory":
        return InMemoryKeyValueStore(max_item_size=settings.store.max_item_size)
    return DiskKeyValueStore(
        settings.store.data_path,
        max_item_size=settings.store.max_item_size,
    )


def build_cache(settings: Settings) -> ChunkedBlobCache:
    """Create a ChunkedBlobCache over the configured store."""
    store = build_store(settings)
    if settings.cache.max_chunk_size > store.max_item_size:
        get_logger(__name__).warning(
            f"max_chunk_size={settings.cache.max_chunk_size} exceeds the store's "
            f"max_item_size={store.max_item_size}; chunked writes will fail"
        )
    return ChunkedBlobCache(
        store,
        max_chunk_size=settings.cache.max_chunk_size,
        verify_checksum=settings.cache.verify_checksum,
        describe_limit=settings.cache.describe_limit,
    )


def open_cache(settings: Settings) -> ChunkedBlobCache:
    """Build the cache for a CLI command, rejecting per-process stores.

    Each command runs in its own process, so a memory store would lose every
    write before the next command could read it.
    """
    if settings.store.backend == "memory":
        typer.echo(
            "Error: the memory backend does not persist between commands; "
            "set BLOBCACHE_STORE_BACKEND=disk",
            err=True,
        )
        raise typer.Exit(code=2)
    return build_cache(settings)


@app.callback()
def main_callback() -> None:
    """Configure logging from settings before any command runs."""
    settings = get_settings()
    configure_logging(settings.logging.level, json_output=settings.logging.json_output)


@app.command()
def put(
    key: str = typer.Argument(..., help="Logical key"),
    source: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="File whose bytes are stored",
    ),
    ttl: float = typer.Option(
        None,
        "--ttl",
        "-t",
        min=0,
        help="Expiration in seconds (default: from settings)",
    ),
    flags: int = typer.Option(0, "--flags", help="Opaque item flags"),
) -> None:
    """Store a file's contents under KEY."""
    settings = get_settings()
    cache = MeteredBlobCache(open_cache(settings))
    expiration = ttl if ttl is not None else settings.cache.default_ttl_seconds
    data = source.read_bytes()

    try:
        cache.set(CacheItem(key=key, value=data, flags=flags, expiration=expiration))
    except BlobCacheError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Stored {len(data)} bytes under {key}", err=True)


@app.command()
def get(
    key: str = typer.Argument(..., help="Logical key"),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the blob here instead of stdout",
    ),
) -> None:
    """Retrieve the blob stored under KEY."""
    cache = MeteredBlobCache(open_cache(get_settings()))

    try:
        item = cache.get(key)
    except CacheMissError as e:
        typer.echo(f"Cache miss: {key}", err=True)
        raise typer.Exit(code=1) from e
    except BlobCacheError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e

    if output is None:
        typer.echo(item.value, nl=False)
    else:
        output.write_bytes(item.value)
        typer.echo(f"Wrote {len(item.value)} bytes to {output}", err=True)


@app.command()
def inspect(key: str = typer.Argument(..., help="Logical key")) -> None:
    """Show how KEY is laid out in the store."""
    cache = open_cache(get_settings())

    try:
        layout = cache.describe(key)
    except CacheMissError as e:
        typer.echo(f"Cache miss: {key}", err=True)
        raise typer.Exit(code=1) from e
    except BlobCacheError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e

    typer.echo(f"Key: {layout.key}")
    typer.echo(f"Stored size: {layout.stored_size}")
    if layout.passthrough:
        typer.echo("Layout: passthrough")
        return
    if layout.record is None:
        typer.echo(f"Layout: invalid master record ({layout.error})")
        raise typer.Exit(code=1)

    typer.echo("Layout: chunked")
    typer.echo(f"Checksum: {layout.record.checksum:016X}")
    typer.echo(f"Total size: {layout.record.total_size}")
    if layout.truncated:
        expected = chunk_count(layout.record.total_size, cache.max_chunk_size)
        typer.echo(f"Chunks: {len(layout.chunks)} scanned of {expected}")
    else:
        typer.echo(f"Chunks: {len(layout.chunks)}")
    for chunk in layout.chunks:
        found = "missing" if chunk.actual_length is None else f"{chunk.actual_length} bytes"
        status = "ok" if chunk.ok else "BAD"
        typer.echo(f"  [{status}] {chunk.key} expected={chunk.expected_length} found={found}")
    typer.echo(f"Complete: {'yes' if layout.complete else 'no'}")
    if not layout.complete:
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"blobcache v{__version__}")


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()

    typer.echo("=" * 60)
    typer.echo("blobcache - Configuration")
    typer.echo("=" * 60)
    typer.echo()
    typer.echo("[Cache]")
    typer.echo(f"  Max chunk size: {settings.cache.max_chunk_size}")
    typer.echo(f"  Verify checksum: {settings.cache.verify_checksum}")
    typer.echo(f"  Default TTL: {settings.cache.default_ttl_seconds}")
    typer.echo(f"  Describe limit: {settings.cache.describe_limit}")
    typer.echo()
    typer.echo("[Store]")
    typer.echo(f"  Backend: {settings.store.backend}")
    typer.echo(f"  Data dir: {settings.store.data_dir}")
    typer.echo(f"  Max item size: {settings.store.max_item_size}")
    typer.echo()
    typer.echo("[Logging]")
    typer.echo(f"  Level: {settings.logging.level}")
    typer.echo(f"  JSON output: {settings.logging.json_output}")
    typer.echo("=" * 60)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
