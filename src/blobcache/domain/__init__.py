"""Domain layer for chunked blob caching.

This package contains pure business logic with zero external dependencies.
All domain code uses only Python stdlib (re, dataclasses, collections.abc)
and internal blobcache.domain imports.

Modules:
    value_objects: Immutable value objects (CacheItem, MasterRecord, ChunkSpan)
    services: Checksum, chunk-key derivation, chunk planning
    errors: Domain exception hierarchy
"""
