# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""blobcache: Chunked blob storage over size-limited key/value caches.

Values larger than the store's per-item ceiling are split into chunks
addressed by the value's CRC-64 and byte offset, and reassembled on read.

Architecture: Hexagonal (Ports & Adapters)
- Domain core: Pure business logic (no external dependencies)
- Ports: Protocol-based interfaces
- Adapters: Infrastructure bindings (in-memory and disk stores, Prometheus, settings)
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
