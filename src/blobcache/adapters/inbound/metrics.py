# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Prometheus metrics for blob cache monitoring.

Defines core metrics for observability:
- Cache operation outcomes (hit, miss, stored, failure)
- Sizes of stored values
"""

from prometheus_client import CollectorRegistry, Counter, Histogram

# Create registry (separate from default to avoid conflicts)
registry = CollectorRegistry()

operation_total = Counter(
    "blobcache_operation_total",
    "Total number of blob cache operations",
    ["operation", "result"],  # operation: get/set; result: hit/miss/stored/failure
    registry=registry,
)

value_bytes = Histogram(
    "blobcache_value_bytes",
    "Size of values stored through the blob cache",
    buckets=(1_000, 10_000, 100_000, 900_000, 2_000_000, 5_000_000, 20_000_000),
    registry=registry,
)
