"""Prometheus metrics for the wallet service and its store.

Tracks:
- Duration of every WalletService call
- Duration of every store call (begin and each unit-of-work operation)

Both histograms are labelled by method and by whether the call raised
(error="true" / "false").
"""

from __future__ import annotations

import time
from functools import lru_cache

from prometheus_client import REGISTRY, CollectorRegistry, Histogram

# Exponential buckets: 25ms doubling 8 times, and 10ms doubling 7 times.
SERVICE_BUCKETS = (0.025, 0.05, 0.1, 0.2, 0.4, 0.8, 1.6, 3.2)
STORAGE_BUCKETS = (0.01, 0.02, 0.04, 0.08, 0.16, 0.32, 0.64)


class WalletMetrics:
    """Histograms registered under a common name prefix."""

    def __init__(self, prefix: str = "wallet", registry: CollectorRegistry = REGISTRY) -> None:
        self.service_queries = Histogram(
            f"{prefix}_queries",
            "Wallet service call duration in seconds",
            ["method", "error"],
            buckets=SERVICE_BUCKETS,
            registry=registry,
        )
        self.storage_queries = Histogram(
            f"{prefix}_storage_queries",
            "Store call duration in seconds",
            ["method", "error"],
            buckets=STORAGE_BUCKETS,
            registry=registry,
        )


@lru_cache()
def default_metrics(prefix: str = "wallet") -> WalletMetrics:
    """Metrics on the process-wide registry; a collector name registers only once."""
    return WalletMetrics(prefix)


def observe_call(histogram: Histogram, method: str, started_at: float, failed: bool) -> None:
    """Record one call that started at time.perf_counter() value started_at."""
    histogram.labels(method=method, error=str(failed).lower()).observe(
        time.perf_counter() - started_at
    )
