"""Prometheus metrics for the store and its sweep.

- ttlkv_keys_expired_total        keys removed by the sweep
- ttlkv_sweep_runs_total          sweep passes executed
- ttlkv_sweep_errors_total        sweep ticks that raised
- ttlkv_sweep_duration_seconds    time spent in one sweep pass
- ttlkv_type_mismatch_total       incr/decr on non-numeric values (label: op)
"""

from __future__ import annotations

import time
from collections.abc import Generator  # noqa: TC003 -- used at runtime by contextmanager
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram

# Sweeps are in-memory heap pops; most finish well under a millisecond.
_SWEEP_BUCKETS = (0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0)


def _counter(
    name: str,
    documentation: str,
    labelnames: list[str],
    registry: CollectorRegistry | None,
) -> Counter:
    """Create a Counter with optional registry."""
    if registry is not None:
        return Counter(name, documentation, labelnames, registry=registry)
    return Counter(name, documentation, labelnames)


class StoreMetrics:
    """Metric handles for one store.

    Pass a custom CollectorRegistry for testing isolation, or when a process
    runs several stores. registry=None registers on the global registry, which
    only works for one StoreMetrics per process.
    """

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.keys_expired = _counter(
            "ttlkv_keys_expired_total",
            "Keys removed by the expiration sweep",
            [],
            registry,
        )
        self.sweep_runs = _counter(
            "ttlkv_sweep_runs_total",
            "Expiration sweep passes executed",
            [],
            registry,
        )
        self.sweep_errors = _counter(
            "ttlkv_sweep_errors_total",
            "Background sweep ticks that raised an exception",
            [],
            registry,
        )
        self.type_mismatch = _counter(
            "ttlkv_type_mismatch_total",
            "incr/decr attempts against non-numeric values",
            ["op"],
            registry,
        )
        if registry is not None:
            self.sweep_duration = Histogram(
                "ttlkv_sweep_duration_seconds",
                "Time spent in one expiration sweep pass",
                buckets=_SWEEP_BUCKETS,
                registry=registry,
            )
        else:
            self.sweep_duration = Histogram(
                "ttlkv_sweep_duration_seconds",
                "Time spent in one expiration sweep pass",
                buckets=_SWEEP_BUCKETS,
            )

    @contextmanager
    def timer(self, histogram: Histogram) -> Generator[None, None, None]:
        """Context manager that observes elapsed time on a histogram.

        Duration is always recorded, even if the block raises an exception.
        """
        start = time.monotonic()
        try:
            yield
        finally:
            histogram.observe(time.monotonic() - start)
