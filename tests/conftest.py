"""Root conftest - shared fixtures for all test layers.

Markers:
    @pytest.mark.unit   - No external deps
    @pytest.mark.smoke  - Fast subset
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from prometheus_client import CollectorRegistry

from tests.fakes import FakeClock
from ttlkv.config import StoreConfig
from ttlkv.core.store import InMemoryKVStore
from ttlkv.metrics import StoreMetrics


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated Prometheus registry per test."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> StoreMetrics:
    return StoreMetrics(registry=registry)


@pytest.fixture
def manual_config() -> StoreConfig:
    """No background thread; tests drive sweep_expired() themselves."""
    return StoreConfig(background_sweep=False)


@pytest.fixture
def store(manual_config: StoreConfig, clock: FakeClock, metrics: StoreMetrics) -> Iterator[InMemoryKVStore]:
    s = InMemoryKVStore(manual_config, clock=clock, metrics=metrics)
    yield s
    s.close()
