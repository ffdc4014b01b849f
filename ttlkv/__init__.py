"""ttlkv - in-process key-value store with per-key TTL expiration.

Usage::

    from ttlkv import InMemoryKVStore

    with InMemoryKVStore() as store:
        store.set("session", {"user": "u1"})
        store.expire("session", 30)
        store.incr("hits")
"""

from ttlkv.config import StoreConfig
from ttlkv.core.expiration_index import ExpirationIndex
from ttlkv.core.store import InMemoryKVStore
from ttlkv.core.sweep import AsyncSweepDriver, SweepDriver
from ttlkv.metrics import StoreMetrics
from ttlkv.ports.kv_store_port import KVStorePort
from ttlkv.shared.errors import (
    StoreClosedError,
    TtlKvError,
    TypeMismatchError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncSweepDriver",
    "ExpirationIndex",
    "InMemoryKVStore",
    "KVStorePort",
    "StoreClosedError",
    "StoreConfig",
    "StoreMetrics",
    "SweepDriver",
    "TtlKvError",
    "TypeMismatchError",
    "ValidationError",
]
