"""Port interfaces for ttlkv.

Hosts program against these; adapters live in ttlkv.core.
"""

from ttlkv.ports.kv_store_port import KVStorePort

__all__ = [
    "KVStorePort",
]
