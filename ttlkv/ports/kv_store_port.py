"""KVStorePort - in-process key-value interface with TTL.

Hosts depend on this port; ``ttlkv.core.store.InMemoryKVStore`` is the
implementation. All operations are synchronous and compute-only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class KVStorePort(ABC):
    """Port: key-value CRUD, counters and per-key expiration."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value, clearing any TTL the key had.

        Args:
            key: Store key.
            value: Opaque payload. int/float payloads are counters.
        """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value by key.

        Args:
            key: Store key.
            default: Returned when the key is absent or has expired.

        Returns:
            Stored payload or ``default``.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a key and its TTL (no-op if absent)."""

    @abstractmethod
    def expire(self, key: str, ttl_seconds: float) -> bool:
        """Set or replace a key's time-to-live.

        Args:
            key: Store key.
            ttl_seconds: Seconds from now until the key expires.

        Returns:
            True if the TTL was registered, False if the key does not exist.
        """

    @abstractmethod
    def incr(self, key: str) -> int | float:
        """Add one to a numeric value, creating it as 1 when absent.

        Raises:
            TypeMismatchError: The current value is not numeric.
        """

    @abstractmethod
    def decr(self, key: str) -> int | float:
        """Subtract one from a numeric value, creating it as -1 when absent.

        Raises:
            TypeMismatchError: The current value is not numeric.
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return whether a key is currently stored."""

    @abstractmethod
    def flush_all(self) -> None:
        """Remove every key and every pending expiration."""

    @abstractmethod
    def close(self) -> None:
        """Release background resources. The store is unusable afterwards."""
