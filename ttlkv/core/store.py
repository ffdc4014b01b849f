"""In-memory implementation of KVStorePort with TTL expiration.

- CRUD, incr/decr, exists, flush_all over a plain dict
- TTLs registered in an ExpirationIndex (indexed min-heap)
- Active-sweep policy: reads never check expiry themselves; a sweep driver
  removes due keys every ``sweep_interval_seconds``, so a read may see an
  expired key for at most one interval

One RLock guards the mapping and the index. Every public operation and every
sweep pass takes it, so the background thread never sees a torn heap.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import TYPE_CHECKING, Any

from ttlkv.config import DEFAULT_CONFIG
from ttlkv.core.expiration_index import ExpirationIndex
from ttlkv.core.sweep import AsyncSweepDriver, SweepDriver
from ttlkv.ports.kv_store_port import KVStorePort
from ttlkv.shared.errors import StoreClosedError, TypeMismatchError, ValidationError
from ttlkv.shared.types import StoredValue

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable
    from types import TracebackType

    from ttlkv.config import StoreConfig
    from ttlkv.metrics import StoreMetrics

logger = logging.getLogger(__name__)


def _validate_ttl(ttl_seconds: object) -> float:
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, (int, float)):
        raise ValidationError(
            f"ttl_seconds must be a number, got {ttl_seconds!r}",
            field="ttl_seconds",
        )
    try:
        ttl = float(ttl_seconds)
    except OverflowError:
        raise ValidationError("ttl_seconds is out of range", field="ttl_seconds") from None
    if math.isnan(ttl):
        raise ValidationError("ttl_seconds must not be NaN", field="ttl_seconds")
    return ttl


class InMemoryKVStore(KVStorePort):
    """Key-value store with per-key TTL, swept in the background.

    Args:
        config: Sweep settings. Defaults to ``StoreConfig()``.
        clock: Monotonic seconds source. TTL timestamps live on this scale.
        metrics: Optional Prometheus handles.

    With ``config.background_sweep`` false no thread is ever started and the
    host drives expiration itself: by calling ``sweep_expired()``, or from
    inside an event loop with ``start_async_sweep()``.
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        clock: Callable[[], float] | None = None,
        metrics: StoreMetrics | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._clock = clock or time.monotonic
        self._metrics = metrics
        self._data: dict[str, StoredValue] = {}
        self._expirations = ExpirationIndex()
        self._lock = threading.RLock()
        self._closed = False
        self._sweeper: SweepDriver | None = None
        self._async_sweeper: AsyncSweepDriver | None = None
        if self._config.background_sweep:
            self._sweeper = SweepDriver(
                self.sweep_expired,
                interval_seconds=self._config.sweep_interval_seconds,
                name=self._config.sweeper_thread_name,
                metrics=metrics,
                describe=self._sweep_context,
            )

    # -- lifecycle --

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sweeper(self) -> SweepDriver | None:
        return self._sweeper

    @property
    def async_sweeper(self) -> AsyncSweepDriver | None:
        return self._async_sweeper

    def start_async_sweep(self) -> AsyncSweepDriver:
        """Sweep from a task on the running event loop instead of a thread.

        The thread driver, if any, is stopped and dropped. The returned driver
        belongs to the store: expire() resumes it, flush_all() and close()
        stop it.

        Raises:
            RuntimeError: No event loop is running in this thread.
            StoreClosedError: The store is closed.
        """
        with self._lock:
            self._ensure_open()
            thread = self._sweeper.cancel() if self._sweeper is not None else None
            self._sweeper = None
            if self._async_sweeper is None:
                self._async_sweeper = AsyncSweepDriver(
                    self.sweep_expired,
                    interval_seconds=self._config.sweep_interval_seconds,
                    metrics=self._metrics,
                    describe=self._sweep_context,
                )
            driver = self._async_sweeper
        SweepDriver.join(thread)
        driver.start()
        return driver

    def close(self) -> None:
        """Stop the sweep and mark the store closed. Idempotent.

        An async sweep task is cancelled but not awaited; use aclose() from
        inside the loop to wait for it.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread, _ = self._cancel_sweepers()
        SweepDriver.join(thread)
        logger.debug("Store closed with %d keys, %d pending TTLs", len(self._data), len(self._expirations))

    async def aclose(self) -> None:
        """close(), then wait for the async sweep task to finish."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread, task = self._cancel_sweepers()
        SweepDriver.join(thread)
        await AsyncSweepDriver.wait_cancelled(task)
        logger.debug("Store closed with %d keys, %d pending TTLs", len(self._data), len(self._expirations))

    def __enter__(self) -> InMemoryKVStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError

    def _cancel_sweepers(self) -> tuple[threading.Thread | None, asyncio.Task[None] | None]:
        # Caller holds the lock and joins/awaits the results after releasing it.
        thread = self._sweeper.cancel() if self._sweeper is not None else None
        task = self._async_sweeper.cancel() if self._async_sweeper is not None else None
        return thread, task

    def _sweep_context(self) -> dict[str, Any]:
        return {"pending_ttls": len(self._expirations), "keys": len(self._data)}

    # -- CRUD --

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._ensure_open()
            self._expirations.remove(key)
            self._data[key] = StoredValue.wrap(value)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            self._ensure_open()
            stored = self._data.get(key)
            if stored is None:
                return default
            return stored.payload

    def delete(self, key: str) -> None:
        with self._lock:
            self._ensure_open()
            self._data.pop(key, None)
            self._expirations.remove(key)

    def exists(self, key: str) -> bool:
        with self._lock:
            self._ensure_open()
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            self._ensure_open()
            return len(self._data)

    def flush_all(self) -> None:
        """Clear every key and TTL, and stop the sweep until the next expire()."""
        with self._lock:
            self._ensure_open()
            self._data.clear()
            self._expirations.clear()
            thread, _ = self._cancel_sweepers()
        SweepDriver.join(thread)

    # -- counters --

    def incr(self, key: str) -> int | float:
        return self._add(key, 1, "incr")

    def decr(self, key: str) -> int | float:
        return self._add(key, -1, "decr")

    def _add(self, key: str, delta: int, op: str) -> int | float:
        with self._lock:
            self._ensure_open()
            current = self._data.get(key)
            if current is None:
                self._data[key] = StoredValue.numeric(delta)
                return delta
            if not current.is_numeric:
                if self._metrics is not None:
                    self._metrics.type_mismatch.labels(op=op).inc()
                raise TypeMismatchError(key, current.kind.value)
            # Replaced in place: an existing TTL on the key is kept.
            updated = current.payload + delta
            self._data[key] = StoredValue.numeric(updated)
            return updated

    # -- expiration --

    def expire(self, key: str, ttl_seconds: float) -> bool:
        """Set or replace a key's TTL. Absent keys are left alone (returns False).

        A non-positive TTL makes the key due immediately; the next sweep removes it.

        Raises:
            ValidationError: ttl_seconds is not a real number, is NaN, or does
                not fit in a float.
        """
        ttl = _validate_ttl(ttl_seconds)
        with self._lock:
            self._ensure_open()
            if key not in self._data:
                return False
            self._expirations.insert(key, self._clock() + ttl)
            if self._sweeper is not None:
                self._sweeper.start()
            elif self._async_sweeper is not None and not self._async_sweeper.running:
                self._async_sweeper.resume()
            return True

    def ttl(self, key: str) -> float | None:
        """Seconds until key expires, or None if it has no TTL or is absent.

        A key whose time has passed but which the sweep has not reached yet
        reports 0.0.
        """
        with self._lock:
            self._ensure_open()
            expires_at = self._expirations.get(key)
            if expires_at is None:
                return None
            return max(0.0, expires_at - self._clock())

    def persist(self, key: str) -> bool:
        """Drop a key's TTL, keeping its value. Returns whether a TTL was removed."""
        with self._lock:
            self._ensure_open()
            return self._expirations.remove(key) is not None

    def sweep_expired(self, now: float | None = None) -> int:
        """Remove every key whose TTL is due at ``now``. Returns how many were removed.

        Index entries whose key is already gone count as satisfied and are
        dropped silently. After close() this is a no-op.
        """
        with self._lock:
            if self._closed:
                return 0
            if self._metrics is None:
                return self._sweep_locked(now)
            with self._metrics.timer(self._metrics.sweep_duration):
                removed = self._sweep_locked(now)
            self._metrics.sweep_runs.inc()
            self._metrics.keys_expired.inc(removed)
            return removed

    def _sweep_locked(self, now: float | None) -> int:
        cutoff = self._clock() if now is None else now
        removed = 0
        while True:
            head = self._expirations.peek()
            if head is None or head.expires_at > cutoff:
                break
            self._expirations.extract_min()
            if self._data.pop(head.key, None) is not None:
                removed += 1
        if removed:
            logger.debug("Sweep removed %d expired keys, %d TTLs pending", removed, len(self._expirations))
        return removed
