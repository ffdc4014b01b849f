"""Periodic expiration sweep drivers.

A driver calls ``tick`` (normally ``InMemoryKVStore.sweep_expired``) on a fixed
interval until stopped. Two flavours share the same contract:

- SweepDriver       a daemon thread waiting on a threading.Event
- AsyncSweepDriver  an asyncio.Task on the host's running loop

Exceptions raised by a tick are logged as structured errors and counted;
they never leave the driver, and the cadence continues.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Any

from ttlkv.shared.logging.error_handler import log_structured_error

if TYPE_CHECKING:
    from collections.abc import Callable

    from ttlkv.metrics import StoreMetrics

logger = logging.getLogger(__name__)


class _TickRunner:
    """Runs one tick at a time, absorbing and reporting failures."""

    def __init__(
        self,
        tick: Callable[[], object],
        *,
        name: str,
        interval_seconds: float,
        metrics: StoreMetrics | None,
        describe: Callable[[], dict[str, Any]] | None,
    ) -> None:
        self.tick = tick
        self.name = name
        self.interval_seconds = interval_seconds
        self.metrics = metrics
        self.describe = describe
        self.consecutive_failures = 0

    def run_once(self) -> bool:
        """Run the tick. Returns False if it raised."""
        try:
            self.tick()
        except Exception as exc:
            self.consecutive_failures += 1
            if self.metrics is not None:
                self.metrics.sweep_errors.inc()
            context: dict[str, Any] = {
                "interval_seconds": self.interval_seconds,
                "consecutive_failures": self.consecutive_failures,
            }
            if self.describe is not None:
                context.update(self.describe())
            log_structured_error(logger, exc, component=self.name, context=context)
            return False
        self.consecutive_failures = 0
        return True


def _on_loop(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class SweepDriver:
    """Background thread that sweeps on a fixed interval.

    start() is idempotent. cancel() only signals and hands back the thread so
    the caller can join it once it has released any lock the tick needs;
    stop() does both.
    """

    def __init__(
        self,
        tick: Callable[[], object],
        *,
        interval_seconds: float = 1.0,
        name: str = "ttlkv-sweeper",
        metrics: StoreMetrics | None = None,
        describe: Callable[[], dict[str, Any]] | None = None,
    ) -> None:
        self._runner = _TickRunner(
            tick,
            name=name,
            interval_seconds=interval_seconds,
            metrics=metrics,
            describe=describe,
        )
        self._interval = interval_seconds
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None
        self._guard = threading.Lock()

    @property
    def running(self) -> bool:
        with self._guard:
            return self._is_running()

    def _is_running(self) -> bool:
        return (
            self._thread is not None
            and self._stop_event is not None
            and not self._stop_event.is_set()
            and self._thread.is_alive()
        )

    def start(self) -> bool:
        """Start the sweep thread. Returns False if it was already running."""
        with self._guard:
            if self._is_running():
                return False
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(stop_event,),
                name=self._name,
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            thread.start()
        logger.info("Sweep driver %s started (interval=%.3fs)", self._name, self._interval)
        return True

    def cancel(self) -> threading.Thread | None:
        """Signal the thread to stop without waiting. Returns the thread to join."""
        with self._guard:
            thread, stop_event = self._thread, self._stop_event
            self._thread = None
            self._stop_event = None
        if stop_event is not None:
            stop_event.set()
            logger.info("Sweep driver %s stopping", self._name)
        return thread

    @staticmethod
    def join(thread: threading.Thread | None, timeout: float | None = None) -> None:
        """Wait for a cancelled sweep thread, unless called from that thread."""
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout)

    def stop(self, timeout: float | None = None) -> None:
        self.join(self.cancel(), timeout)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval):
            self._runner.run_once()


class AsyncSweepDriver:
    """Sweep as one more task on the host's event loop.

    Ticks run on the loop thread, between the host's own coroutines, so no
    tick ever interleaves with a caller running on the same loop.

    start() binds the driver to the running loop. After a cancel(), resume()
    schedules a fresh task on that same loop and may be called from any thread.
    """

    def __init__(
        self,
        tick: Callable[[], object],
        *,
        interval_seconds: float = 1.0,
        name: str = "ttlkv-async-sweeper",
        metrics: StoreMetrics | None = None,
        describe: Callable[[], dict[str, Any]] | None = None,
    ) -> None:
        self._runner = _TickRunner(
            tick,
            name=name,
            interval_seconds=interval_seconds,
            metrics=metrics,
            describe=describe,
        )
        self._interval = interval_seconds
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Schedule the sweep task on the running loop.

        Raises:
            RuntimeError: No event loop is running in this thread.
        """
        self._loop = asyncio.get_running_loop()
        return self._spawn()

    def resume(self) -> bool:
        """Restart on the loop start() bound to. False if never started or the loop is gone."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return False
        if _on_loop(loop):
            return self._spawn()
        loop.call_soon_threadsafe(self._spawn)
        return True

    def cancel(self) -> asyncio.Task[None] | None:
        """Request cancellation without awaiting. Returns the task to await."""
        task, self._task = self._task, None
        if task is None or task.done():
            return task
        loop = task.get_loop()
        if _on_loop(loop):
            task.cancel()
        elif not loop.is_closed():
            loop.call_soon_threadsafe(task.cancel)
        logger.info("Async sweep driver %s stopping", self._name)
        return task

    @staticmethod
    async def wait_cancelled(task: asyncio.Task[None] | None) -> None:
        """Await a task handed back by cancel()."""
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def stop(self) -> None:
        await self.wait_cancelled(self.cancel())

    def _spawn(self) -> bool:
        if self.running or self._loop is None:
            return False
        self._task = self._loop.create_task(self._run(), name=self._name)
        logger.info("Async sweep driver %s started (interval=%.3fs)", self._name, self._interval)
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._runner.run_once()
