"""Asynchronous, best-effort delivery of records to a remote sink.

Application code calling ``logger.info(...)`` is usually synchronous and
has no running event loop. Sink coroutines therefore run on a private
event loop owned by a :class:`DeliveryWorker` daemon thread, started
lazily on the first submission. The caller only schedules work on that
loop and never waits on network I/O.

:class:`RemoteDelivery` is the remote path of a root logger. It builds the
sink (retrying a failed construction once), tracks pending submissions,
and implements the bounded flush used at shutdown.
"""

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Callable, Coroutine
from enum import Enum
from typing import Any, TypeVar

from observepy.core.models import LogRecord
from observepy.core.outcome import Err, acapture, capture
from observepy.core.ports import RemoteSinkPort

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class FlushOutcome(str, Enum):
    """Result of a flush. A flush never raises."""

    DRAINED = "drained"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    NO_SINK = "no_sink"


class DeliveryWorker:
    """Runs coroutines on a private event loop in a daemon thread."""

    def __init__(self, name: str = "observepy-delivery") -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=self._run, args=(loop,), name=self._name, daemon=True
                )
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    @staticmethod
    def _run(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()

    def run(self, coro: Coroutine[Any, Any, T]) -> "concurrent.futures.Future[T]":
        """Schedule ``coro`` on the worker loop and return its future."""
        loop = self._ensure_started()
        return asyncio.run_coroutine_threadsafe(coro, loop)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the loop and wait up to ``timeout`` for the thread to exit.

        Submissions still pending on the loop are abandoned.
        """
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop, self._thread = None, None
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not threading.current_thread():
            thread.join(timeout)


class RemoteDelivery:
    """Remote delivery path shared by a root logger and its bound loggers.

    Args:
        sink_factory: Zero-argument callable building the sink, or None when
            no remote sink is configured.
        retry_delay: Seconds before retrying a failed sink construction
            once. None disables the retry.
        worker: Delivery worker; a new one is created when omitted.
    """

    def __init__(
        self,
        sink_factory: Callable[[], RemoteSinkPort] | None,
        *,
        retry_delay: float | None = 5.0,
        worker: DeliveryWorker | None = None,
    ) -> None:
        self._factory = sink_factory
        self._retry_delay = retry_delay
        self._worker = worker or DeliveryWorker()
        self._sink: RemoteSinkPort | None = None
        self._retry_timer: threading.Timer | None = None
        self._pending: set[concurrent.futures.Future[Any]] = set()
        self._pending_lock = threading.Lock()
        # At most one drain runs on the worker loop; later flushes join it.
        self._drain_future: concurrent.futures.Future[FlushOutcome] | None = None
        self._closed = False
        if sink_factory is not None:
            self._initialize(attempt=1)

    @classmethod
    def for_sink(cls, sink: RemoteSinkPort, **kwargs: Any) -> "RemoteDelivery":
        """Build a delivery path around an already constructed sink."""
        return cls(lambda: sink, **kwargs)

    @property
    def configured(self) -> bool:
        """True if a remote sink was requested, whether or not it initialized."""
        return self._factory is not None

    @property
    def sink(self) -> RemoteSinkPort | None:
        return self._sink

    @property
    def worker(self) -> DeliveryWorker:
        return self._worker

    @property
    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def _initialize(self, attempt: int) -> None:
        self._retry_timer = None
        if self._closed or self._factory is None:
            return
        outcome = capture(self._factory)
        if not isinstance(outcome, Err):
            self._sink = outcome.value
            _logger.debug("[observepy] Remote sink %s initialized", type(self._sink).__name__)
            return
        if attempt == 1 and self._retry_delay is not None:
            _logger.warning(
                "[observepy] Failed to initialize remote sink, retrying in %ss: %s",
                self._retry_delay,
                outcome.error,
            )
            timer = threading.Timer(self._retry_delay, self._initialize, kwargs={"attempt": attempt + 1})
            timer.daemon = True
            self._retry_timer = timer
            timer.start()
            return
        _logger.error(
            "[observepy] Failed to initialize remote sink, logs will only go to console: %s",
            outcome.error,
        )

    def submit(self, record: LogRecord) -> None:
        """Schedule delivery of ``record`` without waiting for it.

        A no-op when no sink is ready. Never raises.
        """
        sink = self._sink
        if sink is None or self._closed:
            return
        scheduled = capture(self._worker.run, self._deliver(sink, record))
        if isinstance(scheduled, Err):
            _logger.error("[observepy] Failed to schedule log delivery: %s", scheduled.error)
            return
        future = scheduled.value
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: "concurrent.futures.Future[Any]") -> None:
        with self._pending_lock:
            self._pending.discard(future)

    async def _deliver(self, sink: RemoteSinkPort, record: LogRecord) -> bool:
        outcome = await acapture(
            sink.submit(record.level.label, record.message, dict(record.metadata))
        )
        if isinstance(outcome, Err):
            _logger.error("[observepy] Failed to send log to remote sink: %s", outcome.error)
            return False
        return True

    async def _drain(
        self, sink: RemoteSinkPort, pending: list["concurrent.futures.Future[Any]"]
    ) -> FlushOutcome:
        # Pending submissions may wait on a partial batch that only drain() sends.
        draining = asyncio.ensure_future(acapture(sink.drain()))
        if pending:
            await asyncio.gather(
                *(asyncio.wrap_future(future) for future in pending),
                return_exceptions=True,
            )
        outcome = await draining
        if isinstance(outcome, Err):
            _logger.error("[observepy] Error flushing logs: %s", outcome.error)
            return FlushOutcome.FAILED
        _logger.debug("[observepy] Logs flushed successfully")
        return FlushOutcome.DRAINED

    def _start_drain(self) -> "concurrent.futures.Future[FlushOutcome] | None":
        sink = self._sink
        if sink is None or self._closed:
            return None
        with self._pending_lock:
            running = self._drain_future
            if running is not None and not running.done():
                return running
            pending = list(self._pending)
            scheduled = capture(self._worker.run, self._drain(sink, pending))
            if isinstance(scheduled, Err):
                _logger.error("[observepy] Failed to start flush: %s", scheduled.error)
                return None
            self._drain_future = scheduled.value
            return scheduled.value

    def _timed_out(self, timeout: float) -> FlushOutcome:
        _logger.warning(
            "[observepy] Flush timed out after %ss, %d record(s) may be lost",
            timeout,
            self.pending_count,
        )
        return FlushOutcome.TIMED_OUT

    def flush(self, timeout: float = 3.0) -> FlushOutcome:
        """Block until pending records are delivered or ``timeout`` elapses.

        In-flight submissions are not cancelled when the timeout elapses.

        Args:
            timeout: Maximum seconds to wait.

        Returns:
            The FlushOutcome. Never raises.
        """
        future = self._start_drain()
        if future is None:
            return FlushOutcome.NO_SINK
        _logger.debug("[observepy] Flushing logs to remote sink")
        try:
            return future.result(timeout)
        except concurrent.futures.TimeoutError:
            return self._timed_out(timeout)
        except concurrent.futures.CancelledError:
            return FlushOutcome.FAILED

    async def aflush(self, timeout: float = 3.0) -> FlushOutcome:
        """Awaitable variant of :meth:`flush` for code running on an event loop."""
        future = self._start_drain()
        if future is None:
            return FlushOutcome.NO_SINK
        _logger.debug("[observepy] Flushing logs to remote sink")
        waiter = asyncio.wrap_future(future)
        done, _ = await asyncio.wait({waiter}, timeout=timeout)
        if not done:
            return self._timed_out(timeout)
        if waiter.cancelled():
            return FlushOutcome.FAILED
        return waiter.result()

    def close(self, timeout: float = 3.0) -> FlushOutcome:
        """Flush, close the sink and stop the worker.

        Further submissions are ignored and later flushes return NO_SINK.
        """
        if self._closed:
            return FlushOutcome.NO_SINK
        if self._retry_timer is not None:
            self._retry_timer.cancel()
            self._retry_timer = None
        result = self.flush(timeout)
        self._closed = True
        sink = self._sink
        aclose = getattr(sink, "aclose", None)
        if aclose is not None and result is not FlushOutcome.TIMED_OUT:
            scheduled = capture(self._worker.run, acapture(aclose()))
            if not isinstance(scheduled, Err):
                try:
                    closed = scheduled.value.result(timeout)
                except concurrent.futures.TimeoutError:
                    _logger.warning("[observepy] Timed out closing remote sink")
                else:
                    if isinstance(closed, Err):
                        _logger.error("[observepy] Error closing remote sink: %s", closed.error)
        self._worker.stop(timeout)
        return result
