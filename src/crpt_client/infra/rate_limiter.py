from __future__ import annotations

import logging
import time
from collections import deque
from threading import TIMEOUT_MAX, Condition, Event, Lock, Thread, current_thread

from ..core.domain.cancellation import CancelToken
from ..core.domain.errors import AcquireTimeout, CancellationError, ConfigError
from ..core.domain.models import RateLimitConfig
from ..core.ports.rate_limiter_port import RateLimiterPort

logger = logging.getLogger(__name__)


class Permit:
    """A single acquired permit. ``release()`` returns it to the pool at most once."""

    def __init__(self, pool: PermitPool) -> None:
        self._pool = pool
        self._lock = Lock()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
        self._pool.release()

    def __enter__(self) -> Permit:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()


class PermitPool:
    """Counting semaphore whose window budget is restored by ``replenish``.

    Two counters are kept under one lock:

    - ``available``: permits not currently checked out. ``release`` gives one
      back (capped at capacity).
    - ``window_remaining``: permits that may still be handed out before the
      next ``replenish``. Only ``replenish`` restores it.

    An acquire needs both to be positive, so at most ``capacity`` acquires pass
    between two replenishes even when callers release immediately.

    Waiters are served in arrival order. A waiter that is cancelled or times out
    leaves the queue without consuming anything.
    """

    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ConfigError(f"PermitPool capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._available = capacity
        self._window_remaining = capacity
        self._cond = Condition(Lock())
        self._waiters: deque[object] = deque()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def available(self) -> int:
        with self._cond:
            return self._available

    @property
    def window_remaining(self) -> int:
        with self._cond:
            return self._window_remaining

    @property
    def waiting(self) -> int:
        with self._cond:
            return len(self._waiters)

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self, *, timeout: float | None = None, cancel: CancelToken | None = None) -> Permit:
        """Block until a permit can be granted and return it.

        Args:
            timeout: Maximum seconds to wait. None (default) waits forever.
            cancel: Optional token; cancelling it aborts the wait.

        Raises:
            CancellationError: the token was cancelled or the pool was closed.
            AcquireTimeout: ``timeout`` elapsed before a permit was granted.
        """
        if cancel is not None and cancel.cancelled:
            raise CancellationError("Cancelled before waiting for a permit")
        deadline = None if timeout is None else time.monotonic() + timeout

        if cancel is not None:
            cancel.add_callback(self._wake_all)
        try:
            with self._cond:
                if self._closed:
                    raise CancellationError("Permit pool is closed")
                if not self._waiters and self._can_grant():
                    return self._take()

                ticket = object()
                self._waiters.append(ticket)
                try:
                    while True:
                        if self._closed:
                            raise CancellationError("Permit pool closed while waiting for a permit")
                        if cancel is not None and cancel.cancelled:
                            raise CancellationError("Permit wait cancelled")
                        if self._waiters[0] is ticket and self._can_grant():
                            break
                        if deadline is None:
                            self._cond.wait()
                        else:
                            remaining = deadline - time.monotonic()
                            if remaining <= 0:
                                raise AcquireTimeout(f"No permit available within {timeout}s")
                            self._cond.wait(min(remaining, TIMEOUT_MAX))
                finally:
                    self._waiters.remove(ticket)
                    # queue head may have changed
                    self._cond.notify_all()
                return self._take()
        finally:
            if cancel is not None:
                cancel.remove_callback(self._wake_all)

    def release(self) -> None:
        with self._cond:
            if self._available >= self._capacity:
                logger.debug("Release ignored: pool already at capacity")
                return
            self._available += 1
            if self._waiters:
                self._cond.notify_all()

    def replenish(self) -> int:
        """Restore the pool to full capacity and open a new window.

        Adds ``capacity - available`` permits, never more, so leftovers are not
        stacked on top. Returns the number of permits added.
        """
        with self._cond:
            added = max(0, self._capacity - self._available)
            self._available += added
            self._window_remaining = self._capacity
            if self._waiters:
                self._cond.notify_all()
            return added

    def close(self) -> None:
        """Wake every waiter with CancellationError and refuse later acquires."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def _can_grant(self) -> bool:
        return self._available > 0 and self._window_remaining > 0

    def _take(self) -> Permit:
        self._available -= 1
        self._window_remaining -= 1
        return Permit(self)

    def _wake_all(self) -> None:
        with self._cond:
            self._cond.notify_all()


class WindowResetter:
    """Background fixed-rate timer calling ``PermitPool.replenish`` once per window.

    Ticks are anchored to the start time (``start + k * interval``), not to the
    end of the previous tick. A tick that overruns one or more periods skips the
    missed ticks instead of firing them back-to-back. An exception inside a tick
    is logged and the schedule continues.
    """

    def __init__(self, pool: PermitPool, interval_seconds: float, *, name: str = "crpt-window-resetter") -> None:
        if not interval_seconds > 0:
            raise ConfigError(f"interval_seconds must be > 0, got {interval_seconds}")
        self._pool = pool
        self._interval = float(interval_seconds)
        self._name = name
        self._stop = Event()
        self._thread: Thread | None = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self, grace_seconds: float | None = 60.0) -> bool:
        """Stop scheduling ticks and wait up to ``grace_seconds`` for the thread.

        Returns True when the timer thread is gone (or never started).
        """
        self._stop.set()
        thread = self._thread
        if thread is None or thread is current_thread():
            return True
        thread.join(grace_seconds)
        if thread.is_alive():
            logger.error(f"Window resetter did not terminate within {grace_seconds}s")
            return False
        return True

    def _run(self) -> None:
        next_tick = time.monotonic() + self._interval
        while not self._stop.wait(min(max(0.0, next_tick - time.monotonic()), TIMEOUT_MAX)):
            if time.monotonic() < next_tick:
                # long windows are waited out in TIMEOUT_MAX slices
                continue
            self._tick()
            next_tick += self._interval
            now = time.monotonic()
            if next_tick <= now:
                skipped = int((now - next_tick) // self._interval) + 1
                logger.warning(f"Window reset overran its period; skipping {skipped} tick(s)")
                next_tick += skipped * self._interval
        logger.debug("Window resetter stopped")

    def _tick(self) -> None:
        try:
            added = self._pool.replenish()
            logger.debug(f"Window reset: restored {added} permit(s)")
        except Exception:
            logger.exception("Window reset tick failed")
        finally:
            self._ticks += 1


class FixedWindowRateLimiter(RateLimiterPort):
    """Allow at most ``max_requests`` permits per window, blocking excess callers.

    Owns its own PermitPool and WindowResetter; the timer starts on construction
    and is stopped by ``shutdown()``. Independent instances do not share state.

    Example:
        limiter = FixedWindowRateLimiter(RateLimitConfig(window_seconds=1.0, max_requests=10))
        with limiter.acquire():
            send_request()
        limiter.shutdown()
    """

    def __init__(self, config: RateLimitConfig, *, shutdown_grace_seconds: float = 60.0) -> None:
        if shutdown_grace_seconds < 0:
            raise ConfigError(f"shutdown_grace_seconds must be >= 0, got {shutdown_grace_seconds}")
        self._config = config
        self._grace = shutdown_grace_seconds
        self._pool = PermitPool(config.max_requests)
        self._resetter = WindowResetter(self._pool, config.window_seconds)
        self._lock = Lock()
        self._shut_down = False
        self._resetter.start()
        logger.info(f"Rate limiter started: {config.max_requests} request(s) per {config.window_seconds}s")

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def pool(self) -> PermitPool:
        return self._pool

    @property
    def available(self) -> int:
        return self._pool.available

    @property
    def window_remaining(self) -> int:
        return self._pool.window_remaining

    @property
    def is_running(self) -> bool:
        return self._resetter.is_alive

    def acquire(self, *, timeout: float | None = None, cancel: CancelToken | None = None) -> Permit:
        return self._pool.acquire(timeout=timeout, cancel=cancel)

    def shutdown(self, grace_seconds: float | None = None) -> None:
        """Stop window resets and wake blocked callers. Safe to call more than once."""
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
        grace = self._grace if grace_seconds is None else grace_seconds
        self._resetter.cancel(grace)
        self._pool.close()
        logger.info("Rate limiter shut down")

    def __enter__(self) -> FixedWindowRateLimiter:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.shutdown()
