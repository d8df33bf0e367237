from __future__ import annotations

from threading import Event, Lock
from typing import Callable


class CancelToken:
    """Cancellation flag a caller can hand to a blocking permit wait.

    Python threads cannot be interrupted from outside, so a waiter that must be
    cancellable registers a wake-up callback here; ``cancel()`` sets the flag and
    runs every registered callback once.

    Example:
        token = CancelToken()
        threading.Timer(5.0, token.cancel).start()
        api.create_document(doc, "sig", cancel=token)  # raises CancellationError after 5s if still waiting
    """

    def __init__(self) -> None:
        self._event = Event()
        self._lock = Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for cb in callbacks:
            cb()

    def add_callback(self, cb: Callable[[], None]) -> None:
        """Register ``cb``; it runs immediately if the token is already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(cb)
                return
        cb()

    def remove_callback(self, cb: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(cb)
            except ValueError:
                pass
