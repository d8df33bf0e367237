from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.cancellation import CancelToken


class PermitPort(Protocol):
    def release(self) -> None:
        """Return the permit to its pool. Calls after the first are no-ops."""

    def __enter__(self) -> "PermitPort": ...

    def __exit__(self, exc_type, exc_value, traceback) -> None: ...


class RateLimiterPort(Protocol):
    def acquire(self, *, timeout: float | None = None, cancel: "CancelToken | None" = None) -> PermitPort:
        """Block until a permit is available according to the configured rate.

        Raises CancellationError when ``cancel`` fires, AcquireTimeout when ``timeout`` elapses.
        """
        ...
