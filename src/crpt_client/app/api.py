from __future__ import annotations

import logging
from typing import Any

from dependency_injector import providers
from pydantic import ValidationError

from .container import Container
from ..config.settings import AppConfig
from ..core.domain.cancellation import CancelToken
from ..core.domain.enums import TimeUnit
from ..core.domain.errors import ConfigError
from ..core.domain.models import RateLimitConfig, Response
from ..core.ports.encoder_port import EncoderPort
from ..core.ports.transport_port import TransportPort
from ..infra.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


class CrptApi:
    """Thread-safe client for the CRPT document creation endpoint.

    At most ``request_limit`` documents are sent per ``time_interval`` of
    ``time_unit``; callers beyond the limit block until the next window opens.
    A single instance is meant to be shared between threads.

    Example:
        # 10 requests per second, everything else from CRPT_* environment variables
        api = CrptApi(TimeUnit.SECONDS, 1, 10)
        response = api.create_document(sample_document(), "signature123")
        print(response.status_code, response.text)
        api.shutdown()

        # Using context manager (recommended)
        with CrptApi(TimeUnit.MINUTES, 1, 100, api_url="http://localhost:8080/create") as api:
            api.create_document(document, signature)
    """

    def __init__(
        self,
        time_unit: TimeUnit | None = None,
        time_interval: float | None = None,
        request_limit: int | None = None,
        *,
        api_url: str | None = None,
        acquire_timeout_seconds: float | None = None,
        shutdown_grace_seconds: float | None = None,
        transport: TransportPort | None = None,
        encoder: EncoderPort | None = None,
    ) -> None:
        """Validate the configuration and start the window timer.

        Args:
            time_unit: Unit of ``time_interval``. Defaults to seconds when only an interval is given.
            time_interval: Window length in ``time_unit``. If None, uses CRPT_TIME_INTERVAL_SECONDS or 1s.
            request_limit: Requests allowed per window. If None, uses CRPT_REQUEST_LIMIT or 10.
            api_url: Endpoint URL. If None, uses CRPT_API_URL or the production endpoint.
            acquire_timeout_seconds: Maximum wait for a permit. If None, waits forever
                                     (unless CRPT_ACQUIRE_TIMEOUT_SECONDS is set).
            shutdown_grace_seconds: How long ``shutdown()`` waits for the timer thread.
            transport: Optional transport replacing the built-in httpx transport.
            encoder: Optional encoder replacing the built-in JSON encoder.

        Raises:
            ConfigError: Any limit, interval or timeout is invalid (e.g. <= 0).
        """
        config_dict: dict[str, Any] = {}
        if time_interval is not None:
            unit = time_unit if time_unit is not None else TimeUnit.SECONDS
            if not isinstance(unit, TimeUnit):
                raise ConfigError(f"time_unit must be a TimeUnit, got {time_unit!r}")
            if isinstance(time_interval, bool) or not isinstance(time_interval, (int, float)):
                raise ConfigError(f"time_interval must be a number, got {time_interval!r}")
            config_dict["time_interval_seconds"] = unit.to_seconds(time_interval)
        elif time_unit is not None:
            raise ConfigError("time_unit given without time_interval")
        if request_limit is not None:
            if isinstance(request_limit, bool) or not isinstance(request_limit, int):
                raise ConfigError(f"request_limit must be an integer, got {request_limit!r}")
            config_dict["request_limit"] = request_limit
        if api_url is not None:
            config_dict["api_url"] = api_url
        if acquire_timeout_seconds is not None:
            config_dict["acquire_timeout_seconds"] = acquire_timeout_seconds
        if shutdown_grace_seconds is not None:
            config_dict["shutdown_grace_seconds"] = shutdown_grace_seconds

        try:
            config = AppConfig(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid client configuration: {e}") from e
        self._rate_limit = RateLimitConfig(
            window_seconds=config.time_interval_seconds,
            max_requests=config.request_limit,
        )

        self._container = Container()
        self._container.config.from_pydantic(config)
        if transport is not None:
            self._container.transport.override(providers.Object(transport))
        if encoder is not None:
            self._container.encoder.override(providers.Object(encoder))

        self._container.init_resources()
        self._rate_limiter = self._container.rate_limiter()
        self._invoker = self._container.invoker()
        self._closed = False
        logger.debug(f"CrptApi ready: {config.request_limit} request(s) per {config.time_interval_seconds}s to {config.api_url}")

    @property
    def rate_limit(self) -> RateLimitConfig:
        return self._rate_limit

    @property
    def rate_limiter(self) -> FixedWindowRateLimiter:
        return self._rate_limiter

    @property
    def api_url(self) -> str:
        return self._invoker.url

    def create_document(self, document: Any, signature: str, *, cancel: CancelToken | None = None) -> Response:
        """Send ``document`` with the given ``signature``, blocking while over the limit.

        Args:
            document: A Document model, or any JSON-serializable mapping.
            signature: Value of the ``Signature`` header.
            cancel: Optional token that aborts the wait for a permit.

        Returns:
            The endpoint response (any status code).

        Raises:
            EncodingError: document cannot be serialized; nothing was sent.
            RequestFailed: network/I/O failure; ``cause`` holds the original error.
            CancellationError: the wait was cancelled, timed out, or the client was shut down.
        """
        return self._invoker.invoke(document, signature, cancel=cancel)

    def shutdown(self) -> None:
        """Stop the window timer and close the HTTP transport. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._container.shutdown_resources()

    def close(self) -> None:
        self.shutdown()

    def __enter__(self) -> CrptApi:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.shutdown()


__all__ = [
    "CrptApi",
    "AppConfig",
]
