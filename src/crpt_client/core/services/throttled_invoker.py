from __future__ import annotations

import logging
from typing import Any

from ..domain.cancellation import CancelToken
from ..domain.enums import InvocationState
from ..domain.errors import ConfigError, RequestFailed, TransportError
from ..domain.models import OutboundRequest, Response
from ..ports.encoder_port import EncoderPort
from ..ports.rate_limiter_port import RateLimiterPort
from ..ports.transport_port import TransportPort

logger = logging.getLogger(__name__)


class ThrottledInvoker:
    """Send one encoded payload per permit to a fixed endpoint.

    Each call acquires a permit, encodes ``payload``, POSTs it with the caller's
    signature, and returns the transport response unchanged. The permit is
    released on every exit path. Nothing is retried.
    """

    def __init__(
        self,
        rate_limiter: RateLimiterPort,
        encoder: EncoderPort,
        transport: TransportPort,
        url: str,
        acquire_timeout_seconds: float | None = None,
    ) -> None:
        if not url:
            raise ConfigError("url must not be empty")
        if acquire_timeout_seconds is not None and acquire_timeout_seconds < 0:
            raise ConfigError(f"acquire_timeout_seconds must be >= 0, got {acquire_timeout_seconds}")
        self._rate_limiter = rate_limiter
        self._encoder = encoder
        self._transport = transport
        self._url = url
        self._acquire_timeout = acquire_timeout_seconds

    @property
    def url(self) -> str:
        return self._url

    def invoke(self, payload: Any, signature: str, *, cancel: CancelToken | None = None) -> Response:
        """Encode and send ``payload``, blocking while the rate limit is exhausted.

        Raises:
            CancellationError: the permit wait was cancelled (AcquireTimeout on timeout).
                Nothing was consumed or sent.
            EncodingError: payload could not be serialized; nothing was sent.
            RequestFailed: the transport failed; ``cause`` holds the original error.
        """
        self._trace(InvocationState.WAITING_FOR_PERMIT)
        with self._rate_limiter.acquire(timeout=self._acquire_timeout, cancel=cancel):
            self._trace(InvocationState.PERMIT_HELD)
            try:
                body = self._encoder.encode(payload)
                request = OutboundRequest(url=self._url, body=body, signature=signature)

                self._trace(InvocationState.SENDING)
                logger.info(f"Sending request to: {request.url}")
                logger.debug(f"Request body: {request.body.decode('utf-8', errors='replace')}")
                try:
                    response = self._transport.send(request.url, request.headers, request.body)
                except TransportError as e:
                    logger.error(f"Request to {request.url} failed: {e}")
                    raise RequestFailed(f"Failed to send request to {request.url}: {e}", cause=e) from e
            except Exception:
                self._trace(InvocationState.FAILED)
                raise

            logger.info(f"Received response with status code: {response.status_code}")
            self._trace(InvocationState.SUCCESS)
            return response

    def _trace(self, state: InvocationState) -> None:
        logger.debug(f"Invocation state: {state.value}")
