from __future__ import annotations

import logging
from typing import Mapping, Optional

import httpx

from ..core.domain.errors import TransportError
from ..core.domain.models import Response
from ..core.ports.transport_port import TransportPort

logger = logging.getLogger(__name__)


class HttpTransport(TransportPort):
    def __init__(
        self,
        base_headers: Optional[Mapping[str, str]] = None,
        timeout_seconds: float = 20.0,
        connect_timeout_seconds: float = 10.0,
    ) -> None:
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=connect_timeout_seconds),
            headers=dict(base_headers or {}),
            follow_redirects=True,
            max_redirects=10
        )

    def send(self, url: str, headers: Mapping[str, str], body: bytes) -> Response:
        try:
            resp = self._client.post(url, content=body, headers=dict(headers))
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid URL {url!r}: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__} while sending to {url}: {e}") from e
        # statuses are the caller's business; only I/O failures raise
        return Response(status_code=resp.status_code, body=resp.content, headers=dict(resp.headers))

    def close(self) -> None:
        logger.debug("Closing HTTP transport")
        self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
