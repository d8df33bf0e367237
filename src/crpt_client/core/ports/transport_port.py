from __future__ import annotations

from typing import Mapping, Protocol

from ..domain.models import Response


class TransportPort(Protocol):
    def send(self, url: str, headers: Mapping[str, str], body: bytes) -> Response:
        """POST body to url and return the response unchanged.

        Implementations raise TransportError on I/O failure or interruption.
        Non-2xx statuses are returned, not raised.
        """
        ...
