from __future__ import annotations

from typing import Any, Protocol


class EncoderPort(Protocol):
    def encode(self, payload: Any) -> bytes:
        """Serialize payload to wire bytes; raise EncodingError on unrepresentable input."""
        ...
