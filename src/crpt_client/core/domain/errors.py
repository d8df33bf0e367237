from __future__ import annotations


class CrptClientError(Exception):
    """Base class for every error raised by crpt_client."""


class ConfigError(CrptClientError, ValueError):
    """Invalid rate limit or client configuration, raised at construction."""


class EncodingError(CrptClientError):
    """Payload could not be serialized to the wire format."""


class TransportError(CrptClientError):
    """Network/I/O failure or interruption while sending a request."""


class RequestFailed(TransportError):
    """A throttled call failed in transport; the original error is kept in ``cause``."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class CancellationError(CrptClientError):
    """Caller stopped waiting for a permit; no permit was consumed."""


class AcquireTimeout(CancellationError):
    """Permit wait exceeded the configured acquire timeout."""
