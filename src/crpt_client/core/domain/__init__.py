from .cancellation import CancelToken
from .enums import InvocationState, TimeUnit
from .errors import (
    AcquireTimeout,
    CancellationError,
    ConfigError,
    CrptClientError,
    EncodingError,
    RequestFailed,
    TransportError,
)
from .models import OutboundRequest, RateLimitConfig, Response

__all__ = [
    "AcquireTimeout",
    "CancelToken",
    "CancellationError",
    "ConfigError",
    "CrptClientError",
    "EncodingError",
    "InvocationState",
    "OutboundRequest",
    "RateLimitConfig",
    "RequestFailed",
    "Response",
    "TimeUnit",
    "TransportError",
]
