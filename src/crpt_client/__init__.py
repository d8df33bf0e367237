"""crpt_client package: app/core/infra/config.

Expose the throttled API client at the package level.
"""

from .app.api import AppConfig, CrptApi
from .core.domain import (
    AcquireTimeout,
    CancellationError,
    CancelToken,
    ConfigError,
    CrptClientError,
    EncodingError,
    RateLimitConfig,
    RequestFailed,
    Response,
    TimeUnit,
    TransportError,
)
from .infra.schemas import Document, Product

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "AcquireTimeout",
    "AppConfig",
    "CancelToken",
    "CancellationError",
    "ConfigError",
    "CrptApi",
    "CrptClientError",
    "Document",
    "EncodingError",
    "Product",
    "RateLimitConfig",
    "RequestFailed",
    "Response",
    "TimeUnit",
    "TransportError",
]
