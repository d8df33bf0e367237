from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from .enums import TimeUnit
from .errors import ConfigError


@dataclass(frozen=True)
class RateLimitConfig:
    window_seconds: float
    max_requests: int

    def __post_init__(self) -> None:
        if isinstance(self.max_requests, bool) or not isinstance(self.max_requests, int):
            raise ConfigError(f"max_requests must be an integer, got {self.max_requests!r}")
        if self.max_requests < 1:
            raise ConfigError(f"max_requests must be >= 1, got {self.max_requests}")
        if not isinstance(self.window_seconds, (int, float)) or isinstance(self.window_seconds, bool):
            raise ConfigError(f"window_seconds must be a number, got {self.window_seconds!r}")
        if not self.window_seconds > 0 or not math.isfinite(self.window_seconds):
            raise ConfigError(f"window_seconds must be a finite number > 0, got {self.window_seconds}")

    @staticmethod
    def of(time_unit: TimeUnit, interval: float, max_requests: int) -> "RateLimitConfig":
        """Build a config from a unit and amount, e.g. ``RateLimitConfig.of(TimeUnit.SECONDS, 1, 10)``."""
        if not isinstance(time_unit, TimeUnit):
            raise ConfigError(f"time_unit must be a TimeUnit, got {time_unit!r}")
        if isinstance(interval, bool) or not isinstance(interval, (int, float)):
            raise ConfigError(f"interval must be a number, got {interval!r}")
        return RateLimitConfig(window_seconds=time_unit.to_seconds(interval), max_requests=max_requests)


@dataclass(frozen=True)
class OutboundRequest:
    url: str
    body: bytes
    signature: str
    content_type: str = "application/json"

    @property
    def headers(self) -> dict[str, str]:
        return {"Content-Type": self.content_type, "Signature": self.signature}


@dataclass(frozen=True)
class Response:
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))
