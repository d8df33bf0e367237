from __future__ import annotations

from enum import Enum
from typing import Optional


class TimeUnit(Enum):
    MILLISECONDS = 0.001
    SECONDS = 1.0
    MINUTES = 60.0
    HOURS = 3600.0
    DAYS = 86400.0

    def to_seconds(self, amount: float) -> float:
        return amount * self.value

    @classmethod
    def from_str(cls, value: str) -> Optional["TimeUnit"]:
        """Parse a unit name, case-insensitive. Accepts short aliases (ms, s, m, h, d)."""
        s = value.strip().upper()
        if not s:
            return None
        aliases = {
            "MS": cls.MILLISECONDS,
            "S": cls.SECONDS,
            "SEC": cls.SECONDS,
            "M": cls.MINUTES,
            "MIN": cls.MINUTES,
            "H": cls.HOURS,
            "D": cls.DAYS,
        }
        if s in aliases:
            return aliases[s]
        try:
            return cls[s]
        except KeyError:
            return None


class InvocationState(Enum):
    WAITING_FOR_PERMIT = "WAITING_FOR_PERMIT"
    PERMIT_HELD = "PERMIT_HELD"
    SENDING = "SENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (InvocationState.SUCCESS, InvocationState.FAILED)
