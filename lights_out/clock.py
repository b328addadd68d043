from __future__ import annotations

import math
import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    The game engine and timer scheduler read time only through this interface.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


def ms_to_s(ms: float) -> float:
    return float(ms) / 1000.0


def s_to_ms(seconds: float) -> int:
    # Round half up rather than to even.
    return int(math.floor(float(seconds) * 1000.0 + 0.5))
