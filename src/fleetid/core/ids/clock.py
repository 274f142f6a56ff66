"""
Time and randomness sources for id generation.

The generator never calls ``time`` or ``random`` directly. It talks to a
``Clock`` and a ``RandomSource`` so tests (and applications with their own
notion of time) can pin both.
"""

from __future__ import annotations

import secrets
import time
from typing import Protocol


class Clock(Protocol):
    """Supplies the current time in epoch milliseconds."""

    def now_ms(self) -> int: ...


class RandomSource(Protocol):
    """Supplies uniformly distributed integers in ``[0, upper)``."""

    def randbelow(self, upper: int) -> int: ...


class SystemClock:
    """Wall-clock time with millisecond resolution."""

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


class SecureRandomSource:
    """Random draws backed by the operating system's CSPRNG."""

    def __init__(self) -> None:
        self._random = secrets.SystemRandom()

    def randbelow(self, upper: int) -> int:
        if upper < 1:
            raise ValueError(f"upper must be >= 1, got {upper}")
        return self._random.randrange(upper)


__all__ = [
    "Clock",
    "RandomSource",
    "SecureRandomSource",
    "SystemClock",
]
