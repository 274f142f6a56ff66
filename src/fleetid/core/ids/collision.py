"""
Per-millisecond collision ledger.

The ledger remembers which disambiguator values have been handed out for the
current millisecond bucket. A reservation for a value that was already issued
in the same bucket is refused; the caller draws again. When the bucket moves,
the ledger starts over with an empty set.

The checker does not take its own lock in ``reserve``. ``IdGenerator`` holds
``lock`` around the clock read, the random draw and the ``reserve`` call, so
generators sharing a checker also share its critical section.

Example:
    >>> checker = CollisionChecker()
    >>> checker.reserve(1700000000000, 5)
    True
    >>> checker.reserve(1700000000000, 5)
    False
    >>> checker.reserve(1700000000001, 5)
    True
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class CollisionChecker:
    """Tracks issued disambiguators for the current millisecond bucket."""

    def __init__(self) -> None:
        self._bucket: int | None = None
        self._issued: set[int] = set()
        self.lock = threading.Lock()

    @property
    def bucket(self) -> int | None:
        """The millisecond bucket currently held by the ledger."""
        return self._bucket

    @property
    def issued_count(self) -> int:
        """Number of disambiguators issued in the current bucket."""
        return len(self._issued)

    def reserve(self, timestamp_ms: int, candidate: int) -> bool:
        """
        Try to reserve ``candidate`` for ``timestamp_ms``.

        Args:
            timestamp_ms: Millisecond bucket the candidate belongs to
            candidate: Disambiguator value drawn by the caller

        Returns:
            True if the pair was unused and is now recorded, False if the
            candidate was already issued in this bucket
        """
        if timestamp_ms != self._bucket:
            self._bucket = timestamp_ms
            self._issued = set()

        if candidate in self._issued:
            return False

        self._issued.add(candidate)
        return True

    def reset(self) -> None:
        """Forget the current bucket and everything issued in it."""
        with self.lock:
            logger.debug("Resetting collision ledger (bucket=%s)", self._bucket)
            self._bucket = None
            self._issued = set()


__all__ = ["CollisionChecker"]
