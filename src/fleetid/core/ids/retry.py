"""
Bounded retry loop for constrained id generation.

Each attempt produces a candidate id together with its validation verdict.
The controller keeps going while verdicts are retryable and stops on the
first valid id, on a fail-fast verdict, on an unexpected exception, or when
the attempt budget runs out.

States:
    ATTEMPTING -> SUCCEEDED   valid candidate
    ATTEMPTING -> ABORTED     fail-fast verdict or exception in an attempt
    ATTEMPTING -> EXHAUSTED   budget used up on retryable verdicts

Callers only see "id or None"; the terminal state is kept on the
``RetryOutcome`` and in the log for diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from fleetid.core.ids.models import GenerationAttempt, Identifier, IdValidationState

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 512


class RetryState(str, Enum):
    """State of a constrained generation request."""

    ATTEMPTING = "attempting"  # only while run() loops; never returned
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


class RetryOutcome(BaseModel):
    """Terminal state of one ``RetryController.run`` call."""

    state: RetryState
    attempts: int
    identifier: Identifier | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def succeeded(self) -> bool:
        return self.state == RetryState.SUCCEEDED


class RetryController:
    """
    Runs generate-then-validate attempts up to a fixed ceiling.

    ATTEMPTING is the implicit state while the loop is running; ``run`` only
    ever returns one of the terminal states.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts

    def run(
        self,
        attempt: Callable[[], GenerationAttempt],
        label: str = "",
    ) -> RetryOutcome:
        """
        Drive attempts until one of the terminal states is reached.

        Args:
            attempt: Produces a fresh candidate and its verdict
            label: Included in log lines (usually the prefix)

        Returns:
            The terminal RetryOutcome. Never raises for failures inside
            ``attempt``.
        """
        for attempts in range(1, self.max_attempts + 1):
            try:
                result = attempt()
            except Exception:
                logger.exception(
                    "Error occurred while generating id with prefix %r (attempt %d)",
                    label,
                    attempts,
                )
                return RetryOutcome(state=RetryState.ABORTED, attempts=attempts)

            if result.state == IdValidationState.VALID:
                return RetryOutcome(
                    state=RetryState.SUCCEEDED,
                    attempts=attempts,
                    identifier=result.identifier,
                )

            if result.state == IdValidationState.INVALID_NON_RETRYABLE:
                logger.warning(
                    "Non-retryable constraint failure for id with prefix %r "
                    "after %d attempt(s)",
                    label,
                    attempts,
                )
                return RetryOutcome(state=RetryState.ABORTED, attempts=attempts)

        logger.warning(
            "Failed to generate id with prefix %r after max attempts (%d)",
            label,
            self.max_attempts,
        )
        return RetryOutcome(state=RetryState.EXHAUSTED, attempts=self.max_attempts)


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "RetryController",
    "RetryOutcome",
    "RetryState",
]
