"""
Id models for node-stamped identifiers.

An identifier is rendered as::

    {prefix}{yyMMddHHmmssSSS}{node:04d}{exponent:03d}

e.g. ``TEST2401151030001230007005`` is prefix ``TEST``, generated at
2024-01-15 10:30:00.123 on node 7 with exponent 5.

These Pydantic models are immutable once built, either by the generator or
by the parser.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

# Fixed-width numeric fields at the tail of every identifier
TIMESTAMP_DIGITS = 15
NODE_DIGITS = 4
EXPONENT_DIGITS = 3
MINIMUM_ID_LENGTH = TIMESTAMP_DIGITS + NODE_DIGITS + EXPONENT_DIGITS

MAX_NODE = 10**NODE_DIGITS - 1
MAX_ID_PER_MS = 10**EXPONENT_DIGITS


class Identifier(BaseModel):
    """
    A generated (or parsed) identifier.

    ``text`` is the canonical form exchanged with callers; the other fields
    are the decoded components it was built from.
    """

    text: str
    node: int
    exponent: int
    generated_at: datetime

    model_config = ConfigDict(frozen=True)

    @field_validator("node")
    @classmethod
    def validate_node(cls, v: int) -> int:
        """Validate that node fits in four digits."""
        if not 0 <= v <= MAX_NODE:
            raise ValueError(f"Node must be between 0 and {MAX_NODE}")
        return v

    @field_validator("exponent")
    @classmethod
    def validate_exponent(cls, v: int) -> int:
        """Validate that exponent fits in three digits."""
        if not 0 <= v < MAX_ID_PER_MS:
            raise ValueError(f"Exponent must be between 0 and {MAX_ID_PER_MS - 1}")
        return v

    @property
    def prefix(self) -> str:
        """Everything in front of the fixed-width numeric tail."""
        return self.text[: len(self.text) - MINIMUM_ID_LENGTH]

    def __str__(self) -> str:
        return self.text


class IdValidationState(str, Enum):
    """Verdict of running validation constraints against a candidate id."""

    VALID = "valid"
    INVALID_RETRYABLE = "invalid_retryable"
    INVALID_NON_RETRYABLE = "invalid_non_retryable"


class GenerationAttempt(BaseModel):
    """A candidate identifier paired with its validation verdict."""

    identifier: Identifier
    state: IdValidationState

    model_config = ConfigDict(frozen=True)
