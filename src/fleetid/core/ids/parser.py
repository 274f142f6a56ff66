"""
Identifier formatting and parsing.

This module owns the text format of an identifier::

    {prefix}{yyMMddHHmmssSSS}{node:04d}{exponent:03d}

Parsing works from the tail of the string: the last 22 characters must be
digits and hold, from right to left, the exponent (3), the node (4) and the
timestamp (15). Whatever is left in front is the prefix.

Because the prefix is free-form, a prefix that itself ends in digits cannot
be told apart from the numeric fields. Those digits always stay in the
prefix, so ``parse_id`` is not a guaranteed inverse of generation for such
prefixes.

Public API:
    - format_timestamp: Render epoch milliseconds as 15 digits
    - format_id: Render a full identifier string
    - parse_id: Parse an identifier string back into an Identifier
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo

from fleetid.core.ids.models import (
    EXPONENT_DIGITS,
    MINIMUM_ID_LENGTH,
    NODE_DIGITS,
    Identifier,
)

logger = logging.getLogger(__name__)

# yyMMddHHmmss, the milliseconds are appended separately
_SECONDS_FORMAT = "%y%m%d%H%M%S"
_ASCII_DIGITS = frozenset("0123456789")


def to_datetime(timestamp_ms: int, tz: tzinfo = timezone.utc) -> datetime:
    """Convert epoch milliseconds to an aware datetime truncated to the ms."""
    seconds, millis = divmod(timestamp_ms, 1000)
    return datetime.fromtimestamp(seconds, tz).replace(microsecond=millis * 1000)


def format_timestamp(timestamp_ms: int, tz: tzinfo = timezone.utc) -> str:
    """
    Render epoch milliseconds as the 15-digit ``yyMMddHHmmssSSS`` field.

    Example:
        >>> format_timestamp(1705314600123)
        '240115103000123'
    """
    moment = to_datetime(timestamp_ms, tz)
    return f"{moment.strftime(_SECONDS_FORMAT)}{moment.microsecond // 1000:03d}"


def format_id(
    prefix: str,
    timestamp_ms: int,
    node: int,
    exponent: int,
    tz: tzinfo = timezone.utc,
) -> str:
    """
    Render an identifier string.

    Example:
        >>> format_id("TEST", 1705314600123, 7, 5)
        'TEST2401151030001230007005'
    """
    return f"{prefix}{format_timestamp(timestamp_ms, tz)}{node:04d}{exponent:03d}"


def parse_id(text: str | None, tz: tzinfo = timezone.utc) -> Identifier | None:
    """
    Parse an identifier string back into an Identifier.

    Never raises: anything that is not a well-formed identifier yields None.

    Args:
        text: The identifier string
        tz: Timezone the timestamp field was rendered in

    Returns:
        The decoded Identifier, or None if the text is missing, too short,
        has a non-numeric tail or carries an impossible date

    Examples:
        >>> parse_id("TEST2401151030001230007005").node
        7
        >>> parse_id("short") is None
        True
    """
    if not isinstance(text, str) or len(text) < MINIMUM_ID_LENGTH:
        return None

    tail = text[-MINIMUM_ID_LENGTH:]
    if not _ASCII_DIGITS.issuperset(tail):
        return None

    exponent_start = MINIMUM_ID_LENGTH - EXPONENT_DIGITS
    node_start = exponent_start - NODE_DIGITS
    stamp = tail[:node_start]

    try:
        generated_at = datetime.strptime(stamp[:-3], _SECONDS_FORMAT).replace(
            microsecond=int(stamp[-3:]) * 1000,
            tzinfo=tz,
        )
    except ValueError as e:
        logger.warning("Could not parse id %r: %s", text, e)
        return None

    return Identifier(
        text=text,
        node=int(tail[node_start:exponent_start]),
        exponent=int(tail[exponent_start:]),
        generated_at=generated_at,
    )


__all__ = [
    "format_id",
    "format_timestamp",
    "parse_id",
    "to_datetime",
]
