"""
Configuration data models for fleetid.

These models define the structure of .fleetid.json and
~/.config/fleetid/config.json files, with validation and type safety via
Pydantic.
"""

import re
from datetime import timedelta, timezone, tzinfo

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fleetid.core.ids.models import MAX_ID_PER_MS, MAX_NODE
from fleetid.core.ids.retry import DEFAULT_MAX_ATTEMPTS

# +HH:MM, +HHMM or +HH
_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):?(\d{2})?$")


class FleetIdConfig(BaseModel):
    """
    Top-level fleetid configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = FleetIdConfig(node=7)
        >>> config.max_attempts
        512
    """

    model_config = ConfigDict(frozen=True)

    node: int = Field(
        default=0,
        ge=0,
        le=MAX_NODE,
        description="Node number stamped into every id (0-9999)"
    )
    max_ids_per_ms: int = Field(
        default=MAX_ID_PER_MS,
        ge=1,
        le=MAX_ID_PER_MS,
        description="Disambiguator space per millisecond (at most 1000)"
    )
    max_attempts: int = Field(
        default=DEFAULT_MAX_ATTEMPTS,
        ge=1,
        description="Attempt ceiling for constrained generation"
    )
    timezone: str = Field(
        default="UTC",
        description="UTC or a fixed offset such as +05:30 for the timestamp field"
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """
        Validate the timezone and normalize it to ``UTC`` or ``+HH:MM``.

        Zones with daylight saving time repeat local times when clocks go
        back, which would make two ids an hour apart render identically.
        Only fixed offsets are accepted.
        """
        if v.strip().upper() in ("UTC", "Z"):
            return "UTC"
        match = _OFFSET_PATTERN.match(v.strip())
        if match is None:
            raise ValueError(
                f"Timezone must be UTC or a fixed offset like +05:30, got {v!r}"
            )
        sign, hours, minutes = match.group(1), int(match.group(2)), int(match.group(3) or 0)
        if hours > 23 or minutes > 59:
            raise ValueError(f"Timezone offset out of range: {v!r}")
        if hours == 0 and minutes == 0:
            return "UTC"
        return f"{sign}{hours:02d}:{minutes:02d}"

    @property
    def tzinfo(self) -> tzinfo:
        """The configured timezone as a fixed-offset tzinfo."""
        if self.timezone == "UTC":
            return timezone.utc
        sign = -1 if self.timezone[0] == "-" else 1
        hours, minutes = self.timezone[1:].split(":")
        return timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))
