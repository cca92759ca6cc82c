"""Base model and enum for parking service records.

Every record model inherits from :class:`ParkVisionBaseModel` which
provides:

* Frozen, hashable instances (a decoded record never changes).
* A ``model_validator(mode="before")`` that renames upstream keys via the
  per-class ``_KEY_ALIASES`` map and drops ``None`` values so the field
  default (or a "missing" error for required fields) applies.

Categorical enums inherit from :class:`ParkVisionEnum` which matches values
case-insensitively and resolves anything unmapped to the subclass
``fallback()`` member instead of raising ``ValueError``.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationInfo, model_validator

# Threshold to distinguish epoch seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an ISO-8601 string or epoch number to a tz-aware datetime.

    Naive values are assumed to be UTC. Returns ``None`` when *value*
    cannot be interpreted; callers decide what to substitute.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


class ParkVisionEnum(StrEnum):
    """Base for categorical enums decoded from upstream strings.

    Subclasses override :meth:`fallback` to name the member used for
    values without a mapped member.
    """

    @classmethod
    def fallback(cls) -> ParkVisionEnum:
        return next(iter(cls))

    @classmethod
    def lookup(cls, value: object) -> ParkVisionEnum | None:
        """Return the member matching *value* (by value or name), ignoring case."""
        if not isinstance(value, str):
            return None
        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle or member.name.lower() == needle:
                return member
        return None

    @classmethod
    def _missing_(cls, value: object) -> ParkVisionEnum:
        member = cls.lookup(value)
        if member is not None:
            return member
        return cls.fallback()


class ParkVisionBaseModel(BaseModel):
    """Base for decoded parking records.

    Handles:
    * upstream → internal key renaming via ``_KEY_ALIASES``
    * ``None`` values → dropped so the field default is used
    * unknown keys → ignored
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}
    """Upstream key → internal field name. Pure renaming, no conversion."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any], aliases: dict[str, str] | None = None) -> dict[str, Any]:
        """Apply key aliases and strip ``None`` values from *values*."""
        working = dict(values)
        if aliases:
            for old_key, new_key in aliases.items():
                if old_key in working and new_key not in working:
                    working[new_key] = working.pop(old_key)
        return {key: value for key, value in working.items() if value is not None}

    @classmethod
    def _prepare(cls, values: dict[str, Any], info: ValidationInfo) -> dict[str, Any]:
        """Hook for subclasses to adjust cleaned input before field validation."""
        return values

    @model_validator(mode="before")
    @classmethod
    def _rename_upstream_keys(cls, values: Any, info: ValidationInfo) -> Any:
        if not isinstance(values, dict):
            return values
        aliases: dict[str, str] = getattr(cls, "_KEY_ALIASES", {})
        return cls._prepare(ParkVisionBaseModel._clean_dict(values, aliases), info)
