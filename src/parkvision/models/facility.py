"""Facility and spot models.

Both models are built straight from upstream records by
:mod:`parkvision.decoding`. Availability metrics are derived on read and
never stored.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from parkvision._constants import LIMITED_THRESHOLD, PLENTIFUL_THRESHOLD
from parkvision.models._base import ParkVisionBaseModel, ParkVisionEnum, parse_timestamp

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class Category(ParkVisionEnum):
    """Kind of parking location."""

    GARAGE = "Garage"  # multi-level structure
    STREET = "Street"  # on-street segment
    LOT = "Lot"  # open lot

    @classmethod
    def fallback(cls) -> Category:
        return cls.LOT


class AvailabilityTier(StrEnum):
    """Coarse availability bucket used for pin colours and filtering."""

    PLENTIFUL = "plentiful"
    LIMITED = "limited"
    SCARCE = "scarce"

    @classmethod
    def from_ratio(cls, ratio: float) -> AvailabilityTier:
        if ratio > PLENTIFUL_THRESHOLD:
            return cls.PLENTIFUL
        if ratio > LIMITED_THRESHOLD:
            return cls.LIMITED
        return cls.SCARCE


def availability_ratio(available_spots: int, total_spots: int) -> float:
    """Share of free spots, ``0.0`` for a facility without spots."""
    if total_spots <= 0:
        return 0.0
    return available_spots / total_spots


def _decoded_at(info: ValidationInfo) -> datetime:
    context = info.context if isinstance(info.context, dict) else {}
    moment = context.get("decoded_at")
    if isinstance(moment, datetime):
        return moment
    return datetime.now(UTC)


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return False
    try:
        parsed = float(value)
    except ValueError:
        return False
    return not math.isnan(parsed) and not math.isinf(parsed)


# ------------------------------------------------------------------
# Models
# ------------------------------------------------------------------


class Spot(ParkVisionBaseModel):
    """A single physical parking space.

    Parameters
    ----------
    id : int
        Identifier, unique within the owning facility.
    number : int
        Label shown to users. Defaults to ``id`` when upstream omits it.
    occupied : bool
        Whether the detector saw a vehicle.
    confidence : float
        Detector certainty, clamped into ``[0.0, 1.0]``.
    observed_at : datetime
        When the camera last checked the spot. Replaced by the decode time
        when upstream sends nothing usable.
    degraded_fields : tuple of str
        Fields that were substituted during decoding.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {
        "is_occupied": "occupied",
        "last_updated": "observed_at",
    }

    id: int
    number: int
    occupied: bool
    confidence: float = Field(default=0.0, allow_inf_nan=False)
    observed_at: datetime
    degraded_fields: tuple[str, ...] = ()

    @classmethod
    def _prepare(cls, values: dict[str, Any], info: ValidationInfo) -> dict[str, Any]:
        degraded: list[str] = []
        if "number" not in values and "id" in values:
            values["number"] = values["id"]

        if "confidence" not in values:
            degraded.append("confidence")
        elif not _is_finite_number(values["confidence"]):
            values.pop("confidence")
            degraded.append("confidence")

        observed_at = parse_timestamp(values.get("observed_at"))
        if observed_at is None:
            observed_at = _decoded_at(info)
            degraded.append("observed_at")
        values["observed_at"] = observed_at

        values["degraded_fields"] = tuple(degraded)
        return values

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return min(1.0, max(0.0, value))

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded_fields)


class Facility(ParkVisionBaseModel):
    """A parking location with aggregate counts and per-spot detail.

    Required upstream fields: ``id``, ``name``, ``latitude``, ``longitude``,
    ``total_spots`` and ``available_spots``. Optional fields that arrive
    malformed are reset to their default and listed in ``degraded_fields``.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"type": "category"}

    _OPTIONAL_NUMBERS: ClassVar[dict[str, bool]] = {
        # field -> must be non-negative
        "price_per_hour": True,
        "rating": False,
        "distance": True,
    }

    id: int
    name: str
    address: str = ""
    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    total_spots: int = Field(ge=0)
    available_spots: int = Field(ge=0)
    price_per_hour: float = 0.0
    rating: float = 0.0
    distance: float = 0.0
    category: Category = Category.LOT
    spots: tuple[Spot, ...] = ()
    degraded_fields: tuple[str, ...] = ()

    @classmethod
    def _prepare(cls, values: dict[str, Any], info: ValidationInfo) -> dict[str, Any]:
        degraded: list[str] = []

        if "category" in values:
            category = Category.lookup(values["category"])
            if category is None:
                category = Category.fallback()
                degraded.append("category")
            values["category"] = category

        if "address" in values and not isinstance(values["address"], str):
            values.pop("address")
            degraded.append("address")

        for field_name, non_negative in cls._OPTIONAL_NUMBERS.items():
            if field_name not in values:
                continue
            value = values[field_name]
            if not _is_finite_number(value) or (non_negative and float(value) < 0):
                values.pop(field_name)
                degraded.append(field_name)

        values["degraded_fields"] = tuple(degraded)
        return values

    @field_validator("available_spots")
    @classmethod
    def _available_within_total(cls, value: int, info: ValidationInfo) -> int:
        total = info.data.get("total_spots")
        if total is not None and value > total:
            raise PydanticCustomError(
                "out_of_range",
                "available_spots ({available}) exceeds total_spots ({total})",
                {"available": value, "total": total},
            )
        return value

    @field_validator("spots")
    @classmethod
    def _unique_spot_ids(cls, value: tuple[Spot, ...]) -> tuple[Spot, ...]:
        seen: set[int] = set()
        for spot in value:
            if spot.id in seen:
                raise PydanticCustomError(
                    "duplicate_spot",
                    "spot id {spot_id} appears more than once",
                    {"spot_id": spot.id},
                )
            seen.add(spot.id)
        return value

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    @property
    def availability_ratio(self) -> float:
        """Free spots as a fraction of total spots (``0.0`` when empty)."""
        return availability_ratio(self.available_spots, self.total_spots)

    @property
    def availability_tier(self) -> AvailabilityTier:
        return AvailabilityTier.from_ratio(self.availability_ratio)

    @property
    def occupied_spots(self) -> int:
        return self.total_spots - self.available_spots

    @property
    def coordinate(self) -> tuple[float, float]:
        """``(latitude, longitude)`` pair for map placement."""
        return (self.latitude, self.longitude)

    @property
    def is_degraded(self) -> bool:
        """True when this facility or any of its spots had fields substituted."""
        return bool(self.degraded_fields) or any(spot.is_degraded for spot in self.spots)
