"""Data models for parking facilities and snapshots."""

from parkvision.models._base import ParkVisionBaseModel, ParkVisionEnum, parse_timestamp
from parkvision.models.facility import AvailabilityTier, Category, Facility, Spot, availability_ratio
from parkvision.models.snapshot import Snapshot

__all__ = [
    "AvailabilityTier",
    "Category",
    "Facility",
    "ParkVisionBaseModel",
    "ParkVisionEnum",
    "Snapshot",
    "Spot",
    "availability_ratio",
    "parse_timestamp",
]
