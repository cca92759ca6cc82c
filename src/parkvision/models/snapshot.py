"""Immutable snapshot of every facility from one successful sync cycle."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from parkvision.models.facility import Facility


class Snapshot(BaseModel):
    """All facilities as of ``fetched_at``.

    A snapshot is replaced wholesale by the sync engine and never mutated,
    so readers may hold on to one without locking.

    Parameters
    ----------
    facilities : tuple of Facility
        Facilities in upstream order.
    fetched_at : datetime
        When the fetch that produced this snapshot was issued.
    rejected_count : int
        Number of upstream records dropped during decoding.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    facilities: tuple[Facility, ...] = ()
    fetched_at: datetime
    rejected_count: int = Field(default=0, ge=0)

    def __len__(self) -> int:
        return len(self.facilities)

    def get(self, facility_id: int) -> Facility | None:
        """Return the facility with *facility_id*, or ``None``."""
        for facility in self.facilities:
            if facility.id == facility_id:
                return facility
        return None

    @property
    def total_spots(self) -> int:
        return sum(facility.total_spots for facility in self.facilities)

    @property
    def total_available(self) -> int:
        return sum(facility.available_spots for facility in self.facilities)
