"""Published sync state.

Every transition of the sync engine is a new :class:`SyncState`; the engine
swaps the whole value at once, so a reader never sees a phase from one cycle
paired with the snapshot of another.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from parkvision.faults import SyncFault
from parkvision.models.snapshot import Snapshot


class SyncPhase(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SyncState(BaseModel):
    """Immutable view of the engine at one point in time.

    ``snapshot`` is the last good snapshot and survives failed cycles.
    ``fault`` describes the most recent failure; it is carried through
    ``FETCHING`` and cleared by the next success.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    phase: SyncPhase = SyncPhase.IDLE
    snapshot: Snapshot | None = None
    fault: SyncFault | None = None
    updated_at: datetime | None = None

    @property
    def is_loading(self) -> bool:
        return self.phase == SyncPhase.FETCHING

    @property
    def last_updated(self) -> datetime | None:
        """``fetched_at`` of the current snapshot, if any."""
        return self.snapshot.fetched_at if self.snapshot is not None else None
