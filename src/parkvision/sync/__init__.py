"""Sync layer.

This package owns the single source of truth for the current parking state:
it polls the data source, decodes the result and publishes immutable
:class:`~parkvision.sync.events.SyncState` values to subscribers.
"""

from parkvision.sync.engine import ParkingDataSource, SyncEngine, SyncObserver
from parkvision.sync.events import SyncPhase, SyncState

__all__ = [
    "ParkingDataSource",
    "SyncEngine",
    "SyncObserver",
    "SyncPhase",
    "SyncState",
]
