"""parkvision - Async sync core for live parking-occupancy data."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("parkvision")
except PackageNotFoundError:
    __version__ = "0+local"
from parkvision.client import ParkVisionClient
from parkvision.config import ParkVisionConfig
from parkvision.decoding import DecodedBatch, RejectedRecord, decode_facility, decode_facility_list
from parkvision.exceptions import (
    DecodeError,
    MissingFieldError,
    OutOfRangeError,
    ParkVisionConfigError,
    ParkVisionError,
    ParkVisionTimeoutError,
    ParkVisionTransportError,
    SyncFailedError,
    UnparsableError,
)
from parkvision.faults import FaultKind, SyncFault, classify_fault
from parkvision.models import AvailabilityTier, Category, Facility, Snapshot, Spot
from parkvision.query import SortKey, filter_by_category, query, search, sort_facilities
from parkvision.sync import ParkingDataSource, SyncEngine, SyncPhase, SyncState

__all__ = [
    "__version__",
    "AvailabilityTier",
    "Category",
    "DecodeError",
    "DecodedBatch",
    "Facility",
    "FaultKind",
    "MissingFieldError",
    "OutOfRangeError",
    "ParkVisionClient",
    "ParkVisionConfig",
    "ParkVisionConfigError",
    "ParkVisionError",
    "ParkVisionTimeoutError",
    "ParkVisionTransportError",
    "ParkingDataSource",
    "RejectedRecord",
    "Snapshot",
    "SortKey",
    "Spot",
    "SyncEngine",
    "SyncFailedError",
    "SyncFault",
    "SyncPhase",
    "SyncState",
    "UnparsableError",
    "classify_fault",
    "decode_facility",
    "decode_facility_list",
    "filter_by_category",
    "query",
    "search",
    "sort_facilities",
]
