"""Internal constants shared across the library."""

BASE_URL = "http://localhost:5000"
USER_AGENT = "parkvision/1"

LOT_LIST_ENDPOINT = "/api/parking_lots"
LOT_DETAIL_ENDPOINT = "/api/parking_lots/{lot_id}"

DEFAULT_SYNC_INTERVAL: float = 10.0
DEFAULT_REQUEST_TIMEOUT: float = 15.0

# ------------------------------------------------------------------
# Availability tiers (ratio of free spots to total spots)
# ------------------------------------------------------------------

PLENTIFUL_THRESHOLD = 0.5
LIMITED_THRESHOLD = 0.2

# Map centre used before any facility is known (San Francisco).
DEFAULT_MAP_CENTER: tuple[float, float] = (37.7749, -122.4194)
