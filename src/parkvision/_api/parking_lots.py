"""Parking lot endpoints.

Endpoints:
  - /api/parking_lots (all lots with spots)
  - /api/parking_lots/{lot_id} (one lot with full spot detail)

Both return raw JSON; decoding belongs to :mod:`parkvision.decoding`.
"""

from __future__ import annotations

import logging
from typing import Any

from parkvision._constants import LOT_DETAIL_ENDPOINT, LOT_LIST_ENDPOINT
from parkvision._transport import Transport

_logger = logging.getLogger(__name__)


async def fetch_lot_list(transport: Transport) -> Any:
    """Fetch the raw list endpoint body (``{"lots": [...]}``)."""
    payload = await transport.get_json(LOT_LIST_ENDPOINT)
    _logger.debug(
        "Lot list: lots=%s",
        len(payload["lots"]) if isinstance(payload, dict) and isinstance(payload.get("lots"), list) else "?",
    )
    return payload


async def fetch_lot(transport: Transport, lot_id: int) -> Any:
    """Fetch the raw detail record for *lot_id*."""
    return await transport.get_json(LOT_DETAIL_ENDPOINT.format(lot_id=int(lot_id)))
