"""High-level async client for the parking data service."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from parkvision._api import parking_lots as _lots_api
from parkvision._transport import HttpTransport
from parkvision.config import ParkVisionConfig
from parkvision.exceptions import ParkVisionError

_logger = logging.getLogger(__name__)


class ParkVisionClient:
    """Async client for the parking data service.

    Implements the :class:`~parkvision.sync.engine.ParkingDataSource`
    protocol, so it can be handed straight to a sync engine.

    Usage::

        async with ParkVisionClient(config) as client:
            async with SyncEngine(client, config=config) as engine:
                await engine.refresh_now()
    """

    def __init__(
        self,
        config: ParkVisionConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or ParkVisionConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: HttpTransport | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ParkVisionClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    @property
    def config(self) -> ParkVisionConfig:
        return self._config

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise ParkVisionError("Client not initialized. Use 'async with ParkVisionClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def fetch_facility_list(self) -> Any:
        """Fetch the raw list of all facilities."""
        return await _lots_api.fetch_lot_list(self._require_transport())

    async def fetch_facility(self, facility_id: int) -> Any:
        """Fetch the raw detail record of one facility."""
        return await _lots_api.fetch_lot(self._require_transport(), facility_id)
