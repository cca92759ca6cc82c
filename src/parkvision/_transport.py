"""HTTP transport for the parking data service."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from parkvision._constants import USER_AGENT
from parkvision.config import ParkVisionConfig
from parkvision.exceptions import ParkVisionTimeoutError, ParkVisionTransportError, UnparsableError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> Any:
        ...


class HttpTransport:
    """Read-only JSON transport on top of an ``aiohttp`` session."""

    def __init__(self, config: ParkVisionConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str) -> Any:
        """GET ``base_url + endpoint`` and return the decoded JSON body.

        Raises
        ------
        ParkVisionTimeoutError
            If the request exceeds ``config.request_timeout``.
        ParkVisionTransportError
            On connection failure or a non-200 status.
        UnparsableError
            If the body is not JSON.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                if resp.status != 200:
                    snippet = await resp.text(errors="replace")
                    raise ParkVisionTransportError(
                        f"HTTP {resp.status} from {endpoint}: {snippet[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise UnparsableError("body", f"Body from {endpoint} is not valid text") from exc
        except ParkVisionTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise ParkVisionTimeoutError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise ParkVisionTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise UnparsableError("body", f"Invalid JSON from {endpoint}: {text[:200]}") from exc
