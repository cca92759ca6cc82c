"""Classification of sync failures.

Presentation shows :attr:`SyncFault.message`, which depends only on the
fault kind, so the text stays the same whichever transport raised the
underlying error.
"""

from __future__ import annotations

import asyncio
import json
from enum import StrEnum

import aiohttp
from pydantic import BaseModel, ConfigDict, ValidationError

from parkvision.exceptions import DecodeError, ParkVisionTimeoutError, ParkVisionTransportError


class FaultKind(StrEnum):
    NETWORK_UNAVAILABLE = "network_unavailable"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    DECODE_FAILURE = "decode_failure"
    UNKNOWN = "unknown"


_MESSAGES: dict[FaultKind, str] = {
    FaultKind.NETWORK_UNAVAILABLE: "Unable to reach the parking service. Check your connection.",
    FaultKind.TIMEOUT: "The parking service took too long to respond.",
    FaultKind.SERVER_ERROR: "The parking service returned an error.",
    FaultKind.DECODE_FAILURE: "Received parking data could not be read.",
    FaultKind.UNKNOWN: "Something went wrong while updating parking data.",
}


class SyncFault(BaseModel):
    """A classified sync failure.

    Parameters
    ----------
    kind : FaultKind
        Taxonomy bucket.
    status_code : int or None
        HTTP status for ``SERVER_ERROR``.
    reason : str
        Diagnostic detail (decode reason, exception text). Not for display.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FaultKind
    status_code: int | None = None
    reason: str = ""

    @property
    def message(self) -> str:
        """User-facing text derived from the kind only."""
        text = _MESSAGES[self.kind]
        if self.kind == FaultKind.SERVER_ERROR and self.status_code is not None:
            return f"{text} (HTTP {self.status_code})"
        return text


def classify_fault(exc: BaseException) -> SyncFault:
    """Map any failure raised during fetch or decode onto a :class:`SyncFault`."""
    reason = str(exc) or type(exc).__name__

    if isinstance(exc, (ParkVisionTimeoutError, asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
        return SyncFault(kind=FaultKind.TIMEOUT, reason=reason)
    if isinstance(exc, ParkVisionTransportError):
        if exc.status_code is not None:
            return SyncFault(kind=FaultKind.SERVER_ERROR, status_code=exc.status_code, reason=reason)
        return SyncFault(kind=FaultKind.NETWORK_UNAVAILABLE, reason=reason)
    if isinstance(exc, aiohttp.ClientResponseError):
        return SyncFault(kind=FaultKind.SERVER_ERROR, status_code=exc.status, reason=reason)
    if isinstance(exc, (aiohttp.ClientConnectionError, ConnectionError)):
        return SyncFault(kind=FaultKind.NETWORK_UNAVAILABLE, reason=reason)
    if isinstance(exc, (DecodeError, ValidationError, json.JSONDecodeError)):
        return SyncFault(kind=FaultKind.DECODE_FAILURE, reason=reason)
    return SyncFault(kind=FaultKind.UNKNOWN, reason=reason)
