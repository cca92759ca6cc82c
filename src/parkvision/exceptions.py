"""Custom exception hierarchy for parkvision."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from parkvision.faults import SyncFault


class ParkVisionError(Exception):
    """Base exception for all parkvision errors."""


class ParkVisionConfigError(ParkVisionError):
    """Invalid or missing configuration."""


class ParkVisionTransportError(ParkVisionError):
    """HTTP-level failure (network, non-200 status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ParkVisionTimeoutError(ParkVisionTransportError):
    """The request did not complete within the configured timeout."""


class DecodeError(ParkVisionError):
    """A wire record could not be turned into a domain object.

    ``field`` names the offending field using internal (snake_case) names,
    with nested spot fields written as ``spots[2].occupied``.
    """

    def __init__(self, field: str, message: str = "") -> None:
        self.field = field
        super().__init__(message or f"cannot decode field {field!r}")


class MissingFieldError(DecodeError):
    """A required field is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(field, f"missing required field {field!r}")


class OutOfRangeError(DecodeError):
    """A numeric field holds a value outside its allowed range."""


class UnparsableError(DecodeError):
    """A field (or the whole payload) has the wrong shape or type."""


class SyncFailedError(ParkVisionError):
    """A fetch-and-decode cycle failed.

    Carries the classified :class:`~parkvision.faults.SyncFault` so callers
    can present a stable message.
    """

    def __init__(self, fault: SyncFault) -> None:
        self.fault = fault
        super().__init__(fault.message)
