from __future__ import annotations

import asyncio

import aiohttp
import pytest
from pydantic import BaseModel, ValidationError

from parkvision.exceptions import (
    MissingFieldError,
    ParkVisionTimeoutError,
    ParkVisionTransportError,
    UnparsableError,
)
from parkvision.faults import FaultKind, SyncFault, classify_fault


class _Strict(BaseModel):
    value: int


def _validation_error() -> ValidationError:
    try:
        _Strict.model_validate({"value": "x"})
    except ValidationError as exc:
        return exc
    raise AssertionError("expected ValidationError")


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (ParkVisionTimeoutError("slow", endpoint="/api/parking_lots"), FaultKind.TIMEOUT),
        (asyncio.TimeoutError(), FaultKind.TIMEOUT),
        (ParkVisionTransportError("refused", endpoint="/api/parking_lots"), FaultKind.NETWORK_UNAVAILABLE),
        (aiohttp.ClientConnectionError("no route"), FaultKind.NETWORK_UNAVAILABLE),
        (ConnectionResetError("reset"), FaultKind.NETWORK_UNAVAILABLE),
        (MissingFieldError("total_spots"), FaultKind.DECODE_FAILURE),
        (UnparsableError("lots", "expected a list"), FaultKind.DECODE_FAILURE),
        (_validation_error(), FaultKind.DECODE_FAILURE),
        (RuntimeError("boom"), FaultKind.UNKNOWN),
    ],
)
def test_classification(exc: BaseException, kind: FaultKind) -> None:
    assert classify_fault(exc).kind == kind


def test_http_status_becomes_server_error() -> None:
    fault = classify_fault(ParkVisionTransportError("HTTP 503", status_code=503, endpoint="/api/parking_lots"))
    assert fault.kind == FaultKind.SERVER_ERROR
    assert fault.status_code == 503
    assert fault.message.endswith("(HTTP 503)")


def test_decode_reason_is_kept() -> None:
    fault = classify_fault(MissingFieldError("total_spots"))
    assert "total_spots" in fault.reason


def test_message_independent_of_transport_text() -> None:
    first = classify_fault(ParkVisionTransportError("Cannot connect to host a:5000"))
    second = classify_fault(aiohttp.ClientConnectionError("Connection refused by b"))
    assert first.message == second.message
    assert first.reason != second.reason


def test_every_kind_has_a_message() -> None:
    for kind in FaultKind:
        assert SyncFault(kind=kind).message
