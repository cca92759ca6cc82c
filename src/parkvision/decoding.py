"""Wire record decoding.

Turns upstream facility records (JSON text, bytes or already-parsed dicts)
into :class:`~parkvision.models.Facility` objects and maps pydantic
validation failures onto the :class:`~parkvision.exceptions.DecodeError`
taxonomy. Batch decoding drops bad records instead of failing the batch.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from parkvision.exceptions import DecodeError, MissingFieldError, OutOfRangeError, UnparsableError
from parkvision.models.facility import Facility

_logger = logging.getLogger(__name__)

_RANGE_ERROR_TYPES: frozenset[str] = frozenset(
    {
        "greater_than",
        "greater_than_equal",
        "less_than",
        "less_than_equal",
        "out_of_range",
    }
)


@dataclass(frozen=True, slots=True)
class RejectedRecord:
    """An upstream record dropped from a batch, with the reason."""

    index: int
    error: DecodeError
    facility_id: Any = None


@dataclass(frozen=True, slots=True)
class DecodedBatch:
    """Result of decoding the list endpoint."""

    facilities: tuple[Facility, ...]
    rejected: tuple[RejectedRecord, ...] = ()


def _field_path(loc: Sequence[int | str]) -> str:
    """Render a pydantic error location as ``spots[2].occupied``."""
    parts: list[str] = []
    for item in loc:
        if isinstance(item, int) and parts:
            parts[-1] = f"{parts[-1]}[{item}]"
        else:
            parts.append(str(item))
    return ".".join(parts) or "record"


def _to_decode_error(exc: ValidationError) -> DecodeError:
    """Pick the most significant validation error and map it to the taxonomy.

    Missing required fields win over range errors, which win over shape
    errors, so a record missing ``total_spots`` always reports exactly that.
    """
    errors = exc.errors()
    for error in errors:
        if error["type"] == "missing":
            return MissingFieldError(_field_path(error["loc"]))
    for error in errors:
        if error["type"] in _RANGE_ERROR_TYPES:
            return OutOfRangeError(_field_path(error["loc"]), error["msg"])
    if errors:
        first = errors[0]
        return UnparsableError(_field_path(first["loc"]), first["msg"])
    return UnparsableError("record", str(exc))


def _load_json(raw: str | bytes | bytearray, field: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise UnparsableError(field, f"payload is not JSON: {exc}") from exc


def decode_facility(raw: Any, *, decoded_at: datetime | None = None) -> Facility:
    """Decode one facility record.

    Parameters
    ----------
    raw
        A mapping, or JSON text/bytes holding one.
    decoded_at
        Timestamp substituted for unparsable spot timestamps. Defaults to now.

    Raises
    ------
    DecodeError
        ``MissingFieldError``, ``OutOfRangeError`` or ``UnparsableError``
        naming the offending field.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        raw = _load_json(raw, "record")
    context = {"decoded_at": decoded_at or datetime.now(UTC)}
    try:
        return Facility.model_validate(raw, context=context)
    except ValidationError as exc:
        raise _to_decode_error(exc) from exc


def decode_facility_list(payload: Any, *, decoded_at: datetime | None = None) -> DecodedBatch:
    """Decode the list endpoint body.

    Accepts ``{"lots": [...]}`` or a bare list. Invalid records and
    duplicate ids are dropped and reported in ``rejected``; valid siblings
    are kept in upstream order.

    Raises
    ------
    UnparsableError
        If the envelope is malformed, or if every record of a non-empty
        list was rejected.
    """
    if isinstance(payload, (str, bytes, bytearray)):
        payload = _load_json(payload, "lots")

    records: Any
    if isinstance(payload, dict):
        records = payload.get("lots")
    else:
        records = payload
    if not isinstance(records, list):
        raise UnparsableError("lots", "expected a list of facility records")

    decoded_at = decoded_at or datetime.now(UTC)
    facilities: list[Facility] = []
    rejected: list[RejectedRecord] = []
    seen_ids: set[int] = set()

    for index, record in enumerate(records):
        facility_id = record.get("id") if isinstance(record, dict) else None
        try:
            facility = decode_facility(record, decoded_at=decoded_at)
            if facility.id in seen_ids:
                raise UnparsableError("id", f"duplicate facility id {facility.id}")
        except DecodeError as exc:
            _logger.warning("Dropping facility record index=%d id=%r: %s", index, facility_id, exc)
            rejected.append(RejectedRecord(index=index, error=exc, facility_id=facility_id))
            continue
        seen_ids.add(facility.id)
        facilities.append(facility)

    if records and not facilities:
        raise UnparsableError(
            "lots",
            f"all {len(records)} facility records rejected (first: {rejected[0].error})",
        )

    _logger.debug("Decoded %d facilities, rejected %d", len(facilities), len(rejected))
    return DecodedBatch(facilities=tuple(facilities), rejected=tuple(rejected))
