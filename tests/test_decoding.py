"""Tests for wire record decoding and the decode error taxonomy."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import pytest

from parkvision.decoding import decode_facility, decode_facility_list
from parkvision.exceptions import DecodeError, MissingFieldError, OutOfRangeError, UnparsableError
from parkvision.models import Category

DECODED_AT = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def _spot(spot_id: int, **overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": spot_id,
        "number": spot_id + 100,
        "is_occupied": spot_id % 2 == 0,
        "confidence": 0.9,
        "last_updated": "2026-03-01T09:29:00Z",
    }
    record.update(overrides)
    return record


def _lot(lot_id: int = 1, **overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": lot_id,
        "name": f"Lot {lot_id}",
        "address": f"{lot_id} Market St",
        "latitude": 37.77,
        "longitude": -122.42,
        "total_spots": 4,
        "available_spots": 2,
        "price_per_hour": 2.5,
        "rating": 4.1,
        "type": "Lot",
        "distance": 1.2,
        "spots": [_spot(1), _spot(2)],
    }
    record.update(overrides)
    return record


class TestDecodeFacility:
    def test_full_record(self) -> None:
        lot = decode_facility(_lot(type="Street"), decoded_at=DECODED_AT)
        assert lot.id == 1
        assert lot.category == Category.STREET
        assert [spot.id for spot in lot.spots] == [1, 2]
        assert lot.spots[1].occupied is True
        assert not lot.is_degraded

    def test_json_bytes(self) -> None:
        lot = decode_facility(json.dumps(_lot(lot_id=5)).encode(), decoded_at=DECODED_AT)
        assert lot.id == 5

    def test_invalid_json(self) -> None:
        with pytest.raises(UnparsableError) as exc_info:
            decode_facility(b"{not json", decoded_at=DECODED_AT)
        assert exc_info.value.field == "record"

    def test_extra_fields_ignored(self) -> None:
        lot = decode_facility(_lot(operator="CityPark", camera_count=3), decoded_at=DECODED_AT)
        assert not hasattr(lot, "operator")

    @pytest.mark.parametrize("field", ["id", "name", "latitude", "longitude", "total_spots", "available_spots"])
    def test_missing_required_field(self, field: str) -> None:
        record = _lot()
        del record[field]
        with pytest.raises(MissingFieldError) as exc_info:
            decode_facility(record, decoded_at=DECODED_AT)
        assert exc_info.value.field == field

    def test_null_required_field_counts_as_missing(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            decode_facility(_lot(total_spots=None), decoded_at=DECODED_AT)
        assert exc_info.value.field == "total_spots"

    def test_negative_count_rejected(self) -> None:
        with pytest.raises(OutOfRangeError) as exc_info:
            decode_facility(_lot(total_spots=-1, available_spots=0), decoded_at=DECODED_AT)
        assert exc_info.value.field == "total_spots"

    def test_available_above_total_rejected(self) -> None:
        with pytest.raises(OutOfRangeError) as exc_info:
            decode_facility(_lot(total_spots=4, available_spots=5), decoded_at=DECODED_AT)
        assert exc_info.value.field == "available_spots"

    def test_latitude_out_of_range(self) -> None:
        with pytest.raises(OutOfRangeError) as exc_info:
            decode_facility(_lot(latitude=95.0), decoded_at=DECODED_AT)
        assert exc_info.value.field == "latitude"

    def test_wrong_type_is_unparsable(self) -> None:
        with pytest.raises(UnparsableError) as exc_info:
            decode_facility(_lot(name=42), decoded_at=DECODED_AT)
        assert exc_info.value.field == "name"

    def test_non_mapping_record(self) -> None:
        with pytest.raises(UnparsableError):
            decode_facility([1, 2, 3], decoded_at=DECODED_AT)

    def test_spot_error_names_nested_field(self) -> None:
        bad_spot = _spot(2)
        del bad_spot["is_occupied"]
        with pytest.raises(MissingFieldError) as exc_info:
            decode_facility(_lot(spots=[_spot(1), bad_spot]), decoded_at=DECODED_AT)
        assert exc_info.value.field == "spots[1].occupied"

    def test_duplicate_spot_ids_rejected(self) -> None:
        with pytest.raises(UnparsableError) as exc_info:
            decode_facility(_lot(spots=[_spot(1), _spot(1)]), decoded_at=DECODED_AT)
        assert exc_info.value.field == "spots"

    def test_confidence_clamped_not_rejected(self) -> None:
        lot = decode_facility(_lot(spots=[_spot(1, confidence=3.0)]), decoded_at=DECODED_AT)
        assert lot.spots[0].confidence == 1.0

    def test_malformed_confidence_keeps_facility(self) -> None:
        batch = decode_facility_list(
            [_lot(1, spots=[_spot(1), _spot(2, confidence="high")]), _lot(2)],
            decoded_at=DECODED_AT,
        )
        assert [lot.id for lot in batch.facilities] == [1, 2]
        assert batch.rejected == ()
        spots = batch.facilities[0].spots
        assert spots[0].confidence == 0.9
        assert spots[1].degraded_fields == ("confidence",)
        assert batch.facilities[0].is_degraded

    def test_bad_spot_timestamp_degrades_spot(self) -> None:
        lot = decode_facility(_lot(spots=[_spot(1, last_updated="not-a-date")]), decoded_at=DECODED_AT)
        assert lot.spots[0].observed_at == DECODED_AT
        assert lot.spots[0].degraded_fields == ("observed_at",)
        assert lot.is_degraded

    def test_malformed_optional_numbers_degrade(self) -> None:
        lot = decode_facility(_lot(price_per_hour=-4, distance="far", rating="n/a"), decoded_at=DECODED_AT)
        assert lot.price_per_hour == 0.0
        assert lot.distance == 0.0
        assert lot.rating == 0.0
        assert set(lot.degraded_fields) == {"price_per_hour", "distance", "rating"}

    def test_numeric_strings_accepted(self) -> None:
        lot = decode_facility(_lot(total_spots="4", price_per_hour="2.5"), decoded_at=DECODED_AT)
        assert lot.total_spots == 4
        assert lot.price_per_hour == 2.5


class TestDecodeFacilityList:
    def test_envelope(self) -> None:
        batch = decode_facility_list({"lots": [_lot(1), _lot(2)]}, decoded_at=DECODED_AT)
        assert [lot.id for lot in batch.facilities] == [1, 2]
        assert batch.rejected == ()

    def test_bare_list(self) -> None:
        batch = decode_facility_list([_lot(3)], decoded_at=DECODED_AT)
        assert [lot.id for lot in batch.facilities] == [3]

    def test_missing_total_spots_dropped_siblings_kept(self) -> None:
        broken = _lot(2)
        del broken["total_spots"]

        batch = decode_facility_list({"lots": [_lot(1), broken, _lot(3)]}, decoded_at=DECODED_AT)

        assert [lot.id for lot in batch.facilities] == [1, 3]
        assert len(batch.rejected) == 1
        rejected = batch.rejected[0]
        assert rejected.index == 1
        assert rejected.facility_id == 2
        assert isinstance(rejected.error, MissingFieldError)
        assert rejected.error.field == "total_spots"

    def test_duplicate_facility_id_first_wins(self) -> None:
        batch = decode_facility_list(
            {"lots": [_lot(1, name="First"), _lot(1, name="Second"), _lot(2)]},
            decoded_at=DECODED_AT,
        )
        assert [lot.name for lot in batch.facilities] == ["First", "Lot 2"]
        assert batch.rejected[0].error.field == "id"

    def test_empty_list(self) -> None:
        batch = decode_facility_list({"lots": []}, decoded_at=DECODED_AT)
        assert batch.facilities == ()

    def test_malformed_envelope(self) -> None:
        with pytest.raises(UnparsableError) as exc_info:
            decode_facility_list({"parking": []}, decoded_at=DECODED_AT)
        assert exc_info.value.field == "lots"

    def test_all_records_rejected_is_total_failure(self) -> None:
        with pytest.raises(DecodeError):
            decode_facility_list({"lots": [{"id": 1}, {"name": "x"}]}, decoded_at=DECODED_AT)

    def test_json_text(self) -> None:
        batch = decode_facility_list(json.dumps({"lots": [_lot(4)]}), decoded_at=DECODED_AT)
        assert batch.facilities[0].id == 4

    def test_shared_decode_time(self) -> None:
        batch = decode_facility_list(
            {"lots": [_lot(1, spots=[_spot(1, last_updated=None)])]},
            decoded_at=DECODED_AT,
        )
        assert batch.facilities[0].spots[0].observed_at == DECODED_AT
