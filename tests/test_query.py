from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from parkvision.models import Category, Facility, Snapshot
from parkvision.query import SortKey, filter_by_category, query, search, sort_facilities


def _facility(lot_id: int, name: str, address: str, category: str, **overrides: Any) -> Facility:
    record: dict[str, Any] = {
        "id": lot_id,
        "name": name,
        "address": address,
        "latitude": 37.78,
        "longitude": -122.41,
        "total_spots": 10,
        "available_spots": 5,
        "type": category,
    }
    record.update(overrides)
    return Facility.model_validate(record)


def _snapshot() -> Snapshot:
    return Snapshot(
        facilities=(
            _facility(1, "Union Square Garage", "333 Post St", "Garage", distance=0.8, price_per_hour=6.0),
            _facility(2, "Mission Lot", "2100 Mission St", "Lot", distance=1.5, price_per_hour=2.0, available_spots=9),
            _facility(3, "Valencia Street", "Valencia St & 16th", "Street", distance=1.1, price_per_hour=3.0),
            _facility(4, "Ferry Building Lot", "1 Ferry Building", "Lot", distance=0.3, price_per_hour=8.0, available_spots=1),
        ),
        fetched_at=datetime(2026, 2, 1, tzinfo=UTC),
    )


def _ids(facilities: list[Facility]) -> list[int]:
    return [facility.id for facility in facilities]


def test_empty_query_returns_everything_in_order() -> None:
    snapshot = _snapshot()
    assert query(snapshot, "", set()) == list(snapshot.facilities)


def test_search_is_case_insensitive_on_name() -> None:
    assert _ids(search(_snapshot(), "mission")) == [2]


def test_search_matches_address() -> None:
    assert _ids(search(_snapshot(), "POST ST")) == [1]


def test_search_whitespace_is_matched_literally() -> None:
    assert _ids(search(_snapshot(), "   ")) == []
    assert _ids(search(_snapshot(), " mission")) == [2]


def test_filter_by_category_preserves_order() -> None:
    assert _ids(filter_by_category(_snapshot(), {Category.LOT})) == [2, 4]


def test_filter_with_several_categories() -> None:
    assert _ids(filter_by_category(_snapshot(), {Category.GARAGE, Category.STREET})) == [1, 3]


def test_empty_category_set_is_no_filter() -> None:
    assert _ids(filter_by_category(_snapshot(), frozenset())) == [1, 2, 3, 4]


def test_query_combines_text_and_category() -> None:
    assert _ids(query(_snapshot(), "lot", {Category.LOT})) == [2, 4]
    assert _ids(query(_snapshot(), "st", {Category.STREET})) == [3]
    assert query(_snapshot(), "mission", {Category.GARAGE}) == []


def test_query_is_idempotent() -> None:
    snapshot = _snapshot()
    once = query(snapshot, "st", {Category.LOT, Category.STREET})
    assert query(once, "st", {Category.LOT, Category.STREET}) == once


def test_query_does_not_touch_snapshot() -> None:
    snapshot = _snapshot()
    before = snapshot.facilities
    query(snapshot, "garage", {Category.GARAGE})
    assert snapshot.facilities is before


def test_sort_by_distance() -> None:
    assert _ids(sort_facilities(_snapshot(), SortKey.DISTANCE)) == [4, 1, 3, 2]


def test_sort_by_price() -> None:
    assert _ids(sort_facilities(_snapshot(), SortKey.PRICE)) == [2, 3, 1, 4]


def test_sort_by_availability_highest_first() -> None:
    assert _ids(sort_facilities(_snapshot(), SortKey.AVAILABILITY)) == [2, 1, 3, 4]
