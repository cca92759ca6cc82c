"""Search and filtering over facilities.

Pure functions: they never touch the sync engine, never suspend, and return
new lists in input order. Each accepts a :class:`Snapshot` or any iterable
of facilities, so results can be fed back in.
"""

from __future__ import annotations

from collections.abc import Iterable, Set
from enum import StrEnum

from parkvision.models.facility import Category, Facility
from parkvision.models.snapshot import Snapshot

FacilitySource = Snapshot | Iterable[Facility]


class SortKey(StrEnum):
    DISTANCE = "distance"
    PRICE = "price"
    AVAILABILITY = "availability"


def _facilities(source: FacilitySource) -> list[Facility]:
    if isinstance(source, Snapshot):
        return list(source.facilities)
    return list(source)


def _matches_text(facility: Facility, needle: str) -> bool:
    return needle in facility.name.casefold() or needle in facility.address.casefold()


def search(source: FacilitySource, text: str) -> list[Facility]:
    """Case-insensitive substring match on name or address.

    Empty text matches every facility. Other text, whitespace included, is
    matched literally.
    """
    facilities = _facilities(source)
    if not text:
        return facilities
    needle = text.casefold()
    return [facility for facility in facilities if _matches_text(facility, needle)]


def filter_by_category(source: FacilitySource, categories: Set[Category]) -> list[Facility]:
    """Keep facilities whose category is in *categories*; empty means no filter."""
    facilities = _facilities(source)
    if not categories:
        return facilities
    return [facility for facility in facilities if facility.category in categories]


def query(source: FacilitySource, text: str = "", categories: Set[Category] = frozenset()) -> list[Facility]:
    """Facilities matching both *text* and *categories*."""
    return filter_by_category(search(source, text), categories)


def sort_facilities(source: FacilitySource, key: SortKey = SortKey.DISTANCE) -> list[Facility]:
    """Stable sort for list presentation.

    ``DISTANCE`` and ``PRICE`` sort ascending; ``AVAILABILITY`` puts the
    highest free-spot ratio first.
    """
    facilities = _facilities(source)
    if key == SortKey.DISTANCE:
        return sorted(facilities, key=lambda facility: facility.distance)
    if key == SortKey.PRICE:
        return sorted(facilities, key=lambda facility: facility.price_per_hour)
    return sorted(facilities, key=lambda facility: facility.availability_ratio, reverse=True)
