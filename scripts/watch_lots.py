#!/usr/bin/env python3
"""Watch live parking availability from the command line.

Starts a sync engine against the configured parking service and prints a
summary line per facility on every successful cycle, or the fault message
on failure.

Usage
-----
Set environment variables and run::

    export PARKVISION_BASE_URL="http://192.168.1.100:5000"
    python scripts/watch_lots.py

Options::

    --interval SECONDS   Refresh cadence (default: PARKVISION_SYNC_INTERVAL or 10)
    --search TEXT        Only show facilities matching TEXT
    --category NAME      Only show this category (repeatable: Garage, Street, Lot)
    --once               Run a single refresh and exit
    --details ID         Fetch one facility with per-spot detail and exit
    --verbose            Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from parkvision import (  # noqa: E402
    Category,
    Facility,
    ParkVisionClient,
    ParkVisionConfig,
    SyncEngine,
    SyncFailedError,
    SyncPhase,
    SyncState,
    query,
)
from parkvision.display import format_distance, format_price, spot_status_label, time_ago  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _facility_line(facility: Facility) -> str:
    flag = " (degraded)" if facility.is_degraded else ""
    return (
        f"  [{facility.availability_tier.value:>9}] {facility.name}: "
        f"{facility.available_spots}/{facility.total_spots} free, "
        f"{format_distance(facility.distance)}, {format_price(facility.price_per_hour)}{flag}"
    )


def _print_details(facility: Facility) -> None:
    print(_facility_line(facility))
    print(f"  {facility.address}")
    for spot in facility.spots:
        print(
            f"    #{spot.number:<4} {spot_status_label(spot):<8} "
            f"confidence={spot.confidence:.2f} checked {time_ago(spot.observed_at)}"
        )


def _make_printer(text: str, categories: set[Category]):
    def _on_state(state: SyncState) -> None:
        if state.phase == SyncPhase.FAILED and state.fault is not None:
            print(f"!! {state.fault.message}", file=sys.stderr)
            return
        if state.phase != SyncPhase.SUCCEEDED or state.snapshot is None:
            return
        snapshot = state.snapshot
        matches = query(snapshot, text, categories)
        print(
            f"\n{len(matches)}/{len(snapshot)} facilities, "
            f"{snapshot.total_available} free spots, updated {time_ago(snapshot.fetched_at)}"
        )
        for facility in matches:
            print(_facility_line(facility))

    return _on_state


async def main() -> None:
    parser = argparse.ArgumentParser(description="Watch live parking availability.")
    parser.add_argument("--interval", type=float, help="Refresh cadence in seconds")
    parser.add_argument("--search", default="", help="Only show facilities matching TEXT")
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        choices=[category.value for category in Category],
        help="Only show this category (repeatable)",
    )
    parser.add_argument("--once", action="store_true", help="Run a single refresh and exit")
    parser.add_argument("--details", type=int, metavar="ID", help="Show per-spot detail for one facility")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {"sync_interval": args.interval} if args.interval is not None else {}
    config = ParkVisionConfig.from_env(**overrides)
    categories = {Category(value) for value in args.category}

    async with ParkVisionClient(config) as client, SyncEngine(client, config=config) as engine:
        if args.details is not None:
            try:
                _print_details(await engine.fetch_details(args.details))
            except SyncFailedError as exc:
                print(f"!! {exc.fault.message}", file=sys.stderr)
                sys.exit(1)
            return

        engine.subscribe(_make_printer(args.search, categories))
        if args.once:
            state = await engine.refresh_now()
            if state.phase == SyncPhase.FAILED:
                sys.exit(1)
            return

        engine.start_periodic_sync()
        try:
            await asyncio.Event().wait()
        finally:
            await engine.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
