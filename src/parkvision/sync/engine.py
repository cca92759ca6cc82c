"""Sync engine: periodic and on-demand refresh of the parking snapshot.

All state lives in one immutable :class:`SyncState` that is replaced
through :meth:`SyncEngine._publish`. The engine runs on a single asyncio
event loop; the only suspension points are the data-source calls.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from parkvision.config import ParkVisionConfig
from parkvision.decoding import decode_facility, decode_facility_list
from parkvision.exceptions import ParkVisionError, SyncFailedError
from parkvision.faults import classify_fault
from parkvision.models.facility import Facility
from parkvision.models.snapshot import Snapshot
from parkvision.sync.events import SyncPhase, SyncState

_logger = logging.getLogger(__name__)

SyncObserver = Callable[[SyncState], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ParkingDataSource(Protocol):
    """Where raw facility records come from.

    :class:`~parkvision.client.ParkVisionClient` is the HTTP
    implementation; tests pass plain fakes.
    """

    async def fetch_facility_list(self) -> Any:
        ...

    async def fetch_facility(self, facility_id: int) -> Any:
        ...


class SyncEngine:
    """Owns the current parking snapshot and keeps it fresh.

    Guarantees:

    * at most one list fetch is in flight; concurrent :meth:`refresh_now`
      calls and periodic ticks join or skip it
    * snapshots are published in non-decreasing ``fetched_at`` order. The
      default clock is wall time, so after a backward clock step results
      are dropped as stale until the clock passes the current snapshot.
      Inject a steadier *clock* where that matters.
    * a failed cycle keeps the previous snapshot and only sets ``fault``
    * after :meth:`stop` nothing else is published

    Usage::

        engine = SyncEngine(client, config=config)
        engine.subscribe(on_state)
        engine.start_periodic_sync()
        ...
        await engine.stop()
    """

    def __init__(
        self,
        source: ParkingDataSource,
        *,
        config: ParkVisionConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._config = config or ParkVisionConfig()
        self._clock = clock
        self._state = SyncState()
        self._observers: list[SyncObserver] = []
        self._inflight: asyncio.Task[SyncState] | None = None
        self._timer: asyncio.Task[None] | None = None
        self._stopped = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SyncEngine:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def current_state(self) -> SyncState:
        return self._state

    def current_snapshot(self) -> Snapshot | None:
        return self._state.snapshot

    @property
    def is_periodic_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def subscribe(self, observer: SyncObserver) -> Callable[[], None]:
        """Register *observer* for every state transition.

        Returns a callable that removes the observer again.
        """
        self._observers.append(observer)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._observers.remove(observer)

        return _unsubscribe

    def _publish(self, state: SyncState) -> None:
        self._state = state
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                _logger.warning("Sync observer %r failed", observer, exc_info=True)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh_now(self) -> SyncState:
        """Run a sync cycle, or join the one already in flight.

        Returns the state published by the cycle. On a stopped engine this
        returns the last state without fetching.
        """
        if self._stopped:
            _logger.debug("refresh_now ignored; engine is stopped")
            return self._state
        return await asyncio.shield(self._begin_cycle())

    def _begin_cycle(self) -> asyncio.Task[SyncState]:
        inflight = self._inflight
        if inflight is not None and not inflight.done():
            _logger.debug("Joining in-flight sync cycle")
            return inflight

        task = asyncio.get_running_loop().create_task(
            self._run_cycle(),
            name="parkvision-sync-cycle",
        )
        # Set before publishing so an observer calling refresh_now joins this cycle.
        self._inflight = task
        previous = self._state
        self._publish(
            SyncState(
                phase=SyncPhase.FETCHING,
                snapshot=previous.snapshot,
                fault=previous.fault,
                updated_at=self._clock(),
            )
        )
        return task

    async def _run_cycle(self) -> SyncState:
        fetched_at = self._clock()
        snapshot: Snapshot | None = None
        try:
            payload = await self._source.fetch_facility_list()
            batch = decode_facility_list(payload, decoded_at=fetched_at)
            snapshot = Snapshot(
                facilities=batch.facilities,
                fetched_at=fetched_at,
                rejected_count=len(batch.rejected),
            )
        except Exception as exc:
            fault = classify_fault(exc)
            _logger.warning("Sync cycle failed: kind=%s reason=%s", fault.kind, fault.reason)
            if self._is_current():
                self._publish(
                    SyncState(
                        phase=SyncPhase.FAILED,
                        snapshot=self._state.snapshot,
                        fault=fault,
                        updated_at=self._clock(),
                    )
                )
            return self._state

        if not self._is_current():
            return self._state

        current = self._state.snapshot
        if current is not None and snapshot.fetched_at < current.fetched_at:
            _logger.debug(
                "Discarding stale snapshot fetched_at=%s (current %s)",
                snapshot.fetched_at,
                current.fetched_at,
            )
            # Only the fetching phase is cleared; snapshot and fault stand.
            previous = self._state
            self._publish(
                SyncState(
                    phase=SyncPhase.SUCCEEDED if previous.fault is None else SyncPhase.FAILED,
                    snapshot=current,
                    fault=previous.fault,
                    updated_at=self._clock(),
                )
            )
            return self._state

        _logger.debug(
            "Sync cycle succeeded: facilities=%d rejected=%d",
            len(snapshot),
            snapshot.rejected_count,
        )
        self._publish(
            SyncState(
                phase=SyncPhase.SUCCEEDED,
                snapshot=snapshot,
                fault=None,
                updated_at=self._clock(),
            )
        )
        return self._state

    def _is_current(self) -> bool:
        if self._stopped:
            _logger.debug("Discarding sync result that completed after stop()")
            return False
        return True

    # ------------------------------------------------------------------
    # Periodic sync
    # ------------------------------------------------------------------

    def start_periodic_sync(self, interval: float | None = None, *, immediate: bool = True) -> None:
        """Refresh on a fixed cadence until :meth:`stop`.

        Calling this while the timer runs is a no-op. A tick that falls while
        a cycle is still in flight is skipped, not queued.

        Parameters
        ----------
        interval
            Seconds between ticks. Defaults to ``config.sync_interval``.
        immediate
            Run the first tick right away instead of after one interval.
        """
        if self._stopped:
            raise ParkVisionError("Sync engine has been stopped")
        if self.is_periodic_running:
            _logger.debug("Periodic sync already running")
            return
        period = self._config.sync_interval if interval is None else float(interval)
        if period <= 0:
            raise ValueError(f"interval must be positive, got {period}")
        self._timer = asyncio.get_running_loop().create_task(
            self._periodic_loop(period, immediate),
            name="parkvision-sync-timer",
        )
        _logger.debug("Periodic sync started: interval=%ss", period)

    async def _periodic_loop(self, interval: float, immediate: bool) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() if immediate else loop.time() + interval
        while not self._stopped:
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            self._tick()
            next_tick += interval
            now = loop.time()
            while next_tick <= now:
                next_tick += interval

    def _tick(self) -> None:
        if self._stopped:
            return
        inflight = self._inflight
        if inflight is not None and not inflight.done():
            _logger.debug("Skipping periodic tick; previous sync cycle still in flight")
            return
        self._begin_cycle()

    async def stop(self) -> None:
        """Cancel the timer and stop publishing.

        A cycle already in flight is left to finish, but its result is
        discarded. Stopping is final.
        """
        if self._stopped:
            return
        self._stopped = True
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        _logger.debug("Sync engine stopped")

    # ------------------------------------------------------------------
    # Drill-down
    # ------------------------------------------------------------------

    async def fetch_details(self, facility_id: int) -> Facility:
        """Fetch one facility with full spot detail.

        Independent of the snapshot: nothing is published.

        Raises
        ------
        SyncFailedError
            Carrying the classified fault when the fetch or decode fails.
        """
        try:
            payload = await self._source.fetch_facility(facility_id)
            return decode_facility(payload, decoded_at=self._clock())
        except Exception as exc:
            fault = classify_fault(exc)
            _logger.warning(
                "Detail fetch failed for facility=%s: kind=%s reason=%s",
                facility_id,
                fault.kind,
                fault.reason,
            )
            raise SyncFailedError(fault) from exc
