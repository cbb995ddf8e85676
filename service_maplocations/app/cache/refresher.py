"""
Refresh coordination for the map locations snapshot.

All access to the snapshot goes through one exclusive lock. A request
that finds the snapshot empty fetches synchronously while holding the
lock; a background task refetches on a fixed interval. Holding the lock
across the fetch means a slow backend call blocks every reader, including
those that could have been served from the snapshot.
"""

import asyncio
from contextlib import nullcontext
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from shared.logging import get_logger
from ..exceptions import FetchError
from ..models import MapLocation
from ..persistence.base import LocationStore
from .snapshot_store import SnapshotStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_REFRESH_INTERVAL = 20.0

TRIGGER_ON_DEMAND = "on_demand"
TRIGGER_PERIODIC = "periodic"


class CacheRefresher:
    """Decides when to fetch map locations and swaps them into the snapshot."""

    def __init__(
        self,
        backend: LocationStore,
        store: Optional[SnapshotStore] = None,
        *,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.backend = backend
        self.store = store or SnapshotStore()
        self.fetch_timeout = fetch_timeout
        self.interval = interval
        self.metrics = metrics
        self.logger = get_logger("maplocations.cache.refresher")

        self.refresh_task: Optional[asyncio.Task] = None
        self.running = False
        self._stats = {"successes": 0, "failures": 0, "ticks": 0}

    async def handle_request(self) -> Tuple[MapLocation, ...]:
        """Return the snapshot, filling it first if it is empty.

        Raises FetchError (or DecodeError) when the fill fails; the
        snapshot is left untouched in that case.
        """
        async with self.store.lock:
            if self.store.is_empty():
                self._count("cache_misses_total")
                await self._refresh_locked(TRIGGER_ON_DEMAND)
            else:
                self._count("cache_hits_total")
            return self.store.get()

    async def refresh_once(self) -> bool:
        """Run one periodic refresh. Failures are logged, never raised."""
        async with self.store.lock:
            try:
                await self._refresh_locked(TRIGGER_PERIODIC)
            except FetchError:
                return False
            return True

    async def run_periodic(self, max_ticks: Optional[int] = None):
        """Refresh every ``interval`` seconds until cancelled.

        ``max_ticks`` stops the loop after that many ticks.
        """
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            await asyncio.sleep(self.interval)
            ticks += 1
            self._stats["ticks"] += 1
            try:
                await self.refresh_once()
            except Exception as e:
                self.logger.error("Error in refresh loop", error=str(e), exc_info=True)

    async def start(self):
        """Start the periodic refresh task."""
        if self.refresh_task and not self.refresh_task.done():
            return
        self.running = True
        self.refresh_task = asyncio.create_task(self.run_periodic())
        self.logger.info(
            "Cache refresher started",
            interval_seconds=self.interval,
            fetch_timeout_seconds=self.fetch_timeout,
        )

    async def stop(self):
        """Cancel the periodic refresh task and wait for it to finish."""
        self.running = False
        if self.refresh_task:
            self.refresh_task.cancel()
            try:
                await self.refresh_task
            except asyncio.CancelledError:
                pass
            self.refresh_task = None

        self.logger.info("Cache refresher stopped")

    def get_stats(self) -> Dict[str, Any]:
        """Describe the snapshot and refresh history."""
        updated_at = self.store.updated_at
        return {
            "records": self.store.size,
            "generation": self.store.generation,
            "updated_at": updated_at.isoformat() if updated_at else None,
            "refresh_successes": self._stats["successes"],
            "refresh_failures": self._stats["failures"],
            "ticks": self._stats["ticks"],
            "interval_seconds": self.interval,
            "fetch_timeout_seconds": self.fetch_timeout,
            "running": self.running,
        }

    async def _refresh_locked(self, trigger: str):
        """Fetch and replace the snapshot. Caller must hold the store lock."""
        try:
            with self._timed(trigger):
                records = await self._fetch()
        except FetchError as e:
            self._stats["failures"] += 1
            self._count("cache_refresh_total", trigger=trigger, status="error")
            self.logger.error(
                "Cache refresh failed",
                trigger=trigger,
                code=e.code,
                error=e.message,
                details=e.details,
            )
            raise

        self.store.replace(records)
        self._stats["successes"] += 1
        self._count("cache_refresh_total", trigger=trigger, status="success")
        if self.metrics:
            self.metrics.set_gauge("cache_snapshot_records", self.store.size)
        self.logger.info(
            "Cache updated",
            trigger=trigger,
            records=self.store.size,
            generation=self.store.generation,
        )

    async def _fetch(self) -> List[MapLocation]:
        """Call the backend under a fresh timeout."""
        try:
            return list(await asyncio.wait_for(
                self.backend.find_all(self.fetch_timeout),
                timeout=self.fetch_timeout,
            ))
        except asyncio.TimeoutError as e:
            raise FetchError(details={"error": "timeout", "timeout_seconds": self.fetch_timeout}) from e
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(details={"error": str(e)}) from e

    def _count(self, metric_name: str, **labels):
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)

    def _timed(self, trigger: str):
        if self.metrics:
            return self.metrics.time_operation("cache_refresh_duration_seconds", trigger=trigger)
        return nullcontext()
