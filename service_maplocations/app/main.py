"""
Map Locations service.
"""

import json
from typing import Optional

from fastapi import Response
from fastapi.responses import PlainTextResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig

from .cache.refresher import CacheRefresher
from .cache.snapshot_store import SnapshotStore
from .exceptions import EncodeError, FetchError
from .persistence.base import LocationStore
from .persistence.mongo import MongoLocationStore


def encode_locations(locations) -> bytes:
    """Serialize locations as a compact JSON array in snapshot order."""
    try:
        return json.dumps(
            [location.to_payload() for location in locations],
            separators=(",", ":"),
            allow_nan=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(details={"error": str(e)}) from e


class MapLocationsService(BaseService):
    """Map locations service implementation."""

    def __init__(
        self,
        location_store: Optional[LocationStore] = None,
        config: Optional[ServiceConfig] = None,
    ):
        super().__init__("maplocations", 8080, config)

        self.location_store = location_store or MongoLocationStore(
            self.config.mongo_uri,
            self.config.mongo_database,
            self.config.mongo_collection,
            max_pool_size=self.config.mongo_max_pool_size,
            connect_timeout_seconds=self.config.fetch_timeout_seconds,
        )
        self.snapshot = SnapshotStore()
        self.refresher = CacheRefresher(
            self.location_store,
            self.snapshot,
            fetch_timeout=self.config.fetch_timeout_seconds,
            interval=self.config.refresh_interval_seconds,
            metrics=self.metrics,
        )

        self._setup_map_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.maplocations_service = self

    def _setup_map_routes(self):
        """Set up map-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "maplocations",
                "message": "Map Locations Service",
                "version": "1.0.0",
                "cache": self.refresher.get_stats(),
            }

        @self.app.get("/api/map")
        async def get_map_data():
            """Return every map location, filling the snapshot on first use."""
            try:
                locations = await self.refresher.handle_request()
            except FetchError as e:
                self.metrics.record_error(e.code)
                return PlainTextResponse(e.message, status_code=e.status_code)

            try:
                body = encode_locations(locations)
            except EncodeError as e:
                self.logger.error("Failed to encode map data", error=e.details.get("error"))
                self.metrics.record_error(e.code)
                return PlainTextResponse(e.message, status_code=e.status_code)

            return Response(content=body, media_type="application/json")

    async def _check_dependencies(self):
        """Check map locations service dependencies."""
        dependencies = {}

        try:
            dependencies["mongodb"] = "ok" if await self.location_store.health_check() else "error"
        except Exception:
            dependencies["mongodb"] = "error"

        return dependencies

    async def start(self):
        """Connect the storage backend and start the refresh loop.

        A StartupError from the backend propagates so the server never
        starts listening.
        """
        await self.location_store.start()
        await self.refresher.start()

        self.logger.info(
            "Map locations service started",
            refresh_interval_seconds=self.config.refresh_interval_seconds,
        )

    async def stop(self):
        """Stop map locations service components."""
        await self.refresher.stop()
        await self.location_store.stop()

        self.logger.info("Map locations service stopped")


def create_app(location_store: Optional[LocationStore] = None, config: Optional[ServiceConfig] = None):
    """Create map locations service application."""
    service = MapLocationsService(location_store, config)
    return service.app


def main():
    service = MapLocationsService()
    service.run()


if __name__ == "__main__":
    main()
