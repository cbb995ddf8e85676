"""
Unit tests for Map Locations main service.
"""

import pytest
from fastapi.testclient import TestClient
from prometheus_client.parser import text_string_to_metric_families

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_maplocations.app.exceptions import DecodeError, FetchError, StartupError
from service_maplocations.app.main import MapLocationsService, create_app
from service_maplocations.app.models import MapLocation
from service_maplocations.app.persistence.mongo import MongoLocationStore
from shared.config import get_config


class TestMapLocationsService:
    """Test cases for MapLocationsService."""

    @pytest.fixture
    def config(self):
        """Service config with a refresh interval longer than any test."""
        return get_config(
            "maplocations",
            8080,
            mongo_uri="mongodb://localhost:27017",
            refresh_interval_seconds=3600,
            fetch_timeout_seconds=1,
        )

    @pytest.fixture
    def backend(self, fake_store_factory):
        return fake_store_factory([[
            MapLocation(id="1", location="Town", xy={"x": 1.5, "y": 2.5}),
        ]])

    @pytest.fixture
    def client(self, backend, config):
        """Create test client with the service lifespan running."""
        with TestClient(create_app(backend, config)) as client:
            yield client

    def test_service_initialization(self, backend, config):
        service = MapLocationsService(backend, config)

        assert service.service_name == "maplocations"
        assert service.port == 8080
        assert service.location_store is backend
        assert service.refresher.store is service.snapshot
        assert service.refresher.interval == 3600
        assert service.app.state.maplocations_service is service

    def test_default_backend_is_mongo(self, config):
        service = MapLocationsService(config=config)

        assert isinstance(service.location_store, MongoLocationStore)
        assert service.location_store.database_name == "soulforged-db"
        assert service.location_store.collection_name == "maplocations"

    def test_get_map_data(self, client, backend):
        """Records are served as a compact JSON array."""
        response = client.get("/api/map")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.content == b'[{"id":"1","location":"Town","xy":{"x":1.5,"y":2.5}}]'
        assert backend.calls == 1

    def test_whole_number_coordinates_served_without_fraction(self, fake_store_factory, config):
        backend = fake_store_factory([[
            MapLocation(id="1", location="Gate", xy={"x": 10, "y": 20}),
        ]])

        with TestClient(create_app(backend, config)) as client:
            response = client.get("/api/map")

        assert response.status_code == 200
        assert response.content == b'[{"id":"1","location":"Gate","xy":{"x":10,"y":20}}]'

    def test_repeated_reads_identical(self, client, backend):
        first = client.get("/api/map").content
        second = client.get("/api/map").content

        assert first == second
        assert backend.calls == 1

    def test_fetch_failure_returns_plain_text_500(self, fake_store_factory, config):
        backend = fake_store_factory([FetchError("Failed to fetch map data from MongoDB")])

        with TestClient(create_app(backend, config)) as client:
            response = client.get("/api/map")

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Failed to fetch map data from MongoDB"

    def test_decode_failure_returns_plain_text_500(self, fake_store_factory, config):
        backend = fake_store_factory([DecodeError()])

        with TestClient(create_app(backend, config)) as client:
            response = client.get("/api/map")

        assert response.status_code == 500
        assert response.text == "Failed to decode map data"

    def test_encode_failure_returns_plain_text_500(self, fake_store_factory, config):
        """Non-finite coordinates cannot be encoded as JSON."""
        backend = fake_store_factory([[
            MapLocation(id="1", location="Void", xy={"x": float("nan"), "y": 0.0}),
        ]])

        with TestClient(create_app(backend, config)) as client:
            response = client.get("/api/map")

        assert response.status_code == 500
        assert response.text == "Failed to encode map data as JSON"

    def test_failed_fill_is_retried_by_next_request(self, fake_store_factory, config):
        backend = fake_store_factory([
            FetchError(),
            [MapLocation(id="1", location="Town", xy={"x": 1.5, "y": 2.5})],
        ])

        with TestClient(create_app(backend, config)) as client:
            assert client.get("/api/map").status_code == 500
            response = client.get("/api/map")

        assert response.status_code == 200
        assert response.json() == [{"id": "1", "location": "Town", "xy": {"x": 1.5, "y": 2.5}}]
        assert backend.calls == 2

    def test_root_endpoint(self, client):
        client.get("/api/map")

        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "maplocations"
        assert data["cache"]["records"] == 1
        assert data["cache"]["generation"] == 1
        assert data["cache"]["running"] is True

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "maplocations"
        assert data["status"] == "ok"
        assert data["dependencies"]["mongodb"] == "ok"

    def test_health_degraded_when_backend_unhealthy(self, client, backend):
        backend.healthy = False

        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["dependencies"]["mongodb"] == "error"

    def test_metrics_endpoint(self, client):
        client.get("/api/map")

        response = client.get("/metrics")

        assert response.status_code == 200
        samples = {
            (sample.name, tuple(sorted(sample.labels.items()))): sample.value
            for family in text_string_to_metric_families(response.text)
            for sample in family.samples
        }
        key = ("cache_refresh_total", (("status", "success"), ("trigger", "on_demand")))
        assert samples[key] == 1.0
        assert samples[("cache_misses_total", ())] == 1.0

        metrics = client.app.state.maplocations_service.metrics
        assert metrics.get_sample_value(
            "cache_refresh_total", {"trigger": "on_demand", "status": "success"}
        ) == 1.0

    def test_request_id_echoed(self, client):
        response = client.get("/api/map", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"

    def test_lifespan_starts_and_stops_components(self, backend, config):
        app = create_app(backend, config)
        service = app.state.maplocations_service

        with TestClient(app):
            assert backend.started is True
            assert service.refresher.refresh_task is not None

        assert backend.stopped is True
        assert service.refresher.refresh_task is None

    def test_startup_error_prevents_serving(self, fake_store_factory, config):
        backend = fake_store_factory()

        async def unreachable():
            raise StartupError("Failed to connect to MongoDB")

        backend.start = unreachable

        with pytest.raises(StartupError):
            with TestClient(create_app(backend, config)):
                pass

    def test_missing_mongo_uri_is_fatal(self, monkeypatch):
        monkeypatch.delenv("MONGO_URI", raising=False)
        monkeypatch.delenv("MAP_MONGO_URI", raising=False)
        config = get_config("maplocations", 8080)

        with pytest.raises(StartupError) as exc_info:
            with TestClient(create_app(config=config)):
                pass

        assert exc_info.value.message == "MONGO_URI environment variable is not set"
