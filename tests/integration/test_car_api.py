"""Integration tests for car API endpoints."""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import DataError, IntegrityError, OperationalError, TimeoutError as PoolTimeoutError

from car_registry.infrastructure.database.connection import DatabaseManager
from car_registry.infrastructure.services import ServiceFactory, set_service_factory
from car_registry.presentation.api.main import create_app
from car_registry.presentation.api.middleware import CORRELATION_ID_HEADER

pytestmark = pytest.mark.asyncio

HONDA_CIVIC = {"year": 2020, "make": "Honda", "model": "Civic", "deleted_flag": 0}


@pytest_asyncio.fixture
async def client(database_manager):
    """HTTP client for an app backed by the SQLite test database."""
    set_service_factory(ServiceFactory(database_manager))

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    set_service_factory(None)


@pytest_asyncio.fixture
async def failing_client():
    """HTTP client whose car service raises whatever the test configures."""
    car_service = AsyncMock()
    factory = MagicMock()
    factory.get_car_service.return_value.__aenter__ = AsyncMock(return_value=car_service)
    factory.get_car_service.return_value.__aexit__ = AsyncMock(return_value=None)
    set_service_factory(factory)

    transport = ASGITransport(app=create_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac, car_service

    set_service_factory(None)


async def active_ids(client):
    response = await client.get("/car")
    assert response.status_code == 200
    return [car["id"] for car in response.json()["cars"]]


class TestCarAPI:
    """End-to-end behavior of the /car endpoints."""

    async def test_create_car(self, client):
        response = await client.post("/car", json=HONDA_CIVIC)

        assert response.status_code == 200
        data = response.json()
        assert isinstance(data["id"], int)
        assert {k: data[k] for k in HONDA_CIVIC} == HONDA_CIVIC

    async def test_created_ids_are_unique(self, client):
        ids = set()
        for year in range(2010, 2015):
            response = await client.post("/car", json={**HONDA_CIVIC, "year": year})
            ids.add(response.json()["id"])

        assert len(ids) == 5

    async def test_create_defaults_deleted_flag_to_active(self, client):
        response = await client.post("/car", json={"year": 2018, "make": "Ford", "model": "Focus"})

        assert response.status_code == 200
        assert response.json()["deleted_flag"] == 0

    async def test_create_strips_whitespace(self, client):
        response = await client.post("/car", json={**HONDA_CIVIC, "make": "  Honda "})

        assert response.json()["make"] == "Honda"

    async def test_list_only_returns_active_cars(self, client):
        active = (await client.post("/car", json=HONDA_CIVIC)).json()
        deleted = (await client.post("/car", json={**HONDA_CIVIC, "deleted_flag": 1})).json()

        response = await client.get("/car")

        assert response.status_code == 200
        cars = response.json()["cars"]
        assert active in cars
        assert deleted["id"] not in [car["id"] for car in cars]
        assert all(car["deleted_flag"] == 0 for car in cars)

    async def test_list_empty(self, client):
        response = await client.get("/car")

        assert response.status_code == 200
        assert response.json() == {"cars": []}

    async def test_delete_toggles_visibility(self, client):
        car_id = (await client.post("/car", json=HONDA_CIVIC)).json()["id"]

        response = await client.delete(f"/car/{car_id}")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert car_id not in await active_ids(client)

        response = await client.delete(f"/car/{car_id}")
        assert response.json() == {"success": True}
        assert car_id in await active_ids(client)

    async def test_delete_unknown_car_still_succeeds(self, client):
        response = await client.delete("/car/9999")

        assert response.status_code == 200
        assert response.json() == {"success": True}

    async def test_delete_non_numeric_id_rejected(self, client):
        response = await client.delete("/car/abc")

        assert response.status_code == 422
        assert response.json()["type"] == "validation_error"

    async def test_update_year(self, client):
        car_id = (await client.post("/car", json=HONDA_CIVIC)).json()["id"]

        response = await client.put("/car", json={"id": car_id, "year": 2021})

        assert response.status_code == 200
        assert response.json() == {"id": car_id, "year": 2021, "make": "Honda", "model": "Civic", "deleted_flag": 0}

    async def test_update_year_keeps_deleted_flag(self, client):
        car_id = (await client.post("/car", json={**HONDA_CIVIC, "deleted_flag": 1})).json()["id"]

        response = await client.put("/car", json={"id": car_id, "year": 2022})

        assert response.json()["deleted_flag"] == 1
        assert response.json()["make"] == "Honda"

    async def test_update_unknown_car_returns_not_found(self, client):
        response = await client.put("/car", json={"id": 9999, "year": 2021})

        assert response.status_code == 404
        assert response.json() == {"detail": "Car not found: 9999", "type": "not_found"}

    @pytest.mark.parametrize("payload", [
        {"make": "Honda", "model": "Civic", "deleted_flag": 0},
        {**HONDA_CIVIC, "year": "twenty twenty"},
        {**HONDA_CIVIC, "year": 1500},
        {**HONDA_CIVIC, "make": ""},
        {**HONDA_CIVIC, "model": "x" * 51},
        {**HONDA_CIVIC, "deleted_flag": 2},
    ])
    async def test_create_rejects_invalid_payload(self, client, pool_usage, payload):
        response = await client.post("/car", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "validation_error"
        assert isinstance(body["detail"], list)
        assert pool_usage.checkouts == 0

    @pytest.mark.parametrize("payload", [
        {"year": 2021},
        {"id": 1},
        {"id": 0, "year": 2021},
        {"id": 1, "year": 3000},
    ])
    async def test_update_rejects_invalid_payload(self, client, payload):
        response = await client.put("/car", json=payload)

        assert response.status_code == 422
        assert response.json()["type"] == "validation_error"


class TestConnectionScoping:
    """Every request returns the connection it checked out."""

    async def test_each_request_checks_out_one_connection(self, client, pool_usage):
        car_id = (await client.post("/car", json=HONDA_CIVIC)).json()["id"]
        await client.get("/car")
        await client.put("/car", json={"id": car_id, "year": 2021})
        response = await client.delete(f"/car/{car_id}")

        assert response.json() == {"success": True}
        assert pool_usage.checkouts == 4
        assert pool_usage.checkins == 4

    async def test_failed_request_returns_connection(self, client, pool_usage):
        response = await client.put("/car", json={"id": 9999, "year": 2021})

        assert response.status_code == 404
        assert pool_usage.checkouts == 1
        assert pool_usage.checkins == 1

    async def test_unreachable_store_returns_service_unavailable(self, tmp_path):
        manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'cars.db'}")
        await manager.connect()
        set_service_factory(ServiceFactory(manager))
        try:
            transport = ASGITransport(app=create_app())
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                response = await ac.get("/car")
        finally:
            set_service_factory(None)
            await manager.disconnect()

        assert response.status_code == 503
        assert response.json() == {"detail": "Database is unavailable", "type": "store_unavailable"}


class TestErrorTranslation:
    """Store errors map to status codes and the JSON error envelope."""

    @pytest.mark.parametrize("error, status_code, error_type", [
        (IntegrityError("INSERT", {}, Exception("duplicate")), 409, "integrity_error"),
        (DataError("INSERT", {}, Exception("out of range")), 422, "data_error"),
        (OperationalError("SELECT", {}, Exception("gone away")), 503, "store_unavailable"),
        (PoolTimeoutError("QueuePool limit reached"), 503, "store_unavailable"),
    ])
    async def test_store_errors(self, failing_client, error, status_code, error_type):
        client, car_service = failing_client
        car_service.create_car.side_effect = error

        response = await client.post("/car", json=HONDA_CIVIC)

        assert response.status_code == status_code
        assert response.json()["type"] == error_type

    async def test_business_rule_error(self, failing_client):
        client, car_service = failing_client
        car_service.update_car_year.side_effect = ValueError("Invalid model year: 2021")

        response = await client.put("/car", json={"id": 1, "year": 2021})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid model year: 2021", "type": "validation_error"}

    async def test_unexpected_error_returns_json_envelope(self, failing_client):
        client, car_service = failing_client
        car_service.list_active_cars.side_effect = KeyError("make")

        response = await client.get("/car")

        assert response.status_code == 500
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"detail": "Internal server error occurred", "type": "internal_error"}

    async def test_unconnected_database_returns_json_envelope(self):
        set_service_factory(ServiceFactory(DatabaseManager("sqlite+aiosqlite:///never-connected.db")))
        try:
            transport = ASGITransport(app=create_app())
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                response = await ac.get("/car")
        finally:
            set_service_factory(None)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error occurred", "type": "runtime_error"}


class TestAmbientBehavior:
    """Health, CORS and correlation IDs."""

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "car-registry"}

    async def test_root(self, client):
        response = await client.get("/")

        assert response.json()["message"] == "Car Registry API"

    async def test_cors_allows_any_origin_with_credentials(self, client):
        response = await client.get("/health", headers={"Origin": "http://frontend.example"})

        assert "access-control-allow-origin" in response.headers
        assert response.headers["access-control-allow-credentials"] == "true"

    async def test_correlation_id_is_echoed(self, client):
        response = await client.get("/car", headers={CORRELATION_ID_HEADER: "req-42"})

        assert response.headers[CORRELATION_ID_HEADER] == "req-42"

    async def test_correlation_id_is_generated(self, client):
        response = await client.get("/car")

        assert response.headers[CORRELATION_ID_HEADER]
