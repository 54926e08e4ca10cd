from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app import schemas
from app.main import _snapshot_service, app
from app.repositories import InMemorySnapshotStore
from app.services.snapshot_service import SnapshotService
from ingestion.service import SnapshotGenerator, utc_date


@pytest.fixture
def client():
    """Test client that cleans up dependency overrides after each test."""
    yield TestClient(app)
    app.dependency_overrides.clear()


def _mock_service(payload: dict) -> MagicMock:
    service = MagicMock(spec=SnapshotService)
    service.get_snapshot = AsyncMock(return_value=schemas.ForecastSnapshot.model_validate(payload))
    return service


def test_healthcheck(client):
    """Verify the healthcheck endpoint returns a successful response."""
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_forecasts_for_explicit_date(client):
    payload = {
        "date": "2024-03-01",
        "items": [{"source": "Kalshi", "title": "CPI print above 3% $0.67", "probability": 67}],
    }
    service = _mock_service(payload)
    app.dependency_overrides[_snapshot_service] = lambda: service

    response = client.get("/api/forecasts", params={"date": "2024-03-01"})

    assert response.status_code == 200
    assert response.json() == payload
    service.get_snapshot.assert_awaited_once_with("2024-03-01", force=False)


def test_forecasts_default_to_today_and_honour_force(client):
    today = utc_date()
    service = _mock_service({"date": today, "items": []})
    app.dependency_overrides[_snapshot_service] = lambda: service

    response = client.get("/api/forecasts", params={"force": "1"})

    assert response.status_code == 200
    service.get_snapshot.assert_awaited_once_with(today, force=True)


def test_invalid_date_is_rejected(client):
    service = _mock_service({"date": "2024-03-01", "items": []})
    app.dependency_overrides[_snapshot_service] = lambda: service

    response = client.get("/api/forecasts", params={"date": "March 1st"})

    assert response.status_code == 422
    service.get_snapshot.assert_not_awaited()


def test_upstream_outage_still_serves_fallback(client, test_settings, make_client_factory, routed_handler):
    """Both sources down: the endpoint answers with the deterministic snapshot."""
    store = InMemorySnapshotStore()
    generator = SnapshotGenerator(
        store,
        settings=test_settings,
        client_factory=make_client_factory(routed_handler(fail={"polymarket", "kalshi"})),
    )
    app.dependency_overrides[_snapshot_service] = lambda: SnapshotService(store, generator)

    first = client.get("/api/forecasts", params={"date": "2024-03-01"})
    second = client.get("/api/forecasts", params={"date": "2024-03-01"})

    assert first.status_code == 200
    body = first.json()
    assert body["date"] == "2024-03-01"
    assert len(body["items"]) == 6
    assert {item["source"] for item in body["items"]} == {"Deterministic"}
    assert all(30 <= item["probability"] <= 80 for item in body["items"])
    assert second.json() == body
