"""Integration tests for health and metrics endpoints."""

from fastapi.testclient import TestClient


def test_health_endpoint(client: TestClient) -> None:
    """Test that /health always returns 200."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_healthz_reports_in_memory_store(client: TestClient) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["components"]["db"] == "in_memory"


def test_metrics_endpoint_exposes_share_counters(client: TestClient) -> None:
    """Test that a denied share request shows up in /metrics."""
    client.get("/share/some-trip", params={"token": "x"})
    trip = client.post("/trips", json={"title": "Metrics"}).json()
    client.post(f"/trips/{trip['id']}/share")
    client.get(f"/share/{trip['id']}")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]
    assert "tripcraft_share_denials_total" in response.text
    assert "tripcraft_approvals_total" in response.text


def test_root_endpoint(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Tripcraft Itinerary API"
