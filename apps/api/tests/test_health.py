"""Tests for health endpoints."""

import pytest

from conftest import proof_file


def test_health_check(client):
    """Test health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "online"
    assert data["pedidos"] == 0
    assert data["uptime"] >= 0


def test_health_counts_orders(client):
    """Health reports how many orders are in memory."""
    client.post("/pedido", data={"email": "a@b.com"}, files=proof_file())
    response = client.get("/health")
    assert response.json()["pedidos"] == 1


def test_readiness_check(client):
    """Test readiness endpoint."""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["uploads_dir"] is True
    assert data["checks"]["smtp"] is False


def test_unknown_route_returns_json_404(client):
    """Any other path answers with a JSON 404 naming the path."""
    response = client.get("/no-such-thing")
    assert response.status_code == 404
    data = response.json()
    assert data["error"] is True
    assert data["message"] == "Ruta no encontrada"
    assert data["path"] == "/no-such-thing"


def test_correlation_id_is_echoed(client):
    """Requests carry a correlation ID back in the response."""
    response = client.get("/health", headers={"x-correlation-id": "abc-123"})
    assert response.headers["x-correlation-id"] == "abc-123"

    response = client.get("/health")
    assert response.headers["x-correlation-id"]


def test_metrics_exposed(client):
    """Prometheus metrics are mounted."""
    response = client.get("/metrics/")
    assert response.status_code == 200
    assert "pedidos_orders_created_total" in response.text


@pytest.mark.parametrize("path", ["/pedidos", "/health"])
def test_cors_headers(client, path):
    """Browsers from any origin may call the API."""
    response = client.get(path, headers={"Origin": "http://tienda.example"})
    assert response.headers["access-control-allow-origin"] == "*"
