"""Integration tests for health and metrics endpoints"""

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def request_count(endpoint: str, status: str = "200") -> float:
    value = REGISTRY.get_sample_value(
        "http_request_duration_seconds_count",
        {"method": "GET", "endpoint": endpoint, "status": status},
    )
    return value or 0.0


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "storefront-gateway"}


def test_request_id_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_metrics_exposes_denials(client: TestClient):
    client.get("/api/admin/revenue/total")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "storefront_authorization_denied_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_metrics_labelled_by_route_template(client: TestClient):
    before = request_count("/api/ai/embeddings")

    client.get("/api/ai/embeddings?source=dashboard&ts=1714400000")

    assert request_count("/api/ai/embeddings") == before + 1
    assert request_count("/api/ai/embeddings?source=dashboard&ts=1714400000") == 0


def test_unmatched_paths_share_one_label(client: TestClient):
    before = request_count("unmatched", status="404")

    client.get("/no/such/page-1")
    client.get("/no/such/page-2")

    assert request_count("unmatched", status="404") == before + 2
    assert request_count("/no/such/page-1", status="404") == 0
