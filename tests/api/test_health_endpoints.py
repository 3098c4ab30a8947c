# This file tests API health, readiness, and version endpoints.
# It exists to validate operational contracts used by orchestration and monitoring.
# The tests confirm request IDs and version metadata are always returned.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, build_store, build_test_config


def test_health_endpoint_returns_expected_fields(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    with api_test_client(config=config, store=build_store(config)) as client:
        response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["environment"] == "test"
    assert payload["service_name"] == config.api_name
    assert payload["api_version"] == "v1"
    assert payload["request_id"]
    assert response.headers["x-request-id"] == payload["request_id"]
    assert "x-response-time-ms" in response.headers


def test_ready_endpoint_reports_all_collections(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    with api_test_client(config=config, store=build_store(config)) as client:
        response = client.get("/ready")

    assert response.status_code == 200
    payload = response.json()
    assert payload["db_connected"] is True
    assert payload["missing_collections"] == []
    assert payload["ready"] is True


def test_version_endpoint_returns_version_metadata(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    with api_test_client(config=config, store=build_store(config)) as client:
        response = client.get("/version")

    assert response.status_code == 200
    payload = response.json()
    assert payload["api_version_path"] == "/api/v1"
    assert payload["app_version"] == config.app_version
    assert payload["project"] == config.api_name


def test_request_id_header_is_echoed(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    with api_test_client(config=config, store=build_store(config)) as client:
        response = client.get("/health", headers={"x-request-id": "trace-123"})

    assert response.headers["x-request-id"] == "trace-123"
    assert response.json()["request_id"] == "trace-123"


def test_metrics_endpoint_exposes_request_counters(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    with api_test_client(config=config, store=build_store(config)) as client:
        client.get("/health")
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "api_http_requests_total" in response.text
