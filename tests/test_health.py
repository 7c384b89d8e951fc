"""Smoke tests for health endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from money_calculator.services.scheduler import SWEEP_STATE_KEY


def test_health_endpoint_returns_ok(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload == {"status": "ok", "app": "money-calculator"}


def test_health_cache_reports_uninitialized_without_cache(client, app):
    previous = app.extensions.pop("rate_cache")
    try:
        response = client.get("/health/cache")
    finally:
        app.extensions["rate_cache"] = previous

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "uninitialized"
    assert payload["provider"] is None
    assert payload["size"] is None
    assert payload["last_sweep"] is None


def test_health_cache_reports_size_and_last_sweep(client, app, app_rate_cache, monkeypatch):
    client.get("/rates/USD/EUR")
    swept_at = datetime(2025, 10, 16, 12, 10, tzinfo=UTC)
    monkeypatch.setitem(app.extensions, SWEEP_STATE_KEY, {"last_sweep": swept_at, "last_removed": 3})

    response = client.get("/health/cache")

    assert response.status_code == 200
    assert response.get_json() == {
        "status": "ok",
        "provider": "cached:scripted",
        "size": 1,
        "validity_minutes": 30,
        "last_sweep": swept_at.isoformat(),
        "last_removed": 3,
    }


def test_health_cache_wraps_configured_provider(client):
    payload = client.get("/health/cache").get_json()
    assert payload["provider"] == "cached:mock"
