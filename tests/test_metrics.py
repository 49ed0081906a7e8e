"""Tests for the metrics endpoints (sources, ranges, series, summary, refresh)."""

import pytest
from httpx import AsyncClient

from opsboard.dependencies import get_store
from opsboard.main import app
from opsboard.services.store import MetricsStore


# ── Static metadata ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_sources_listed(client: AsyncClient):
    response = await client.get("/api/v1/sources")
    assert response.status_code == 200
    data = response.json()
    assert [s["key"] for s in data] == ["orders", "labels", "packers", "pickers"]
    assert data[1] == {
        "key": "labels",
        "name": "Shipping Labels",
        "group": "volume",
        "path": "shipping_labels.csv",
    }


@pytest.mark.asyncio
async def test_ranges_listed(client: AsyncClient):
    data = (await client.get("/api/v1/ranges")).json()
    assert [r["days"] for r in data] == [1, 3, 7, 14, 28]
    assert data[0]["label"] == "LAST 24 HOURS"
    assert [r["days"] for r in data if r["default"]] == [7]


# ── Series / summary ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_series_empty_before_refresh(client: AsyncClient):
    response = await client.get("/api/v1/series")
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "idle"
    assert data["window_days"] == 7
    assert data["data"] == []
    assert data["date_range"] is None


@pytest.mark.asyncio
async def test_series_after_refresh(client: AsyncClient):
    refresh = await client.post("/api/v1/refresh")
    assert refresh.status_code == 200
    assert refresh.json()["total_records"] == 2
    assert refresh.json()["state"] == "ready"

    data = (await client.get("/api/v1/series", params={"days": 28})).json()
    assert data["returned"] == 2
    assert data["date_range"] == {"start": "Jun-01 10:00", "end": "Jun-02 09:00"}
    first = data["data"][0]
    assert first["bucket_label"] == "Jun-01 10:00"
    assert {k: first[k] for k in ("orders", "labels", "packers", "pickers")} == {
        "orders": 12,
        "labels": 3,
        "packers": 2,
        "pickers": 1,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [0, 5, 30, -1])
async def test_series_rejects_unselectable_window(client: AsyncClient, days: int):
    response = await client.get("/api/v1/series", params={"days": days})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_summary_after_refresh(client: AsyncClient):
    await client.post("/api/v1/refresh")
    response = await client.get("/api/v1/summary", params={"days": 3})
    assert response.status_code == 200

    stats = response.json()["stats"]
    assert stats["peak_orders"] == {"count": 20, "date": "Sunday, 6/2/2024"}
    assert stats["peak_labels"] == {"count": 12, "date": "Sunday, 6/2/2024"}
    assert stats["labels_per_labor"]["avg"] == pytest.approx(2.0)
    assert stats["hourly"]["orders"]["max"] == 20


@pytest.mark.asyncio
async def test_summary_before_refresh_is_zeroed(client: AsyncClient):
    stats = (await client.get("/api/v1/summary")).json()["stats"]
    assert stats["peak_orders"] == {"count": 0, "date": "N/A"}
    assert stats["labor"] == {"min": 0.0, "max": 0.0, "avg": 0.0}


# ── Refresh failures ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_refresh_failure_returns_502(client: AsyncClient, make_feed_client, recording_sleep):
    failing = MetricsStore(
        client=make_feed_client(failing={"total_packers.csv"}), sleep=recording_sleep
    )
    app.dependency_overrides[get_store] = lambda: failing

    response = await client.post("/api/v1/refresh")
    assert response.status_code == 502
    assert "Total Packers" in response.json()["detail"]

    status_data = (await client.get("/api/v1/status")).json()
    assert status_data["state"] == "error"
    assert "Total Packers" in status_data["error_message"]
