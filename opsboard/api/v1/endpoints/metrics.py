"""Metrics endpoints.

GET  /sources  — configured feeds and their chart group
GET  /ranges   — selectable trailing windows
GET  /series   — hourly rows for a window (no re-fetch)
GET  /summary  — KPI summary for a window (no re-fetch)
POST /refresh  — re-run the full fetch → merge pipeline
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from opsboard.config import TIME_RANGES, WINDOW_CHOICES, settings
from opsboard.dependencies import get_store
from opsboard.services.fetcher import FetchError
from opsboard.services.store import MetricsStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _window_days(
    days: int = Query(settings.default_window_days, description="Trailing window in days"),
) -> int:
    """Query dependency — only the windows the range selector offers are accepted."""
    if days not in WINDOW_CHOICES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unsupported window {days} days. Allowed: {list(WINDOW_CHOICES)}",
        )
    return days


def _store_meta(store: MetricsStore) -> dict:
    return {
        "state": store.state,
        "refreshed_at": store.refreshed_at.isoformat() if store.refreshed_at else None,
        "error_message": store.last_error,
    }


@router.get("/sources", summary="Configured metric feeds")
async def list_sources(store: MetricsStore = Depends(get_store)):
    return [
        {"key": s.key, "name": s.name, "group": s.group, "path": s.path}
        for s in store.sources
    ]


@router.get("/ranges", summary="Selectable time windows")
async def list_ranges():
    return [
        {"label": label, "days": days, "default": days == settings.default_window_days}
        for label, days in TIME_RANGES
    ]


@router.get(
    "/series",
    summary="Hourly series for a window",
    description=(
        "Returns the hourly rows within the trailing window, anchored to the most "
        "recent hour in the data. Every row carries one integer per source key."
    ),
)
async def get_series(
    days: int = Depends(_window_days),
    store: MetricsStore = Depends(get_store),
):
    rows, _ = store.window(days)
    data = [row.as_record() for row in rows]
    date_range = (
        {"start": data[0]["bucket_label"], "end": data[-1]["bucket_label"]} if data else None
    )

    return {
        **_store_meta(store),
        "window_days": days,
        "total_records": len(store.series),
        "returned": len(data),
        "date_range": date_range,
        "data": data,
    }


@router.get("/summary", summary="KPI summary for a window")
async def get_summary(
    days: int = Depends(_window_days),
    store: MetricsStore = Depends(get_store),
):
    _, stats = store.window(days)
    return {
        **_store_meta(store),
        "window_days": days,
        "stats": stats.model_dump(),
    }


@router.post(
    "/refresh",
    summary="Re-fetch every feed",
    description=(
        "Re-runs the whole pipeline. A refresh requested while one is running joins "
        "it. On failure the previously loaded series stays available and 502 is returned."
    ),
)
async def refresh(store: MetricsStore = Depends(get_store)):
    try:
        series = await store.refresh()
    except FetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc

    logger.info("Manual refresh loaded %d hourly rows", len(series))
    return {
        **_store_meta(store),
        "total_records": len(series),
    }
