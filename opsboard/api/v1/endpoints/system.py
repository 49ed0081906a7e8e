from fastapi import APIRouter, Depends

from opsboard.config import settings
from opsboard.dependencies import get_store
from opsboard.services.store import MetricsStore

router = APIRouter()


@router.get(
    "/status",
    summary="Service status",
    description=(
        "Returns service version, the state of the metrics store (idle, loading, "
        "ready, error), the size of the loaded series, and the active configuration."
    ),
)
async def get_status(store: MetricsStore = Depends(get_store)):
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "state": store.state,
        "rows": len(store.series),
        "refreshed_at": store.refreshed_at.isoformat() if store.refreshed_at else None,
        "error_message": store.last_error,
        "config": {
            "display_timezone": settings.display_timezone,
            "default_window_days": settings.default_window_days,
            "fetch_max_attempts": settings.fetch_max_attempts,
            "fetch_initial_delay_ms": settings.fetch_initial_delay_ms,
            "proxy_enabled": bool(settings.proxy_base),
            "sources": len(store.sources),
        },
    }
