from fastapi import APIRouter

from opsboard.api.v1.endpoints import metrics, system

api_v1_router = APIRouter()

# Service status + store state
api_v1_router.include_router(system.router, tags=["System"])

# Sources, ranges, hourly series, KPI summary, manual refresh
api_v1_router.include_router(metrics.router, tags=["Metrics"])
