import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from opsboard.config import settings
from opsboard.services.fetcher import FetchError
from opsboard.services.store import metrics_store

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def _initial_load() -> None:
    try:
        await metrics_store.refresh()
    except FetchError:
        # Front end sees state='error' and offers POST /refresh
        logger.warning("Initial load failed; waiting for a manual refresh")
    except Exception:
        logger.exception("Initial load failed unexpectedly; waiting for a manual refresh")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    initial = None
    if settings.refresh_on_startup:
        initial = asyncio.create_task(_initial_load())
    yield
    logger.info("Shutting down — closing HTTP client")
    if initial is not None and not initial.done():
        initial.cancel()
    await metrics_store.aclose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Operational metrics API — fetches the orders, shipping labels, packers and "
        "pickers feeds, merges them into an hourly series, and serves filtered "
        "windows and KPI summaries to the dashboard."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Root liveness check ────────────────────────────────────────────────────────
@app.get("/health", tags=["System"], summary="Liveness check")
async def health():
    """Returns 200 OK if the service is running."""
    return {"status": "ok"}


# ── Versioned API routes ────────────────────────────────────────────────────────
from opsboard.api.v1.router import api_v1_router  # noqa: E402 — imported after app creation

app.include_router(api_v1_router, prefix="/api/v1")
