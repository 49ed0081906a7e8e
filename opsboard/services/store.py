"""In-process holder for the latest master series.

The store owns the httpx client (created lazily on first refresh), the most
recent successfully built series, and a per-window cache of filtered rows and
summary stats. Nothing survives a process restart.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone

import httpx

from opsboard.config import SOURCES, SourceConfig, settings
from opsboard.models.series import HourlyRow
from opsboard.models.stats import SummaryStats
from opsboard.services.fetcher import FetchError, RetryPolicy, SleepFn
from opsboard.services.pipeline import run_pipeline
from opsboard.services.range_filter import filter_window
from opsboard.services.stats import summarize

logger = logging.getLogger(__name__)


class MetricsStore:
    """Latest master series plus refresh bookkeeping.

    A refresh requested while another is running joins the running one. A
    failed refresh leaves the previous series in place.
    """

    def __init__(
        self,
        sources: Sequence[SourceConfig] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        policy: RetryPolicy | None = None,
        display_timezone: str | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.sources = list(sources) if sources is not None else list(SOURCES)
        self._client = client
        self._owns_client = client is None
        self._policy = policy
        self._display_timezone = display_timezone
        self._sleep = sleep

        self._series: list[HourlyRow] = []
        self._refreshed_at: datetime | None = None
        self._last_error: str | None = None
        self._task: asyncio.Task | None = None
        self._windows: dict[int, tuple[list[HourlyRow], SummaryStats]] = {}

    # ── Internal helpers ───────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        """Return the HTTP client, creating it on first call."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=settings.fetch_timeout_seconds,
                follow_redirects=True,
            )
            logger.info("HTTP client initialised (timeout=%.0fs)", settings.fetch_timeout_seconds)
        return self._client

    async def _run(self) -> list[HourlyRow]:
        try:
            series = await run_pipeline(
                self.sources,
                client=self._get_client(),
                policy=self._policy,
                timezone=self._display_timezone,
                sleep=self._sleep,
            )
        except FetchError as exc:
            self._last_error = str(exc)
            logger.error(
                "Refresh failed; keeping %d previously loaded rows: %s", len(self._series), exc
            )
            raise
        except Exception as exc:
            self._last_error = f"{type(exc).__name__}: {exc}"
            logger.exception(
                "Refresh failed unexpectedly; keeping %d previously loaded rows", len(self._series)
            )
            raise

        self._series = series
        self._refreshed_at = datetime.now(timezone.utc)
        self._last_error = None
        self._windows.clear()
        return series

    # ── Public API ─────────────────────────────────────────────────────────────

    @property
    def series(self) -> list[HourlyRow]:
        return self._series

    @property
    def refreshed_at(self) -> datetime | None:
        return self._refreshed_at

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def state(self) -> str:
        """'loading', 'error', 'ready', or 'idle' (nothing attempted yet)."""
        if self.in_flight:
            return "loading"
        if self._last_error is not None:
            return "error"
        if self._refreshed_at is not None:
            return "ready"
        return "idle"

    async def refresh(self) -> list[HourlyRow]:
        """Rebuild the master series from every feed.

        Raises:
            FetchError: If any feed failed. Any other error raised by the run is
                re-raised unchanged; in both cases the previous series is kept
                and last_error is set.
        """
        if self.in_flight:
            logger.info("Refresh already in flight; joining it")
        else:
            self._task = asyncio.create_task(self._run())
        return await asyncio.shield(self._task)

    def window(self, days: int) -> tuple[list[HourlyRow], SummaryStats]:
        """Filtered rows and their summary for the trailing *days*, cached until the next refresh."""
        cached = self._windows.get(days)
        if cached is None:
            filtered = filter_window(self._series, days)
            cached = (filtered, summarize(filtered, [s.key for s in self.sources]))
            self._windows[days] = cached
        return cached

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


metrics_store = MetricsStore()
