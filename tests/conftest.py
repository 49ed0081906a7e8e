"""Shared pytest fixtures for the Ops Metrics test suite."""

from collections.abc import Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from opsboard.dependencies import get_store
from opsboard.main import app
from opsboard.services.store import MetricsStore

# Upstream payloads keyed by feed file name
FEEDS: dict[str, str] = {
    "orders.csv": (
        "time,value\n"
        "2024-06-01T10:15:00Z,7\n"
        "2024-06-01T10:45:00Z,5\n"
        "2024-06-02T09:00:00Z,20\n"
    ),
    "shipping_labels.csv": (
        "time,value\n"
        '"2024-06-01T10:50:00Z","3"\n'
        "2024-06-02T09:30:00Z,12\n"
    ),
    "total_packers.csv": "time,value\n2024-06-01T10:00:00Z,2\n2024-06-02T09:00:00Z,3\n",
    "total_pickers.csv": "time,value\n2024-06-01T10:00:00Z,1\n2024-06-02T09:00:00Z,1\n",
}


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def feed_transport(feeds: dict[str, str], failing: set[str] | None = None) -> httpx.MockTransport:
    """Serve *feeds* by file name; names in *failing* (or unknown) answer 503."""
    failing = failing or set()

    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        if name in failing or name not in feeds:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, text=feeds[name])

    return httpx.MockTransport(handler)


@pytest.fixture
def feeds() -> dict[str, str]:
    """A mutable copy of the default upstream payloads."""
    return dict(FEEDS)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_feed_client() -> Callable[..., httpx.AsyncClient]:
    """Factory for an httpx client whose upstream is an in-memory feed map."""

    def _make(feeds: dict[str, str] | None = None, failing: set[str] | None = None):
        return httpx.AsyncClient(transport=feed_transport(FEEDS if feeds is None else feeds, failing))

    return _make


@pytest.fixture
def store(make_feed_client, recording_sleep) -> MetricsStore:
    """Metrics store wired to the in-memory feeds (no network, no real sleeps)."""
    return MetricsStore(client=make_feed_client(), sleep=recording_sleep)


@pytest.fixture
async def client(store: MetricsStore) -> AsyncClient:
    """Async test client that talks directly to the ASGI app with the test store injected."""
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
