"""Metrics feed fetcher with exponential-backoff retries.

Every configured feed is fetched concurrently. A feed that still fails after
the last attempt raises FetchError, and the whole run fails with it: the
hourly merge needs every source present.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

import httpx

from opsboard.config import SourceConfig, settings

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Pure backoff rule: the delay doubles after every failed attempt, no jitter."""

    max_attempts: int = 3
    initial_delay: float = 1.0  # seconds

    def next_delay(self, attempt: int) -> float | None:
        """Delay before the attempt following *attempt* (1-based), or None when out of attempts."""
        if attempt >= self.max_attempts:
            return None
        return self.initial_delay * 2 ** (attempt - 1)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.fetch_max_attempts,
            initial_delay=settings.fetch_initial_delay_ms / 1000,
        )


class FetchError(Exception):
    """A feed could not be retrieved after all attempts."""

    def __init__(self, label: str, attempts: int, cause: Exception | None = None) -> None:
        self.label = label
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Failed to fetch {label} after {attempts} attempts: {cause}")


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    label: str,
    policy: RetryPolicy | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> str:
    """GET *url* and return the body text, retrying transport errors and non-2xx statuses.

    Raises:
        FetchError: After policy.max_attempts failed attempts. The last
            underlying httpx error is kept on .cause and chained.
    """
    policy = policy or RetryPolicy.from_settings()
    last_exc: httpx.HTTPError | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text
        except httpx.HTTPError as exc:
            last_exc = exc
            delay = policy.next_delay(attempt)
            logger.warning(
                "Fetch attempt %d/%d for %s failed: %s", attempt, policy.max_attempts, label, exc
            )
            if delay is None:
                break
            await sleep(delay)

    raise FetchError(label, policy.max_attempts, last_exc) from last_exc


async def fetch_all(
    sources: Sequence[SourceConfig],
    client: httpx.AsyncClient,
    policy: RetryPolicy | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> list[str]:
    """Fetch every source concurrently; payloads are returned in *sources* order.

    Waits for every fetch to settle, then raises the first FetchError in
    source order if any feed failed.
    """
    results = await asyncio.gather(
        *(fetch_text(client, s.url, s.name, policy, sleep) for s in sources),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        for exc in failures:
            if not isinstance(exc, FetchError):
                raise exc
        logger.error(
            "%d of %d feeds failed: %s",
            len(failures),
            len(sources),
            ", ".join(e.label for e in failures),
        )
        raise failures[0]

    logger.info("Fetched %d feeds", len(results))
    return list(results)
