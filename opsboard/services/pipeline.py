"""One ingestion run: fetch every feed, parse, merge into the hourly master series.

Pipeline:  fetch (concurrent, retried) → parse → bucket + merge → sort
                 ↘ FetchError (run aborted, nothing merged)
"""

import asyncio
import logging
from collections.abc import Sequence

import httpx

from opsboard.config import SourceConfig, settings
from opsboard.models.series import HourlyRow
from opsboard.services.aggregator import HourlyAggregator
from opsboard.services.fetcher import RetryPolicy, SleepFn, fetch_all
from opsboard.services.parser import parse_csv_records

logger = logging.getLogger(__name__)


async def run_pipeline(
    sources: Sequence[SourceConfig],
    *,
    client: httpx.AsyncClient,
    policy: RetryPolicy | None = None,
    timezone: str | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> list[HourlyRow]:
    """Build a fresh master series from *sources*.

    Raises:
        FetchError: If any feed exhausts its retries.
    """
    payloads = await fetch_all(sources, client, policy, sleep)

    # Merging starts only once every feed is in hand
    aggregator = HourlyAggregator(
        [s.key for s in sources], timezone or settings.display_timezone
    )
    for source, payload in zip(sources, payloads):
        records = parse_csv_records(payload)
        logger.info("Parsed %d records from %s", len(records), source.name)
        aggregator.add(source.key, records)

    series = aggregator.finalize()
    logger.info("Built master series: %d hourly rows from %d feeds", len(series), len(sources))
    return series
