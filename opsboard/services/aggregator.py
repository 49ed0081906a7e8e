"""Merge per-source records into one hourly master series."""

import logging
from collections.abc import Iterable, Sequence

from opsboard.models.series import HourlyRow, RawRecord
from opsboard.services.bucketer import hour_bucket

logger = logging.getLogger(__name__)


class HourlyAggregator:
    """Accumulates records from every source into one row per hour bucket.

    One instance per pipeline run. Rows are keyed by sort_key, so two hours a
    year apart never collapse even though their labels match.
    """

    def __init__(self, source_keys: Sequence[str], timezone: str = "UTC") -> None:
        self.source_keys = tuple(source_keys)
        self.timezone = timezone
        self._rows: dict[int, HourlyRow] = {}
        self._dropped = 0

    def _row_for(self, label: str, sort_key: int) -> HourlyRow:
        row = self._rows.get(sort_key)
        if row is None:
            row = HourlyRow(
                bucket_label=label,
                sort_key=sort_key,
                values={key: 0 for key in self.source_keys},
            )
            self._rows[sort_key] = row
        return row

    def add(self, source_key: str, records: Iterable[RawRecord]) -> None:
        """Sum *records* into their hour rows under *source_key*.

        Raises:
            KeyError: If *source_key* is not one of the configured keys.
        """
        if source_key not in self.source_keys:
            raise KeyError(f"Unknown source key '{source_key}'")

        added = 0
        for record in records:
            bucket = hour_bucket(record.timestamp, self.timezone)
            if bucket is None:
                self._dropped += 1
                continue
            row = self._row_for(bucket.label, bucket.sort_key)
            row.values[source_key] += record.value
            added += 1

        logger.debug("Aggregated %d records for '%s'", added, source_key)

    def finalize(self) -> list[HourlyRow]:
        """Return the master series, ascending by sort_key."""
        if self._dropped:
            logger.info("Dropped %d records with unparseable timestamps", self._dropped)
        return sorted(self._rows.values(), key=lambda row: row.sort_key)
