"""Metrics feed CSV parser.

Feeds are two-column CSVs (timestamp, count) with a header line. Only column
position matters; header names are never inspected. Bad rows are dropped or
zeroed one at a time, never failing the whole payload.
"""

import logging
import re

from opsboard.models.series import RawRecord

logger = logging.getLogger(__name__)

# Optional sign and leading digits; "12.7" → 12, "7 units" → 7
_LEADING_INT = re.compile(r"[+-]?\d+")


def _clean(field: str) -> str:
    return field.replace('"', "").strip()


def _parse_int(raw: str) -> int:
    """Leading-integer parse; anything without leading digits is 0."""
    match = _LEADING_INT.match(raw)
    return int(match.group()) if match else 0


def parse_csv_records(text: str) -> list[RawRecord]:
    """Parse a feed payload into RawRecords.

    Args:
        text: Raw CSV body. The first line is always treated as a header.

    Returns:
        Records in file order. Lines with fewer than two fields or an empty
        timestamp are skipped; unparseable values become 0.
    """
    if not text:
        return []

    lines = text.strip().splitlines()
    if len(lines) < 2:
        return []

    records: list[RawRecord] = []
    skipped = 0
    for line in lines[1:]:
        parts = line.split(",")
        if len(parts) < 2:
            skipped += 1
            continue

        timestamp = _clean(parts[0])
        if not timestamp:
            skipped += 1
            continue

        records.append(RawRecord(timestamp=timestamp, value=_parse_int(_clean(parts[1]))))

    if skipped:
        logger.debug("Skipped %d malformed CSV rows", skipped)
    return records
