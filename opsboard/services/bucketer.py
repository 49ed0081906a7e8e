"""Hour bucketing: parse a feed timestamp, truncate to the hour in the display timezone."""

import logging
import re

import pandas as pd
import pytz

from opsboard.models.series import HourBucket

logger = logging.getLogger(__name__)

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# pandas reads these as the current clock time
_RELATIVE_KEYWORDS = {"now", "today", "tomorrow", "yesterday"}
_YEAR = re.compile(r"\d{4}")


def format_hour_label(ts: pd.Timestamp) -> str:
    """Render as 'Mon-DD HH:00' (e.g. 'Oct-21 13:00'), independent of locale."""
    return f"{_MONTHS[ts.month - 1]}-{ts.day:02d} {ts.hour:02d}:00"


def hour_bucket(timestamp: str, timezone: str = "UTC") -> HourBucket | None:
    """Map a timestamp string to its hour bucket.

    Args:
        timestamp: A dated string pandas can parse. Offset-aware values are
            converted to *timezone*; naive values are read as *timezone* wall time.
            Relative keywords ('now', 'today') and strings without a four-digit
            year are rejected.
        timezone: IANA zone the hour boundaries and labels are computed in.

    Returns:
        HourBucket, or None if the string is not a parseable instant.
    """
    if timestamp.strip().lower() in _RELATIVE_KEYWORDS or not _YEAR.search(timestamp):
        logger.debug("Undated timestamp %r", timestamp)
        return None
    try:
        ts = pd.Timestamp(timestamp)
    except (ValueError, TypeError, OverflowError):
        logger.debug("Unparseable timestamp %r", timestamp)
        return None
    if pd.isna(ts):
        return None

    tz = pytz.timezone(timezone)

    # ── Localize / convert timezone ────────────────────────────────────────────
    if ts.tzinfo is None:
        # Ambiguous DST wall times fold to the first occurrence
        ts = ts.tz_localize(tz, ambiguous=True, nonexistent="shift_forward")
    else:
        ts = ts.tz_convert(tz)

    # Drop the sub-hour part of the instant itself; the offset is kept, so both
    # fall-back hours stay distinct
    hour = ts - pd.Timedelta(
        minutes=ts.minute,
        seconds=ts.second,
        microseconds=ts.microsecond,
        nanoseconds=ts.nanosecond,
    )
    return HourBucket(label=format_hour_label(hour), sort_key=int(hour.timestamp()) * 1000)
