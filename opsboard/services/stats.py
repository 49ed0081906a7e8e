"""KPI summary statistics for a filtered hourly series."""

import logging
from collections.abc import Sequence
from datetime import date

import pandas as pd

from opsboard.config import SOURCES
from opsboard.models.series import HourlyRow
from opsboard.models.stats import MetricStats, PeakDay, SummaryStats

logger = logging.getLogger(__name__)

ORDERS_KEY = "orders"
LABELS_KEY = "labels"
LABOR_KEYS = ("packers", "pickers")

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def series_to_frame(
    series: Sequence[HourlyRow], source_keys: Sequence[str] | None = None
) -> pd.DataFrame:
    """Flatten hourly rows into a DataFrame with one integer column per source key."""
    keys = list(source_keys) if source_keys is not None else [s.key for s in SOURCES]
    frame = pd.DataFrame(
        [row.as_record() for row in series],
        columns=["bucket_label", "sort_key", *keys],
    )
    frame[keys] = frame[keys].fillna(0).astype("int64")
    return frame


def format_peak_date(day: date) -> str:
    """Render as 'Saturday, 6/1/2024'."""
    return f"{_WEEKDAYS[day.weekday()]}, {day.month}/{day.day}/{day.year}"


def _metric_stats(values: pd.Series) -> MetricStats:
    if values.empty:
        return MetricStats()
    return MetricStats(
        min=float(values.min()),
        max=float(values.max()),
        avg=float(values.mean()),
    )


def _column(frame: pd.DataFrame, key: str) -> pd.Series:
    if key in frame.columns:
        return frame[key]
    return pd.Series(0, index=frame.index, dtype="int64")


def _peak_day(daily_totals: pd.Series) -> PeakDay:
    """First day whose total strictly beats every earlier one; all-zero stays N/A."""
    best = PeakDay()
    for day, total in daily_totals.items():
        if total > best.count:
            best = PeakDay(count=int(total), date=format_peak_date(day))
    return best


def summarize(
    series: Sequence[HourlyRow], source_keys: Sequence[str] | None = None
) -> SummaryStats:
    """Compute the KPI summary for *series*.

    Args:
        series: Hourly rows, ascending by sort_key (typically a filtered window).
        source_keys: Keys to report hourly stats for; defaults to the configured sources.

    Returns:
        SummaryStats. An empty series yields zeros and 'N/A' peak dates.
    """
    keys = list(source_keys) if source_keys is not None else [s.key for s in SOURCES]

    if not series:
        return SummaryStats(hourly={key: MetricStats() for key in keys})

    frame = series_to_frame(series, keys)
    orders = _column(frame, ORDERS_KEY)
    labels = _column(frame, LABELS_KEY)
    labor = sum((_column(frame, key) for key in LABOR_KEYS), pd.Series(0, index=frame.index))

    # ── Efficiency (hours with no labor are excluded, not zero) ───────────────
    staffed = labor > 0
    efficiency = labels[staffed] / labor[staffed]

    # ── Daily peaks (UTC calendar date of the hour bucket) ────────────────────
    day = pd.to_datetime(frame["sort_key"], unit="ms", utc=True).dt.date
    daily = (
        pd.DataFrame({"day": day, "orders": orders, "labels": labels})
        .groupby("day", sort=True)
        .sum()
    )

    stats = SummaryStats(
        peak_orders=_peak_day(daily["orders"]),
        peak_labels=_peak_day(daily["labels"]),
        labels_per_labor=_metric_stats(efficiency),
        labor=_metric_stats(labor),
        hourly={key: _metric_stats(frame[key]) for key in keys},
    )
    logger.debug(
        "Summarised %d hourly rows over %d days (%d staffed hours)",
        len(frame),
        len(daily),
        int(staffed.sum()),
    )
    return stats
