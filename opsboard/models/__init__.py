# Series records are plain dataclasses; KPI outputs are pydantic models so the API can serialise them.
from opsboard.models.series import HourBucket, HourlyRow, RawRecord
from opsboard.models.stats import MetricStats, PeakDay, SummaryStats

__all__ = ["RawRecord", "HourBucket", "HourlyRow", "MetricStats", "PeakDay", "SummaryStats"]
