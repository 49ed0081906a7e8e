from pydantic import BaseModel, Field


class MetricStats(BaseModel):
    """Hourly min / max / average of one metric over a window."""

    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0


class PeakDay(BaseModel):
    """Highest-volume calendar day (UTC) for one metric."""

    count: int = 0
    date: str = "N/A"


class SummaryStats(BaseModel):
    """KPI card values derived from a filtered hourly series."""

    peak_orders: PeakDay = Field(default_factory=PeakDay)
    peak_labels: PeakDay = Field(default_factory=PeakDay)
    labels_per_labor: MetricStats = Field(default_factory=MetricStats)
    labor: MetricStats = Field(default_factory=MetricStats)
    # Keyed by source key (orders, labels, packers, pickers, ...)
    hourly: dict[str, MetricStats] = Field(default_factory=dict)
