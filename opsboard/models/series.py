from dataclasses import dataclass, field


@dataclass(frozen=True)
class RawRecord:
    """One (timestamp, value) line from a metrics CSV feed."""

    timestamp: str
    value: int


@dataclass(frozen=True)
class HourBucket:
    """Hour-truncated instant.

    sort_key — epoch milliseconds, the ordering and grouping key
    label    — 'Mon-DD HH:00' display string, not year-qualified
    """

    label: str
    sort_key: int


@dataclass
class HourlyRow:
    """Summed per-source values for one hour bucket."""

    bucket_label: str
    sort_key: int
    values: dict[str, int] = field(default_factory=dict)

    def as_record(self) -> dict:
        """Flatten to the shape the chart front end consumes."""
        return {"bucket_label": self.bucket_label, "sort_key": self.sort_key, **self.values}
