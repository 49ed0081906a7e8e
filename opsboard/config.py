from urllib.parse import quote

import pytz
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Selectable trailing windows offered to the front end: (label, days)
TIME_RANGES: list[tuple[str, int]] = [
    ("LAST 24 HOURS", 1),
    ("LAST 3 DAYS", 3),
    ("LAST 7 DAYS", 7),
    ("LAST 2 WEEKS", 14),
    ("LAST 4 WEEKS", 28),
]
WINDOW_CHOICES: tuple[int, ...] = tuple(days for _, days in TIME_RANGES)


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "Ops Metrics API"
    app_version: str = "0.1.0"
    debug: bool = False

    # ── Upstream feeds ─────────────────────────────────────────────────────────
    data_base_url: str = "https://bfcm-2025-data-viz.shiphero.com/sh_metrics/metrics/"
    # Prefix of a URL-rewriting proxy; None → fetch the feeds directly
    proxy_base: str | None = None

    # ── Fetch / retry ──────────────────────────────────────────────────────────
    fetch_max_attempts: int = 3
    fetch_initial_delay_ms: int = 1000
    fetch_timeout_seconds: float = 30.0

    # ── Processing Defaults ────────────────────────────────────────────────────
    # Hour buckets and labels are rendered in this zone
    display_timezone: str = "UTC"
    default_window_days: int = 7
    refresh_on_startup: bool = True

    @field_validator("display_timezone")
    @classmethod
    def validate_display_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone '{v}'")
        return v

    @field_validator("fetch_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("fetch_max_attempts must be at least 1")
        return v

    @field_validator("default_window_days")
    @classmethod
    def validate_default_window(cls, v: int) -> int:
        if v not in WINDOW_CHOICES:
            raise ValueError(f"default_window_days must be one of {list(WINDOW_CHOICES)}")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()


class SourceConfig(BaseModel):
    """One upstream CSV feed and the series key its values are merged under."""

    path: str
    key: str
    name: str
    group: str

    @property
    def url(self) -> str:
        return resolve_url(self.path)


def resolve_url(path: str) -> str:
    """Join *path* onto the data base URL, wrapped by the proxy when one is set."""
    target = settings.data_base_url + path
    if not settings.proxy_base:
        return target
    return settings.proxy_base + quote(target, safe="")


# Add a feed here to get a new series key in every hourly row.
SOURCES: list[SourceConfig] = [
    SourceConfig(path="orders.csv", key="orders", name="Orders", group="volume"),
    SourceConfig(path="shipping_labels.csv", key="labels", name="Shipping Labels", group="volume"),
    SourceConfig(path="total_packers.csv", key="packers", name="Total Packers", group="labor"),
    SourceConfig(path="total_pickers.csv", key="pickers", name="Total Pickers", group="labor"),
]
