from opsboard.services.store import MetricsStore, metrics_store


def get_store() -> MetricsStore:
    """FastAPI dependency — the process-wide metrics store (overridden in tests)."""
    return metrics_store
