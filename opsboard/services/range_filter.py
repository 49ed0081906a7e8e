from collections.abc import Sequence

from opsboard.models.series import HourlyRow

MS_PER_DAY = 24 * 60 * 60 * 1000


def filter_window(series: Sequence[HourlyRow], days: int) -> list[HourlyRow]:
    """Return the trailing *days* of *series*.

    The window is anchored to the last row's sort_key, not to the current
    time, so historical datasets filter the same way on every run.
    """
    if not series:
        return []
    lower_bound = series[-1].sort_key - days * MS_PER_DAY
    return [row for row in series if row.sort_key >= lower_bound]
