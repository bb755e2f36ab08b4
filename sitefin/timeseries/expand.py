"""Expansion of scalar and monthly inputs to the model's time resolution.

The model year is always 8760 hours; leap days are not represented.
"""

from __future__ import annotations

import calendar
from numbers import Real
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from sitefin.exceptions import InvalidSeriesLength

# ======================================================================
# Constants
# ======================================================================

HOURS_PER_YEAR: int = 8760

# Day counts of a non-leap year, Jan .. Dec.
DAYS_IN_MONTH: tuple[int, ...] = tuple(
    calendar.monthrange(2017, m)[1] for m in range(1, 13)
)


# ======================================================================
# Public API
# ======================================================================

def expand_to_hourly(
    value: float | Sequence[float] | NDArray[np.float64],
    steps_per_hour: int = 1,
    name: str = "series",
) -> NDArray[np.float64]:
    """Convert a per-hour value (e.g. $/kWh) to a time series.

    Parameters
    ----------
    value : float or sequence
        A scalar, 12 monthly values, or an already complete series of
        ``8760 * steps_per_hour`` values (returned unchanged).
    steps_per_hour : int
        Model time steps per hour.  Scalar and monthly values are
        divided by it so each step carries its share of the hourly value.
    name : str
        Input name used in the error message.

    Returns
    -------
    NDArray[np.float64]
        Shape ``(8760 * steps_per_hour,)``.

    Raises
    ------
    InvalidSeriesLength
        If a sequence is neither 12 long nor ``8760 * steps_per_hour`` long.
    """
    n_steps = HOURS_PER_YEAR * steps_per_hour

    if isinstance(value, Real):
        return np.full(n_steps, float(value) / steps_per_hour, dtype=np.float64)

    arr = np.asarray(value, dtype=np.float64)
    if arr.shape == (n_steps,):
        return arr

    if arr.shape == (12,):
        repeats = [steps_per_hour * 24 * days for days in DAYS_IN_MONTH]
        return np.repeat(arr / steps_per_hour, repeats)

    raise InvalidSeriesLength(
        f"Cannot convert {name} to appropriate length time series: got "
        f"{arr.size} values, expected 12 or {n_steps}"
    )


def monthly_time_steps(year: int, steps_per_hour: int = 1) -> list[list[int]]:
    """Zero-based time-step indices belonging to each month of *year*.

    In leap years February is truncated to 28 days so that the twelve
    lists together cover exactly ``8760 * steps_per_hour`` steps.
    """
    months: list[list[int]] = []
    start = 0
    for month in range(1, 13):
        n_days = calendar.monthrange(year, month)[1]
        if month == 2 and calendar.isleap(year):
            n_days -= 1
        stop = start + n_days * 24 * steps_per_hour
        months.append(list(range(start, stop)))
        start = stop
    return months
