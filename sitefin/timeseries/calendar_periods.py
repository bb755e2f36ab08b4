"""Hourly 0/1 profiles from recurring calendar periods.

A :class:`CalendarPeriod` describes a consecutive block of hours in
relative calendar terms (e.g. "week 2 of March, Tuesday, from hour 8 for
48 hours"), which is mapped onto a concrete year by
:func:`recurring_period_mask`.  Typical use is scheduled equipment
unavailability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from sitefin.timeseries.expand import HOURS_PER_YEAR

logger = logging.getLogger(__name__)

# Day 1 is Monday, not Sunday.
DAY_OF_WEEK_NAMES: tuple[str, ...] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)


@dataclass(frozen=True)
class CalendarPeriod:
    """One consecutive period of hours.

    Parameters
    ----------
    month : int
        Month of the start date, 1 -- 12.
    start_week_of_month : int
        Week of the month holding the start date, 1 -- 6.  Week 1 is the
        Monday-based week containing the 1st of the month.
    start_day_of_week : int
        Day of the start date, 1 (Monday) -- 7 (Sunday).
    start_hour : int
        Hour of the start date at which the period begins, 1 -- 24.
    duration_hours : int
        Number of hours in the period.
    """

    month: int
    start_week_of_month: int
    start_day_of_week: int
    start_hour: int
    duration_hours: int

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> CalendarPeriod:
        return cls(
            month=int(d["month"]),
            start_week_of_month=int(d["start_week_of_month"]),
            start_day_of_week=int(d["start_day_of_week"]),
            start_hour=int(d["start_hour"]),
            duration_hours=int(d["duration_hours"]),
        )

    def start_datetime(self, year: int) -> datetime:
        """Resolve the first hour of the period in *year*.

        Raises
        ------
        ValueError
            If a field is out of range, or the requested day does not
            exist in the month (e.g. no Monday in a short first week).
        """
        if not 1 <= self.start_week_of_month <= 6:
            raise ValueError(f"start_week_of_month must be 1-6, got {self.start_week_of_month}")
        if not 1 <= self.start_day_of_week <= 7:
            raise ValueError(f"start_day_of_week must be 1-7, got {self.start_day_of_week}")
        if not 1 <= self.start_hour <= 24:
            raise ValueError(f"start_hour must be 1-24, got {self.start_hour}")
        if self.duration_hours < 1:
            raise ValueError(f"duration_hours must be >= 1, got {self.duration_hours}")

        first_of_month = date(year, self.month, 1)
        week_start = first_of_month - timedelta(days=first_of_month.weekday())
        start_date = week_start + timedelta(
            weeks=self.start_week_of_month - 1, days=self.start_day_of_week - 1
        )
        if start_date.month != self.month:
            raise ValueError(
                f"there is no day {self.start_day_of_week} "
                f"({DAY_OF_WEEK_NAMES[self.start_day_of_week - 1]}) in week "
                f"{self.start_week_of_month} of month {self.month}, {year}"
            )
        return datetime(start_date.year, start_date.month, start_date.day) + timedelta(
            hours=self.start_hour - 1
        )


def recurring_period_mask(
    year: int,
    periods: Sequence[CalendarPeriod | Mapping[str, Any]],
) -> NDArray[np.float64]:
    """Build an 8760-hour profile that is 1.0 inside any period, 0.0 elsewhere.

    Leap years are truncated by dropping December 31.  A period that
    cannot be placed is logged and skipped; the remaining periods are
    still applied.  That covers invalid fields, a day missing from the
    month, a period running up to midnight on December 31 (the hour
    after it must still be in *year*), and hours past the truncated
    last day.

    Parameters
    ----------
    year : int
        Calendar year used to resolve weekdays.
    periods : sequence
        :class:`CalendarPeriod` instances or dicts with keys ``month``,
        ``start_week_of_month``, ``start_day_of_week``, ``start_hour``
        and ``duration_hours``.

    Returns
    -------
    NDArray[np.float64]
        Shape ``(8760,)``.
    """
    profile = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    year_start = datetime(year, 1, 1)

    for i, raw in enumerate(periods, start=1):
        try:
            period = raw if isinstance(raw, CalendarPeriod) else CalendarPeriod.from_dict(raw)
            start = period.start_datetime(year)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping calendar period %d for year %d: %s", i, year, exc)
            continue

        # The hour after the period must still fall inside the year.
        if (start + timedelta(hours=period.duration_hours)).year > year:
            logger.warning(
                "Skipping calendar period %d: the start day/time and duration_hours "
                "exceed the end of %d. Split it into two periods, one ending with "
                "the year and one starting with it.", i, year,
            )
            continue

        start_idx = int((start - year_start).total_seconds() // 3600)
        end_idx = start_idx + period.duration_hours - 1
        if end_idx >= HOURS_PER_YEAR:
            logger.warning(
                "Skipping calendar period %d: it reaches December 31, which is "
                "dropped from the 8760-hour profile of leap year %d.", i, year,
            )
            continue

        profile[start_idx:end_idx + 1] = 1.0

    return profile
