"""Time-series generation at the model's time resolution."""

from .expand import HOURS_PER_YEAR, expand_to_hourly, monthly_time_steps
from .calendar_periods import CalendarPeriod, recurring_period_mask

__all__ = [
    "HOURS_PER_YEAR",
    "expand_to_hourly",
    "monthly_time_steps",
    "CalendarPeriod",
    "recurring_period_mask",
]
