"""Economic analysis module."""

from .present_value import (
    annuity,
    annuity_escalation,
    annuity_two_rates,
    effective_cost,
    levelization_factor,
    npv,
    straight_line_depreciation_savings,
)
from .financial import FinancialConfig, build_financial_config

__all__ = [
    "annuity",
    "annuity_escalation",
    "annuity_two_rates",
    "effective_cost",
    "levelization_factor",
    "npv",
    "straight_line_depreciation_savings",
    "FinancialConfig",
    "build_financial_config",
]
