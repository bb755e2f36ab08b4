"""Present-value, annuity and depreciation primitives.

These factors turn per-year nominal cash flows into present values over
the analysis period and are used as objective coefficients by the
optimisation model.  All functions are pure.

Rates are annual fractions (0.0564 = 5.64 %).
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

# ======================================================================
# Annuities
# ======================================================================

def annuity(years: int, rate_escalation: float, rate_discount: float) -> float:
    """Present worth factor of a cash flow escalating from year 1.

    Geometric sum of ``(1 + e)^n / (1 + d)^n`` for ``n = 1 .. years``.
    """
    return annuity_two_rates(years, rate_escalation, 0.0, rate_discount)


def annuity_two_rates(
    years: int,
    rate_escalation1: float,
    rate_escalation2: float,
    rate_discount: float,
) -> float:
    """Present worth factor with two compounding escalation rates.

    Sum of ``(1 + e1)^n * (1 + e2)^n / (1 + d)^n`` for ``n = 1 .. years``,
    refactored as a single geometric series in
    ``x = (1 + e1 + e2 + e1*e2) / (1 + d)``.
    """
    x = (1 + rate_escalation1 + rate_escalation2 + rate_escalation1 * rate_escalation2) / (
        1 + rate_discount
    )
    if x == 1:
        return float(years)
    return round(x * (1 - x ** years) / (1 - x), 5)


def annuity_escalation(years: int, rate_escalation: float, rate_discount: float) -> float:
    """Present worth factor with escalation (or degradation if negative) from year 2.

    Sum of ``(1 + e)^(n-1) / (1 + d)^n`` for ``n = 1 .. years + 1``.
    Unlike :func:`annuity`, the first year is not escalated.
    """
    n = np.arange(1, years + 2, dtype=np.float64)
    return float(np.sum((1 + rate_escalation) ** (n - 1) / (1 + rate_discount) ** n))


def levelization_factor(
    years: int,
    rate_escalation: float,
    rate_discount: float,
    rate_degradation: float,
) -> float:
    """Ratio of a degrading, escalating production value to its flat annuity.

    Numerator: sum of ``(1+e)^n / (1+d)^n * (1-g)^(n-1)`` for
    ``n = 1 .. years`` where *g* is the (positive) degradation rate.
    Denominator: ``annuity(years, e, d)``.

    The model multiplies rated production by this factor; because every
    energy-value term is already scaled by the same reference annuity,
    the denominator cancels there.
    """
    n = np.arange(1, years + 1, dtype=np.float64)
    num = float(
        np.sum(
            (1 + rate_escalation) ** n
            / (1 + rate_discount) ** n
            * (1 - rate_degradation) ** (n - 1)
        )
    )
    return num / annuity(years, rate_escalation, rate_discount)


# ======================================================================
# Net present value
# ======================================================================

def npv(rate: float, cash_flows: Sequence[float]) -> float:
    """NPV with ``cash_flows[0]`` undiscounted and ``cash_flows[i]`` at year *i*."""
    value = float(cash_flows[0])
    for year, flow in enumerate(cash_flows[1:], start=1):
        value += flow / (1 + rate) ** year
    return value


# ======================================================================
# Depreciation and tax incentives
# ======================================================================

def effective_cost(
    itc_basis: float,
    replacement_cost: float,
    replacement_year: int,
    discount_rate: float,
    tax_rate: float,
    itc: float,
    macrs_schedule: Sequence[float],
    macrs_bonus_fraction: float,
    macrs_itc_reduction: float,
    rebate_per_unit: float = 0.0,
) -> float:
    """Capital cost per unit after ITC, depreciation and replacement.

    Assumptions
    -----------
    * Depreciation tax shields are nominal; no inflation adjustment.
    * ITC and bonus depreciation are realised at the end of year 1.
    * The replacement is a one-time after-tax capex in
      *replacement_year*, discounted to year 0.
    * Cash incentives other than the ITC are already netted out of
      *itc_basis* and are not taxable.

    Parameters
    ----------
    itc_basis : float
        ITC-eligible capital cost ($/kW or $/kWh).
    replacement_cost : float
        Cost of one replacement ($/unit).
    replacement_year : int
        Year of the replacement.
    discount_rate : float
        Owner's discount rate.
    tax_rate : float
        Owner's tax rate.
    itc : float
        Investment tax credit fraction.
    macrs_schedule : Sequence[float]
        MACRS depreciation fractions by year (may be empty).
    macrs_bonus_fraction : float
        Fraction of the depreciable basis taken as bonus depreciation.
    macrs_itc_reduction : float
        Fraction of the ITC that reduces the depreciable basis.
    rebate_per_unit : float
        Rebate subtracted from the final cost.

    Returns
    -------
    float
        Effective cost, rounded to 4 decimals and never negative.
    """
    # ITC reduces the depreciable basis
    depr_basis = itc_basis * (1 - macrs_itc_reduction * itc)

    bonus_depreciation = depr_basis * macrs_bonus_fraction
    depr_basis -= bonus_depreciation

    replacement = replacement_cost * (1 - tax_rate) / (1 + discount_rate) ** replacement_year

    tax_savings = [0.0]
    for idx, macrs_rate in enumerate(macrs_schedule):
        depreciation_amount = macrs_rate * depr_basis
        if idx == 0:
            depreciation_amount += bonus_depreciation
        tax_savings.append(depreciation_amount * tax_rate)
    if len(tax_savings) == 1:
        tax_savings.append(bonus_depreciation * tax_rate)

    tax_savings[1] += itc_basis * itc

    cost = itc_basis - npv(discount_rate, tax_savings) + replacement - rebate_per_unit
    return max(0.0, round(cost, 4))


def straight_line_depreciation_savings(
    capital_cost: float,
    discount_rate: float,
    years: int,
    tax_rate: float,
) -> float:
    """Present value of tax savings from straight-line depreciation.

    ``capital_cost / years`` is deducted each year for *years* years,
    starting at the end of year 1.
    """
    annual_savings = capital_cost / years * tax_rate
    return npv(discount_rate, [0.0] + [annual_savings] * years)
