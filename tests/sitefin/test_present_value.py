"""Tests for sitefin.economics.present_value: annuities, NPV, depreciation."""

from __future__ import annotations

import pytest

from sitefin.economics.present_value import (
    annuity,
    annuity_escalation,
    annuity_two_rates,
    effective_cost,
    levelization_factor,
    npv,
    straight_line_depreciation_savings,
)
from sitefin.schemas.financial import MACRS_FIVE_YEAR, MACRS_SEVEN_YEAR


def _effective_cost(**overrides) -> float:
    kwargs = dict(
        itc_basis=1000.0,
        replacement_cost=0.0,
        replacement_year=10,
        discount_rate=0.1,
        tax_rate=0.0,
        itc=0.0,
        macrs_schedule=[],
        macrs_bonus_fraction=0.0,
        macrs_itc_reduction=0.0,
    )
    kwargs.update(overrides)
    return effective_cost(**kwargs)


# ======================================================================
# Annuities
# ======================================================================


class TestAnnuity:
    """Tests for annuity() and annuity_two_rates()."""

    def test_equal_rates_returns_years(self):
        """x == 1 is handled analytically."""
        assert annuity(25, 0.05, 0.05) == 25

    def test_zero_rates(self):
        assert annuity(10, 0.0, 0.0) == 10

    def test_known_value(self):
        """Growth in the first period: sum of x^n for n = 1..N."""
        x = 1.02 / 1.08
        expected = sum(x ** n for n in range(1, 26))
        assert annuity(25, 0.02, 0.08) == pytest.approx(expected, abs=1e-5)

    def test_rounded_to_five_decimals(self):
        value = annuity(20, 0.019, 0.0564)
        assert value == round(value, 5)

    def test_single_year(self):
        assert annuity(1, 0.0, 0.1) == pytest.approx(1 / 1.1, abs=1e-5)

    def test_two_rates_combine_multiplicatively(self):
        """(1+a)^n (1+b)^n == (1+a+b+ab)^n."""
        combined = 0.02 + 0.03 + 0.02 * 0.03
        assert annuity_two_rates(20, 0.02, 0.03, 0.07) == pytest.approx(
            annuity(20, combined, 0.07)
        )

    def test_two_rates_with_zero_second_rate(self):
        assert annuity_two_rates(15, 0.025, 0.0, 0.06) == annuity(15, 0.025, 0.06)

    def test_two_rates_equal_to_discount(self):
        """Combined escalation equal to the discount rate returns years."""
        assert annuity_two_rates(12, 0.1, 0.0, 0.1) == 12


class TestAnnuityEscalation:
    """Tests for annuity_escalation(): escalation starts in year 2."""

    def test_matches_explicit_sum(self):
        expected = sum(1.03 ** (n - 1) / 1.08 ** n for n in range(1, 27))
        assert annuity_escalation(25, 0.03, 0.08) == pytest.approx(expected)

    def test_covers_years_plus_one_terms(self):
        """Zero rates: one term per year, plus one."""
        assert annuity_escalation(10, 0.0, 0.0) == pytest.approx(11.0)

    def test_degradation_lowers_factor(self):
        assert annuity_escalation(20, -0.005, 0.06) < annuity_escalation(20, 0.0, 0.06)

    def test_differs_from_annuity(self):
        assert annuity_escalation(20, 0.02, 0.06) != pytest.approx(annuity(20, 0.02, 0.06))


class TestLevelizationFactor:
    """Tests for levelization_factor()."""

    @pytest.mark.parametrize(
        "years,esc,disc",
        [(25, 0.019, 0.0564), (10, 0.0, 0.08), (30, 0.03, 0.03), (1, 0.02, 0.1)],
    )
    def test_no_degradation_is_one(self, years, esc, disc):
        assert levelization_factor(years, esc, disc, 0.0) == pytest.approx(1.0, rel=1e-5)

    def test_degradation_below_one(self):
        lf = levelization_factor(25, 0.019, 0.0564, 0.005)
        assert 0.9 < lf < 1.0

    def test_more_degradation_lower_factor(self):
        assert levelization_factor(25, 0.02, 0.06, 0.01) < levelization_factor(
            25, 0.02, 0.06, 0.005
        )

    def test_known_value(self):
        num = sum(
            1.02 ** n / 1.06 ** n * 0.99 ** (n - 1) for n in range(1, 21)
        )
        expected = num / annuity(20, 0.02, 0.06)
        assert levelization_factor(20, 0.02, 0.06, 0.01) == pytest.approx(expected)


# ======================================================================
# NPV
# ======================================================================


class TestNPV:
    """Tests for npv()."""

    @pytest.mark.parametrize("rate", [0.0, 0.05, 0.2, -0.5])
    def test_only_initial_flow(self, rate):
        """Year-0 flow is not discounted."""
        assert npv(rate, [-1000.0, 0.0, 0.0, 0.0]) == -1000.0

    def test_known_value(self):
        expected = -100 + 50 / 1.1 + 60 / 1.1 ** 2
        assert npv(0.1, [-100, 50, 60]) == pytest.approx(expected)

    def test_single_element(self):
        assert npv(0.07, [42.0]) == 42.0

    def test_zero_rate_is_sum(self):
        assert npv(0.0, [1.0, 2.0, 3.0]) == pytest.approx(6.0)


# ======================================================================
# Effective cost
# ======================================================================


class TestEffectiveCost:
    """Tests for effective_cost(): ITC, MACRS and replacement."""

    def test_no_incentives_returns_basis(self):
        assert _effective_cost() == 1000.0

    def test_macrs_only(self):
        """Full write-off in year 1 at 50 % tax: 1000 - 500/1.1."""
        cost = _effective_cost(tax_rate=0.5, macrs_schedule=[1.0])
        assert cost == pytest.approx(round(1000 - 500 / 1.1, 4))

    def test_itc_reduces_depreciable_basis(self):
        """Basis 1000*(1 - 0.5*0.3) = 850; year-1 savings 425 + ITC 300."""
        cost = _effective_cost(
            tax_rate=0.5, itc=0.3, macrs_schedule=[1.0], macrs_itc_reduction=0.5,
        )
        assert cost == pytest.approx(round(1000 - 725 / 1.1, 4))

    def test_bonus_depreciation_in_year_one(self):
        """All-bonus equals a one-year schedule."""
        bonus = _effective_cost(
            tax_rate=0.3, macrs_schedule=MACRS_FIVE_YEAR, macrs_bonus_fraction=1.0,
        )
        one_year = _effective_cost(tax_rate=0.3, macrs_schedule=[1.0])
        assert bonus == pytest.approx(one_year)

    def test_itc_without_schedule(self):
        """ITC is still credited in year 1 when no MACRS schedule applies."""
        cost = _effective_cost(itc=0.3)
        assert cost == pytest.approx(round(1000 - 300 / 1.1, 4))

    def test_replacement_after_tax(self):
        cost = _effective_cost(replacement_cost=200.0, replacement_year=10, tax_rate=0.25)
        expected = 1000 + 200 * 0.75 / 1.1 ** 10
        assert cost == pytest.approx(round(expected, 4))

    def test_rebate_subtracted(self):
        assert _effective_cost(rebate_per_unit=100.0) == 900.0

    def test_never_negative(self):
        assert _effective_cost(rebate_per_unit=5000.0) == 0.0
        assert _effective_cost(itc_basis=0.0) == 0.0

    def test_rounded_to_four_decimals(self):
        cost = _effective_cost(tax_rate=0.26, itc=0.3, macrs_schedule=MACRS_SEVEN_YEAR)
        assert cost == round(cost, 4)

    def test_non_increasing_in_itc(self):
        costs = [
            _effective_cost(
                tax_rate=0.26,
                itc=itc,
                discount_rate=0.0564,
                macrs_schedule=MACRS_FIVE_YEAR,
                macrs_bonus_fraction=0.4,
                macrs_itc_reduction=0.5,
                replacement_cost=300.0,
            )
            for itc in [0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 1.0]
        ]
        assert all(a >= b for a, b in zip(costs, costs[1:]))
        assert all(c >= 0 for c in costs)


class TestStraightLineDepreciation:
    """Tests for straight_line_depreciation_savings()."""

    def test_zero_discount(self):
        assert straight_line_depreciation_savings(1000.0, 0.0, 5, 0.2) == pytest.approx(200.0)

    def test_known_value(self):
        expected = sum(40.0 / 1.1 ** y for y in range(1, 6))
        assert straight_line_depreciation_savings(1000.0, 0.1, 5, 0.2) == pytest.approx(expected)

    def test_zero_capital(self):
        assert straight_line_depreciation_savings(0.0, 0.08, 25, 0.26) == 0.0
