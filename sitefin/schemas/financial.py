"""Pydantic schema for raw financial inputs."""
from pydantic import BaseModel, Field, field_validator

# IRS Publication 946, half-year convention.
MACRS_FIVE_YEAR: tuple[float, ...] = (0.2, 0.32, 0.192, 0.1152, 0.1152, 0.0576)
MACRS_SEVEN_YEAR: tuple[float, ...] = (
    0.1429, 0.2449, 0.1749, 0.1249, 0.0893, 0.0892, 0.0893, 0.0446,
)

_MACRS_TOLERANCE = 1e-6


class FinancialInputs(BaseModel):
    """Caller-supplied financial assumptions; ``None`` means "resolve for me"."""

    model_config = {"extra": "forbid"}

    off_grid_flag: bool = Field(default=False, description="Site is not connected to the grid")

    om_cost_escalation_pct: float = Field(default=0.025, description="Annual O&M cost escalation rate")
    elec_cost_escalation_pct: float = Field(default=0.019, description="Annual electricity cost escalation rate")
    boiler_fuel_cost_escalation_pct: float = Field(default=0.034)
    chp_fuel_cost_escalation_pct: float = Field(default=0.034)
    generator_fuel_cost_escalation_pct: float = Field(default=0.027)

    offtaker_tax_pct: float = Field(default=0.26, ge=0.0, le=1.0)
    offtaker_discount_pct: float = Field(default=0.0564, ge=0.0, le=1.0)
    third_party_ownership: bool = Field(default=False)
    owner_tax_pct: float = Field(default=0.26, ge=0.0, le=1.0, description="Ignored unless third_party_ownership")
    owner_discount_pct: float = Field(default=0.0564, ge=0.0, le=1.0, description="Ignored unless third_party_ownership")

    analysis_years: int = Field(default=25, ge=1)
    value_of_lost_load_per_kwh: float | list[float] = Field(default=1.00)
    microgrid_upgrade_cost_pct: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Defaults to 0.3 grid-connected, 0.0 off-grid",
    )

    macrs_five_year: list[float] = Field(default_factory=lambda: list(MACRS_FIVE_YEAR))
    macrs_seven_year: list[float] = Field(default_factory=lambda: list(MACRS_SEVEN_YEAR))

    co2_cost_per_tonne: float = Field(default=51.0, ge=0.0)
    co2_cost_escalation_pct: float = Field(default=0.042173)

    nox_grid_cost_per_tonne: float | None = Field(default=None, ge=0.0)
    so2_grid_cost_per_tonne: float | None = Field(default=None, ge=0.0)
    pm25_grid_cost_per_tonne: float | None = Field(default=None, ge=0.0)
    nox_onsite_fuelburn_cost_per_tonne: float | None = Field(default=None, ge=0.0)
    so2_onsite_fuelburn_cost_per_tonne: float | None = Field(default=None, ge=0.0)
    pm25_onsite_fuelburn_cost_per_tonne: float | None = Field(default=None, ge=0.0)
    nox_cost_escalation_pct: float | None = Field(default=None)
    so2_cost_escalation_pct: float | None = Field(default=None)
    pm25_cost_escalation_pct: float | None = Field(default=None)

    offgrid_other_capital_costs: float = Field(
        default=0.0, ge=0.0, description="Off-grid only; depreciated straight-line over analysis_years",
    )
    offgrid_other_annual_costs: float = Field(
        default=0.0, ge=0.0, description="Off-grid only; tax deductible for the owner",
    )

    model_health_obj: bool = Field(default=False, description="Include health costs in the objective")

    @field_validator("macrs_five_year", "macrs_seven_year")
    @classmethod
    def _check_macrs(cls, schedule: list[float]) -> list[float]:
        if any(rate < 0 for rate in schedule):
            raise ValueError("MACRS schedule fractions must be >= 0")
        if sum(schedule) > 1.0 + _MACRS_TOLERANCE:
            raise ValueError(f"MACRS schedule must sum to <= 1.0, got {sum(schedule):.6f}")
        return schedule

    @field_validator("value_of_lost_load_per_kwh")
    @classmethod
    def _check_voll(cls, value: float | list[float]) -> float | list[float]:
        if isinstance(value, list) and not value:
            raise ValueError("value_of_lost_load_per_kwh series must not be empty")
        return value
