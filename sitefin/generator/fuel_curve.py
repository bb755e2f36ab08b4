"""Fuel consumption curve for diesel/gas generators.

Fuel burn is linear in electrical output:

    F(P) = intercept * P_rated + slope * P_output   [gal/hr]

where the two coefficients are usually derived from the electric
efficiency quoted at full and half load.
"""

from __future__ import annotations

from dataclasses import dataclass

# Higher heating value of diesel (kWh_thermal per gallon).
DIESEL_HHV_KWH_PER_GAL: float = 40.7


def fuel_slope_and_intercept(
    electric_efficiency_full_load: float,
    electric_efficiency_half_load: float,
    fuel_higher_heating_value_kwh_per_gal: float = DIESEL_HHV_KWH_PER_GAL,
) -> tuple[float, float]:
    """Fit the linear fuel curve through the full- and half-load points.

    Parameters
    ----------
    electric_efficiency_full_load : float
        kWh_e per kWh_t at rated output.
    electric_efficiency_half_load : float
        kWh_e per kWh_t at 50 % of rated output.
    fuel_higher_heating_value_kwh_per_gal : float
        Fuel energy content.

    Returns
    -------
    tuple[float, float]
        ``(slope, intercept)``: marginal burn in gal/kWh_e and no-load
        burn in gal/hr per kW of rated capacity.
    """
    if electric_efficiency_full_load <= 0 or electric_efficiency_half_load <= 0:
        raise ValueError("electric efficiencies must be > 0")
    if fuel_higher_heating_value_kwh_per_gal <= 0:
        raise ValueError(
            f"fuel_higher_heating_value_kwh_per_gal must be > 0, "
            f"got {fuel_higher_heating_value_kwh_per_gal}"
        )

    # Thermal input per kW rated at each load point [kWh_t/hr]
    burn_full_load = 1.0 / electric_efficiency_full_load
    burn_half_load = 0.5 / electric_efficiency_half_load

    slope_kwht_per_kwhe = (burn_full_load - burn_half_load) / (1.0 - 0.5)
    intercept_kwht_per_hr = burn_full_load - slope_kwht_per_kwhe * 1.0

    return (
        slope_kwht_per_kwhe / fuel_higher_heating_value_kwh_per_gal,
        intercept_kwht_per_hr / fuel_higher_heating_value_kwh_per_gal,
    )


@dataclass
class FuelCurve:
    """Linear fuel-consumption curve for a reciprocating generator.

    Parameters
    ----------
    slope : float
        Marginal fuel burn in gal/hr per kW of electrical output.
    intercept : float
        No-load fuel burn in gal/hr per kW of rated capacity.
    fuel_higher_heating_value_kwh_per_gal : float
        Fuel energy content, used for :meth:`thermal_efficiency`.
    """

    slope: float
    intercept: float = 0.0
    fuel_higher_heating_value_kwh_per_gal: float = DIESEL_HHV_KWH_PER_GAL

    def __post_init__(self) -> None:
        if self.intercept < 0:
            raise ValueError(f"intercept must be >= 0, got {self.intercept}")
        if self.slope <= 0:
            raise ValueError(f"slope must be > 0, got {self.slope}")

    @classmethod
    def from_efficiencies(
        cls,
        electric_efficiency_full_load: float,
        electric_efficiency_half_load: float,
        fuel_higher_heating_value_kwh_per_gal: float = DIESEL_HHV_KWH_PER_GAL,
    ) -> FuelCurve:
        slope, intercept = fuel_slope_and_intercept(
            electric_efficiency_full_load,
            electric_efficiency_half_load,
            fuel_higher_heating_value_kwh_per_gal,
        )
        return cls(
            slope=slope,
            intercept=intercept,
            fuel_higher_heating_value_kwh_per_gal=fuel_higher_heating_value_kwh_per_gal,
        )

    def consumption(self, power_output_kw: float, rated_power_kw: float) -> float:
        """Fuel consumption in gal/hr at a given operating point.

        Raises
        ------
        ValueError
            If power_output_kw is negative or exceeds rated_power_kw.
        """
        if power_output_kw < 0:
            raise ValueError(
                f"power_output_kw must be >= 0, got {power_output_kw}"
            )
        if power_output_kw > rated_power_kw * 1.001:  # small tolerance
            raise ValueError(
                f"power_output_kw ({power_output_kw}) exceeds "
                f"rated_power_kw ({rated_power_kw})"
            )

        power_output_kw = min(power_output_kw, rated_power_kw)

        return self.intercept * rated_power_kw + self.slope * power_output_kw

    def thermal_efficiency(self, power_output_kw: float, rated_power_kw: float) -> float:
        """Fraction of fuel energy converted to electricity (0.0 when idling)."""
        if power_output_kw <= 0:
            return 0.0

        fuel_gal_per_hr = self.consumption(power_output_kw, rated_power_kw)
        return power_output_kw / (fuel_gal_per_hr * self.fuel_higher_heating_value_kwh_per_gal)
