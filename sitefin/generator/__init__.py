"""Generator fuel curve module."""

from .fuel_curve import FuelCurve, fuel_slope_and_intercept

__all__ = ["FuelCurve", "fuel_slope_and_intercept"]
