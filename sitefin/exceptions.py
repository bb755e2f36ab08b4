"""Error types raised by the sitefin engine.

Lookup unavailability for sites outside the EASIUR grid is *not* an
exception; see :class:`sitefin.emissions.costs.NotAvailable`.
"""

from __future__ import annotations


class SitefinError(Exception):
    """Base class for all sitefin errors."""


class ProjectionError(SitefinError):
    """Coordinate transform failed (unknown datum or unprojectable point)."""


class InvalidReleaseClass(SitefinError, ValueError):
    """Release class is not one of ``area``, ``p150`` or ``p300``."""


class UnsupportedIncomeYear(SitefinError, ValueError):
    """Income year falls outside the income growth adjustment table."""


class UnsupportedDollarYear(SitefinError, ValueError):
    """Dollar year falls outside the GDP deflator table."""


class MissingHealthCostInputs(SitefinError):
    """Health costs were requested in the objective but could not be resolved."""


class InvalidSeriesLength(SitefinError, ValueError):
    """A time series cannot be expanded to the model's time resolution."""
