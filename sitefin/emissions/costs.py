"""Site-specific health damage costs and escalation rates from EASIUR.

Grid-purchased electricity emissions are assumed to be released at the
site 150 m above ground (``p150``); onsite fuel combustion at ground
level (``area``).  Sites outside the CAMx grid resolve to
:class:`NotAvailable`, which callers treat as "no default available"
rather than an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from sitefin.config import settings
from sitefin.emissions.easiur import EmissionsCostGrid, EmissionsGridCache
from sitefin.emissions.projection import to_grid_index
from sitefin.exceptions import ProjectionError

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

POLLUTANTS: tuple[str, ...] = ("NOx", "SO2", "PM25")

# Pollutant -> EASIUR annual-average dataset name.
POLLUTANT_LAYERS: dict[str, str] = {
    "NOx": "NOX_Annual",
    "SO2": "SO2_Annual",
    "PM25": "PEC_Annual",
}

SITE_KIND_RELEASE: dict[str, str] = {
    "grid": "p150",
    "onsite": "area",
}

# 2010 USD -> 2020 USD
USD_2010_TO_2020: float = 1.246

COST_YEARS: tuple[int, int, int] = (2020, 2020, 2010)
ESCALATION_YEARS: tuple[int, int, int] = (2024, 2024, 2010)


# ======================================================================
# Lookup results
# ======================================================================

@dataclass(frozen=True)
class Found:
    """Successful lookup: pollutant name -> value."""

    values: Mapping[str, float]

    def __getitem__(self, pollutant: str) -> float:
        return self.values[pollutant]

    def __contains__(self, pollutant: object) -> bool:
        return pollutant in self.values


@dataclass(frozen=True)
class NotAvailable:
    """Lookup could not be resolved for this site."""

    reason: str = field(default="")


LookupResult = Found | NotAvailable


# ======================================================================
# Internal helpers
# ======================================================================

def _site_cells(
    grids: list[EmissionsCostGrid], ix: int, iy: int
) -> list[dict[str, float]] | None:
    """Read the three pollutant layers at a cell from each grid.

    Returns ``None`` when the cell falls outside any grid.
    """
    out = []
    for grid in grids:
        cell: dict[str, float] = {}
        for pollutant, layer in POLLUTANT_LAYERS.items():
            value = grid.cost_at(layer, ix, iy)
            if value is None:
                return None
            cell[pollutant] = value
        out.append(cell)
    return out


def _lookup(
    lat: float,
    lon: float,
    release_class: str,
    year_triples: list[tuple[int, int, int]],
    cache: EmissionsGridCache | None,
    datum: str | None,
) -> list[dict[str, float]] | NotAvailable:
    extra = {"latitude": lat, "longitude": lon, "release_class": release_class}

    try:
        x, y = to_grid_index(lon, lat, datum=datum or settings.default_datum)
    except ProjectionError as exc:
        logger.error("Could not project point (%s, %s): %s", lat, lon, exc, extra=extra)
        return NotAvailable(f"projection failed: {exc}")

    cache = cache if cache is not None else EmissionsGridCache()
    try:
        grids = [cache.get(release_class, *years) for years in year_triples]
    except OSError as exc:
        logger.error("Could not load EASIUR %s data: %s", release_class, exc, extra=extra)
        return NotAvailable(f"dataset unavailable: {exc}")

    try:
        # CAMx grid indices are one-based.
        cells = _site_cells(grids, x - 1, y - 1)
    except KeyError as exc:
        logger.error("EASIUR %s data has no layer %s", release_class, exc, extra=extra)
        return NotAvailable(f"dataset missing layer {exc}")

    if cells is None:
        logger.error(
            "Could not look up EASIUR health costs from point (%s, %s). "
            "Location is likely invalid or outside the CAMx grid.",
            lat, lon, extra=extra,
        )
        return NotAvailable(f"grid cell ({x}, {y}) is outside the CAMx grid")

    return cells


# ======================================================================
# Public API
# ======================================================================

def resolve_costs(
    lat: float,
    lon: float,
    site_kind: str,
    cache: EmissionsGridCache | None = None,
    datum: str | None = None,
) -> LookupResult:
    """Health damage cost per tonne (2020 USD) of NOx, SO2 and PM2.5.

    Parameters
    ----------
    lat, lon : float
        Site coordinates in decimal degrees.
    site_kind : str
        ``"grid"`` for emissions associated with purchased electricity,
        ``"onsite"`` for onsite fuel burn.
    cache : EmissionsGridCache, optional
        Shared grid cache; a throwaway cache is used when omitted.
    datum : str, optional
        Geodetic datum of *lat*/*lon*; defaults to ``settings.default_datum``.

    Returns
    -------
    Found or NotAvailable
    """
    release_class = SITE_KIND_RELEASE.get(site_kind)
    if release_class is None:
        logger.warning(
            "site_kind must equal either 'grid' or 'onsite', got '%s'", site_kind,
            extra={"site_kind": site_kind},
        )
        return NotAvailable(f"unknown site_kind '{site_kind}'")

    cells = _lookup(lat, lon, release_class, [COST_YEARS], cache, datum)
    if isinstance(cells, NotAvailable):
        return cells

    return Found({p: cost * USD_2010_TO_2020 for p, cost in cells[0].items()})


def resolve_escalation(
    lat: float,
    lon: float,
    baseline_inflation: float,
    cache: EmissionsGridCache | None = None,
    datum: str | None = None,
) -> LookupResult:
    """Nominal annual escalation rate of health damage costs per pollutant.

    The real growth rate is the 2020 -> 2024 compound annual change in
    the 150 m release costs; *baseline_inflation* is added to make it
    nominal::

        rate = (cost_2024 / cost_2020) ** (1/4) - 1 + baseline_inflation

    A pollutant whose 2020 cost is not positive has no growth rate and
    is left out of the result; the others are still returned.  If no
    pollutant can be resolved the result is :class:`NotAvailable`.
    """
    cells = _lookup(lat, lon, "p150", [COST_YEARS, ESCALATION_YEARS], cache, datum)
    if isinstance(cells, NotAvailable):
        return cells

    start, end = cells
    rates: dict[str, float] = {}
    for pollutant in POLLUTANTS:
        if start[pollutant] <= 0:
            logger.error(
                "Non-positive 2020 %s cost at (%s, %s); cannot compute its escalation rate",
                pollutant, lat, lon,
                extra={"latitude": lat, "longitude": lon, "release_class": "p150"},
            )
            continue
        growth = (end[pollutant] / start[pollutant]) ** (1 / 4) - 1
        rates[pollutant] = growth + baseline_inflation

    if not rates:
        return NotAvailable("non-positive 2020 cost for every pollutant")
    return Found(rates)
