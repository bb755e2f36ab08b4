"""Geodetic <-> CAMx grid coordinate conversion.

The EASIUR datasets are laid out on the CAMx 148 x 112 grid with 36 km
cells over a Lambert conformal conic projection of North America.  Grid
coordinates follow the CAMx convention and start at 1, so the projected
easting/northing in metres maps to::

    x = X / 36000 + 1      (1 .. 148)
    y = Y / 36000 + 1      (1 .. 112)
"""

from __future__ import annotations

import math

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from sitefin.exceptions import ProjectionError

# ======================================================================
# Constants
# ======================================================================

GRID_SHAPE: tuple[int, int] = (148, 112)
CELL_SIZE_M: float = 36_000.0

# Spherical earth, no datum shift (lat/lon are used as-is on the sphere).
LCP_US: str = (
    "+proj=lcc +a=6370000.0 +b=6370000.0 +lon_0=-97 +lat_0=40 "
    "+lat_1=33 +lat_2=45 +x_0=2736000.0 +y_0=2088000.0 +units=m +no_defs"
)

DATUMS: dict[str, str] = {
    "NAD83": "EPSG:4269",
    "WGS84": "EPSG:4326",
}


# ======================================================================
# Internal helpers
# ======================================================================

def _transformer(datum: str, inverse: bool) -> Transformer:
    """Build a transformer between *datum* and the CAMx LCC projection."""
    try:
        geodetic = CRS.from_user_input(DATUMS[datum])
    except KeyError:
        raise ProjectionError(
            f"Unknown datum '{datum}'. Choose from: {sorted(DATUMS)}"
        ) from None

    try:
        lcp = CRS.from_proj4(LCP_US)
        if inverse:
            return Transformer.from_crs(lcp, geodetic, always_xy=True)
        return Transformer.from_crs(geodetic, lcp, always_xy=True)
    except (CRSError, ProjError) as exc:
        raise ProjectionError(f"Cannot build {datum} transform: {exc}") from exc


def _checked(a: float, b: float, what: str) -> tuple[float, float]:
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ProjectionError(f"{what} produced non-finite coordinates ({a}, {b})")
    return a, b


# ======================================================================
# Public API
# ======================================================================

def project(lon: float, lat: float, datum: str = "NAD83") -> tuple[float, float]:
    """Convert geodetic (lon, lat) to fractional CAMx grid (x, y).

    Parameters
    ----------
    lon, lat : float
        Site longitude and latitude in decimal degrees.
    datum : str
        ``"NAD83"`` (default) or ``"WGS84"``.

    Returns
    -------
    tuple[float, float]
        One-based grid coordinates; not rounded and not bounds-checked.

    Raises
    ------
    ProjectionError
        If the datum is unknown or the point cannot be projected.
    """
    transformer = _transformer(datum, inverse=False)
    try:
        x_m, y_m = transformer.transform(float(lon), float(lat), errcheck=True)
    except ProjError as exc:
        raise ProjectionError(f"Cannot project ({lat}, {lon}): {exc}") from exc

    x_m, y_m = _checked(x_m, y_m, f"Projection of ({lat}, {lon})")
    return x_m / CELL_SIZE_M + 1.0, y_m / CELL_SIZE_M + 1.0


def unproject(x: float, y: float, datum: str = "NAD83") -> tuple[float, float]:
    """Convert CAMx grid (x, y) back to geodetic (lon, lat)."""
    transformer = _transformer(datum, inverse=True)
    try:
        lon, lat = transformer.transform(
            (float(x) - 1.0) * CELL_SIZE_M,
            (float(y) - 1.0) * CELL_SIZE_M,
            errcheck=True,
        )
    except ProjError as exc:
        raise ProjectionError(f"Cannot unproject grid point ({x}, {y}): {exc}") from exc

    return _checked(lon, lat, f"Inverse projection of ({x}, {y})")


def to_grid_index(lon: float, lat: float, datum: str = "NAD83") -> tuple[int, int]:
    """Project and round to the nearest one-based grid cell."""
    x, y = project(lon, lat, datum=datum)
    return int(round(x)), int(round(y))
