"""EASIUR marginal health-damage grids.

Loads the 2005-baseline EASIUR social-cost datasets (USD per tonne of
pollutant emitted, 8.6M USD value of statistical life) for a release
class and rescales them to a requested population year, income year and
dollar year.  Each adjustment is a separate multiplicative pass that is
skipped when the requested year equals the base year.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import h5py
import numpy as np
from numpy.typing import NDArray

from sitefin.config import settings
from sitefin.exceptions import (
    InvalidReleaseClass,
    UnsupportedDollarYear,
    UnsupportedIncomeYear,
)

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

RELEASE_CLASSES: tuple[str, ...] = ("area", "p150", "p300")

BASE_POP_YEAR: int = 2005
BASE_INCOME_YEAR: int = 2005
BASE_DOLLAR_YEAR: int = 2010

# Mortality income growth adjustment factors (BenMAP).
INCOME_GROWTH_ADJ: dict[int, float] = {
    1990: 1.000000, 1991: 0.992025, 1992: 0.998182, 1993: 1.003087,
    1994: 1.012843, 1995: 1.016989, 1996: 1.024362, 1997: 1.034171,
    1998: 1.038842, 1999: 1.042804, 2000: 1.038542, 2001: 1.043834,
    2002: 1.049992, 2003: 1.056232, 2004: 1.062572, 2005: 1.068587,
    2006: 1.074681, 2007: 1.080843, 2008: 1.087068, 2009: 1.093349,
    2010: 1.099688, 2011: 1.111515, 2012: 1.122895, 2013: 1.133857,
    2014: 1.144425, 2015: 1.154627, 2016: 1.164482, 2017: 1.174010,
    2018: 1.183233, 2019: 1.192168, 2020: 1.200834, 2021: 1.209226,
    2022: 1.217341, 2023: 1.225191, 2024: 1.232790,
}

# GDP deflator (BenMAP), 2000 = 1.0.
GDP_DEFLATOR: dict[int, float] = {
    1980: 0.478513, 1981: 0.527875, 1982: 0.560395, 1983: 0.578397,
    1984: 0.603368, 1985: 0.624855, 1986: 0.636469, 1987: 0.659698,
    1988: 0.686992, 1989: 0.720093, 1990: 0.759001, 1991: 0.790941,
    1992: 0.814750, 1993: 0.839141, 1994: 0.860627, 1995: 0.885017,
    1996: 0.911150, 1997: 0.932056, 1998: 0.946574, 1999: 0.967480,
    2000: 1.000000, 2001: 1.028455, 2002: 1.044715, 2003: 1.068525,
    2004: 1.096980, 2005: 1.134146, 2006: 1.170732, 2007: 1.204077,
    2008: 1.250308, 2009: 1.245860, 2010: 1.266295,
}


def base_filename(release_class: str) -> str:
    return f"sc_8.6MVSL_{release_class}_pop2005.hdf5"


def growth_filename(release_class: str) -> str:
    return f"sc_growth_rate_pop2005_pop2040_{release_class}.hdf5"


# ======================================================================
# Grid container
# ======================================================================

@dataclass(frozen=True)
class EmissionsCostGrid:
    """Per-tonne damage cost layers for one release class and year triple.

    ``layers`` maps dataset names (``"NOX_Annual"``, ``"SO2_Annual"``,
    ``"PEC_Annual"``, ...) to read-only 2-D arrays indexed by zero-based
    grid cell ``[x, y]``.
    """

    release_class: str
    pop_year: int
    income_year: int
    dollar_year: int
    layers: Mapping[str, NDArray[np.float64]]

    def __getitem__(self, layer: str) -> NDArray[np.float64]:
        return self.layers[layer]

    def __contains__(self, layer: object) -> bool:
        return layer in self.layers

    def cost_at(self, layer: str, ix: int, iy: int) -> float | None:
        """Return the cell value at zero-based ``(ix, iy)``, or ``None`` if outside."""
        arr = self.layers[layer]
        if ix < 0 or iy < 0 or ix >= arr.shape[0] or iy >= arr.shape[1]:
            return None
        return float(arr[ix, iy])


# ======================================================================
# Loading
# ======================================================================

def _read_layers(path: Path) -> dict[str, NDArray[np.float64]]:
    """Read every top-level dataset in an HDF5 file as a float64 array."""
    layers: dict[str, NDArray[np.float64]] = {}
    with h5py.File(path, "r") as fh:
        for key, obj in fh.items():
            if isinstance(obj, h5py.Dataset):
                layers[key] = np.asarray(obj[()], dtype=np.float64)
    return layers


def _check_args(release_class: str, income_year: int, dollar_year: int) -> None:
    if release_class not in RELEASE_CLASSES:
        raise InvalidReleaseClass(
            f"release_class should be one of {list(RELEASE_CLASSES)}, got '{release_class}'"
        )
    if income_year not in INCOME_GROWTH_ADJ:
        raise UnsupportedIncomeYear(
            f"income year is {income_year} but must be between "
            f"{min(INCOME_GROWTH_ADJ)} and {max(INCOME_GROWTH_ADJ)}"
        )
    if dollar_year not in GDP_DEFLATOR:
        raise UnsupportedDollarYear(
            f"dollar year is {dollar_year} but must be between "
            f"{min(GDP_DEFLATOR)} and {max(GDP_DEFLATOR)}"
        )


def load_grid(
    release_class: str,
    pop_year: int = BASE_POP_YEAR,
    income_year: int = BASE_INCOME_YEAR,
    dollar_year: int = BASE_DOLLAR_YEAR,
    data_dir: Path | str | None = None,
) -> EmissionsCostGrid:
    """Load EASIUR damage costs adjusted to the requested years.

    Parameters
    ----------
    release_class : str
        ``"area"`` (ground level), ``"p150"`` (150 m stack) or ``"p300"``
        (300 m stack).
    pop_year : int
        Population year.  Growth rates from the 2005-2040 projection are
        compounded cell by cell over ``pop_year - 2005`` years.
    income_year : int
        Income level year (1990 -- 2024).
    dollar_year : int
        Dollar year of the returned costs (1980 -- 2010).
    data_dir : Path, optional
        Directory holding the HDF5 files.  Defaults to
        ``settings.easiur_data_dir``.

    Returns
    -------
    EmissionsCostGrid

    Raises
    ------
    InvalidReleaseClass, UnsupportedIncomeYear, UnsupportedDollarYear
        For arguments outside the supported tables.
    OSError
        If a dataset file is missing or unreadable.
    """
    _check_args(release_class, income_year, dollar_year)
    data_dir = Path(data_dir) if data_dir is not None else settings.easiur_data_dir

    layers = _read_layers(data_dir / base_filename(release_class))

    if pop_year != BASE_POP_YEAR:
        rates = _read_layers(data_dir / growth_filename(release_class))
        years = pop_year - BASE_POP_YEAR
        for key, rate in rates.items():
            if key in layers:
                layers[key] = layers[key] * rate ** years

    if income_year != BASE_INCOME_YEAR:
        adj = INCOME_GROWTH_ADJ[income_year] / INCOME_GROWTH_ADJ[BASE_INCOME_YEAR]
        layers = {key: v * adj for key, v in layers.items()}

    if dollar_year != BASE_DOLLAR_YEAR:
        adj = GDP_DEFLATOR[dollar_year] / GDP_DEFLATOR[BASE_DOLLAR_YEAR]
        layers = {key: v * adj for key, v in layers.items()}

    for arr in layers.values():
        arr.flags.writeable = False

    logger.debug(
        "Loaded EASIUR %s grid (pop %d, income %d, dollar %d) with %d layers",
        release_class, pop_year, income_year, dollar_year, len(layers),
    )

    return EmissionsCostGrid(
        release_class=release_class,
        pop_year=pop_year,
        income_year=income_year,
        dollar_year=dollar_year,
        layers=MappingProxyType(layers),
    )


# ======================================================================
# Cache
# ======================================================================

class EmissionsGridCache:
    """Memoises :func:`load_grid` results for the lifetime of a run.

    Concurrent requests for a key that is not cached yet are serialised
    on a per-key lock so each grid is built once.
    """

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else settings.easiur_data_dir
        self._grids: dict[tuple[str, int, int, int], EmissionsCostGrid] = {}
        self._key_locks: dict[tuple[str, int, int, int], threading.Lock] = {}
        self._lock = threading.Lock()

    def get(
        self,
        release_class: str,
        pop_year: int = BASE_POP_YEAR,
        income_year: int = BASE_INCOME_YEAR,
        dollar_year: int = BASE_DOLLAR_YEAR,
    ) -> EmissionsCostGrid:
        key = (release_class, pop_year, income_year, dollar_year)
        grid = self._grids.get(key)
        if grid is not None:
            return grid

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            grid = self._grids.get(key)
            if grid is None:
                grid = load_grid(*key, data_dir=self.data_dir)
                self._grids[key] = grid
        return grid

    def clear(self) -> None:
        with self._lock:
            self._grids.clear()
            self._key_locks.clear()

    def __len__(self) -> int:
        return len(self._grids)

    def __contains__(self, key: object) -> bool:
        return key in self._grids
