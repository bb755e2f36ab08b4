"""Shared test fixtures for sitefin tests."""

from __future__ import annotations

from pathlib import Path

import h5py
import numpy as np
import pytest
from numpy.typing import NDArray

from sitefin.emissions.easiur import (
    EmissionsGridCache,
    RELEASE_CLASSES,
    base_filename,
    growth_filename,
)

GRID_SHAPE = (148, 112)

# ======================================================================
# Synthetic EASIUR datasets
# ======================================================================

# Base $/tonne per layer; each cell adds 10*ix + iy so lookups are
# position-sensitive.  "area" costs are twice the stack costs.
_LAYER_BASE = {
    "NOX_Annual": 5_000.0,
    "SO2_Annual": 20_000.0,
    "PEC_Annual": 150_000.0,
    "NH3_Annual": 60_000.0,
}
_CLASS_SCALE = {"area": 2.0, "p150": 1.0, "p300": 0.8}

# Annual population growth rate per layer.
GROWTH_RATES = {
    "NOX_Annual": 1.01,
    "SO2_Annual": 1.005,
    "PEC_Annual": 1.02,
    "NH3_Annual": 1.0,
}


def _base_layer(release_class: str, layer: str) -> NDArray[np.float64]:
    base = _LAYER_BASE[layer] * _CLASS_SCALE[release_class]
    return np.fromfunction(
        lambda i, j: base + 10.0 * i + j, GRID_SHAPE, dtype=np.float64
    )


@pytest.fixture
def easiur_layers() -> dict[str, dict[str, NDArray[np.float64]]]:
    """2005-baseline layers keyed by release class, then dataset name."""
    return {
        rc: {layer: _base_layer(rc, layer) for layer in _LAYER_BASE}
        for rc in RELEASE_CLASSES
    }


@pytest.fixture
def growth_rates() -> dict[str, float]:
    return dict(GROWTH_RATES)


def _write_easiur_files(data_dir: Path, layers_by_class) -> None:
    for rc, layers in layers_by_class.items():
        with h5py.File(data_dir / base_filename(rc), "w") as fh:
            for name, arr in layers.items():
                fh.create_dataset(name, data=arr)
        with h5py.File(data_dir / growth_filename(rc), "w") as fh:
            for name, rate in GROWTH_RATES.items():
                fh.create_dataset(name, data=np.full(GRID_SHAPE, rate))


@pytest.fixture
def easiur_data_dir(tmp_path: Path, easiur_layers) -> Path:
    """Directory of synthetic base and growth-rate HDF5 files."""
    data_dir = tmp_path / "easiur"
    data_dir.mkdir()
    _write_easiur_files(data_dir, easiur_layers)
    return data_dir


@pytest.fixture
def make_zeroed_cache(tmp_path: Path, easiur_layers):
    """Factory: cache over datasets with given layers zeroed at one cell.

    ``make_zeroed_cache(["SO2_Annual"], (76, 58))`` zeroes that layer at
    zero-based cell ``(76, 58)`` in every release class.
    """

    def _make(layer_names, cell: tuple[int, int]) -> EmissionsGridCache:
        data_dir = tmp_path / ("zeroed-" + "-".join(layer_names))
        data_dir.mkdir()
        layers_by_class = {
            rc: {name: arr.copy() for name, arr in layers.items()}
            for rc, layers in easiur_layers.items()
        }
        for layers in layers_by_class.values():
            for name in layer_names:
                layers[name][cell] = 0.0
        _write_easiur_files(data_dir, layers_by_class)
        return EmissionsGridCache(data_dir)

    return _make


@pytest.fixture
def grid_cache(easiur_data_dir: Path) -> EmissionsGridCache:
    return EmissionsGridCache(easiur_data_dir)


@pytest.fixture
def missing_data_cache(tmp_path: Path) -> EmissionsGridCache:
    """Cache pointing at a directory without any datasets."""
    return EmissionsGridCache(tmp_path / "does-not-exist")
