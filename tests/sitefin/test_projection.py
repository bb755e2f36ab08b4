"""Tests for sitefin.emissions.projection: geodetic to CAMx grid."""

from __future__ import annotations

import pytest

from sitefin.emissions.projection import (
    GRID_SHAPE,
    project,
    to_grid_index,
    unproject,
)
from sitefin.exceptions import ProjectionError

# Projection origin (lon_0, lat_0) sits at the false easting/northing.
ORIGIN_LON, ORIGIN_LAT = -97.0, 40.0
DENVER_LON, DENVER_LAT = -104.99, 39.74


class TestProject:
    """Tests for project()."""

    def test_origin_maps_to_false_origin_cell(self):
        x, y = project(ORIGIN_LON, ORIGIN_LAT)
        assert x == pytest.approx(2_736_000.0 / 36_000.0 + 1, abs=1e-6)
        assert y == pytest.approx(2_088_000.0 / 36_000.0 + 1, abs=1e-6)

    @pytest.mark.parametrize("datum", ["NAD83", "WGS84"])
    def test_both_datums_supported(self, datum):
        x, y = project(DENVER_LON, DENVER_LAT, datum=datum)
        assert 1 <= x <= GRID_SHAPE[0]
        assert 1 <= y <= GRID_SHAPE[1]

    def test_west_of_origin_has_smaller_x(self):
        x_denver, _ = project(DENVER_LON, DENVER_LAT)
        x_origin, _ = project(ORIGIN_LON, ORIGIN_LAT)
        assert x_denver < x_origin

    def test_north_of_origin_has_larger_y(self):
        _, y_north = project(ORIGIN_LON, 45.0)
        _, y_origin = project(ORIGIN_LON, ORIGIN_LAT)
        assert y_north > y_origin

    def test_unknown_datum(self):
        with pytest.raises(ProjectionError, match="Unknown datum"):
            project(DENVER_LON, DENVER_LAT, datum="ED50")

    def test_out_of_grid_point_is_not_bounds_checked(self):
        """Points outside the domain still project; callers check bounds."""
        x, y = project(0.0, 0.0)
        assert not (1 <= x <= GRID_SHAPE[0] and 1 <= y <= GRID_SHAPE[1])


class TestUnproject:
    """Tests for unproject()."""

    def test_inverse_of_origin(self):
        lon, lat = unproject(77.0, 59.0)
        assert lon == pytest.approx(ORIGIN_LON, abs=1e-6)
        assert lat == pytest.approx(ORIGIN_LAT, abs=1e-6)

    @pytest.mark.parametrize("datum", ["NAD83", "WGS84"])
    def test_inverts_project(self, datum):
        x, y = project(DENVER_LON, DENVER_LAT, datum=datum)
        lon, lat = unproject(x, y, datum=datum)
        assert lon == pytest.approx(DENVER_LON, abs=1e-6)
        assert lat == pytest.approx(DENVER_LAT, abs=1e-6)

    def test_unknown_datum(self):
        with pytest.raises(ProjectionError):
            unproject(77.0, 59.0, datum="nope")


class TestToGridIndex:
    """Tests for to_grid_index()."""

    def test_origin_cell(self):
        assert to_grid_index(ORIGIN_LON, ORIGIN_LAT) == (77, 59)

    def test_returns_ints(self):
        ix, iy = to_grid_index(DENVER_LON, DENVER_LAT)
        assert isinstance(ix, int) and isinstance(iy, int)

    def test_rounds_to_nearest(self):
        x, y = project(DENVER_LON, DENVER_LAT)
        assert to_grid_index(DENVER_LON, DENVER_LAT) == (round(x), round(y))

    def test_half_cell_offset_stays_in_cell(self):
        """A point 0.4 cells east of the origin still rounds to the origin cell."""
        lon, lat = unproject(77.4, 59.0)
        assert to_grid_index(lon, lat) == (77, 59)
