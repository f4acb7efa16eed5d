import math

import numpy as np
import pytest

from earthviewer_app.math import geo_mapping
from earthviewer_app.models.geo import CartesianPosition, GeographicCoordinate


def assert_position(position, expected, tol=1e-9):
    assert math.isclose(position.x, expected[0], abs_tol=tol)
    assert math.isclose(position.y, expected[1], abs_tol=tol)
    assert math.isclose(position.z, expected[2], abs_tol=tol)


@pytest.mark.parametrize("radius", [1.0, 5.19, 8.4, 100.0])
def test_prime_meridian_on_equator_maps_to_negative_x(radius):
    position = geo_mapping.lat_lon_to_position(0.0, 0.0, radius)
    assert_position(position, (-radius, 0.0, 0.0))


@pytest.mark.parametrize("radius", [1.0, 5.19, 8.4])
def test_antimeridian_maps_to_positive_x(radius):
    position = geo_mapping.lat_lon_to_position(0.0, -180.0, radius)
    assert_position(position, (radius, 0.0, 0.0))


@pytest.mark.parametrize("latitude", [-90.0, -45.0, 0.0, 12.5, 89.0])
def test_longitude_is_periodic(latitude):
    a = geo_mapping.lat_lon_to_position(latitude, 0.0, 3.0)
    b = geo_mapping.lat_lon_to_position(latitude, -360.0, 3.0)
    assert_position(a, b.as_tuple())


@pytest.mark.parametrize("longitude", [-180.0, -43.2, 0.0, 151.2, 720.0])
def test_poles_lie_on_the_polar_axis(longitude):
    radius = 6.5
    north = geo_mapping.lat_lon_to_position(90.0, longitude, radius)
    south = geo_mapping.lat_lon_to_position(-90.0, longitude, radius)
    assert_position(north, (0.0, radius, 0.0))
    assert_position(south, (0.0, -radius, 0.0))


@pytest.mark.parametrize("latitude, longitude", [(0.0, 0.0), (-22.9, -43.2), (123.0, 999.0)])
def test_zero_radius_collapses_to_origin(latitude, longitude):
    position = geo_mapping.lat_lon_to_position(latitude, longitude, 0.0)
    assert_position(position, (0.0, 0.0, 0.0), tol=0.0)


def test_mapping_is_deterministic():
    a = geo_mapping.lat_lon_to_position(-33.86, 151.20, 5.19)
    b = geo_mapping.lat_lon_to_position(-33.86, 151.20, 5.19)
    assert a == b
    assert a.as_tuple() == b.as_tuple()


def test_east_longitudes_rotate_towards_positive_z():
    # lon 90E: lonRad = -(270 deg) so the point sits on +Z.
    position = geo_mapping.lat_lon_to_position(0.0, 90.0, 2.0)
    assert_position(position, (0.0, 0.0, 2.0))


def test_negative_radius_reflects_through_origin():
    a = geo_mapping.lat_lon_to_position(10.0, 20.0, 4.0)
    b = geo_mapping.lat_lon_to_position(10.0, 20.0, -4.0)
    np.testing.assert_allclose(a.as_array(), -b.as_array())


def test_out_of_range_latitude_is_accepted():
    position = geo_mapping.lat_lon_to_position(120.0, 0.0, 1.0)
    assert math.isclose(np.linalg.norm(position.as_array()), 1.0, abs_tol=1e-12)


def test_custom_calibration_changes_seam():
    identity = geo_mapping.AssetCalibration(longitude_offset_deg=0.0, azimuth_sign=1.0)
    position = geo_mapping.lat_lon_to_position(0.0, 90.0, 1.0, calibration=identity)
    assert_position(position, (0.0, 0.0, 1.0))


def test_coordinate_wrapper_matches_scalar_function():
    coordinate = GeographicCoordinate(-22.90, -43.20)
    assert geo_mapping.coordinate_to_position(coordinate, 5.19) == geo_mapping.lat_lon_to_position(
        -22.90, -43.20, 5.19
    )


def test_vectorised_conversion_matches_scalar():
    latitudes = np.array([-90.0, -22.9, 0.0, 45.0, 90.0])
    longitudes = np.array([-180.0, -43.2, 0.0, 151.2, 33.0])
    points = geo_mapping.lat_lon_to_positions(latitudes, longitudes, 7.0)
    assert points.shape == (5, 3)
    for row, lat, lon in zip(points, latitudes, longitudes):
        expected = geo_mapping.lat_lon_to_position(float(lat), float(lon), 7.0)
        np.testing.assert_allclose(row, expected.as_array(), atol=1e-12)


def test_grid_ranges_are_inclusive():
    assert list(geo_mapping.grid_latitudes(30.0)) == [-90.0, -60.0, -30.0, 0.0, 30.0, 60.0, 90.0]
    longitudes = geo_mapping.grid_longitudes(30.0)
    assert longitudes[0] == -180.0
    assert longitudes[-1] == 180.0
    assert len(longitudes) == 13
    # 180 is not a multiple of 7: stop below the upper bound.
    assert geo_mapping.grid_latitudes(7.0)[-1] == pytest.approx(85.0)


def test_grid_step_must_be_positive():
    with pytest.raises(ValueError):
        geo_mapping.grid_latitudes(0.0)
    with pytest.raises(ValueError):
        geo_mapping.grid_longitudes(-5.0)


def test_latitude_circle_stays_at_constant_height():
    path = geo_mapping.latitude_circle_path(30.0, 10.0)
    assert path.shape == (73, 3)
    np.testing.assert_allclose(path[:, 1], 10.0 * math.sin(math.radians(30.0)))
    np.testing.assert_allclose(np.linalg.norm(path, axis=1), 10.0)
    # The circle closes on itself.
    np.testing.assert_allclose(path[0], path[-1], atol=1e-9)


def test_meridian_runs_pole_to_pole():
    path = geo_mapping.meridian_path(0.0, 2.0)
    assert path.shape == (37, 3)
    np.testing.assert_allclose(path[0], [0.0, -2.0, 0.0], atol=1e-9)
    np.testing.assert_allclose(path[-1], [0.0, 2.0, 0.0], atol=1e-9)


def test_root_scaling_mirrors_x():
    assert geo_mapping.DEFAULT_CALIBRATION.root_scaling(0.01) == (-0.01, 0.01, 0.01)
    unmirrored = geo_mapping.AssetCalibration(mirror_x=False)
    assert unmirrored.root_scaling(0.5) == (0.5, 0.5, 0.5)
    assert math.isclose(geo_mapping.DEFAULT_CALIBRATION.axial_tilt_rad, math.radians(23.5))


def test_cartesian_position_helpers():
    assert CartesianPosition.zero().as_tuple() == (0.0, 0.0, 0.0)
    assert CartesianPosition(1.0, 2.0, 3.0).as_array().dtype == np.float64
