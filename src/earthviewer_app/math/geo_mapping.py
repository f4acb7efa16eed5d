"""Latitude/longitude to scene-space conversion for the Earth model."""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..models.geo import CartesianPosition, GeographicCoordinate

# Calibration for the bundled Earth_Nasa.glb asset. These values align the
# model's texture seam and authoring axes with the geographic convention and
# must be re-derived when the asset changes.
LONGITUDE_OFFSET_DEG = 180.0
AZIMUTH_SIGN = -1.0
AXIAL_TILT_DEG = 23.5
ROOT_PITCH_RAD = math.pi / 2.0
MIRROR_X = True

DEFAULT_SAMPLE_STEP_DEG = 5.0


@dataclass(frozen=True, slots=True)
class AssetCalibration:
    """Orientation constants tied to a specific 3D Earth asset."""

    longitude_offset_deg: float = LONGITUDE_OFFSET_DEG
    azimuth_sign: float = AZIMUTH_SIGN
    axial_tilt_deg: float = AXIAL_TILT_DEG
    root_pitch_rad: float = ROOT_PITCH_RAD
    mirror_x: bool = MIRROR_X

    @property
    def axial_tilt_rad(self) -> float:
        return math.radians(self.axial_tilt_deg)

    def root_scaling(self, scale_factor: float) -> tuple[float, float, float]:
        """Return the root node scaling, with the X mirror applied if enabled."""
        x_scale = -scale_factor if self.mirror_x else scale_factor
        return x_scale, scale_factor, scale_factor


DEFAULT_CALIBRATION = AssetCalibration()


def lat_lon_to_position(
    latitude: float,
    longitude: float,
    radius: float,
    *,
    calibration: AssetCalibration = DEFAULT_CALIBRATION,
) -> CartesianPosition:
    """Convert a geographic coordinate and radius into a scene position.

    The longitude is shifted by the calibration offset and its sign flipped
    before the usual spherical-to-Cartesian conversion with +Y as the polar
    axis. Inputs are not validated; out-of-range latitudes and negative radii
    yield mathematically valid points.
    """
    lat_rad = latitude * (math.pi / 180.0)
    lon_adjusted = longitude + calibration.longitude_offset_deg
    lon_rad = calibration.azimuth_sign * lon_adjusted * (math.pi / 180.0)

    cos_lat = math.cos(lat_rad)
    x = radius * cos_lat * math.cos(lon_rad)
    y = radius * math.sin(lat_rad)
    z = radius * cos_lat * math.sin(lon_rad)
    return CartesianPosition(x, y, z)


def coordinate_to_position(
    coordinate: GeographicCoordinate,
    radius: float,
    *,
    calibration: AssetCalibration = DEFAULT_CALIBRATION,
) -> CartesianPosition:
    """Convenience wrapper accepting a :class:`GeographicCoordinate`."""
    return lat_lon_to_position(
        coordinate.latitude,
        coordinate.longitude,
        radius,
        calibration=calibration,
    )


def lat_lon_to_positions(
    latitudes,
    longitudes,
    radius: float,
    *,
    calibration: AssetCalibration = DEFAULT_CALIBRATION,
) -> np.ndarray:
    """Vectorised conversion returning an ``(N, 3)`` float64 array.

    ``latitudes`` and ``longitudes`` are broadcast against each other.
    """
    lat = np.asarray(latitudes, dtype=np.float64)
    lon = np.asarray(longitudes, dtype=np.float64)
    lat, lon = np.broadcast_arrays(lat, lon)

    lat_rad = lat * (math.pi / 180.0)
    lon_rad = calibration.azimuth_sign * (lon + calibration.longitude_offset_deg) * (math.pi / 180.0)

    cos_lat = np.cos(lat_rad)
    points = np.empty(lat.shape + (3,), dtype=np.float64)
    points[..., 0] = radius * cos_lat * np.cos(lon_rad)
    points[..., 1] = radius * np.sin(lat_rad)
    points[..., 2] = radius * cos_lat * np.sin(lon_rad)
    return points.reshape(-1, 3)


def _inclusive_range(start: float, stop: float, step: float) -> np.ndarray:
    if step <= 0.0:
        raise ValueError(f"Step must be positive, got {step}")
    count = int(math.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(count, dtype=np.float64)


def grid_latitudes(step_deg: float) -> np.ndarray:
    """Latitudes from -90 to 90 (inclusive when reachable) in ``step_deg`` increments."""
    return _inclusive_range(-90.0, 90.0, step_deg)


def grid_longitudes(step_deg: float) -> np.ndarray:
    """Longitudes from -180 to 180 (inclusive when reachable) in ``step_deg`` increments."""
    return _inclusive_range(-180.0, 180.0, step_deg)


def latitude_circle_path(
    latitude: float,
    radius: float,
    sample_step_deg: float = DEFAULT_SAMPLE_STEP_DEG,
    *,
    calibration: AssetCalibration = DEFAULT_CALIBRATION,
) -> np.ndarray:
    """Points tracing the parallel at ``latitude`` from -180 to 180 degrees longitude."""
    longitudes = grid_longitudes(sample_step_deg)
    return lat_lon_to_positions(latitude, longitudes, radius, calibration=calibration)


def meridian_path(
    longitude: float,
    radius: float,
    sample_step_deg: float = DEFAULT_SAMPLE_STEP_DEG,
    *,
    calibration: AssetCalibration = DEFAULT_CALIBRATION,
) -> np.ndarray:
    """Points tracing the meridian at ``longitude`` from the south to the north pole."""
    latitudes = grid_latitudes(sample_step_deg)
    return lat_lon_to_positions(latitudes, longitude, radius, calibration=calibration)
