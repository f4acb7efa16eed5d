"""Geographic and scene-space value types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True, slots=True)
class GeographicCoordinate:
    """A latitude/longitude pair in degrees.

    Values are not validated: latitudes outside [-90, 90] and unnormalised
    longitudes are carried as given.
    """

    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        return self.latitude, self.longitude


@dataclass(frozen=True, slots=True)
class CartesianPosition:
    """A point in the scene's Y-up coordinate space."""

    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.x, self.y, self.z

    @classmethod
    def zero(cls) -> "CartesianPosition":
        return cls(0.0, 0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Color3:
    """RGB colour with components in [0, 1]."""

    r: float
    g: float
    b: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.r, self.g, self.b

    @classmethod
    def red(cls) -> "Color3":
        return cls(1.0, 0.0, 0.0)

    @classmethod
    def green(cls) -> "Color3":
        return cls(0.0, 1.0, 0.0)

    @classmethod
    def white(cls) -> "Color3":
        return cls(1.0, 1.0, 1.0)

    @classmethod
    def gray(cls, level: float) -> "Color3":
        return cls(level, level, level)
