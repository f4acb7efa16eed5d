"""Orbit camera around a target point."""
from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

from ..math import transforms


class ArcRotateCamera:
    """Camera constrained to a sphere around ``target``.

    ``alpha`` is the longitudinal angle around the Y axis and ``beta`` the
    latitudinal angle measured from +Y, both in radians.
    """

    def __init__(
        self,
        name: str,
        alpha: float,
        beta: float,
        radius: float,
        target: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> None:
        self.name = name
        self.alpha = float(alpha)
        self.beta = float(beta)
        self.radius = float(radius)
        self.target = np.asarray(target, dtype=np.float64).reshape(3).copy()
        self.fov = 0.8
        self.min_z = 1.0
        self.max_z = 1_000.0
        self.lower_beta_limit = 0.01
        self.upper_beta_limit = math.pi - 0.01
        self.lower_radius_limit = 1.0
        self.upper_radius_limit = 200.0
        self.angular_sensibility = 0.005
        self.wheel_factor = 0.9
        self._home = (self.alpha, self.beta, self.radius)

    @property
    def position(self) -> np.ndarray:
        sin_beta = math.sin(self.beta)
        offset = np.array(
            [
                self.radius * math.cos(self.alpha) * sin_beta,
                self.radius * math.cos(self.beta),
                self.radius * math.sin(self.alpha) * sin_beta,
            ],
            dtype=np.float64,
        )
        return self.target + offset

    def orbit(self, dx_px: float, dy_px: float) -> None:
        """Rotate around the target in response to a pointer drag."""
        self.alpha -= dx_px * self.angular_sensibility
        self.beta = float(
            np.clip(
                self.beta - dy_px * self.angular_sensibility,
                self.lower_beta_limit,
                self.upper_beta_limit,
            )
        )

    def zoom(self, steps: float) -> None:
        """Move towards (positive steps) or away from the target."""
        self.radius = float(
            np.clip(
                self.radius * math.pow(self.wheel_factor, steps),
                self.lower_radius_limit,
                self.upper_radius_limit,
            )
        )

    def reset(self) -> None:
        self.alpha, self.beta, self.radius = self._home

    def view_matrix(self) -> np.ndarray:
        """View matrix mapping the left-handed scene into OpenGL eye space."""
        flip = transforms.Z_FLIP
        eye = transforms.transform_point(flip, self.position)
        target = transforms.transform_point(flip, self.target)
        return transforms.look_at(eye, target, (0.0, 1.0, 0.0)) @ flip

    def projection_matrix(self, aspect: float) -> np.ndarray:
        return transforms.perspective(self.fov, aspect, self.min_z, self.max_z)

    def matrices(self, width: float, height: float) -> Tuple[np.ndarray, np.ndarray]:
        aspect = max(1e-3, width / max(1.0, height))
        return self.view_matrix(), self.projection_matrix(aspect)
