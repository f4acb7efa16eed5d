"""Viewer configuration and startup placements."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .models.geo import Color3

DEFAULT_MODEL_PATH = Path("assets") / "models_3D" / "Earth_Nasa.glb"


@dataclass(slots=True)
class ViewerConfig:
    """Tunable parameters of the Earth viewer."""

    scale_factor: float = 0.01
    visual_radius: float = 8.0
    rotation_speed: float = 0.0021  # radians per frame
    is_rotating: bool = True
    model_diameter: float = 58.0  # model units before scaling

    marker_altitude: float = 4.9
    marker_size: float = 0.1
    label_radius_factor: float = 1.05
    label_anchor_size: float = 0.1

    # The grid uses its own radius base, unrelated to the marker and label radii.
    grid_enabled: bool = False
    grid_step_deg: float = 30.0
    grid_base_radius: float = 10.0
    grid_radius_factor: float = 1.001
    grid_color: Color3 = field(default_factory=lambda: Color3.gray(0.4))

    show_alignment_markers: bool = True
    model_path: Path = DEFAULT_MODEL_PATH
    texture_path: Optional[Path] = None

    @property
    def earth_radius_scaled(self) -> float:
        """Surface radius of the model after the scale correction."""
        return (self.model_diameter * self.scale_factor) / 2.0


@dataclass(frozen=True, slots=True)
class MarkerPlacement:
    latitude: float
    longitude: float
    color: Optional[Color3] = None


@dataclass(frozen=True, slots=True)
class LabelPlacement:
    latitude: float
    longitude: float
    text: str


# Placed right after the model attaches, to check the texture alignment.
ALIGNMENT_MARKERS = (
    MarkerPlacement(-22.90, -43.20, Color3.green()),  # Rio de Janeiro
    MarkerPlacement(-33.86, 151.20, Color3.red()),  # Sydney
)

DEFAULT_LABELS = (
    LabelPlacement(0.0, 0.0, "Equator / Greenwich"),
    LabelPlacement(90.0, 0.0, "90°N"),
    LabelPlacement(-90.0, 0.0, "90°S"),
)

DEFAULT_MARKERS = (
    MarkerPlacement(-22.90, -43.20, Color3.green()),
    MarkerPlacement(-23.66, -52.62, Color3.green()),
)


def parse_marker_spec(spec: str) -> MarkerPlacement:
    """Parse ``LAT,LON`` or ``LAT,LON,R,G,B`` into a :class:`MarkerPlacement`."""
    parts = [part.strip() for part in spec.split(",")]
    if len(parts) not in (2, 5):
        raise ValueError(f"Marker must be LAT,LON or LAT,LON,R,G,B: {spec!r}")
    try:
        values = [float(part) for part in parts]
    except ValueError as exc:
        raise ValueError(f"Marker values must be numeric: {spec!r}") from exc

    color = None
    if len(values) == 5:
        r, g, b = values[2:]
        if not all(0.0 <= c <= 1.0 for c in (r, g, b)):
            raise ValueError(f"Marker colour components must lie in [0, 1]: {spec!r}")
        color = Color3(r, g, b)
    return MarkerPlacement(values[0], values[1], color)


def parse_label_spec(spec: str) -> LabelPlacement:
    """Parse ``LAT,LON,TEXT``; the text may itself contain commas."""
    parts = spec.split(",", 2)
    if len(parts) != 3 or not parts[2].strip():
        raise ValueError(f"Label must be LAT,LON,TEXT: {spec!r}")
    try:
        latitude = float(parts[0])
        longitude = float(parts[1])
    except ValueError as exc:
        raise ValueError(f"Label coordinates must be numeric: {spec!r}") from exc
    return LabelPlacement(latitude, longitude, parts[2].strip())


def parse_positive_float(value: str) -> float:
    """Parse a strictly positive, finite number such as a grid step in degrees."""
    try:
        number = float(value)
    except ValueError as exc:
        raise ValueError(f"Expected a number: {value!r}") from exc
    if not math.isfinite(number) or number <= 0.0:
        raise ValueError(f"Expected a positive number: {value!r}")
    return number
