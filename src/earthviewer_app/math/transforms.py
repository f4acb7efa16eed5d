"""Homogeneous 4x4 transform helpers used by the scene graph and renderer.

Matrices act on column vectors (``M @ [x, y, z, 1]``). OpenGL expects
column-major storage, so callers uploading a matrix pass ``gl_matrix(m)``.
"""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

# The scene uses a left-handed, Y-up space; OpenGL is right-handed.
Z_FLIP = np.diag([1.0, 1.0, -1.0, 1.0])


def identity() -> np.ndarray:
    return np.eye(4, dtype=np.float64)


def translation_matrix(x: float, y: float, z: float) -> np.ndarray:
    m = identity()
    m[:3, 3] = (x, y, z)
    return m


def scaling_matrix(sx: float, sy: float, sz: float) -> np.ndarray:
    return np.diag([sx, sy, sz, 1.0]).astype(np.float64)


def rotation_x(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    m = identity()
    m[1, 1], m[1, 2] = c, -s
    m[2, 1], m[2, 2] = s, c
    return m


def rotation_y(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    m = identity()
    m[0, 0], m[0, 2] = c, s
    m[2, 0], m[2, 2] = -s, c
    return m


def rotation_z(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    m = identity()
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


def compose_trs(
    position: Sequence[float],
    rotation: Sequence[float],
    scaling: Sequence[float],
) -> np.ndarray:
    """Build a local transform: scale, then roll (z), pitch (x), yaw (y), then translate."""
    rx, ry, rz = rotation
    return (
        translation_matrix(*position)
        @ rotation_y(ry)
        @ rotation_x(rx)
        @ rotation_z(rz)
        @ scaling_matrix(*scaling)
    )


def look_at(eye: Sequence[float], target: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """Right-handed view matrix equivalent to ``gluLookAt``."""
    eye_v = np.asarray(eye, dtype=np.float64)
    forward = np.asarray(target, dtype=np.float64) - eye_v
    forward_norm = float(np.linalg.norm(forward))
    if forward_norm <= 1e-12:
        raise ValueError("Camera eye and target coincide.")
    forward /= forward_norm

    side = np.cross(forward, np.asarray(up, dtype=np.float64))
    side_norm = float(np.linalg.norm(side))
    if side_norm <= 1e-12:
        # Looking straight along the up axis: pick a stable alternative.
        alt_up = np.array([0.0, 0.0, 1.0]) if abs(forward[2]) < 0.95 else np.array([1.0, 0.0, 0.0])
        side = np.cross(forward, alt_up)
        side_norm = float(np.linalg.norm(side))
    side /= side_norm
    true_up = np.cross(side, forward)

    m = identity()
    m[0, :3] = side
    m[1, :3] = true_up
    m[2, :3] = -forward
    m[:3, 3] = (-float(side @ eye_v), -float(true_up @ eye_v), float(forward @ eye_v))
    return m


def perspective(fov_y_rad: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Projection matrix equivalent to ``gluPerspective``."""
    f = 1.0 / math.tan(fov_y_rad / 2.0)
    m = np.zeros((4, 4), dtype=np.float64)
    m[0, 0] = f / max(aspect, 1e-9)
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = (2.0 * far * near) / (near - far)
    m[3, 2] = -1.0
    return m


def transform_point(matrix: np.ndarray, point: Sequence[float]) -> np.ndarray:
    """Apply an affine transform to a 3D point."""
    p = np.array([point[0], point[1], point[2], 1.0], dtype=np.float64)
    out = matrix @ p
    if abs(out[3]) > 1e-12 and out[3] != 1.0:
        out = out / out[3]
    return out[:3]


def project_to_screen(
    view_projection: np.ndarray,
    point: Sequence[float],
    width: float,
    height: float,
) -> Optional[Tuple[float, float]]:
    """Project a world-space point to pixel coordinates (origin top-left).

    Returns ``None`` for points behind the camera or outside the viewport.
    """
    clip = view_projection @ np.array([point[0], point[1], point[2], 1.0], dtype=np.float64)
    if clip[3] <= 1e-9:
        return None
    x_ndc = clip[0] / clip[3]
    y_ndc = clip[1] / clip[3]
    if abs(x_ndc) > 1.0 or abs(y_ndc) > 1.0:
        return None
    x_px = ((x_ndc + 1.0) * 0.5) * width
    y_px = ((1.0 - y_ndc) * 0.5) * height
    return float(x_px), float(y_px)


def gl_matrix(matrix: np.ndarray) -> np.ndarray:
    """Return ``matrix`` as contiguous column-major float32 data for OpenGL."""
    return np.ascontiguousarray(matrix.T, dtype=np.float32)
