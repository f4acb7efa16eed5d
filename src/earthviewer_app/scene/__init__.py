"""Scene graph primitives consumed by the Earth viewer and renderer."""

from .camera import ArcRotateCamera
from .graph import (
    DirectionalLight,
    HemisphericLight,
    Mesh,
    Scene,
    StandardMaterial,
    TextLabel,
    TransformNode,
    create_lines,
    create_sphere,
)

__all__ = [
    "ArcRotateCamera",
    "DirectionalLight",
    "HemisphericLight",
    "Mesh",
    "Scene",
    "StandardMaterial",
    "TextLabel",
    "TransformNode",
    "create_lines",
    "create_sphere",
]
