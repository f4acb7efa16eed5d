"""Minimal retained-mode scene graph rendered by :mod:`earthviewer_app.viewer.globe_widget`."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional, Sequence, Tuple

import numpy as np

from ..math import transforms
from ..models.geo import CartesianPosition, Color3

if TYPE_CHECKING:
    from .camera import ArcRotateCamera

PRIMITIVE_TRIANGLES = "triangles"
PRIMITIVE_LINE_STRIP = "line_strip"


@dataclass(slots=True)
class StandardMaterial:
    """Surface description for a mesh."""

    name: str
    diffuse_color: Color3 = field(default_factory=Color3.white)
    emissive_color: Color3 = field(default_factory=lambda: Color3(0.0, 0.0, 0.0))
    disable_lighting: bool = False


@dataclass(slots=True)
class TextLabel:
    """Text attached to a mesh and drawn as a screen-facing overlay."""

    text: str
    color: Color3 = field(default_factory=Color3.white)
    font_size: int = 50
    texture_size: int = 256


@dataclass(slots=True)
class HemisphericLight:
    name: str
    direction: Tuple[float, float, float]
    intensity: float = 1.0


@dataclass(slots=True)
class DirectionalLight:
    name: str
    direction: Tuple[float, float, float]
    intensity: float = 1.0


class TransformNode:
    """A named transform that can parent other nodes."""

    def __init__(self, name: str, scene: Optional["Scene"] = None) -> None:
        self.name = name
        self.position = np.zeros(3, dtype=np.float64)
        self.rotation = np.zeros(3, dtype=np.float64)  # x (pitch), y (yaw), z (roll) in radians
        self.scaling = np.ones(3, dtype=np.float64)
        self._parent: Optional[TransformNode] = None
        self._children: list[TransformNode] = []
        self.scene: Optional[Scene] = None
        if scene is not None:
            scene.add_node(self)

    # ------------------------------------------------------------------
    @property
    def parent(self) -> Optional["TransformNode"]:
        return self._parent

    @parent.setter
    def parent(self, node: Optional["TransformNode"]) -> None:
        if node is self:
            raise ValueError(f"Node {self.name!r} cannot parent itself")
        ancestor = node
        while ancestor is not None:
            if ancestor is self:
                raise ValueError(f"Parenting {self.name!r} under {node.name!r} would create a cycle")
            ancestor = ancestor.parent
        if self._parent is not None:
            self._parent._children.remove(self)
        self._parent = node
        if node is not None:
            node._children.append(self)

    @property
    def children(self) -> Tuple["TransformNode", ...]:
        return tuple(self._children)

    def set_position(self, position: CartesianPosition | Sequence[float]) -> None:
        if isinstance(position, CartesianPosition):
            position = position.as_tuple()
        self.position = np.asarray(position, dtype=np.float64).reshape(3).copy()

    # ------------------------------------------------------------------
    def local_matrix(self) -> np.ndarray:
        return transforms.compose_trs(self.position, self.rotation, self.scaling)

    def world_matrix(self) -> np.ndarray:
        matrix = self.local_matrix()
        node = self._parent
        while node is not None:
            matrix = node.local_matrix() @ matrix
            node = node._parent
        return matrix

    def absolute_position(self) -> np.ndarray:
        return transforms.transform_point(self.world_matrix(), (0.0, 0.0, 0.0))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Mesh(TransformNode):
    """Geometry node: triangle meshes or connected line strips."""

    def __init__(
        self,
        name: str,
        vertices: np.ndarray,
        scene: Optional["Scene"] = None,
        *,
        indices: Optional[np.ndarray] = None,
        normals: Optional[np.ndarray] = None,
        uvs: Optional[np.ndarray] = None,
        colors: Optional[np.ndarray] = None,
        texture: Optional[np.ndarray] = None,
        primitive: str = PRIMITIVE_TRIANGLES,
    ) -> None:
        super().__init__(name, scene)
        if primitive not in {PRIMITIVE_TRIANGLES, PRIMITIVE_LINE_STRIP}:
            raise ValueError(f"Unsupported primitive: {primitive}")
        self.vertices = np.ascontiguousarray(vertices, dtype=np.float32).reshape(-1, 3)
        self.indices = None if indices is None else np.ascontiguousarray(indices, dtype=np.uint32).reshape(-1)
        self.normals = None if normals is None else np.ascontiguousarray(normals, dtype=np.float32).reshape(-1, 3)
        self.uvs = None if uvs is None else np.ascontiguousarray(uvs, dtype=np.float32).reshape(-1, 2)
        self.colors = None if colors is None else np.ascontiguousarray(colors, dtype=np.float32).reshape(-1, 4)
        self.texture = texture
        self.primitive = primitive
        self.material: Optional[StandardMaterial] = None
        self.line_color = Color3.white()
        self.label: Optional[TextLabel] = None
        self.visible = True

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])


class Scene:
    """Owns nodes, lights and the active camera."""

    def __init__(self) -> None:
        self.clear_color = Color3(0.0, 0.0, 0.0)
        self._nodes: list[TransformNode] = []
        self.lights: list[HemisphericLight | DirectionalLight] = []
        self.active_camera: Optional[ArcRotateCamera] = None

    def add_node(self, node: TransformNode) -> None:
        if node.scene is self:
            return
        if node.scene is not None:
            node.scene.remove_node(node)
        node.scene = self
        self._nodes.append(node)

    def remove_node(self, node: TransformNode) -> None:
        if node.scene is not self:
            return
        self._nodes.remove(node)
        node.scene = None

    def add_light(self, light: HemisphericLight | DirectionalLight) -> None:
        self.lights.append(light)

    @property
    def nodes(self) -> Tuple[TransformNode, ...]:
        return tuple(self._nodes)

    @property
    def meshes(self) -> list[Mesh]:
        return [node for node in self._nodes if isinstance(node, Mesh)]

    def roots(self) -> list[TransformNode]:
        return [node for node in self._nodes if node.parent is None]

    def get_node_by_name(self, name: str) -> Optional[TransformNode]:
        for node in self._nodes:
            if node.name == name:
                return node
        return None

    def get_mesh_by_name(self, name: str) -> Optional[Mesh]:
        for node in self._nodes:
            if isinstance(node, Mesh) and node.name == name:
                return node
        return None

    def walk(self) -> Iterator[tuple[TransformNode, np.ndarray]]:
        """Yield every node reachable from the roots with its world matrix."""
        stack = [(root, transforms.identity()) for root in reversed(self.roots())]
        while stack:
            node, parent_matrix = stack.pop()
            world = parent_matrix @ node.local_matrix()
            yield node, world
            for child in reversed(node._children):
                stack.append((child, world))


# ----------------------------------------------------------------------
# Mesh builders


def sphere_geometry(
    diameter: float,
    lat_segments: int = 16,
    lon_segments: int = 32,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(vertices, normals, uvs, indices)`` for a UV sphere centred at the origin."""
    radius = diameter / 2.0
    vertices = []
    normals = []
    uvs = []
    for lat_idx in range(lat_segments + 1):
        v = lat_idx / lat_segments
        phi = (math.pi / 2.0) - (v * math.pi)
        cos_phi = math.cos(phi)
        sin_phi = math.sin(phi)
        for lon_idx in range(lon_segments + 1):
            u = lon_idx / lon_segments
            theta = u * (2.0 * math.pi)
            normal = (cos_phi * math.cos(theta), sin_phi, cos_phi * math.sin(theta))
            normals.append(normal)
            vertices.append(tuple(radius * c for c in normal))
            uvs.append((u, v))

    indices = []
    row = lon_segments + 1
    for lat_idx in range(lat_segments):
        for lon_idx in range(lon_segments):
            a = lat_idx * row + lon_idx
            b = a + row
            indices.extend((a, b, a + 1, a + 1, b, b + 1))

    return (
        np.asarray(vertices, dtype=np.float32),
        np.asarray(normals, dtype=np.float32),
        np.asarray(uvs, dtype=np.float32),
        np.asarray(indices, dtype=np.uint32),
    )


def create_sphere(name: str, diameter: float, scene: Scene, segments: int = 16) -> Mesh:
    vertices, normals, uvs, indices = sphere_geometry(diameter, segments, segments * 2)
    return Mesh(name, vertices, scene, indices=indices, normals=normals, uvs=uvs)


def create_lines(name: str, points: np.ndarray, scene: Scene, color: Optional[Color3] = None) -> Mesh:
    points = np.asarray(points, dtype=np.float32).reshape(-1, 3)
    if points.shape[0] < 2:
        raise ValueError(f"Line {name!r} needs at least two points")
    mesh = Mesh(name, points, scene, primitive=PRIMITIVE_LINE_STRIP)
    if color is not None:
        mesh.line_color = color
    return mesh
