"""GLB/glTF model loading into scene-graph nodes."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np
import trimesh
from loguru import logger

from ..models.geo import Color3
from ..scene.graph import Mesh, StandardMaterial, TransformNode
from .textures import prepare_texture

ROOT_NODE_NAME = "__root__"


class ModelLoadError(RuntimeError):
    """Raised when a model file exists but cannot be turned into geometry."""


@dataclass(slots=True)
class LoadedModel:
    """Detached node hierarchy produced from a model file."""

    root: TransformNode
    meshes: list[Mesh] = field(default_factory=list)
    source_path: Optional[Path] = None

    @property
    def nodes(self) -> list[TransformNode]:
        return [self.root, *self.meshes]

    @property
    def triangle_count(self) -> int:
        return sum(0 if m.indices is None else m.indices.size // 3 for m in self.meshes)


def load_model(path: Path, texture_override: Optional[np.ndarray] = None) -> LoadedModel:
    """Load a model file and return its meshes parented under a ``__root__`` node.

    Node transforms are baked into the vertex data. Textures are stored with
    rows flipped bottom-up so that they match trimesh's OpenGL UV convention.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ModelLoadError: If the file cannot be parsed or holds no triangle geometry.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Unable to read model file: {path}")

    try:
        loaded = trimesh.load(str(path), force="scene")
    except Exception as exc:  # noqa: BLE001
        raise ModelLoadError(f"Failed to parse model {path}: {exc}") from exc

    root = TransformNode(ROOT_NODE_NAME)
    model = LoadedModel(root=root, source_path=path)
    for node_name in loaded.graph.nodes_geometry:
        transform, geometry_name = loaded.graph[node_name]
        geometry = loaded.geometry.get(geometry_name)
        if not isinstance(geometry, trimesh.Trimesh) or len(geometry.faces) == 0:
            logger.debug("Skipping non-triangle geometry {} in {}", geometry_name, path)
            continue
        baked = geometry.copy()
        baked.apply_transform(transform)
        mesh = _mesh_from_trimesh(str(node_name), baked)
        mesh.parent = root
        model.meshes.append(mesh)

    if not model.meshes:
        raise ModelLoadError(f"Model {path} contains no triangle geometry")

    if texture_override is not None:
        apply_texture_override(model, texture_override)

    logger.info(
        "Loaded model {} with {} meshes and {} triangles",
        path,
        len(model.meshes),
        model.triangle_count,
    )
    return model


def apply_texture_override(model: LoadedModel, image: np.ndarray) -> int:
    """Replace the texture of every mesh carrying UVs; returns the number changed."""
    texture = np.flipud(prepare_texture(image)).copy()
    changed = 0
    for mesh in model.meshes:
        if mesh.uvs is None:
            continue
        mesh.texture = texture
        changed += 1
    if changed == 0:
        logger.warning("Texture override ignored: no mesh in the model has UV coordinates")
    return changed


def _mesh_from_trimesh(name: str, geometry: trimesh.Trimesh) -> Mesh:
    uvs = None
    texture = None
    colors = None
    material = StandardMaterial(f"{name}_mat")

    visual = geometry.visual
    kind = getattr(visual, "kind", None)
    if kind == "texture":
        uv = getattr(visual, "uv", None)
        source_material = getattr(visual, "material", None)
        image = _material_image(source_material)
        if uv is not None:
            uvs = np.asarray(uv, dtype=np.float32)
        if uvs is not None and image is not None:
            texture = np.flipud(prepare_texture(np.asarray(image.convert("RGB")))).copy()
        main_color = getattr(source_material, "main_color", None)
        if main_color is not None and texture is None:
            rgba = np.asarray(main_color, dtype=np.float64) / 255.0
            material.diffuse_color = Color3(*rgba[:3])
    elif kind == "vertex":
        colors = np.asarray(visual.vertex_colors, dtype=np.float32) / 255.0

    mesh = Mesh(
        name,
        np.asarray(geometry.vertices),
        indices=np.asarray(geometry.faces),
        normals=np.asarray(geometry.vertex_normals),
        uvs=uvs,
        colors=colors,
        texture=texture,
    )
    mesh.material = material
    return mesh


def _material_image(material):
    if material is None:
        return None
    image = getattr(material, "baseColorTexture", None)
    if image is None:
        image = getattr(material, "image", None)
    return image
