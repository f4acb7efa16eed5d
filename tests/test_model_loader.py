from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest
import trimesh
from PIL import Image

from earthviewer_app.io.model_loader import ROOT_NODE_NAME, ModelLoadError, apply_texture_override, load_model
from earthviewer_app.io.textures import load_texture_image, prepare_texture


def _write_globe(path: Path, radius: float = 29.0) -> None:
    sphere = trimesh.creation.icosphere(subdivisions=1, radius=radius)
    sphere.export(str(path))
    if not path.exists():
        raise RuntimeError(f"Failed to export test model to {path}")


def _write_textured_quad(path: Path) -> None:
    vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    uv = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    pixels = np.array([[[255, 0, 0], [255, 0, 0]], [[0, 0, 255], [0, 0, 255]]], dtype=np.uint8)
    visual = trimesh.visual.TextureVisuals(uv=uv, image=Image.fromarray(pixels))
    trimesh.Trimesh(vertices=vertices, faces=faces, visual=visual, process=False).export(str(path))


def test_load_model_builds_root_with_meshes(tmp_path: Path):
    model_path = tmp_path / "earth.glb"
    _write_globe(model_path)

    model = load_model(model_path)

    assert model.root.name == ROOT_NODE_NAME
    assert model.source_path == model_path
    assert model.meshes
    assert all(mesh.parent is model.root for mesh in model.meshes)
    assert model.triangle_count == 80
    vertices = np.vstack([mesh.vertices for mesh in model.meshes])
    np.testing.assert_allclose(np.linalg.norm(vertices, axis=1), 29.0, rtol=1e-4)
    assert model.nodes[0] is model.root


def test_load_model_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_model(tmp_path / "missing.glb")


def test_load_model_rejects_garbage(tmp_path: Path):
    bad = tmp_path / "bad.glb"
    bad.write_bytes(b"definitely not a binary glTF file")
    with pytest.raises(ModelLoadError):
        load_model(bad)


def test_texture_override_skips_meshes_without_uvs(tmp_path: Path):
    model_path = tmp_path / "earth.glb"
    _write_globe(model_path)
    model = load_model(model_path)

    changed = apply_texture_override(model, np.zeros((8, 16, 3), dtype=np.uint8))
    assert changed == 0
    assert all(mesh.texture is None for mesh in model.meshes)


def test_load_model_keeps_uvs_and_flipped_texture(tmp_path: Path):
    model_path = tmp_path / "quad.glb"
    _write_textured_quad(model_path)

    model = load_model(model_path)

    assert len(model.meshes) == 1
    mesh = model.meshes[0]
    assert mesh.uvs is not None
    assert mesh.uvs.shape == (mesh.vertex_count, 2)
    assert mesh.texture.shape == (2, 2, 3)
    assert mesh.texture.dtype == np.uint8
    # rows are flipped for GL upload: the bottom (blue) row comes first
    np.testing.assert_array_equal(mesh.texture[0, 0], [0, 0, 255])
    np.testing.assert_array_equal(mesh.texture[1, 0], [255, 0, 0])


def test_texture_override_replaces_textured_meshes(tmp_path: Path):
    model_path = tmp_path / "quad.glb"
    _write_textured_quad(model_path)
    model = load_model(model_path)
    override = np.zeros((4, 8, 3), dtype=np.uint8)
    override[0] = (0, 255, 0)

    changed = apply_texture_override(model, override)

    assert changed == len(model.meshes) == 1
    texture = model.meshes[0].texture
    assert texture.shape == (4, 8, 3)
    np.testing.assert_array_equal(texture[-1, 0], [0, 255, 0])
    np.testing.assert_array_equal(texture[0, 0], [0, 0, 0])


def test_prepare_texture_converts_and_downscales():
    gray = np.full((100, 200), 128, dtype=np.uint8)
    rgb = prepare_texture(gray, max_size=64)
    assert rgb.shape == (32, 64, 3)
    assert rgb.dtype == np.uint8

    rgba = np.zeros((4, 4, 4), dtype=np.uint8)
    assert prepare_texture(rgba).shape == (4, 4, 3)

    floats = np.ones((2, 2, 3), dtype=np.float32)
    assert int(prepare_texture(floats).max()) == 255

    with pytest.raises(ValueError):
        prepare_texture(np.zeros((2, 2, 2), dtype=np.uint8))


def test_load_texture_image_returns_rgb(tmp_path: Path):
    bgr = np.zeros((4, 8, 3), dtype=np.uint8)
    bgr[..., 0] = 255  # blue in OpenCV channel order
    path = tmp_path / "earth.png"
    assert cv2.imwrite(str(path), bgr)

    image = load_texture_image(path)
    assert image.shape == (4, 8, 3)
    assert np.all(image[..., 2] == 255)
    assert np.all(image[..., 0] == 0)


def test_load_texture_image_missing(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_texture_image(tmp_path / "nope.png")
