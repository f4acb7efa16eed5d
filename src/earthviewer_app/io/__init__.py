"""Input helpers for Earth models and their textures."""

from .model_loader import LoadedModel, ModelLoadError, load_model
from .textures import load_texture_image, prepare_texture

__all__ = [
    "LoadedModel",
    "ModelLoadError",
    "load_model",
    "load_texture_image",
    "prepare_texture",
]
