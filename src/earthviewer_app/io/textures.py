"""Texture image helpers."""
from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
from loguru import logger

MAX_TEXTURE_SIZE = 4096


def load_texture_image(path: Path) -> np.ndarray:
    """Load an equirectangular texture as RGB uint8."""
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Unable to read texture image: {path}")
    image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    logger.debug("Loaded texture {} with shape {}", path, image.shape)
    return prepare_texture(image)


def prepare_texture(image: np.ndarray, max_size: int = MAX_TEXTURE_SIZE) -> np.ndarray:
    """Coerce an image to contiguous RGB uint8 no larger than ``max_size`` per side."""
    image = np.asarray(image)
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)
    elif image.ndim == 3 and image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_RGBA2RGB)
    elif image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Unsupported texture shape: {image.shape}")

    if image.dtype != np.uint8:
        if np.issubdtype(image.dtype, np.floating):
            image = np.clip(image * 255.0, 0, 255).astype(np.uint8)
        else:
            image = np.clip(image, 0, 255).astype(np.uint8)

    height, width = image.shape[:2]
    longest = max(height, width)
    if longest > max_size:
        scale = max_size / float(longest)
        new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
        logger.info("Downscaling texture from {}x{} to {}x{}", width, height, *new_size)
        image = cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)
    return np.ascontiguousarray(image)
