"""Decoding of user-supplied images into :class:`SourceImage` values."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

from glow_portrait.errors import InvalidInput
from glow_portrait.models import SourceImage


def decode_source_image(data: bytes) -> SourceImage:
    """Decode encoded image bytes (PNG, JPEG, ...) from an upload."""
    if not data:
        raise InvalidInput("Image data is empty")
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise InvalidInput("Image data could not be decoded")
    return SourceImage.from_array(image, order="bgr")


def load_source_image(path: Path | str) -> SourceImage:
    """Read an image file picked by the user."""
    image_path = Path(path)
    if not image_path.is_file():
        raise InvalidInput(f"Image file not found: {image_path}")
    return decode_source_image(image_path.read_bytes())


__all__ = ["decode_source_image", "load_source_image"]
