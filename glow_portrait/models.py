"""Data models shared by the renderer and its shell."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from glow_portrait.errors import InvalidInput


@dataclass(frozen=True, eq=False)
class SourceImage:
    """Immutable decoded bitmap as an ``(height, width, 4)`` uint8 RGBA array."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = self.pixels
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidInput(f"Expected an RGBA array, got shape {pixels.shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise InvalidInput(
                f"Source image has degenerate size {pixels.shape[1]}x{pixels.shape[0]}"
            )
        frozen = np.array(pixels, dtype=np.uint8, copy=True)
        frozen.flags.writeable = False
        object.__setattr__(self, "pixels", frozen)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_array(cls, array: np.ndarray, *, order: str = "rgb") -> "SourceImage":
        """Build a source from a gray, 3-channel or 4-channel array.

        Integer samples are 8-bit (uint16 is scaled down); float samples are
        intensities in [0, 1].

        ``order`` names the channel order of color input: ``"rgb"`` or ``"bgr"``
        (as returned by ``cv2.imread``).
        """
        rgba = _ensure_rgba(np.asarray(array), order)
        if rgba is None:
            raise InvalidInput(f"Unsupported image array shape {np.shape(array)}")
        return cls(rgba)


def _ensure_rgba(image: np.ndarray, order: str) -> Optional[np.ndarray]:
    if image.size == 0:
        raise InvalidInput(f"Source image has degenerate shape {image.shape}")
    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)
    elif np.issubdtype(image.dtype, np.floating):
        # Float samples are normalized intensities in [0, 1].
        if not np.all(np.isfinite(image)):
            raise InvalidInput("Source image contains NaN or infinite samples")
        image = np.rint(np.clip(image, 0.0, 1.0) * 255.0).astype(np.uint8)
    elif np.issubdtype(image.dtype, np.integer) and image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise InvalidInput(f"Unsupported image dtype {image.dtype}")
    if image.ndim == 2 or (image.ndim == 3 and image.shape[2] == 1):
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.ndim != 3:
        return None
    channels = image.shape[2]
    color_order = order.lower()
    if color_order not in {"rgb", "bgr"}:
        raise ValueError(f"Unknown channel order {order!r}")
    if channels == 3:
        code = cv2.COLOR_BGR2RGBA if color_order == "bgr" else cv2.COLOR_RGB2RGBA
        return cv2.cvtColor(image, code)
    if channels == 4:
        if color_order == "bgr":
            return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        return image
    return None


@dataclass(frozen=True)
class RenderSummary:
    """Timing and stage information for one completed render."""

    output_size: int
    stages: tuple[str, ...]
    elapsed_seconds: float
    has_source: bool


__all__ = ["RenderSummary", "SourceImage"]
