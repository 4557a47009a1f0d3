"""Paint sources, filters and per-draw styles used by the output surface.

All paints produce premultiplied RGBA float32 pixels in ``[0, 1]``. Sample
coordinates are pixel centers, so a paint is evaluated at ``x + 0.5`` and
``y + 0.5`` for the pixel at column ``x`` and row ``y``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

import cv2
import numpy as np

# Rec. 709 luma weights used by the CSS ``saturate()`` filter, RGB order.
LUMA_WEIGHTS = np.array([0.213, 0.715, 0.072], dtype=np.float32)


@dataclass(frozen=True)
class Color:
    """Straight-alpha color with 0-255 channels and a 0-1 alpha."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_hex(cls, value: str, alpha: float = 1.0) -> "Color":
        hex_value = value.lstrip("#")
        if len(hex_value) != 6:
            raise ValueError(f"Expected a #rrggbb color, got {value!r}")
        return cls(
            r=int(hex_value[0:2], 16),
            g=int(hex_value[2:4], 16),
            b=int(hex_value[4:6], 16),
            a=alpha,
        )

    def with_alpha(self, alpha: float) -> "Color":
        return Color(self.r, self.g, self.b, alpha)

    def premultiplied(self) -> np.ndarray:
        alpha = max(0.0, min(1.0, float(self.a)))
        rgb = np.array([self.r, self.g, self.b], dtype=np.float32) / 255.0
        return np.append(np.clip(rgb, 0.0, 1.0) * alpha, alpha).astype(np.float32)

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        shape = (ys.shape[0], xs.shape[1], 4)
        return np.broadcast_to(self.premultiplied(), shape).copy()


def _interpolate(start: Color, end: Color, t: np.ndarray) -> np.ndarray:
    """Blend two stops in premultiplied space for every offset in ``t``."""
    p0 = start.premultiplied()
    p1 = end.premultiplied()
    return (p0 + (p1 - p0) * t[..., None]).astype(np.float32)


@dataclass(frozen=True)
class LinearGradient:
    """Two-stop gradient along the line from ``(x0, y0)`` to ``(x1, y1)``."""

    x0: float
    y0: float
    x1: float
    y1: float
    start: Color
    end: Color

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        dx = self.x1 - self.x0
        dy = self.y1 - self.y0
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            return np.zeros((ys.shape[0], xs.shape[1], 4), dtype=np.float32)
        t = ((xs - self.x0) * dx + (ys - self.y0) * dy) / length_sq
        return _interpolate(self.start, self.end, np.clip(t, 0.0, 1.0))


@dataclass(frozen=True)
class RadialGradient:
    """Two-stop gradient between concentric circles of radius ``r0`` and ``r1``.

    ``r0`` may exceed ``r1``; the gradient then runs inwards. Equal radii
    paint nothing.
    """

    cx: float
    cy: float
    r0: float
    r1: float
    inner: Color
    outer: Color

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        if self.r0 == self.r1:
            return np.zeros((ys.shape[0], xs.shape[1], 4), dtype=np.float32)
        distance = np.hypot(xs - self.cx, ys - self.cy)
        t = (distance - self.r0) / (self.r1 - self.r0)
        return _interpolate(self.inner, self.outer, np.clip(t, 0.0, 1.0))


class CompositeOp(str, Enum):
    NORMAL = "source-over"
    SCREEN = "screen"


@dataclass(frozen=True)
class FilterSpec:
    """Filter chain applied to a drawing before it is composited.

    Operations run in a fixed order: blur, brightness, contrast, saturate.
    Color operations work on un-premultiplied values and clamp to ``[0, 1]``
    after each step.
    """

    blur: float = 0.0
    brightness: float = 1.0
    contrast: float = 1.0
    saturation: float = 1.0

    @property
    def is_identity(self) -> bool:
        return (
            self.blur <= 0
            and self.brightness == 1.0
            and self.contrast == 1.0
            and self.saturation == 1.0
        )

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        """Return a filtered copy of premultiplied ``pixels``; the input is never modified."""
        out = pixels.astype(np.float32, copy=True)
        if self.blur > 0:
            out = cv2.GaussianBlur(
                out,
                (0, 0),
                sigmaX=float(self.blur),
                sigmaY=float(self.blur),
                borderType=cv2.BORDER_CONSTANT,
            )

        if self.brightness == 1.0 and self.contrast == 1.0 and self.saturation == 1.0:
            return out

        alpha = out[..., 3:4]
        rgb = np.divide(
            out[..., :3],
            alpha,
            out=np.zeros_like(out[..., :3]),
            where=alpha > 0,
        )
        if self.brightness != 1.0:
            rgb = np.clip(rgb * self.brightness, 0.0, 1.0)
        if self.contrast != 1.0:
            rgb = np.clip((rgb - 0.5) * self.contrast + 0.5, 0.0, 1.0)
        if self.saturation != 1.0:
            luma = (rgb @ LUMA_WEIGHTS)[..., None]
            rgb = np.clip(luma + (rgb - luma) * self.saturation, 0.0, 1.0)

        out[..., :3] = rgb * alpha
        return out

    def extent(self) -> int:
        """Pixels a drawing can spread beyond its footprint under this filter."""
        if self.blur <= 0:
            return 0
        return int(math.ceil(self.blur * 4.0)) + 1


@dataclass(frozen=True)
class DrawStyle:
    """Compositing operator and filter passed explicitly to every draw call."""

    op: CompositeOp = CompositeOp.NORMAL
    filter: FilterSpec = field(default_factory=FilterSpec)


NEUTRAL_STYLE = DrawStyle()
SCREEN_STYLE = DrawStyle(op=CompositeOp.SCREEN)


__all__ = [
    "Color",
    "CompositeOp",
    "DrawStyle",
    "FilterSpec",
    "LinearGradient",
    "NEUTRAL_STYLE",
    "RadialGradient",
    "SCREEN_STYLE",
]
