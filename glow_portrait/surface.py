"""Square RGBA drawing surface with explicit per-call compositing styles."""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from glow_portrait.geometry import CoverFit
from glow_portrait.models import SourceImage
from glow_portrait.paint import NEUTRAL_STYLE, Color, CompositeOp, DrawStyle

# Fractional bits used when handing sub-pixel coordinates to cv2 line drawing.
_LINE_SHIFT = 4
_LINE_SCALE = 1 << _LINE_SHIFT

Bounds = Tuple[int, int, int, int]


def composite(dst: np.ndarray, src: np.ndarray, op: CompositeOp) -> None:
    """Blend premultiplied ``src`` onto ``dst`` in place."""
    if op == CompositeOp.SCREEN:
        blended = src + dst - src * dst
    elif op == CompositeOp.NORMAL:
        blended = src + dst * (1.0 - src[..., 3:4])
    else:
        raise ValueError(f"Unsupported compositing operator: {op!r}")
    np.clip(blended, 0.0, 1.0, out=dst)


def premultiply(rgba8: np.ndarray) -> np.ndarray:
    """Convert straight-alpha uint8 RGBA into premultiplied float32."""
    pixels = rgba8.astype(np.float32) / 255.0
    pixels[..., :3] *= pixels[..., 3:4]
    return pixels


def unpremultiply(pixels: np.ndarray) -> np.ndarray:
    """Convert premultiplied float32 RGBA into straight-alpha uint8."""
    alpha = pixels[..., 3:4]
    rgb = np.divide(
        pixels[..., :3],
        alpha,
        out=np.zeros_like(pixels[..., :3]),
        where=alpha > 0,
    )
    straight = np.concatenate((np.clip(rgb, 0.0, 1.0), np.clip(alpha, 0.0, 1.0)), axis=2)
    return np.rint(straight * 255.0).astype(np.uint8)


class OutputSurface:
    """Mutable ``size x size`` premultiplied RGBA buffer.

    The surface keeps no drawing state between calls: every primitive takes
    the :class:`DrawStyle` it should composite with.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError(f"Surface size must be positive, got {size}")
        self.size = int(size)
        self.pixels = np.zeros((self.size, self.size, 4), dtype=np.float32)

    @property
    def width(self) -> int:
        return self.size

    @property
    def height(self) -> int:
        return self.size

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.size, self.size)

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self.pixels.fill(0.0)

    def snapshot(self) -> np.ndarray:
        """Independent copy of the current pixels."""
        return self.pixels.copy()

    def to_rgba8(self) -> np.ndarray:
        """Straight-alpha uint8 RGBA view of the surface for export."""
        return unpremultiply(self.pixels)

    def composite_layer(
        self,
        layer: np.ndarray,
        origin: Tuple[int, int] = (0, 0),
        op: CompositeOp = CompositeOp.NORMAL,
    ) -> None:
        """Composite a premultiplied layer whose top-left corner sits at ``origin``."""
        ox, oy = origin
        height, width = layer.shape[:2]
        x0, y0 = max(0, ox), max(0, oy)
        x1, y1 = min(self.size, ox + width), min(self.size, oy + height)
        if x0 >= x1 or y0 >= y1:
            return
        src = layer[y0 - oy:y1 - oy, x0 - ox:x1 - ox]
        composite(self.pixels[y0:y1, x0:x1], src, op)

    # ------------------------------------------------------------------
    # Drawing primitives
    # ------------------------------------------------------------------

    def fill(self, paint, style: DrawStyle = NEUTRAL_STYLE, bounds: Optional[Bounds] = None) -> None:
        """Fill ``bounds`` (default: the whole surface) with a color or gradient."""
        x0, y0, x1, y1 = bounds if bounds is not None else (0, 0, self.size, self.size)
        x0, y0 = max(0, x0), max(0, y0)
        x1, y1 = min(self.size, x1), min(self.size, y1)
        if x0 >= x1 or y0 >= y1:
            return
        xs, ys = self._pixel_centers(x0, y0, x1, y1)
        layer = style.filter.apply(paint.sample(xs, ys))
        self.composite_layer(layer, (x0, y0), style.op)

    def draw_image(
        self,
        source: SourceImage,
        fit: CoverFit,
        style: DrawStyle = NEUTRAL_STYLE,
    ) -> None:
        """Draw the ``fit`` crop of ``source`` scaled into its destination square."""
        sx0, sy0, sx1, sy1 = fit.source_box
        crop = source.pixels[sy0:sy1, sx0:sx1]
        if crop.size == 0 or fit.dest_side <= 0:
            return
        layer = premultiply(crop)
        side = fit.dest_side
        if layer.shape[0] != side or layer.shape[1] != side:
            shrinking = layer.shape[0] > side or layer.shape[1] > side
            interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
            layer = cv2.resize(layer, (side, side), interpolation=interpolation)
        layer = style.filter.apply(layer)
        self.composite_layer(layer, (fit.dest_x, fit.dest_y), style.op)

    def draw_self(self, style: DrawStyle) -> None:
        """Filter a snapshot of the surface and composite it back onto the live pixels."""
        layer = style.filter.apply(self.snapshot())
        self.composite_layer(layer, (0, 0), style.op)

    def fill_circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        paint,
        style: DrawStyle = NEUTRAL_STYLE,
    ) -> None:
        """Fill an anti-aliased disc; ``paint`` is sampled in surface coordinates."""
        if radius <= 0:
            return
        pad = style.filter.extent() + 1
        bounds = self._clip_bounds(cx - radius - pad, cy - radius - pad, cx + radius + pad, cy + radius + pad)
        if bounds is None:
            return
        x0, y0, x1, y1 = bounds
        xs, ys = self._pixel_centers(x0, y0, x1, y1)
        coverage = np.clip(radius - np.hypot(xs - cx, ys - cy) + 0.5, 0.0, 1.0)
        layer = paint.sample(xs, ys) * coverage[..., None]
        layer = style.filter.apply(layer.astype(np.float32))
        self.composite_layer(layer, (x0, y0), style.op)

    def stroke_polyline(
        self,
        points: Sequence[Tuple[float, float]],
        color: Color,
        width: float,
        style: DrawStyle = NEUTRAL_STYLE,
    ) -> None:
        """Stroke an open path through ``points`` with an anti-aliased line."""
        if len(points) < 2 or width <= 0:
            return
        path = np.asarray(points, dtype=np.float64)
        pad = width / 2.0 + style.filter.extent() + 2
        bounds = self._clip_bounds(
            path[:, 0].min() - pad,
            path[:, 1].min() - pad,
            path[:, 0].max() + pad,
            path[:, 1].max() + pad,
        )
        if bounds is None:
            return
        x0, y0, x1, y1 = bounds

        mask = np.zeros((y1 - y0, x1 - x0), dtype=np.uint8)
        # cv2 places integer coordinates on pixel centers.
        local = (path - (x0 + 0.5, y0 + 0.5)) * _LINE_SCALE
        cv2.polylines(
            mask,
            [np.rint(local).astype(np.int32)],
            isClosed=False,
            color=255,
            thickness=max(1, int(round(width))),
            lineType=cv2.LINE_AA,
            shift=_LINE_SHIFT,
        )
        coverage = mask.astype(np.float32) / 255.0
        layer = color.premultiplied() * coverage[..., None]
        layer = style.filter.apply(layer)
        self.composite_layer(layer, (x0, y0), style.op)

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------

    def _clip_bounds(self, min_x: float, min_y: float, max_x: float, max_y: float) -> Optional[Bounds]:
        x0 = max(0, int(math.floor(min_x)))
        y0 = max(0, int(math.floor(min_y)))
        x1 = min(self.size, int(math.ceil(max_x)) + 1)
        y1 = min(self.size, int(math.ceil(max_y)) + 1)
        if x0 >= x1 or y0 >= y1:
            return None
        return (x0, y0, x1, y1)

    @staticmethod
    def _pixel_centers(x0: int, y0: int, x1: int, y1: int) -> Tuple[np.ndarray, np.ndarray]:
        xs = (np.arange(x0, x1, dtype=np.float32) + 0.5)[None, :]
        ys = (np.arange(y0, y1, dtype=np.float32) + 0.5)[:, None]
        return xs, ys


__all__ = ["OutputSurface", "composite", "premultiply", "unpremultiply"]
