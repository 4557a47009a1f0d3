"""Cover-fit geometry for mapping an arbitrary image onto the square canvas."""

from __future__ import annotations

from dataclasses import dataclass

from glow_portrait.errors import InvalidInput


@dataclass(frozen=True)
class CoverFit:
    """Source crop and destination square produced by :func:`fit_cover`."""

    src_x: int
    src_y: int
    src_side: int
    dest_side: int
    dest_x: int = 0
    dest_y: int = 0

    @property
    def source_box(self) -> tuple[int, int, int, int]:
        """Crop as ``(x0, y0, x1, y1)`` in source pixel coordinates."""
        return (
            self.src_x,
            self.src_y,
            self.src_x + self.src_side,
            self.src_y + self.src_side,
        )


def fit_cover(source_w: int, source_h: int, dest_w: int, dest_h: int) -> CoverFit:
    """Compute the centered crop that fills ``dest_w x dest_h`` without letterboxing.

    A source wider than the destination keeps its full height and loses a
    centered band on each side; otherwise the full width is kept and the crop
    is centered vertically.
    """
    if source_w <= 0 or source_h <= 0:
        raise InvalidInput(f"Source image has degenerate size {source_w}x{source_h}")
    if dest_w <= 0 or dest_h <= 0:
        raise InvalidInput(f"Destination has degenerate size {dest_w}x{dest_h}")

    source_ratio = source_w / source_h
    dest_ratio = dest_w / dest_h

    if source_ratio > dest_ratio:
        side = int(source_h * (dest_w / dest_h))
        return CoverFit(
            src_x=(source_w - side) // 2,
            src_y=0,
            src_side=side,
            dest_side=dest_w,
        )

    side = int(source_w * (dest_h / dest_w))
    return CoverFit(
        src_x=0,
        src_y=(source_h - side) // 2,
        src_side=side,
        dest_side=dest_h,
    )


__all__ = ["CoverFit", "fit_cover"]
