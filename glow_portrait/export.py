"""Surface export helpers: PNG encoding and file output."""

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import cv2

from glow_portrait.errors import InvalidParameter, RenderFailed
from glow_portrait.surface import OutputSurface

OUTPUT_FILENAME_PREFIX = "spirit-pfp"
SUPPORTED_FORMATS = {"png": ".png"}


def encode(surface: OutputSurface, image_format: str = "png") -> bytes:
    """Encode the surface losslessly, keeping its alpha channel."""
    extension = SUPPORTED_FORMATS.get(image_format.lower().lstrip("."))
    if extension is None:
        raise InvalidParameter("image_format", f"unsupported format {image_format!r}")

    bgra = cv2.cvtColor(surface.to_rgba8(), cv2.COLOR_RGBA2BGRA)
    success, buffer = cv2.imencode(extension, bgra)
    if not success:
        raise RenderFailed(
            "export",
            f"failed to encode {surface.width}x{surface.height} surface as {image_format}",
        )
    return buffer.tobytes()


def encode_png(surface: OutputSurface) -> bytes:
    return encode(surface, "png")


def default_output_filename(now: Optional[datetime] = None) -> str:
    """Download name in the ``spirit-pfp-<epoch milliseconds>.png`` form."""
    moment = now or datetime.now()
    return f"{OUTPUT_FILENAME_PREFIX}-{int(moment.timestamp() * 1000)}.png"


def write_png(surface: OutputSurface, output_path: Path | str) -> Path:
    """Encode the surface and write it atomically to ``output_path``."""
    path = Path(output_path)
    payload = encode_png(surface)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_output = path.with_name(f".tmp_{uuid.uuid4().hex}_{path.name}")
    try:
        temp_output.write_bytes(payload)
        temp_output.replace(path)
    finally:
        if temp_output.exists():
            temp_output.unlink()
    return path


__all__ = ["default_output_filename", "encode", "encode_png", "write_png"]
