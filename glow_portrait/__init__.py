"""
Deterministic neon "glow portrait" compositing pipeline.
"""

from .config import DEFAULT_STYLE, Background, StyleParameters, load_style_parameters
from .errors import InvalidInput, InvalidParameter, RenderFailed
from .export import default_output_filename, encode, encode_png, write_png
from .geometry import CoverFit, fit_cover
from .models import RenderSummary, SourceImage
from .random_source import SeededStream, new_stream
from .rendering import GlowRenderer, render
from .sources import decode_source_image, load_source_image
from .surface import OutputSurface

__all__ = [
    "Background",
    "CoverFit",
    "DEFAULT_STYLE",
    "GlowRenderer",
    "InvalidInput",
    "InvalidParameter",
    "OutputSurface",
    "RenderFailed",
    "RenderSummary",
    "SeededStream",
    "SourceImage",
    "StyleParameters",
    "decode_source_image",
    "default_output_filename",
    "encode",
    "encode_png",
    "fit_cover",
    "load_source_image",
    "load_style_parameters",
    "new_stream",
    "render",
    "write_png",
]
