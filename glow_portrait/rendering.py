"""Render orchestration for the glow portrait pipeline."""

from __future__ import annotations

import logging
from time import perf_counter
from typing import List, Optional, Sequence

from glow_portrait.config import StyleParameters
from glow_portrait.errors import InvalidInput, RenderFailed
from glow_portrait.layers import LAYER_STAGES, LayerStage
from glow_portrait.models import RenderSummary, SourceImage
from glow_portrait.surface import OutputSurface

LOGGER = logging.getLogger(__name__)


class GlowRenderer:
    """Run the layer stages in order against a freshly allocated surface."""

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        stages: Sequence[LayerStage] = LAYER_STAGES,
    ) -> None:
        self.logger = logger or LOGGER
        self.stages = tuple(stages)
        self.busy = False
        self.last_summary: Optional[RenderSummary] = None

    def render(
        self,
        source: Optional[SourceImage],
        params: StyleParameters,
    ) -> OutputSurface:
        """Render ``source`` (or nothing) with ``params`` and return the finished surface.

        Parameters are clamped first; values that cannot be clamped raise
        :class:`~glow_portrait.errors.InvalidParameter` before any drawing.
        A failing stage raises :class:`~glow_portrait.errors.RenderFailed` and
        the partially drawn surface is discarded.
        """
        if source is not None and not isinstance(source, SourceImage):
            raise InvalidInput(f"Expected a SourceImage or None, got {type(source).__name__}")
        style = params.normalized()

        self.busy = True
        self.logger.info(
            "Rendering %sx%s glow portrait (%s)",
            style.output_size,
            style.output_size,
            "with source image" if source is not None else "no source image",
        )
        render_start = perf_counter()
        try:
            surface = OutputSurface(style.output_size)
            surface.clear()
            completed: List[str] = []

            for stage in self.stages:
                if not stage.is_enabled(source, style):
                    self.logger.debug("Skipping %s layer", stage.name)
                    continue
                stage_start = perf_counter()
                try:
                    stage.draw(surface, source, style)
                except Exception as exc:
                    self.logger.error("Layer %s failed: %s", stage.name, exc)
                    raise RenderFailed(stage.name, str(exc)) from exc
                completed.append(stage.name)
                self.logger.debug(
                    "Layer %s finished in %0.1f ms",
                    stage.name,
                    (perf_counter() - stage_start) * 1000.0,
                )
        finally:
            self.busy = False

        elapsed = perf_counter() - render_start
        self.last_summary = RenderSummary(
            output_size=style.output_size,
            stages=tuple(completed),
            elapsed_seconds=elapsed,
            has_source=source is not None,
        )
        self.logger.info(
            "Ready: rendered %s layers in %0.2fs",
            len(completed),
            elapsed,
        )
        return surface


def render(source: Optional[SourceImage], params: StyleParameters) -> OutputSurface:
    """Render with a default :class:`GlowRenderer`."""
    return GlowRenderer().render(source, params)


__all__ = ["GlowRenderer", "render"]
