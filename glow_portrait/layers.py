"""Layer compositors for the glow portrait effect.

Every layer is a function of ``(surface, source, params)`` that draws into the
surface with explicit styles. Layers needing randomness build their own
stream from a seed derived from the parameters, so re-rendering identical
inputs repeats every particle and bolt exactly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from glow_portrait.config import Background, StyleParameters
from glow_portrait.geometry import fit_cover
from glow_portrait.models import SourceImage
from glow_portrait.paint import (
    NEUTRAL_STYLE,
    SCREEN_STYLE,
    Color,
    CompositeOp,
    DrawStyle,
    FilterSpec,
    LinearGradient,
    RadialGradient,
)
from glow_portrait.random_source import SeededStream, new_stream
from glow_portrait.surface import OutputSurface

BACKGROUND_TOP = Color.from_hex("#0b1220")
BACKGROUND_BOTTOM = Color.from_hex("#0a0f1a")

TINT_INNER = Color(0, 255, 255)
TINT_OUTER = Color(0, 160, 255)

PARTICLE_CORE = Color(255, 255, 255)
PARTICLE_RIM = Color(100, 220, 255, 0.0)

BOLT_COUNT = 6
LIGHTNING_SEED_BASE = 12345
BOLT_GLOW_COLOR = Color(120, 220, 255, 0.55)
BOLT_GLOW_WIDTH = 6.0
BOLT_CORE_COLOR = Color(200, 255, 255, 0.9)
BOLT_CORE_WIDTH = 2.0

VIGNETTE_CLEAR = Color(0, 0, 0, 0.0)
VIGNETTE_DARK = Color(0, 0, 0, 0.55)

Point = Tuple[float, float]
LayerFn = Callable[[OutputSurface, Optional[SourceImage], StyleParameters], None]


@dataclass(frozen=True)
class Particle:
    x: float
    y: float
    radius: float
    alpha: float


@dataclass(frozen=True)
class LayerStage:
    """A named layer and the condition under which the renderer runs it."""

    name: str
    draw: LayerFn
    is_enabled: Callable[[Optional[SourceImage], StyleParameters], bool]


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


# ----------------------------------------------------------------------
# Background and image layers
# ----------------------------------------------------------------------


def paint_background(
    surface: OutputSurface,
    source: Optional[SourceImage],
    params: StyleParameters,
) -> None:
    if params.background == Background.TRANSPARENT:
        return
    gradient = LinearGradient(0, 0, 0, surface.height, BACKGROUND_TOP, BACKGROUND_BOTTOM)
    surface.fill(gradient, NEUTRAL_STYLE)


def draw_base_image(
    surface: OutputSurface,
    source: Optional[SourceImage],
    params: StyleParameters,
) -> None:
    if source is None:
        return
    fit = fit_cover(source.width, source.height, surface.width, surface.height)
    style = DrawStyle(
        op=CompositeOp.NORMAL,
        filter=FilterSpec(contrast=params.contrast, saturation=params.saturation),
    )
    surface.draw_image(source, fit, style)


def apply_tint(
    surface: OutputSurface,
    source: Optional[SourceImage],
    params: StyleParameters,
) -> None:
    strength = _clamp_unit(params.cyanize)
    size = surface.width
    gradient = RadialGradient(
        cx=size / 2,
        cy=surface.height / 2,
        r0=size * 0.15,
        r1=size * 0.8,
        inner=TINT_INNER.with_alpha(0.35 * strength),
        outer=TINT_OUTER.with_alpha(0.10 * strength),
    )
    surface.fill(gradient, SCREEN_STYLE)


def apply_glow(
    surface: OutputSurface,
    source: Optional[SourceImage],
    params: StyleParameters,
) -> None:
    if params.glow_radius <= 0:
        return
    intensity = params.intensity
    style = DrawStyle(
        op=CompositeOp.SCREEN,
        filter=FilterSpec(
            blur=float(params.glow_radius),
            brightness=1.0 + intensity,
            saturation=1.0 + intensity * 0.4,
        ),
    )
    surface.draw_self(style)


def apply_vignette(
    surface: OutputSurface,
    source: Optional[SourceImage],
    params: StyleParameters,
) -> None:
    if params.vignette <= 0:
        return
    size = surface.width
    gradient = RadialGradient(
        cx=size / 2,
        cy=surface.height / 2,
        r0=size * (1 - params.vignette),
        r1=size * 0.75,
        inner=VIGNETTE_CLEAR,
        outer=VIGNETTE_DARK,
    )
    surface.fill(gradient, NEUTRAL_STYLE)


# ----------------------------------------------------------------------
# Procedural layers
# ----------------------------------------------------------------------


def particle_seed(intensity: float, width: int, height: int) -> int:
    return math.floor(intensity * 1e6) ^ width ^ height


def generate_particles(count: int, width: int, height: int, intensity: float) -> List[Particle]:
    """Positions, radii and alphas for ``count`` sparkles, in draw order."""
    rnd = new_stream(particle_seed(intensity, width, height))
    particles: List[Particle] = []
    for _ in range(count):
        x = rnd() * width
        y = rnd() * height
        radius = 0.5 + rnd() * 2.2
        alpha = 0.35 + rnd() * 0.45
        particles.append(Particle(x=x, y=y, radius=radius, alpha=alpha))
    return particles


def draw_particles(
    surface: OutputSurface,
    source: Optional[SourceImage],
    params: StyleParameters,
) -> None:
    particles = generate_particles(
        params.particle_count,
        surface.width,
        surface.height,
        params.intensity,
    )
    for particle in particles:
        extent = particle.radius * 4
        gradient = RadialGradient(
            cx=particle.x,
            cy=particle.y,
            r0=0.0,
            r1=extent,
            inner=PARTICLE_CORE.with_alpha(particle.alpha),
            outer=PARTICLE_RIM,
        )
        surface.fill_circle(particle.x, particle.y, extent, gradient, SCREEN_STYLE)


def lightning_seed(intensity: float) -> int:
    return LIGHTNING_SEED_BASE + math.floor(intensity * 1000)


def _generate_bolt(rnd: SeededStream, width: int, height: int, intensity: float) -> List[Point]:
    x = rnd() * width * 0.8 + width * 0.1
    y = rnd() * height * 0.8 + height * 0.1
    length = (height * 0.25 + rnd() * height * 0.35) * (0.7 + intensity * 0.6)
    segments = 15 + math.floor(rnd() * 18)
    jitter = 10 + 30 * rnd()
    heading = rnd() * math.pi * 2
    step = length / segments

    points: List[Point] = [(x, y)]
    for _ in range(segments):
        x += math.cos(heading + (rnd() - 0.5) * 0.5) * step
        y += math.sin(heading + (rnd() - 0.5) * 0.5) * step
        x += (rnd() - 0.5) * jitter
        y += (rnd() - 0.5) * jitter
        points.append((x, y))
    return points


def generate_bolts(
    width: int,
    height: int,
    intensity: float,
    branches: int = BOLT_COUNT,
) -> List[List[Point]]:
    """Point sequences for each lightning branch, sharing one stream in draw order."""
    rnd = new_stream(lightning_seed(intensity))
    return [_generate_bolt(rnd, width, height, intensity) for _ in range(branches)]


def draw_lightning(
    surface: OutputSurface,
    source: Optional[SourceImage],
    params: StyleParameters,
) -> None:
    intensity = params.intensity
    glow_style = DrawStyle(
        op=CompositeOp.SCREEN,
        filter=FilterSpec(blur=8 + 10 * intensity),
    )
    for bolt in generate_bolts(surface.width, surface.height, intensity):
        surface.stroke_polyline(bolt, BOLT_GLOW_COLOR, BOLT_GLOW_WIDTH, glow_style)
        surface.stroke_polyline(bolt, BOLT_CORE_COLOR, BOLT_CORE_WIDTH, SCREEN_STYLE)


def _has_source(source: Optional[SourceImage], params: StyleParameters) -> bool:
    return source is not None


LAYER_STAGES: Tuple[LayerStage, ...] = (
    LayerStage("background", paint_background, lambda source, params: True),
    LayerStage("base_image", draw_base_image, _has_source),
    LayerStage("tint", apply_tint, _has_source),
    LayerStage(
        "glow",
        apply_glow,
        lambda source, params: source is not None and params.glow_radius > 0,
    ),
    LayerStage("particles", draw_particles, lambda source, params: params.particle_count > 0),
    LayerStage("lightning", draw_lightning, lambda source, params: params.lightning),
    LayerStage(
        "vignette",
        apply_vignette,
        lambda source, params: source is not None and params.vignette > 0,
    ),
)


__all__ = [
    "LAYER_STAGES",
    "LayerStage",
    "Particle",
    "apply_glow",
    "apply_tint",
    "apply_vignette",
    "draw_base_image",
    "draw_lightning",
    "draw_particles",
    "generate_bolts",
    "generate_particles",
    "lightning_seed",
    "paint_background",
    "particle_seed",
]
