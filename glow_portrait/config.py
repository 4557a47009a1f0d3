"""Style parameters, their validation rules, and configuration loading helpers."""

from __future__ import annotations

import json
import math
import os
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from glow_portrait.errors import InvalidParameter

OUTPUT_SIZE_MIN = 512
OUTPUT_SIZE_MAX = 2048
OUTPUT_SIZE_STEP = 256

GLOW_RADIUS_RANGE = (0, 60)
INTENSITY_RANGE = (0.0, 1.0)
CYANIZE_RANGE = (0.0, 1.0)
CONTRAST_RANGE = (0.5, 2.0)
SATURATION_RANGE = (0.2, 2.5)
VIGNETTE_RANGE = (0.0, 1.0)
PARTICLE_COUNT_RANGE = (0, 600)

ENV_KEYS = {
    "output_size": "GLOW_OUTPUT_SIZE",
    "glow_radius": "GLOW_RADIUS",
    "intensity": "GLOW_INTENSITY",
    "cyanize": "GLOW_CYANIZE",
    "contrast": "GLOW_CONTRAST",
    "saturation": "GLOW_SATURATION",
    "vignette": "GLOW_VIGNETTE",
    "particle_count": "GLOW_PARTICLES",
    "lightning": "GLOW_LIGHTNING",
    "background": "GLOW_BACKGROUND",
}

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


class Background(str, Enum):
    DARK = "dark"
    TRANSPARENT = "transparent"


@dataclass(frozen=True)
class StyleParameters:
    """Immutable set of style controls for one render.

    The defaults are the values the controls reset to.
    """

    output_size: int = 1024
    glow_radius: int = 24
    intensity: float = 0.7
    cyanize: float = 0.55
    contrast: float = 1.1
    saturation: float = 1.25
    vignette: float = 0.35
    particle_count: int = 150
    lightning: bool = True
    background: Background = Background.DARK

    def normalized(self) -> "StyleParameters":
        """Return a copy with every field validated and clamped into range.

        Raises :class:`InvalidParameter` for values without a natural clamp.
        """
        return StyleParameters(
            output_size=_normalize_output_size(self.output_size),
            glow_radius=int(_clamp_number("glow_radius", self.glow_radius, *GLOW_RADIUS_RANGE)),
            intensity=_clamp_number("intensity", self.intensity, *INTENSITY_RANGE),
            cyanize=_clamp_number("cyanize", self.cyanize, *CYANIZE_RANGE),
            contrast=_clamp_number("contrast", self.contrast, *CONTRAST_RANGE),
            saturation=_clamp_number("saturation", self.saturation, *SATURATION_RANGE),
            vignette=_clamp_number("vignette", self.vignette, *VIGNETTE_RANGE),
            particle_count=int(
                _clamp_number("particle_count", self.particle_count, *PARTICLE_COUNT_RANGE)
            ),
            lightning=_coerce_lightning(self.lightning),
            background=_coerce_background(self.background),
        )

    def with_overrides(self, **overrides: Any) -> "StyleParameters":
        """Return a copy with the non-``None`` overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["background"] = Background(self.background).value
        return data


DEFAULT_STYLE = StyleParameters()


def _to_number(field: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidParameter(field, f"expected a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(field, f"expected a number, got {value!r}") from exc
    if math.isnan(number):
        raise InvalidParameter(field, "value is NaN")
    return number


def _clamp_number(field: str, value: Any, low: float, high: float) -> float:
    number = _to_number(field, value)
    return max(low, min(high, number))


def _normalize_output_size(value: Any) -> int:
    size = _to_number("output_size", value)
    if math.isinf(size) or size != math.floor(size):
        raise InvalidParameter("output_size", f"expected an integer, got {value!r}")
    if size <= 0:
        raise InvalidParameter("output_size", f"must be positive, got {value!r}")
    snapped = int(math.floor(size / OUTPUT_SIZE_STEP + 0.5)) * OUTPUT_SIZE_STEP
    return max(OUTPUT_SIZE_MIN, min(OUTPUT_SIZE_MAX, snapped))


def _coerce_lightning(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise InvalidParameter("lightning", f"expected a boolean, got {value!r}")


def _coerce_background(value: Any) -> Background:
    if isinstance(value, Background):
        return value
    if isinstance(value, str):
        try:
            return Background(value.strip().lower())
        except ValueError as exc:
            raise InvalidParameter("background", f"unknown background {value!r}") from exc
    raise InvalidParameter("background", f"unknown background {value!r}")


def _parse_bool(value: Any, default: bool) -> bool:
    """Parse truthy/falsy values from multiple input types."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return default
    if isinstance(value, (int, float)):
        return value != 0
    return default


def _parse_int(value: Any, default: int) -> int:
    """Parse an integer with fallback to default."""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _parse_float(value: Any, default: float) -> float:
    """Parse a floating point number with fallback to default."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_background(value: Any, default: Background) -> Background:
    if isinstance(value, Background):
        return value
    if isinstance(value, str):
        try:
            return Background(value.strip().lower())
        except ValueError:
            return default
    return default


def style_from_mapping(
    raw: Mapping[str, Any],
    base: StyleParameters = DEFAULT_STYLE,
) -> StyleParameters:
    """Build style parameters from loosely typed values, keeping ``base`` for missing keys."""
    if not isinstance(raw, Mapping):
        return base
    return StyleParameters(
        output_size=_parse_int(raw.get("output_size"), base.output_size),
        glow_radius=_parse_int(raw.get("glow_radius"), base.glow_radius),
        intensity=_parse_float(raw.get("intensity"), base.intensity),
        cyanize=_parse_float(raw.get("cyanize"), base.cyanize),
        contrast=_parse_float(raw.get("contrast"), base.contrast),
        saturation=_parse_float(raw.get("saturation"), base.saturation),
        vignette=_parse_float(raw.get("vignette"), base.vignette),
        particle_count=_parse_int(raw.get("particle_count"), base.particle_count),
        lightning=_parse_bool(raw.get("lightning"), base.lightning),
        background=_parse_background(raw.get("background"), base.background),
    )


def _style_from_env(env: Mapping[str, str]) -> StyleParameters:
    """Fallback configuration derived from environment variables."""
    raw = {
        field: env[key]
        for field, key in ENV_KEYS.items()
        if key in env
    }
    return style_from_mapping(raw)


def load_style_parameters(
    config_path: Optional[Path | str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> StyleParameters:
    """Load style parameters from a JSON file, or from the environment when it is absent.

    The file may hold the fields at the top level or under a ``"style"`` key.
    A file that is not valid JSON raises :class:`InvalidParameter` for ``config``.
    """
    source_env = os.environ if env is None else env

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as handle:
                    data = json.load(handle)
            except ValueError as exc:
                raise InvalidParameter("config", f"{path} is not valid JSON: {exc}") from exc
            if isinstance(data, Mapping) and isinstance(data.get("style"), Mapping):
                data = data["style"]
            return style_from_mapping(data)

    return _style_from_env(source_env)


__all__ = [
    "Background",
    "DEFAULT_STYLE",
    "StyleParameters",
    "load_style_parameters",
    "style_from_mapping",
]
