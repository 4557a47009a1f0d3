import sys
from datetime import datetime, timezone
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from glow_portrait.config import StyleParameters
from glow_portrait.errors import InvalidParameter
from glow_portrait.export import default_output_filename, encode, encode_png, write_png
from glow_portrait.paint import NEUTRAL_STYLE, Color
from glow_portrait.rendering import render
from glow_portrait.surface import OutputSurface


def half_transparent_surface() -> OutputSurface:
    surface = OutputSurface(16)
    surface.fill(Color(255, 0, 0, 0.5), NEUTRAL_STYLE, bounds=(0, 0, 8, 16))
    surface.fill(Color(0, 128, 255), NEUTRAL_STYLE, bounds=(8, 0, 16, 16))
    return surface


def test_png_keeps_alpha_channel():
    surface = half_transparent_surface()

    decoded = cv2.imdecode(np.frombuffer(encode_png(surface), dtype=np.uint8), cv2.IMREAD_UNCHANGED)

    assert decoded.shape == (16, 16, 4)
    expected = cv2.cvtColor(surface.to_rgba8(), cv2.COLOR_RGBA2BGRA)
    assert np.array_equal(decoded, expected)
    assert decoded[0, 0, 3] == 128
    assert decoded[0, 15, 3] == 255


def test_transparent_render_exports_empty_alpha():
    surface = render(None, StyleParameters(output_size=512, particle_count=0, lightning=False, background="transparent"))

    decoded = cv2.imdecode(np.frombuffer(encode(surface), dtype=np.uint8), cv2.IMREAD_UNCHANGED)

    assert decoded.shape == (512, 512, 4)
    assert not np.any(decoded[..., 3])


def test_encode_accepts_extension_style_format():
    surface = half_transparent_surface()

    assert encode(surface, ".PNG") == encode(surface)


def test_unsupported_format_is_rejected():
    with pytest.raises(InvalidParameter) as excinfo:
        encode(half_transparent_surface(), "gif")

    assert excinfo.value.field == "image_format"


def test_default_output_filename_uses_epoch_milliseconds():
    moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

    name = default_output_filename(moment)

    assert name.startswith("spirit-pfp-") and name.endswith(".png")
    assert abs(int(name[len("spirit-pfp-"):-len(".png")]) - 1704164645678) <= 1


def test_write_png_creates_parent_and_leaves_no_temp_files(tmp_path):
    target = tmp_path / "nested" / "portrait.png"

    written = write_png(half_transparent_surface(), target)

    assert written == target
    assert target.read_bytes() == encode_png(half_transparent_surface())
    assert [path.name for path in target.parent.iterdir()] == ["portrait.png"]


def test_write_png_replaces_existing_file(tmp_path):
    target = tmp_path / "portrait.png"
    target.write_bytes(b"stale")

    write_png(half_transparent_surface(), target)

    assert target.read_bytes().startswith(b"\x89PNG")
