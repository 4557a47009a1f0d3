import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from glow_portrait.errors import InvalidInput
from glow_portrait.geometry import CoverFit, fit_cover


def test_wide_source_is_cropped_horizontally():
    fit = fit_cover(800, 400, 300, 300)
    assert fit == CoverFit(src_x=200, src_y=0, src_side=400, dest_side=300)
    assert (fit.dest_x, fit.dest_y) == (0, 0)


def test_tall_source_is_cropped_vertically():
    fit = fit_cover(400, 800, 512, 512)
    assert (fit.src_x, fit.src_y, fit.src_side, fit.dest_side) == (0, 200, 400, 512)


def test_square_source_is_not_cropped():
    fit = fit_cover(500, 500, 1024, 1024)
    assert fit.source_box == (0, 0, 500, 500)
    assert fit.dest_side == 1024


def test_odd_margin_uses_floor_division():
    fit = fit_cover(801, 400, 512, 512)
    assert fit.src_side == 400
    assert fit.src_x == 200


@pytest.mark.parametrize(
    "dims",
    [(0, 100, 512, 512), (100, 0, 512, 512), (100, 100, 0, 512), (-4, 10, 512, 512)],
)
def test_degenerate_geometry_is_rejected(dims):
    with pytest.raises(InvalidInput):
        fit_cover(*dims)
