import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from glow_portrait.errors import InvalidInput
from glow_portrait.models import SourceImage
from glow_portrait.sources import decode_source_image, load_source_image


def encoded_png(bgr: np.ndarray) -> bytes:
    success, buffer = cv2.imencode(".png", bgr)
    assert success
    return buffer.tobytes()


def test_decode_converts_to_rgba_order():
    bgr = np.zeros((6, 10, 3), dtype=np.uint8)
    bgr[..., 2] = 200  # red in BGR order

    image = decode_source_image(encoded_png(bgr))

    assert (image.width, image.height) == (10, 6)
    assert image.pixels.shape == (6, 10, 4)
    assert np.all(image.pixels[..., 0] == 200)
    assert np.all(image.pixels[..., 1:3] == 0)
    assert np.all(image.pixels[..., 3] == 255)


def test_decode_keeps_source_alpha():
    bgra = np.zeros((4, 4, 4), dtype=np.uint8)
    bgra[..., 0] = 255
    bgra[..., 3] = 90

    image = decode_source_image(encoded_png(bgra))

    assert np.all(image.pixels[..., 2] == 255)
    assert np.all(image.pixels[..., 3] == 90)


def test_decode_grayscale_expands_channels():
    gray = np.full((5, 5), 77, dtype=np.uint8)

    image = decode_source_image(encoded_png(gray))

    assert np.all(image.pixels[..., :3] == 77)
    assert np.all(image.pixels[..., 3] == 255)


@pytest.mark.parametrize("data", [b"", b"not an image at all"])
def test_decode_rejects_bad_data(data):
    with pytest.raises(InvalidInput):
        decode_source_image(data)


def test_load_reads_file(tmp_path):
    path = tmp_path / "face.png"
    path.write_bytes(encoded_png(np.full((8, 12, 3), 30, dtype=np.uint8)))

    image = load_source_image(path)

    assert (image.width, image.height) == (12, 8)


def test_load_missing_file(tmp_path):
    with pytest.raises(InvalidInput):
        load_source_image(tmp_path / "missing.png")


def test_source_image_is_read_only_copy():
    array = np.zeros((3, 3, 3), dtype=np.uint8)
    image = SourceImage.from_array(array)

    array[...] = 255

    assert not np.any(image.pixels[..., :3])
    with pytest.raises(ValueError):
        image.pixels[0, 0, 0] = 1


@pytest.mark.parametrize(
    "shape",
    [(0, 4, 3), (4, 0, 3), (4, 4, 2), (4, 4, 5)],
)
def test_degenerate_arrays_are_rejected(shape):
    with pytest.raises(InvalidInput):
        SourceImage.from_array(np.zeros(shape, dtype=np.uint8))


def test_float_arrays_are_normalized_intensities():
    array = np.zeros((2, 2, 3), dtype=np.float32)
    array[..., 0] = 1.0
    array[..., 1] = 0.5
    array[0, 0, 2] = 7.0

    image = SourceImage.from_array(array)

    assert np.all(image.pixels[..., 0] == 255)
    assert np.all(image.pixels[..., 1] == 128)
    assert image.pixels[0, 0, 2] == 255
    assert image.pixels[1, 1, 2] == 0


def test_uint16_arrays_are_scaled_down():
    image = SourceImage.from_array(np.full((2, 2, 3), 65535, dtype=np.uint16))

    assert np.all(image.pixels == 255)


@pytest.mark.parametrize(
    "array",
    [
        np.full((2, 2, 3), np.nan, dtype=np.float64),
        np.ones((2, 2, 3), dtype=bool),
    ],
)
def test_unusable_sample_types_are_rejected(array):
    with pytest.raises(InvalidInput):
        SourceImage.from_array(array)
