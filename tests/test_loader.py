"""
Image Loader Tests
==================

Tests for decoding, resizing, grayscale and contrast.
"""

import cv2
import numpy as np
import pytest

from activity_receipt.errors import ImageDecodeError
from activity_receipt.imaging.loader import (
    adjust_contrast,
    decode_image,
    fit_width,
    grayscale,
    load_image,
    load_raster,
)


class TestDecodeImage:
    """Tests for decode_image."""

    def test_png_bytes_to_rgba(self, make_png):
        image = decode_image(make_png(12, 6, color=(255, 0, 0)))
        assert image.shape == (6, 12, 4)
        assert image.dtype == np.uint8
        # BGR blue -> RGBA blue
        assert tuple(image[0, 0]) == (0, 0, 255, 255)

    def test_grayscale_png(self):
        ok, buffer = cv2.imencode(".png", np.full((4, 4), 128, dtype=np.uint8))
        image = decode_image(buffer.tobytes())
        assert image.shape == (4, 4, 4)
        assert tuple(image[0, 0]) == (128, 128, 128, 255)

    def test_path_source(self, tmp_path, make_png):
        path = tmp_path / "logo.png"
        path.write_bytes(make_png(10, 5))
        assert decode_image(path).shape == (5, 10, 4)
        assert decode_image(str(path)).shape == (5, 10, 4)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ImageDecodeError, match="not found"):
            decode_image(tmp_path / "missing.png")

    def test_garbage_bytes_raise(self):
        with pytest.raises(ImageDecodeError):
            decode_image(b"definitely not an image")

    def test_empty_bytes_raise(self):
        with pytest.raises(ImageDecodeError):
            decode_image(b"")


class TestTransforms:
    """Tests for resize, grayscale and contrast."""

    def test_fit_width_downscales(self):
        image = np.zeros((400, 800, 4), dtype=np.uint8)
        assert fit_width(image, 400).shape == (200, 400, 4)

    def test_fit_width_never_upscales(self):
        image = np.zeros((10, 20, 4), dtype=np.uint8)
        assert fit_width(image, 512).shape == (10, 20, 4)

    def test_fit_width_rounds_height(self):
        image = np.zeros((3, 10, 4), dtype=np.uint8)
        # 3 * 5 / 10 = 1.5 -> 2
        assert fit_width(image, 5).shape[0] == 2

    def test_grayscale_weights(self):
        image = np.zeros((1, 1, 4), dtype=np.uint8)
        image[0, 0] = (255, 0, 0, 200)
        gray = grayscale(image)
        # 0.2126 * 255 = 54.2
        assert tuple(gray[0, 0]) == (54, 54, 54, 200)

    def test_zero_contrast_is_identity(self):
        image = np.random.default_rng(0).integers(0, 256, (5, 5, 4), dtype=np.uint8)
        assert np.array_equal(adjust_contrast(image, 0.0), image)

    def test_contrast_pushes_away_from_mid(self):
        image = np.zeros((1, 2, 4), dtype=np.uint8)
        image[0, 0, :3] = 100
        image[0, 1, :3] = 160
        image[:, :, 3] = 255
        out = adjust_contrast(image, 0.3)
        assert out[0, 0, 0] < 100
        assert out[0, 1, 0] > 160
        assert out[0, 0, 3] == 255

    def test_contrast_out_of_range_raises(self):
        with pytest.raises(ValueError):
            adjust_contrast(np.zeros((1, 1, 4), dtype=np.uint8), 1.0)


class TestLoadRaster:
    """Tests for the decode -> prepare -> encode chain."""

    def test_black_png_is_all_ink(self, make_png):
        raster = load_raster(make_png(16, 8, color=(0, 0, 0)), max_width=512, contrast=0.3)
        assert (raster.width, raster.height) == (16, 8)
        assert raster.data == b"\xff\xff" * 8

    def test_white_png_is_blank(self, make_png):
        raster = load_raster(make_png(16, 8, color=(255, 255, 255)), max_width=512, contrast=0.3)
        assert set(raster.data) == {0}

    def test_respects_max_width(self, make_png):
        raster = load_raster(make_png(800, 400), max_width=400, contrast=0.2)
        assert (raster.width, raster.height) == (400, 200)
        assert raster.bytes_per_row == 50

    def test_load_image_returns_rgba(self, make_png):
        image = load_image(make_png(30, 10), max_width=15, contrast=0.2)
        assert image.shape == (5, 15, 4)
