"""
Raster Encoder Tests
====================

Tests for RGBA -> packed 1-bit raster conversion and GS v 0 framing.
"""

import math

import numpy as np
import pytest

from activity_receipt.errors import ImageDecodeError
from activity_receipt.imaging.raster import RasterImage, encode_raster, raster_command


def rgba(width, height, value=255, alpha=255):
    """Solid gray RGBA buffer."""
    pixels = np.full((height, width, 4), value, dtype=np.uint8)
    pixels[:, :, 3] = alpha
    return pixels


class TestEncodeRaster:
    """Tests for encode_raster."""

    def test_white_has_no_ink(self):
        raster = encode_raster(rgba(8, 2, 255))
        assert raster.data == b"\x00\x00"

    def test_black_is_all_ink(self):
        raster = encode_raster(rgba(8, 2, 0))
        assert raster.data == b"\xff\xff"

    def test_rows_padded_with_zero_bits(self):
        """9 dots wide -> 2 bytes per row, 7 padding bits cleared."""
        raster = encode_raster(rgba(9, 3, 0))
        assert raster.width == 9
        assert raster.height == 3
        assert raster.bytes_per_row == 2
        assert raster.data == b"\xff\x80" * 3

    def test_msb_first(self):
        pixels = rgba(8, 1, 255)
        pixels[0, 0, :3] = 0
        pixels[0, 7, :3] = 0
        raster = encode_raster(pixels)
        assert raster.data == bytes([0b10000001])

    def test_transparent_black_is_not_ink(self):
        raster = encode_raster(rgba(8, 1, 0, alpha=0))
        assert raster.data == b"\x00"

    def test_faint_alpha_is_not_ink(self):
        """Alpha of 25/255 is below the 0.1 cutoff."""
        raster = encode_raster(rgba(8, 1, 0, alpha=25))
        assert raster.data == b"\x00"

    def test_threshold_boundary(self):
        """Gray 127 is just dark enough, gray 128 is not."""
        assert encode_raster(rgba(8, 1, 127)).data == b"\xff"
        assert encode_raster(rgba(8, 1, 128)).data == b"\x00"

    def test_custom_threshold(self):
        assert encode_raster(rgba(8, 1, 200), threshold=0.1).data == b"\xff"

    def test_data_length(self):
        raster = encode_raster(rgba(20, 5, 0))
        assert len(raster.data) == raster.bytes_per_row * raster.height

    @pytest.mark.parametrize("height", [1, 2, 3])
    @pytest.mark.parametrize("width", range(1, 18))
    def test_row_size_for_every_width(self, width, height):
        raster = encode_raster(rgba(width, height, 0))
        assert raster.bytes_per_row == math.ceil(width / 8)
        assert len(raster.data) == raster.bytes_per_row * height

    def test_wrong_shape_raises(self):
        with pytest.raises(ImageDecodeError):
            encode_raster(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_empty_raises(self):
        with pytest.raises(ImageDecodeError):
            encode_raster(np.zeros((0, 4, 4), dtype=np.uint8))


class TestRasterCommand:
    """Tests for GS v 0 framing."""

    def test_header(self):
        image = RasterImage(width=10, height=3, bytes_per_row=2, data=b"\xaa" * 6)
        command = raster_command(image)
        assert command[:8] == b"\x1d\x76\x30\x00\x02\x00\x03\x00"
        assert command[8:] == b"\xaa" * 6

    def test_little_endian_sizes(self):
        image = RasterImage(width=2048, height=300, bytes_per_row=256, data=b"")
        assert raster_command(image)[4:8] == b"\x00\x01\x2c\x01"

    def test_mode_byte(self):
        image = RasterImage(width=8, height=1, bytes_per_row=1, data=b"\x00")
        assert raster_command(image, mode=3)[3] == 3

    def test_unknown_mode_raises(self):
        image = RasterImage(width=8, height=1, bytes_per_row=1, data=b"\x00")
        with pytest.raises(ValueError):
            raster_command(image, mode=4)

    def test_repr_hides_data(self):
        image = RasterImage(width=8, height=1, bytes_per_row=1, data=b"\xff")
        assert "data" not in repr(image)
