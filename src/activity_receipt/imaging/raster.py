"""
Raster Encoder
==============

Converts RGBA pixel buffers into 1-bit printer raster bitmaps.

Design Rules:
    - Luminance is 0.2126 R + 0.7152 G + 0.0722 B on 0-1 channels
      (linear weights, no gamma correction)
    - A pixel is ink when (1 - luminance) > threshold AND alpha > 0.1
    - Bits are packed MSB-first; each row is padded to whole bytes with
      zero (no ink) bits
    - Raster data is raw bytes, never text
"""

import logging
from dataclasses import dataclass

import numpy as np

from activity_receipt.errors import ImageDecodeError


logger = logging.getLogger(__name__)


DEFAULT_THRESHOLD = 0.5
ALPHA_EPSILON = 0.1

_LUMA = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


@dataclass(frozen=True, slots=True)
class RasterImage:
    """
    Packed 1-bit monochrome bitmap.

    Attributes:
        width: Width in dots
        height: Height in dots (rows)
        bytes_per_row: ceil(width / 8)
        data: Row-major packed bitmap, bytes_per_row * height bytes
    """

    width: int
    height: int
    bytes_per_row: int
    data: bytes

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the bitmap."""
        return (
            f"RasterImage(width={self.width}, height={self.height}, "
            f"bytes_per_row={self.bytes_per_row})"
        )


def encode_raster(pixels: np.ndarray, threshold: float = DEFAULT_THRESHOLD) -> RasterImage:
    """
    Binarize an RGBA buffer and pack it into a raster bitmap.

    Args:
        pixels: RGBA image as np.ndarray (H, W, 4), values 0-255
        threshold: Ink threshold on inverted luminance (0-1)

    Returns:
        RasterImage with MSB-first packed rows

    Raises:
        ImageDecodeError: If the buffer is empty or not (H, W, 4)
    """
    if pixels is None or pixels.ndim != 3 or pixels.shape[2] != 4:
        shape = None if pixels is None else pixels.shape
        raise ImageDecodeError(f"Expected an (H, W, 4) RGBA buffer, got {shape}")

    height, width = pixels.shape[:2]
    if width < 1 or height < 1:
        raise ImageDecodeError(f"Cannot rasterize an empty image ({width}x{height})")
    if height > 0xFFFF or (width + 7) // 8 > 0xFFFF:
        raise ImageDecodeError(f"Image too large for one raster block ({width}x{height})")

    channels = pixels.astype(np.float64) / 255.0
    luminance = channels[:, :, :3] @ _LUMA
    alpha = channels[:, :, 3]

    ink = ((1.0 - luminance) > threshold) & (alpha > ALPHA_EPSILON)

    # packbits pads each row to a whole byte with zero bits
    packed = np.packbits(ink, axis=1, bitorder="big")
    bytes_per_row = packed.shape[1]

    return RasterImage(
        width=width,
        height=height,
        bytes_per_row=bytes_per_row,
        data=packed.tobytes(),
    )


def raster_command(image: RasterImage, mode: int = 0) -> bytes:
    """
    Build a GS v 0 raster block.

    Header: 1D 76 30 m xL xH yL yH, where x is the row width in bytes
    and y the row count, both little-endian 16-bit.

    Args:
        image: Packed raster image
        mode: Raster scale mode (0 = normal, 1 = double width,
            2 = double height, 3 = quadruple)

    Returns:
        Header followed by the packed payload
    """
    if mode not in (0, 1, 2, 3):
        raise ValueError(f"Unknown raster mode: {mode}")

    header = (
        b"\x1d\x76\x30"
        + bytes([mode])
        + image.bytes_per_row.to_bytes(2, "little")
        + image.height.to_bytes(2, "little")
    )
    return header + image.data
