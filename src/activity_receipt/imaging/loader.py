"""
Image Loader
============

Decodes logo and photo images into print-ready RGBA buffers.

Design Rules:
    - This is the ONLY place in the codebase that decodes image files
    - Accepts a file path or raw PNG/JPEG bytes
    - Resizes preserving aspect ratio (never upscales)
    - Applies grayscale + a fixed contrast boost before rasterizing
    - Fails with ImageDecodeError on missing, corrupt or empty input
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from activity_receipt.errors import ImageDecodeError
from activity_receipt.imaging.raster import DEFAULT_THRESHOLD, RasterImage, encode_raster


logger = logging.getLogger(__name__)


ImageSource = Union[str, Path, bytes, bytearray]

_LUMA = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


def decode_image(source: ImageSource) -> np.ndarray:
    """
    Decode a path or byte buffer to an RGBA array.

    Args:
        source: File path, or encoded image bytes

    Returns:
        RGBA image as np.ndarray (H, W, 4), dtype=uint8

    Raises:
        ImageDecodeError: If the file is missing or decoding fails
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        label = f"<{len(data)} bytes>"
    else:
        path = Path(source)
        label = str(path)
        if not path.is_file():
            raise ImageDecodeError(f"Image file not found: {label}")
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ImageDecodeError(f"Cannot read image {label}: {e}")

    if not data:
        raise ImageDecodeError(f"Empty image data: {label}")

    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)

    if image is None:
        raise ImageDecodeError(f"Failed to decode image {label}: cv2.imdecode returned None")

    if image.size == 0:
        raise ImageDecodeError(f"Decoded image is empty: {label}")

    # 16-bit PNGs
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ImageDecodeError(f"Unsupported pixel type for {label}: {image.dtype}")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)

    raise ImageDecodeError(f"Invalid image shape for {label}: {image.shape}")


def fit_width(rgba: np.ndarray, max_width: int) -> np.ndarray:
    """
    Resize to ``min(max_width, width)`` wide, preserving aspect ratio.

    Height is rounded to the nearest row and never below 1.
    """
    height, width = rgba.shape[:2]
    if width < 1 or height < 1:
        raise ImageDecodeError(f"Cannot resize an empty image ({width}x{height})")

    target_width = min(max_width, width)
    target_height = max(1, int(round(target_width * height / width)))

    if (target_width, target_height) == (width, height):
        return rgba

    interpolation = cv2.INTER_AREA if target_width < width else cv2.INTER_LINEAR
    return cv2.resize(rgba, (target_width, target_height), interpolation=interpolation)


def grayscale(rgba: np.ndarray) -> np.ndarray:
    """Replace RGB with weighted luminance; alpha is kept."""
    gray = np.rint(rgba[:, :, :3].astype(np.float64) @ _LUMA)
    gray = np.clip(gray, 0, 255).astype(np.uint8)

    out = rgba.copy()
    out[:, :, 0] = gray
    out[:, :, 1] = gray
    out[:, :, 2] = gray
    return out


def adjust_contrast(rgba: np.ndarray, amount: float) -> np.ndarray:
    """
    Stretch RGB around mid-gray.

    Uses factor (amount + 1) / (1 - amount), so 0 is a no-op and values
    towards 1 push everything to black or white. Alpha is kept.
    """
    if not -1.0 < amount < 1.0:
        raise ValueError(f"Contrast amount must be in (-1, 1), got {amount}")

    factor = (amount + 1.0) / (1.0 - amount)
    rgb = rgba[:, :, :3].astype(np.float64)
    rgb = np.floor(factor * (rgb - 127.0) + 127.0)

    out = rgba.copy()
    out[:, :, :3] = np.clip(rgb, 0, 255).astype(np.uint8)
    return out


def prepare_for_print(rgba: np.ndarray, max_width: int, contrast: float) -> np.ndarray:
    """Resize, grayscale and contrast-boost an RGBA buffer."""
    resized = fit_width(rgba, max_width)
    return adjust_contrast(grayscale(resized), contrast)


def load_image(source: ImageSource, max_width: int, contrast: float) -> np.ndarray:
    """
    Decode and prepare an image for rasterizing.

    Args:
        source: File path or encoded image bytes
        max_width: Maximum output width in dots
        contrast: Contrast boost in (-1, 1)

    Returns:
        Prepared RGBA image as np.ndarray (H, W, 4)

    Raises:
        ImageDecodeError: On missing file or undecodable data
    """
    return prepare_for_print(decode_image(source), max_width, contrast)


def load_raster(
    source: ImageSource,
    max_width: int,
    contrast: float,
    threshold: float = DEFAULT_THRESHOLD,
) -> RasterImage:
    """Decode, prepare and rasterize an image in one step."""
    raster = encode_raster(load_image(source, max_width, contrast), threshold)
    logger.debug(f"Loaded raster {raster.width}x{raster.height} from image source")
    return raster
