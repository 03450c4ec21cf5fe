"""
Imaging Module
==============

Image sources and the raster encoder.

Components:
    - raster: RGBA buffer -> packed 1-bit RasterImage, GS v 0 framing
    - loader: PNG/JPEG decode, resize, grayscale, contrast
    - route: GPS route projection and polyline rendering
    - fetch: Photo download with a bounded wait
"""

from activity_receipt.imaging.raster import RasterImage, encode_raster, raster_command
from activity_receipt.imaging.loader import decode_image, load_image, load_raster
from activity_receipt.imaging.route import RouteRenderer, parse_route, project_route
from activity_receipt.imaging.fetch import PhotoFetcher


__all__ = [
    "RasterImage",
    "encode_raster",
    "raster_command",
    "decode_image",
    "load_image",
    "load_raster",
    "RouteRenderer",
    "parse_route",
    "project_route",
    "PhotoFetcher",
]
