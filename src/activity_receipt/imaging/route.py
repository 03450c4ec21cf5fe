"""
Route Renderer
==============

Draws a GPS route as a single open polyline and rasterizes it.

Projection:
    The bounding box of all points is padded by 10% of the larger of the
    latitude/longitude spans, then every point is mapped onto a fixed
    canvas:

        x = (lng - min_lng) / (max_lng - min_lng) * width
        y = height - (lat - min_lat) / (max_lat - min_lat) * height

    The y-flip puts north at the top of the canvas. This is a plain
    equirectangular mapping; no aspect correction is applied.

Degenerate routes (fewer than 2 points, malformed points, zero extent)
raise RouteDataError so the caller can print a placeholder.
"""

import logging
from typing import Any, Iterable, List, Optional

import cv2
import numpy as np
from pydantic import ValidationError

from activity_receipt.errors import RouteDataError
from activity_receipt.imaging.loader import prepare_for_print
from activity_receipt.imaging.raster import DEFAULT_THRESHOLD, RasterImage, encode_raster
from activity_receipt.models.activity import RoutePoint


logger = logging.getLogger(__name__)


PADDING_RATIO = 0.1

# Fixed-point bits for sub-pixel polyline vertices
_SHIFT = 4


def parse_route(raw: Optional[Iterable[Any]]) -> List[RoutePoint]:
    """
    Validate raw route points.

    Args:
        raw: Sequence of {lat, lng} dicts or RoutePoint objects

    Returns:
        Validated points, order preserved

    Raises:
        RouteDataError: If the route is missing, too short, or any point
            lacks a numeric lat/lng
    """
    if raw is None:
        raise RouteDataError("No route data")
    if isinstance(raw, (str, bytes, dict)):
        raise RouteDataError(f"Route must be a list of points, got {type(raw).__name__}")

    points: List[RoutePoint] = []
    for index, item in enumerate(raw):
        if isinstance(item, RoutePoint):
            points.append(item)
            continue
        try:
            points.append(RoutePoint.model_validate(item))
        except ValidationError as e:
            raise RouteDataError(f"Invalid route point at index {index}: {e.errors()[0]['msg']}")

    if len(points) < 2:
        raise RouteDataError(f"Route needs at least 2 points, got {len(points)}")

    return points


def project_route(points: List[RoutePoint], width: int, height: int) -> np.ndarray:
    """
    Project route points into canvas coordinates.

    Args:
        points: At least two route points
        width: Canvas width
        height: Canvas height

    Returns:
        np.ndarray (N, 2) of float (x, y) canvas coordinates

    Raises:
        RouteDataError: If the bounding box has zero extent
    """
    if len(points) < 2:
        raise RouteDataError(f"Route needs at least 2 points, got {len(points)}")

    lats = np.array([p.lat for p in points], dtype=np.float64)
    lngs = np.array([p.lng for p in points], dtype=np.float64)

    min_lat, max_lat = lats.min(), lats.max()
    min_lng, max_lng = lngs.min(), lngs.max()

    padding = max(max_lat - min_lat, max_lng - min_lng) * PADDING_RATIO
    if padding <= 0:
        raise RouteDataError("Route has zero extent (all points identical)")

    min_lat -= padding
    max_lat += padding
    min_lng -= padding
    max_lng += padding

    x = (lngs - min_lng) / (max_lng - min_lng) * width
    y = height - (lats - min_lat) / (max_lat - min_lat) * height

    return np.stack([x, y], axis=1)


class RouteRenderer:
    """
    Renders a route into a raster image.

    Attributes:
        canvas_width: Drawing canvas width
        canvas_height: Drawing canvas height
        stroke_width: Polyline thickness
        max_width: Maximum raster width after resizing
        contrast: Contrast boost applied before rasterizing
        threshold: Raster ink threshold

    Example:
        renderer = RouteRenderer()
        raster = renderer.render([{"lat": 40.0, "lng": -73.0}, ...])
    """

    def __init__(
        self,
        canvas_width: int = 400,
        canvas_height: int = 300,
        stroke_width: int = 2,
        max_width: int = 512,
        contrast: float = 0.3,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.stroke_width = stroke_width
        self.max_width = max_width
        self.contrast = contrast
        self.threshold = threshold

    def draw(self, points: List[RoutePoint]) -> np.ndarray:
        """
        Draw the route on a white RGBA canvas.

        Returns:
            RGBA canvas as np.ndarray (H, W, 4)
        """
        coords = project_route(points, self.canvas_width, self.canvas_height)

        canvas = np.full((self.canvas_height, self.canvas_width, 4), 255, dtype=np.uint8)
        vertices = np.rint(coords * (1 << _SHIFT)).astype(np.int32).reshape(-1, 1, 2)

        cv2.polylines(
            canvas,
            [vertices],
            isClosed=False,
            color=(0, 0, 0, 255),
            thickness=self.stroke_width,
            lineType=cv2.LINE_AA,
            shift=_SHIFT,
        )
        return canvas

    def render(self, raw_points: Optional[Iterable[Any]]) -> RasterImage:
        """
        Validate, draw and rasterize a route.

        Raises:
            RouteDataError: On degenerate or malformed input
        """
        points = parse_route(raw_points)
        canvas = self.draw(points)
        prepared = prepare_for_print(canvas, self.max_width, self.contrast)
        raster = encode_raster(prepared, self.threshold)

        logger.debug(
            f"Rendered route: points={len(points)}, "
            f"raster={raster.width}x{raster.height}"
        )
        return raster
