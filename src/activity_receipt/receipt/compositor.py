"""
Receipt Compositor
==================

Builds the ESC/POS CommandStream for one activity receipt.

Layout (each step ends in a section break unless noted):

    PREAMBLE -> LOGO? -> TITLE -> LOCATION/DATE -> DIVIDER (no break)
    -> STATS -> DIVIDER (no break) -> TOTALS -> ROUTE -> PHOTOS?
    -> GRATUITY -> QR? -> FOOTER + CUT

Design Rules:
    - Pure: no file, network or printer I/O. Image rasters arrive
      pre-rendered in ReceiptAssets; a missing route raster prints a
      text placeholder, a missing logo is simply omitted, and a QR code
      the printer cannot hold prints a text line instead.
    - All receipt text is uppercased.
    - Section breaks sit where the printer can pause without tearing a
      raster block in half.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from activity_receipt.config import ReceiptConfig
from activity_receipt.escpos.commands import (
    ALIGN_CENTER,
    ALIGN_LEFT,
    ALIGN_RIGHT,
    BOLD_OFF,
    BOLD_ON,
    FONT_A,
    FULL_CUT,
    INIT,
    NORMAL_SIZE,
    RESET_LINE_SPACING,
    feed,
)
from activity_receipt.escpos.qr import qr_command
from activity_receipt.escpos.stream import CommandStream
from activity_receipt.imaging.raster import RasterImage
from activity_receipt.models.activity import ActivityRecord
from activity_receipt.receipt.formatting import (
    format_duration,
    format_elevation,
    format_heart_rate,
    format_miles,
    format_pace,
    format_timestamp,
    three_col,
    wrap_text,
)


logger = logging.getLogger(__name__)


# Indent of the detail lines under the stats row, aligned with column 2
STATS_INDENT = " " * 9
GRATUITY_INDENT = " " * 10

ROUTE_PLACEHOLDER = "[Route visualization]"
QR_PLACEHOLDER = "[QR code unavailable]"


@dataclass
class ReceiptAssets:
    """
    Pre-rendered images for one receipt.

    Attributes:
        logo: Header logo raster, or None to omit it
        route: Route raster, or None to print the placeholder
        photos: Photo rasters in print order
        extra_photos: Photos supplied beyond the per-receipt limit, printed
            as an overflow line
    """

    logo: Optional[RasterImage] = None
    route: Optional[RasterImage] = None
    photos: List[RasterImage] = field(default_factory=list)
    extra_photos: int = 0


def format_location(activity: ActivityRecord, default: str) -> str:
    """'CITY, STATE', else the country, else the default location."""
    parts = [
        part.strip().upper()
        for part in (activity.location_city, activity.location_state)
        if part and part.strip()
    ]
    if not activity.location_state and activity.location_country and activity.location_country.strip():
        parts.append(activity.location_country.strip().upper())
    return ", ".join(parts) if parts else default.upper()


class ReceiptCompositor:
    """
    Composes receipts from an activity and its rendered assets.

    Attributes:
        config: Receipt layout configuration
        encoding: Printer code page for text fragments

    Example:
        compositor = ReceiptCompositor(settings.receipt)
        stream = compositor.compose(activity, ReceiptAssets(route=raster))
        sections = stream.sections()
    """

    def __init__(self, config: Optional[ReceiptConfig] = None, encoding: str = "cp437") -> None:
        self.config = config or ReceiptConfig()
        self.encoding = encoding

    def compose(
        self,
        activity: ActivityRecord,
        assets: Optional[ReceiptAssets] = None,
        now: Optional[datetime] = None,
    ) -> CommandStream:
        """
        Build the full receipt.

        Args:
            activity: Activity to print
            assets: Rendered images (defaults to none)
            now: Timestamp used when the activity has no start date

        Returns:
            CommandStream ready for serialization
        """
        assets = assets or ReceiptAssets()
        stream = CommandStream(self.encoding)

        stream.control(INIT, RESET_LINE_SPACING, ALIGN_LEFT, FONT_A, NORMAL_SIZE, feed(2))

        if assets.logo is not None:
            self._logo(stream, assets.logo)
        self._title(stream, activity)
        self._location(stream, activity, now)
        self._divider(stream)
        self._stats(stream, activity)
        self._divider(stream)
        self._totals(stream, activity)
        self._route(stream, assets.route)
        if assets.photos:
            self._photos(stream, assets)
        stream.section_break()
        self._gratuity(stream)
        if self.config.qr.enabled and activity.id is not None:
            self._qr(stream, activity)
        self._footer(stream)

        logger.debug(
            f"Composed receipt for activity {activity.id!r}: "
            f"{len(stream)} fragments, logo={assets.logo is not None}, "
            f"route={assets.route is not None}, photos={len(assets.photos)}"
        )
        return stream

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _logo(self, stream: CommandStream, logo: RasterImage) -> None:
        stream.control(ALIGN_CENTER).raster(logo).control(ALIGN_LEFT).line()
        stream.section_break()

    def _title(self, stream: CommandStream, activity: ActivityRecord) -> None:
        stream.control(ALIGN_CENTER, BOLD_ON)
        stream.line(activity.name.upper())
        stream.control(BOLD_OFF)
        if activity.description and activity.description.strip():
            for text in wrap_text(activity.description.upper(), self.config.line_width):
                stream.line(text)
        stream.control(feed(1))
        stream.section_break()

    def _location(self, stream: CommandStream, activity: ActivityRecord, now: Optional[datetime]) -> None:
        moment = activity.start_date or now or datetime.now().astimezone()
        stream.control(ALIGN_CENTER)
        stream.line(format_location(activity, self.config.default_location))
        stream.control(feed(1))
        stream.line(format_timestamp(moment))
        stream.control(feed(1))
        stream.section_break()

    def _divider(self, stream: CommandStream) -> None:
        stream.control(ALIGN_CENTER).line("-" * self.config.line_width)
        stream.control(ALIGN_LEFT, feed(1))

    def _stats(self, stream: CommandStream, activity: ActivityRecord) -> None:
        stream.control(BOLD_ON).line(three_col("COUNT", "TYPE", "NO. MILES"))
        stream.control(BOLD_OFF, feed(1))

        stream.line(three_col("1", activity.type.upper(), format_miles(activity.distance)))
        details = [
            ("PACE", format_pace(activity.distance, activity.duration)),
            ("MOVING TIME", format_duration(activity.duration)),
            ("AVG HEART RATE", format_heart_rate(activity.average_heartrate)),
            ("ELEVATION GAIN", format_elevation(activity.total_elevation_gain)),
        ]
        for label, value in details:
            stream.line(f"{STATS_INDENT}{label}: {value}".upper())
        stream.control(feed(1))

    def _totals(self, stream: CommandStream, activity: ActivityRecord) -> None:
        stream.control(BOLD_ON).line(three_col("", "TOTAL MILES", format_miles(activity.distance)))
        stream.control(BOLD_OFF, feed(1))
        stream.control(ALIGN_RIGHT).line(f"({self.config.brand} TAX INCL.)".upper())
        stream.control(ALIGN_LEFT, feed(2))
        stream.section_break()

    def _route(self, stream: CommandStream, route: Optional[RasterImage]) -> None:
        stream.control(ALIGN_CENTER, BOLD_ON).line(self.config.route_title.upper())
        stream.control(BOLD_OFF, feed(1))
        if route is not None:
            stream.raster(route)
            stream.control(ALIGN_LEFT).line()
        else:
            stream.line(ROUTE_PLACEHOLDER)
            stream.control(ALIGN_LEFT)
        stream.control(feed(2))
        stream.section_break()

    def _photos(self, stream: CommandStream, assets: ReceiptAssets) -> None:
        stream.control(ALIGN_CENTER, BOLD_ON).line("ACTIVITY PHOTOS")
        stream.control(BOLD_OFF, feed(1))
        for photo in assets.photos:
            stream.control(ALIGN_CENTER).raster(photo)
            stream.control(ALIGN_LEFT).line()
            stream.control(feed(1))

        remaining = assets.extra_photos
        if remaining > 0:
            noun = "photo" if remaining == 1 else "photos"
            stream.control(ALIGN_CENTER)
            stream.line(f"(+{remaining} more {noun} on {self.config.brand})".upper())
            stream.control(ALIGN_LEFT)
        stream.control(feed(1))

    def _gratuity(self, stream: CommandStream) -> None:
        stream.control(ALIGN_CENTER, BOLD_ON).line("SUGGESTED GRATUITY")
        stream.control(BOLD_OFF, feed(1), ALIGN_LEFT)
        for text in self.config.gratuity_lines:
            stream.line(f"{GRATUITY_INDENT}{text}".upper())
        stream.control(feed(2))
        stream.section_break()

    def _qr(self, stream: CommandStream, activity: ActivityRecord) -> None:
        url = self.config.activity_url_template.format(id=activity.id)
        module_size, ec_level = self.config.qr.module_size, self.config.qr.ec_level
        stream.control(ALIGN_CENTER).line(f"VIEW ON {self.config.brand}".upper())
        stream.control(feed(1))
        try:
            qr_command(url, module_size, ec_level)
        except ValueError as e:
            logger.warning(f"QR code for activity {activity.id!r} skipped: {e}")
            stream.line(QR_PLACEHOLDER)
        else:
            stream.qr(url, module_size, ec_level)
        stream.control(ALIGN_LEFT, feed(1), ALIGN_CENTER, feed(2))
        stream.section_break()

    def _footer(self, stream: CommandStream) -> None:
        stream.control(ALIGN_CENTER).line(self.config.footer.upper())
        stream.control(feed(2))
        stream.control(feed(2), INIT, FULL_CUT)
