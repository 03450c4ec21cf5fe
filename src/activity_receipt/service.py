"""
Print Service
=============

The receipt pipeline for one print job:

    PrintRequest
        -> gather assets (logo, route raster, photo rasters)
        -> ReceiptCompositor.compose()
        -> TransmissionScheduler.transmit()

Design Rules:
    - All I/O happens while gathering assets: file reads, photo downloads
      and OpenCV work run off the event loop (asyncio.to_thread) with a
      bounded wait; a timeout counts as a broken image.
    - Each asset fails on its own. A broken logo is omitted, a broken
      route prints a placeholder, a broken photo is skipped. None of them
      fail the job.
    - Transmission errors propagate to the HTTP layer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, List, Optional

import cv2

from activity_receipt.config import Settings
from activity_receipt.errors import ImageDecodeError, RouteDataError
from activity_receipt.imaging.fetch import PhotoFetcher
from activity_receipt.imaging.loader import load_raster
from activity_receipt.imaging.raster import RasterImage
from activity_receipt.imaging.route import RouteRenderer
from activity_receipt.models.request import PrintRequest
from activity_receipt.receipt.compositor import ReceiptAssets, ReceiptCompositor
from activity_receipt.transmission import (
    DryRunSpooler,
    LpSpooler,
    LpstatPrinterDirectory,
    PrinterDiscoveryCache,
    PrintPacing,
    StaticPrinterDirectory,
    TransmissionReport,
    TransmissionScheduler,
)
from activity_receipt.transmission.scheduler import SleepFn


logger = logging.getLogger(__name__)


# Failures that cost one asset, not the job
_ASSET_ERRORS = (ImageDecodeError, RouteDataError, cv2.error)


class PrintService:
    """
    Runs print jobs end to end.

    Attributes:
        settings: Application settings
        compositor: Receipt layout
        scheduler: Transmission to the printer
        renderer: Route renderer
        fetcher: Photo fetcher
        pacing: Slow-print mode applied to every job
    """

    def __init__(
        self,
        settings: Settings,
        compositor: ReceiptCompositor,
        scheduler: TransmissionScheduler,
        renderer: RouteRenderer,
        fetcher: PhotoFetcher,
    ) -> None:
        self.settings = settings
        self.compositor = compositor
        self.scheduler = scheduler
        self.renderer = renderer
        self.fetcher = fetcher
        self.pacing = PrintPacing.parse(settings.printer.pacing)

    @property
    def dry_run(self) -> bool:
        return isinstance(self.scheduler.spooler, DryRunSpooler)

    async def print_activity(self, request: PrintRequest) -> TransmissionReport:
        """
        Compose and transmit one receipt.

        Returns:
            TransmissionReport

        Raises:
            SpoolSubmissionError: Single-shot submission failed
        """
        activity = request.activity
        logger.info(
            f"Printing activity {activity.id!r} ({activity.name!r}, {activity.type}): "
            f"route_points={len(request.route or [])}, photos={len(request.photos or [])}"
        )

        assets = await self.gather_assets(request)
        stream = self.compositor.compose(activity, assets)

        if self.dry_run:
            logger.info(f"[dry-run] Receipt content:\n{stream.plain_text()}")

        label = f"activity_{activity.id}" if activity.id is not None else "activity"
        report = await self.scheduler.transmit(stream, self.pacing, label=label)

        logger.info(
            f"Print job for activity {activity.id!r} done: "
            f"{report.sections_sent}/{report.sections_total} sections, "
            f"printer={report.printer or 'default'}, {report.duration_ms:.0f}ms"
        )
        return report

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    async def gather_assets(self, request: PrintRequest) -> ReceiptAssets:
        """Render logo, route and photos concurrently."""
        photos = request.photos or []
        logo, route, photo_rasters = await asyncio.gather(
            self._render_logo(),
            self._render_route(request.route, request.activity.supports_gps),
            self._render_photos(photos),
        )
        return ReceiptAssets(
            logo=logo,
            route=route,
            photos=photo_rasters,
            extra_photos=max(0, len(photos) - self.settings.receipt.images.max_photos),
        )

    async def _off_loop(self, what: str, func, *args):
        """Run blocking image work in a thread with a bounded wait."""
        timeout = self.settings.fetch.timeout_seconds
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)
        except asyncio.TimeoutError:
            raise ImageDecodeError(f"Timed out rendering {what} after {timeout}s")

    async def _render_logo(self) -> Optional[RasterImage]:
        logo = self.settings.receipt.logo
        if not logo.enabled:
            return None

        images = self.settings.receipt.images
        try:
            return await self._off_loop(
                "logo", load_raster, Path(logo.path), logo.max_width, logo.contrast, images.threshold
            )
        except _ASSET_ERRORS as e:
            logger.warning(f"Logo omitted: {e}")
            return None

    async def _render_route(self, route: Optional[List[Any]], supports_gps: bool) -> Optional[RasterImage]:
        if not route:
            if supports_gps:
                logger.info("No route data, printing placeholder")
            return None

        try:
            return await self._off_loop("route", self.renderer.render, route)
        except _ASSET_ERRORS as e:
            logger.warning(f"Route placeholder printed: {e}")
            return None

    async def _render_photo(self, index: int, photo: Any) -> Optional[RasterImage]:
        images = self.settings.receipt.images
        try:
            data = await self.fetcher.fetch(photo)
            return await self._off_loop(
                f"photo {index + 1}", load_raster, data, images.photo_max_width, images.photo_contrast, images.threshold
            )
        except _ASSET_ERRORS as e:
            logger.warning(f"Photo {index + 1} skipped: {e}")
            return None

    async def _render_photos(self, photos: List[Any]) -> List[RasterImage]:
        selected = photos[: self.settings.receipt.images.max_photos]
        if not selected:
            return []

        results = await asyncio.gather(
            *(self._render_photo(i, photo) for i, photo in enumerate(selected))
        )
        return [raster for raster in results if raster is not None]

    def close(self) -> None:
        self.fetcher.close()

    async def aclose(self) -> None:
        """Wait for pending spool file deletions, then close."""
        drain = getattr(self.scheduler.spooler, "drain", None)
        if drain is not None:
            await drain()
        self.close()


# =============================================================================
# Factory
# =============================================================================

def create_print_service(settings: Settings, sleep: SleepFn = asyncio.sleep) -> PrintService:
    """
    Build a PrintService from settings.

    The printer discovery cache is created here, once per service, and
    lives as long as the service does.
    """
    printer = settings.printer
    images = settings.receipt.images

    if printer.dry_run:
        logger.info("Dry-run mode: receipts are logged, not printed")
        spooler = DryRunSpooler()
        directory = StaticPrinterDirectory()
    else:
        spooler = LpSpooler(command=printer.lp_command, spool_dir=printer.spool_dir)
        directory = LpstatPrinterDirectory(command=printer.lpstat_command)

    discovery = PrinterDiscoveryCache(directory)
    scheduler = TransmissionScheduler(
        discovery=discovery,
        spooler=spooler,
        candidates=printer.candidates,
        sleep=sleep,
        section_cleanup_delay=printer.section_cleanup_delay_seconds,
        job_cleanup_delay=printer.job_cleanup_delay_seconds,
    )

    renderer = RouteRenderer(
        canvas_width=images.route_canvas_width,
        canvas_height=images.route_canvas_height,
        stroke_width=images.route_stroke_width,
        max_width=images.route_max_width,
        contrast=images.route_contrast,
        threshold=images.threshold,
    )

    logger.info(
        f"Print service ready: pacing={printer.pacing}, "
        f"candidates={printer.candidates}, dry_run={printer.dry_run}"
    )

    return PrintService(
        settings=settings,
        compositor=ReceiptCompositor(settings.receipt, encoding=printer.encoding),
        scheduler=scheduler,
        renderer=renderer,
        fetcher=PhotoFetcher(timeout=settings.fetch.timeout_seconds),
    )
