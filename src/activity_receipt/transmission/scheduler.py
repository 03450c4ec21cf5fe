"""
Transmission Scheduler
======================

Sends a composed receipt to the printer, either in one shot or paced.

Modes:
    - Single-shot: pacing is OFF or the receipt has at most one section.
      The whole stream (section breaks removed) is one job; a failure is
      raised to the caller.
    - Paced: each section is its own job, submitted strictly in order
      with a pause of ``pacing.delay_ms`` between submissions. A failed
      section is logged and skipped; the rest of the receipt still prints.

The pause goes through an injected ``sleep`` coroutine so tests can run
without real delays.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from activity_receipt.errors import map_exception
from activity_receipt.escpos.stream import CommandStream
from activity_receipt.transmission.directory import PrinterDiscoveryCache
from activity_receipt.transmission.pacing import PrintPacing
from activity_receipt.transmission.spooler import Spooler


logger = logging.getLogger(__name__)


SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class TransmissionReport:
    """
    Outcome of one transmission.

    Attributes:
        printer: Print queue used (None = system default)
        pacing: Slow-print mode that was applied
        sections_total: Sections submitted or attempted
        sections_sent: Sections accepted by the print system
        failed_sections: 1-based indices of failed sections
        bytes_sent: Payload bytes accepted
        duration_ms: Wall time of the transmission
    """

    printer: Optional[str]
    pacing: PrintPacing
    sections_total: int = 0
    sections_sent: int = 0
    failed_sections: List[int] = field(default_factory=list)
    bytes_sent: int = 0
    duration_ms: float = 0.0

    @property
    def paced(self) -> bool:
        return self.pacing is not PrintPacing.OFF and self.sections_total > 1

    @property
    def ok(self) -> bool:
        return not self.failed_sections


class TransmissionScheduler:
    """
    Sends CommandStreams through a spooler.

    Attributes:
        discovery: Printer discovery cache
        spooler: Job submission backend
        candidates: Printer names probed on first use
        sleep: Coroutine used for the inter-section pause
        section_cleanup_delay: Spool file grace delay per section (s)
        job_cleanup_delay: Spool file grace delay for single-shot jobs (s)
    """

    def __init__(
        self,
        discovery: PrinterDiscoveryCache,
        spooler: Spooler,
        candidates: Sequence[str],
        sleep: SleepFn = asyncio.sleep,
        section_cleanup_delay: float = 1.0,
        job_cleanup_delay: float = 5.0,
    ) -> None:
        self.discovery = discovery
        self.spooler = spooler
        self.candidates = list(candidates)
        self.sleep = sleep
        self.section_cleanup_delay = section_cleanup_delay
        self.job_cleanup_delay = job_cleanup_delay

    async def transmit(
        self,
        stream: CommandStream,
        pacing: PrintPacing = PrintPacing.SLOW,
        label: str = "receipt",
    ) -> TransmissionReport:
        """
        Send a composed receipt.

        Args:
            stream: Composed receipt
            pacing: Slow-print mode
            label: Job label used for spool file names and logs

        Returns:
            TransmissionReport

        Raises:
            SpoolSubmissionError: Single-shot submission failed
        """
        start_time = time.perf_counter()
        printer = await self.discovery.get(self.candidates)
        sections = stream.sections()

        report = TransmissionReport(
            printer=printer.name if printer else None,
            pacing=pacing,
            sections_total=len(sections),
        )

        if pacing.delay_ms > 0 and len(sections) > 1:
            logger.info(
                f"Slow print mode: {pacing.value} "
                f"({pacing.delay_ms}ms between {len(sections)} sections)"
            )
            await self._send_paced(sections, printer, pacing, label, report)
        else:
            report.sections_total = 1
            payload = stream.to_bytes()
            try:
                await self.spooler.submit(payload, printer, label, self.job_cleanup_delay)
            except Exception as e:
                report.failed_sections.append(1)
                logger.error(f"Print job {label} failed: {e}")
                raise map_exception(e)
            report.sections_sent = 1
            report.bytes_sent = len(payload)
            logger.info(f"Print job {label} sent ({len(payload)} bytes)")

        report.duration_ms = (time.perf_counter() - start_time) * 1000
        return report

    async def _send_paced(self, sections, printer, pacing, label, report) -> None:
        total = len(sections)
        for index, payload in enumerate(sections, start=1):
            if index > 1:
                await self.sleep(pacing.delay_seconds)

            section_label = f"{label}_section_{index}"
            try:
                await self.spooler.submit(payload, printer, section_label, self.section_cleanup_delay)
            except Exception as e:
                report.failed_sections.append(index)
                logger.error(f"Section {index}/{total} print error: {map_exception(e)}")
                continue

            report.sections_sent += 1
            report.bytes_sent += len(payload)
            logger.info(f"Section {index}/{total} sent")

        if report.failed_sections:
            logger.warning(
                f"Print job {label} finished with {len(report.failed_sections)} "
                f"failed section(s): {report.failed_sections}"
            )
        else:
            logger.info(f"All {total} sections printed")
