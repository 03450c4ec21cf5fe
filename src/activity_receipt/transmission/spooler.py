"""
Spoolers
========

Hand serialized receipt bytes to the OS print subsystem.

LpSpooler:
    Writes the payload to a temporary spool file, runs
    ``lp [-d NAME] -o raw FILE`` and deletes the file after a grace
    delay (the print system may still be reading it when ``lp`` returns).

DryRunSpooler:
    Records every submission and never touches the OS. Used when
    ``printer.dry_run`` is set and in tests.
"""

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import List, Optional, Protocol, Set

from activity_receipt.errors import SpoolSubmissionError, map_exception
from activity_receipt.transmission.directory import PrinterHandle


logger = logging.getLogger(__name__)


class Spooler(Protocol):
    """Capability: submit one raw payload to a print queue."""

    async def submit(
        self,
        payload: bytes,
        printer: Optional[PrinterHandle],
        label: str,
        cleanup_delay: float = 0.0,
    ) -> None:
        ...


class LpSpooler:
    """
    Submits raw jobs with the CUPS ``lp`` command.

    Attributes:
        command: lp executable
        spool_dir: Directory for spool files (None = system temp dir)
    """

    def __init__(self, command: str = "lp", spool_dir: Optional[str] = None) -> None:
        self.command = command
        self.spool_dir = spool_dir
        self._cleanup_tasks: Set[asyncio.Task] = set()

    def build_command(self, path: str, printer: Optional[PrinterHandle]) -> List[str]:
        """lp argument list for a spool file."""
        args = [self.command]
        if printer is not None:
            args += ["-d", printer.name]
        args += ["-o", "raw", path]
        return args

    def _write_spool_file(self, payload: bytes, label: str) -> str:
        if self.spool_dir:
            os.makedirs(self.spool_dir, exist_ok=True)
        fd, path = tempfile.mkstemp(prefix=f"{label}_", suffix=".bin", dir=self.spool_dir)
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        return path

    async def submit(
        self,
        payload: bytes,
        printer: Optional[PrinterHandle],
        label: str,
        cleanup_delay: float = 0.0,
    ) -> None:
        """
        Write and submit one spool file.

        Raises:
            SpoolSubmissionError: If the file cannot be written, ``lp`` is
                missing, or ``lp`` exits non-zero
        """
        try:
            path = self._write_spool_file(payload, label)
        except OSError as e:
            raise map_exception(e)

        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(path, printer),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            self._schedule_cleanup(path, 0.0)
            raise map_exception(e)

        self._schedule_cleanup(path, cleanup_delay)

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip() or f"exit status {process.returncode}"
            raise SpoolSubmissionError(f"lp failed for {label}: {detail}")

        logger.debug(f"Submitted {label} ({len(payload)} bytes): {stdout.decode(errors='replace').strip()}")

    def _schedule_cleanup(self, path: str, delay: float) -> None:
        task = asyncio.get_running_loop().create_task(self._cleanup(path, delay))
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_tasks.discard)

    async def _cleanup(self, path: str, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            os.unlink(path)
            logger.debug(f"Removed spool file {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove spool file {path}: {e}")

    async def drain(self) -> None:
        """Wait for pending spool file deletions."""
        if self._cleanup_tasks:
            await asyncio.gather(*list(self._cleanup_tasks), return_exceptions=True)


@dataclass
class SpoolRecord:
    """One submission seen by the DryRunSpooler."""

    payload: bytes
    printer: Optional[str]
    label: str


class DryRunSpooler:
    """
    Records submissions instead of printing.

    Attributes:
        records: Every submission, in order
        fail_labels: Labels whose submission raises SpoolSubmissionError
    """

    def __init__(self, fail_labels: Optional[Set[str]] = None) -> None:
        self.records: List[SpoolRecord] = []
        self.fail_labels = set(fail_labels or ())

    async def submit(
        self,
        payload: bytes,
        printer: Optional[PrinterHandle],
        label: str,
        cleanup_delay: float = 0.0,
    ) -> None:
        if label in self.fail_labels:
            raise SpoolSubmissionError(f"Dry-run failure for {label}")

        printer_name = printer.name if printer else None
        self.records.append(SpoolRecord(payload, printer_name, label))
        logger.info(
            f"[dry-run] {label}: {len(payload)} bytes -> {printer_name or 'default printer'}"
        )

    @property
    def payload(self) -> bytes:
        """All recorded payloads joined in submission order."""
        return b"".join(r.payload for r in self.records)
