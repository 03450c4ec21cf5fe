"""
Printer Directory
=================

Resolves which OS print queue receives the receipt.

Candidates are probed in order with ``lpstat -p <name>``; the first name
the print system knows wins. When none resolves, the job goes to the
system default printer.

The result (hit or miss) is cached in a PrinterDiscoveryCache owned by
the application, so the probe runs once per process.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from activity_receipt.errors import PrinterDiscoveryMiss


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrinterHandle:
    """A resolved print queue name."""

    name: str


class PrinterDirectory(Protocol):
    """Capability: resolve candidate names to a print queue."""

    async def resolve(self, candidates: Sequence[str]) -> Optional[PrinterHandle]:
        ...


class StaticPrinterDirectory:
    """
    Resolves to a fixed printer without probing.

    Used in dry-run mode, where no print system is involved.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self.calls = 0

    async def resolve(self, candidates: Sequence[str]) -> Optional[PrinterHandle]:
        self.calls += 1
        return PrinterHandle(self.name) if self.name else None


class LpstatPrinterDirectory:
    """
    Probes printers with the CUPS ``lpstat`` command.

    Attributes:
        command: lpstat executable
        timeout: Seconds allowed per probe
    """

    def __init__(self, command: str = "lpstat", timeout: float = 5.0) -> None:
        self.command = command
        self.timeout = timeout

    async def _probe(self, name: str) -> bool:
        """Return True if ``lpstat -p name`` exits with status 0."""
        try:
            process = await asyncio.create_subprocess_exec(
                self.command,
                "-p",
                name,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except FileNotFoundError:
            logger.warning(f"Printer probe command not found: {self.command}")
            return False

        try:
            returncode = await asyncio.wait_for(process.wait(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.warning(f"Printer probe timed out for {name!r}")
            return False

        return returncode == 0

    async def resolve(self, candidates: Sequence[str]) -> Optional[PrinterHandle]:
        for name in candidates:
            if await self._probe(name):
                logger.info(f"Found printer: {name}")
                return PrinterHandle(name)
        return None


class PrinterDiscoveryCache:
    """
    Memoizes printer discovery for the lifetime of the process.

    A miss is cached too: once no candidate resolved, later jobs go
    straight to the default printer without probing again.

    Example:
        cache = PrinterDiscoveryCache(LpstatPrinterDirectory())
        printer = await cache.get(["EPSON_TM_T20III", "Epson"])
    """

    def __init__(self, directory: PrinterDirectory) -> None:
        self.directory = directory
        self._resolved = False
        self._printer: Optional[PrinterHandle] = None
        self._lock = asyncio.Lock()

    @property
    def resolved(self) -> bool:
        """Whether discovery has run."""
        return self._resolved

    async def get(self, candidates: Sequence[str]) -> Optional[PrinterHandle]:
        """
        Return the cached printer, running discovery on first use.

        Returns:
            PrinterHandle, or None for the system default printer
        """
        async with self._lock:
            if not self._resolved:
                self._printer = await self.directory.resolve(candidates)
                self._resolved = True
                if self._printer is None:
                    miss = PrinterDiscoveryMiss(
                        f"No printer matched {list(candidates)}; using default printer"
                    )
                    logger.warning(str(miss))
            return self._printer

    def reset(self) -> None:
        """Forget the cached result so the next job probes again."""
        self._resolved = False
        self._printer = None
