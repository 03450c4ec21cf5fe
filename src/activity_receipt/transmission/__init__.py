"""
Transmission Module
===================

Delivery of composed receipts to the OS print subsystem.

Components:
    - pacing: Slow-print modes and their delays
    - directory: Printer discovery (lpstat) and the discovery cache
    - spooler: lp submission and the dry-run recorder
    - scheduler: Single-shot vs paced transmission
"""

from activity_receipt.transmission.pacing import PrintPacing
from activity_receipt.transmission.directory import (
    LpstatPrinterDirectory,
    PrinterDirectory,
    PrinterDiscoveryCache,
    PrinterHandle,
    StaticPrinterDirectory,
)
from activity_receipt.transmission.spooler import DryRunSpooler, LpSpooler, Spooler, SpoolRecord
from activity_receipt.transmission.scheduler import TransmissionReport, TransmissionScheduler


__all__ = [
    "PrintPacing",
    "LpstatPrinterDirectory",
    "PrinterDirectory",
    "PrinterDiscoveryCache",
    "PrinterHandle",
    "StaticPrinterDirectory",
    "DryRunSpooler",
    "LpSpooler",
    "Spooler",
    "SpoolRecord",
    "TransmissionReport",
    "TransmissionScheduler",
]
