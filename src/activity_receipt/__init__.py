"""
Activity Receipt
================

Local print server that turns fitness activities into ESC/POS receipts
for Epson TM-series thermal printers.

Components:
    - models: Activity, route point, photo and HTTP request schemas
    - imaging: Image decoding, route rendering, raster encoding
    - escpos: Command set, QR framing, typed command stream
    - receipt: Receipt layout and text formatting
    - transmission: Printer discovery, spooling, paced transmission
    - service: The print pipeline

Example:
    from activity_receipt.config import settings
    from activity_receipt.service import create_print_service

    # The HTTP server is started via the FastAPI application
    # See main.py for entry point
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
