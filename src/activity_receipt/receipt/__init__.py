"""
Receipt Module
==============

Receipt layout and text formatting.

Components:
    - formatting: Miles, pace, elevation, timestamps, fixed-width columns
    - compositor: Activity + rendered assets -> CommandStream
"""

from activity_receipt.receipt.compositor import ReceiptAssets, ReceiptCompositor, format_location
from activity_receipt.receipt.formatting import three_col, wrap_text


__all__ = [
    "ReceiptAssets",
    "ReceiptCompositor",
    "format_location",
    "three_col",
    "wrap_text",
]
