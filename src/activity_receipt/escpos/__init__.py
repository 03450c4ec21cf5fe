"""
ESC/POS Module
==============

Byte-level protocol layer for the receipt printer.

Components:
    - commands: Control codes (init, size, alignment, bold, font, feed, cut)
    - qr: QR code framing (GS ( k)
    - stream: CommandStream of typed fragments, serialized in one pass
"""

from activity_receipt.escpos.qr import qr_command
from activity_receipt.escpos.stream import (
    CommandStream,
    Control,
    QRBlock,
    RasterBlock,
    SectionBreak,
    Text,
)


__all__ = [
    "qr_command",
    "CommandStream",
    "Control",
    "QRBlock",
    "RasterBlock",
    "SectionBreak",
    "Text",
]
