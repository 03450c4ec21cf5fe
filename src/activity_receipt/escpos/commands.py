"""
ESC/POS Command Set
===================

Byte-exact control codes for Epson TM-series receipt printers.

Only the subset used by the receipt layout is defined here:
initialization, character size, alignment, emphasis, font, line
spacing, paper feed, full cut. Raster and QR blocks live in
``activity_receipt.imaging.raster`` and ``activity_receipt.escpos.qr``.
"""

ESC = b"\x1b"
GS = b"\x1d"

# ESC @ - initialize printer
INIT = ESC + b"@"

# ESC ! n - print mode (character size)
NORMAL_SIZE = ESC + b"!" + bytes([0])
SMALL_SIZE = ESC + b"!" + bytes([1])
DOUBLE_HEIGHT = ESC + b"!" + bytes([16])
DOUBLE_WIDTH = ESC + b"!" + bytes([32])
DOUBLE_SIZE = ESC + b"!" + bytes([48])

# ESC a n - justification
ALIGN_LEFT = ESC + b"a" + bytes([0])
ALIGN_CENTER = ESC + b"a" + bytes([1])
ALIGN_RIGHT = ESC + b"a" + bytes([2])

# ESC E n - emphasized
BOLD_ON = ESC + b"E" + bytes([1])
BOLD_OFF = ESC + b"E" + bytes([0])

# ESC M n - character font
FONT_A = ESC + b"M" + bytes([0])

# ESC 3 n / ESC 2 - line spacing
RESET_LINE_SPACING = ESC + b"2"

# GS V 66 n - feed n lines then full cut
FULL_CUT = GS + b"V" + bytes([66, 3])


def feed(lines: int = 3) -> bytes:
    """ESC d n: print and feed n lines, clamped to 0-255."""
    return ESC + b"d" + bytes([max(0, min(255, lines))])


def line_spacing(dots: int) -> bytes:
    """ESC 3 n: set line spacing to n dots (0-255)."""
    if not 0 <= dots <= 255:
        raise ValueError(f"Line spacing out of range: {dots}")
    return ESC + b"3" + bytes([dots])
