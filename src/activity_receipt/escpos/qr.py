"""
QR Payload Framer
=================

Encodes a string into the printer-native QR code sequence (GS ( k,
function 165/167/169/180/181).

The printer silently drops commands whose parameters are out of range,
so every parameter is validated here before framing.
"""

from activity_receipt.escpos.commands import GS


# Symbol storage limit of a model 2 QR code (numeric data, version 40)
MAX_QR_PAYLOAD = 7089

# GS ( k <fn 169> n: 48=L, 49=M, 50=Q, 51=H
EC_LEVELS = {
    "L": 48,
    "M": 49,
    "Q": 50,
    "H": 51,
}

_PREFIX = GS + b"(k"


def qr_command(data: str, module_size: int = 5, ec_level: str = "M") -> bytes:
    """
    Build the five QR sub-commands for ``data``.

    Args:
        data: Text to encode (UTF-8)
        module_size: Dot size of one module, 1-16
        ec_level: Error correction level, one of L, M, Q, H

    Returns:
        select model + module size + EC level + store data + print

    Raises:
        ValueError: If any parameter is outside the firmware's range
    """
    if not 1 <= module_size <= 16:
        raise ValueError(f"QR module size must be 1-16, got {module_size}")

    level = EC_LEVELS.get(str(ec_level).upper())
    if level is None:
        raise ValueError(f"QR error correction must be one of L, M, Q, H, got {ec_level!r}")

    payload = str(data).encode("utf-8")
    if not payload:
        raise ValueError("QR payload is empty")
    if len(payload) > MAX_QR_PAYLOAD:
        raise ValueError(f"QR payload too long: {len(payload)} bytes")

    store_len = len(payload) + 3

    model = _PREFIX + b"\x04\x00\x31\x41\x32\x00"
    size = _PREFIX + b"\x03\x00\x31\x43" + bytes([module_size])
    ec = _PREFIX + b"\x03\x00\x31\x45" + bytes([level])
    store = _PREFIX + store_len.to_bytes(2, "little") + b"\x31\x50\x30" + payload
    print_symbol = _PREFIX + b"\x03\x00\x31\x51\x30"

    return model + size + ec + store + print_symbol
