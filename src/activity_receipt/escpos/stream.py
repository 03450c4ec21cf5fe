"""
Command Stream
==============

Ordered list of typed fragments assembled into printer bytes in a single
serialization pass.

Fragment types:
    - Text: literal text, encoded with the printer code page
    - Control: raw control codes, copied verbatim
    - RasterBlock: a packed bitmap, emitted as a GS v 0 block
    - QRBlock: a QR symbol, emitted as GS ( k sub-commands
    - SectionBreak: split point for paced transmission (emits nothing)

Binary payloads are never routed through text encoding, so raster bytes
that collide with code-page control points reach the printer intact.

Example:
    stream = CommandStream()
    stream.control(INIT, ALIGN_CENTER)
    stream.line("HELLO")
    stream.raster(image)
    stream.section_break()

    payload = stream.to_bytes()
    sections = stream.sections()
"""

from dataclasses import dataclass
from typing import Iterator, List, Union

from activity_receipt.escpos.qr import qr_command
from activity_receipt.imaging.raster import RasterImage, raster_command


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text."""

    value: str


@dataclass(frozen=True, slots=True)
class Control:
    """Raw control codes."""

    value: bytes


@dataclass(frozen=True, slots=True)
class RasterBlock:
    """Embedded raster image."""

    image: RasterImage
    mode: int = 0


@dataclass(frozen=True, slots=True)
class QRBlock:
    """Embedded QR symbol."""

    data: str
    module_size: int = 5
    ec_level: str = "M"


@dataclass(frozen=True, slots=True)
class SectionBreak:
    """Split point for paced transmission."""


Fragment = Union[Text, Control, RasterBlock, QRBlock, SectionBreak]


class CommandStream:
    """
    Mutable, ordered command stream owned by one print job.

    Attributes:
        encoding: Printer code page used for Text fragments
        fragments: Fragments in emission order
    """

    def __init__(self, encoding: str = "cp437") -> None:
        self.encoding = encoding
        self.fragments: List[Fragment] = []

    def __len__(self) -> int:
        return len(self.fragments)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def control(self, *codes: bytes) -> "CommandStream":
        """Append one Control fragment per code."""
        for code in codes:
            self.fragments.append(Control(bytes(code)))
        return self

    def text(self, value: str) -> "CommandStream":
        """Append literal text (no newline)."""
        self.fragments.append(Text(value))
        return self

    def line(self, value: str = "") -> "CommandStream":
        """Append literal text followed by a newline."""
        self.fragments.append(Text(value + "\n"))
        return self

    def raster(self, image: RasterImage, mode: int = 0) -> "CommandStream":
        """Append a raster image block."""
        self.fragments.append(RasterBlock(image, mode))
        return self

    def qr(self, data: str, module_size: int = 5, ec_level: str = "M") -> "CommandStream":
        """Append a QR code block."""
        self.fragments.append(QRBlock(data, module_size, ec_level))
        return self

    def section_break(self) -> "CommandStream":
        """Mark a split point for paced transmission."""
        self.fragments.append(SectionBreak())
        return self

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _encode(self, fragment: Fragment) -> bytes:
        if isinstance(fragment, Text):
            return fragment.value.encode(self.encoding, errors="replace")
        if isinstance(fragment, Control):
            return fragment.value
        if isinstance(fragment, RasterBlock):
            return raster_command(fragment.image, fragment.mode)
        if isinstance(fragment, QRBlock):
            return qr_command(fragment.data, fragment.module_size, fragment.ec_level)
        if isinstance(fragment, SectionBreak):
            return b""
        raise TypeError(f"Unknown fragment type: {type(fragment).__name__}")

    def sections(self) -> List[bytes]:
        """
        Serialize the stream split at section breaks.

        Empty sections (adjacent breaks, leading/trailing breaks) are
        dropped; order is preserved.
        """
        sections: List[bytes] = []
        current = bytearray()
        for fragment in self.fragments:
            if isinstance(fragment, SectionBreak):
                if current:
                    sections.append(bytes(current))
                current = bytearray()
                continue
            current += self._encode(fragment)
        if current:
            sections.append(bytes(current))
        return sections

    def to_bytes(self) -> bytes:
        """Serialize the whole stream, ignoring section breaks."""
        return b"".join(self._encode(f) for f in self.fragments)

    def plain_text(self) -> str:
        """Text content only, for logging and debugging."""
        return "".join(f.value for f in self.fragments if isinstance(f, Text))
