"""
Command Stream Tests
====================

Tests for fragment serialization and section splitting.
"""

import pytest

from activity_receipt.escpos.commands import (
    ALIGN_CENTER,
    BOLD_ON,
    DOUBLE_HEIGHT,
    DOUBLE_SIZE,
    DOUBLE_WIDTH,
    INIT,
    SMALL_SIZE,
    feed,
    line_spacing,
)
from activity_receipt.escpos.qr import qr_command
from activity_receipt.escpos.stream import CommandStream, Control, SectionBreak, Text
from activity_receipt.imaging.raster import RasterImage


class TestCommands:
    """Tests for command helpers."""

    def test_feed(self):
        assert feed(2) == b"\x1bd\x02"

    def test_feed_is_clamped(self):
        assert feed(300) == b"\x1bd\xff"
        assert feed(-1) == b"\x1bd\x00"

    @pytest.mark.parametrize("code,mode", [
        (SMALL_SIZE, 1),
        (DOUBLE_HEIGHT, 16),
        (DOUBLE_WIDTH, 32),
        (DOUBLE_SIZE, 48),
    ])
    def test_print_modes(self, code, mode):
        assert code == b"\x1b!" + bytes([mode])

    def test_line_spacing(self):
        assert line_spacing(10) == b"\x1b3\x0a"
        assert line_spacing(0) == b"\x1b3\x00"

    @pytest.mark.parametrize("dots", [-1, 256])
    def test_line_spacing_out_of_range(self, dots):
        with pytest.raises(ValueError):
            line_spacing(dots)


class TestCommandStream:
    """Tests for CommandStream."""

    def test_builders_append_in_order(self):
        stream = CommandStream().control(INIT, BOLD_ON).line("HI").section_break()
        assert list(stream) == [Control(INIT), Control(BOLD_ON), Text("HI\n"), SectionBreak()]

    def test_text_encoding_replaces_unknown_characters(self):
        stream = CommandStream(encoding="cp437").text("café €")
        assert stream.to_bytes() == b"caf\x82 ?"

    def test_raster_bytes_copied_verbatim(self):
        # Bytes that collide with LF, ESC and high code points
        data = b"\x0a\x1b\xff\x80"
        image = RasterImage(width=32, height=1, bytes_per_row=4, data=data)
        payload = CommandStream().raster(image).to_bytes()
        assert payload == b"\x1d\x76\x30\x00\x04\x00\x01\x00" + data

    def test_qr_block(self):
        payload = CommandStream().qr("https://example.com/1", 6, "H").to_bytes()
        assert payload == qr_command("https://example.com/1", 6, "H")

    def test_sections_split_at_breaks(self):
        stream = CommandStream()
        stream.text("A").section_break().text("B").text("C").section_break().text("D")
        assert stream.sections() == [b"A", b"BC", b"D"]

    def test_empty_sections_dropped(self):
        stream = CommandStream()
        stream.section_break().text("A").section_break().section_break().text("B").section_break()
        assert stream.sections() == [b"A", b"B"]

    def test_to_bytes_ignores_breaks(self):
        stream = CommandStream()
        stream.control(INIT).section_break().line("X").section_break()
        assert stream.to_bytes() == b"".join(stream.sections())
        assert stream.to_bytes() == INIT + b"X\n"

    def test_plain_text(self):
        stream = CommandStream().control(INIT).line("ONE").text("TWO")
        assert stream.plain_text() == "ONE\nTWO"

    def test_unknown_fragment_raises(self):
        stream = CommandStream()
        stream.fragments.append("raw string")
        with pytest.raises(TypeError):
            stream.to_bytes()
