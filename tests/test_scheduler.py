"""
Transmission Scheduler Tests
============================

Tests for single-shot vs paced transmission, ordering, delays and
failure handling.
"""

import asyncio

import pytest

from activity_receipt.errors import SpoolSubmissionError
from activity_receipt.escpos.stream import CommandStream
from activity_receipt.transmission import (
    DryRunSpooler,
    PrinterDiscoveryCache,
    PrintPacing,
    StaticPrinterDirectory,
    TransmissionScheduler,
)


class ClockedSpooler(DryRunSpooler):
    """DryRunSpooler that stamps each submission with the fake clock."""

    def __init__(self, clock, fail_labels=None):
        super().__init__(fail_labels)
        self.clock = clock
        self.times = []
        self.cleanup_delays = []

    async def submit(self, payload, printer, label, cleanup_delay=0.0):
        self.times.append(self.clock.now)
        self.cleanup_delays.append(cleanup_delay)
        await super().submit(payload, printer, label, cleanup_delay)


def three_sections():
    stream = CommandStream()
    stream.text("ONE").section_break().text("TWO").section_break().text("THREE")
    return stream


def make_scheduler(spooler, sleep, printer="EPSON_TM_T20III"):
    directory = StaticPrinterDirectory(printer)
    scheduler = TransmissionScheduler(
        discovery=PrinterDiscoveryCache(directory),
        spooler=spooler,
        candidates=["EPSON_TM_T20III"],
        sleep=sleep,
    )
    return scheduler, directory


class TestPacing:
    """Tests for PrintPacing."""

    def test_delays(self):
        assert PrintPacing.OFF.delay_ms == 0
        assert PrintPacing.FAST.delay_ms == 50
        assert PrintPacing.MEDIUM.delay_ms == 150
        assert PrintPacing.SLOW.delay_ms == 300

    def test_parse(self):
        assert PrintPacing.parse(" Medium ") is PrintPacing.MEDIUM
        with pytest.raises(ValueError):
            PrintPacing.parse("glacial")


class TestPacedTransmission:
    """Tests for section-by-section transmission."""

    def test_sections_sent_in_order_with_gaps(self, recording_sleep):
        spooler = ClockedSpooler(recording_sleep)
        scheduler, _ = make_scheduler(spooler, recording_sleep)

        report = asyncio.run(scheduler.transmit(three_sections(), PrintPacing.MEDIUM, label="job"))

        assert [r.payload for r in spooler.records] == [b"ONE", b"TWO", b"THREE"]
        assert [r.label for r in spooler.records] == ["job_section_1", "job_section_2", "job_section_3"]
        assert recording_sleep.delays == [0.15, 0.15]
        gaps = [b - a for a, b in zip(spooler.times, spooler.times[1:])]
        assert all(gap >= 0.15 for gap in gaps)
        assert report.paced
        assert report.sections_sent == 3
        assert report.ok

    def test_section_cleanup_delay(self, recording_sleep):
        spooler = ClockedSpooler(recording_sleep)
        scheduler, _ = make_scheduler(spooler, recording_sleep)
        asyncio.run(scheduler.transmit(three_sections(), PrintPacing.FAST))
        assert spooler.cleanup_delays == [1.0, 1.0, 1.0]

    def test_failed_section_is_skipped(self, recording_sleep):
        spooler = ClockedSpooler(recording_sleep, fail_labels={"job_section_1"})
        scheduler, _ = make_scheduler(spooler, recording_sleep)

        report = asyncio.run(scheduler.transmit(three_sections(), PrintPacing.MEDIUM, label="job"))

        assert [r.payload for r in spooler.records] == [b"TWO", b"THREE"]
        assert len(spooler.times) == 3
        assert report.failed_sections == [1]
        assert report.sections_sent == 2
        assert report.bytes_sent == len(b"TWOTHREE")
        assert not report.ok

    def test_os_error_in_section_is_skipped(self, recording_sleep):
        class FlakySpooler(DryRunSpooler):
            async def submit(self, payload, printer, label, cleanup_delay=0.0):
                if payload == b"TWO":
                    raise PermissionError("spool dir not writable")
                await super().submit(payload, printer, label, cleanup_delay)

        spooler = FlakySpooler()
        scheduler, _ = make_scheduler(spooler, recording_sleep)
        report = asyncio.run(scheduler.transmit(three_sections(), PrintPacing.SLOW))
        assert report.failed_sections == [2]
        assert [r.payload for r in spooler.records] == [b"ONE", b"THREE"]

    def test_unexpected_error_in_section_is_skipped(self, recording_sleep):
        class BuggySpooler(DryRunSpooler):
            async def submit(self, payload, printer, label, cleanup_delay=0.0):
                if payload == b"ONE":
                    raise RuntimeError("spooler bug")
                await super().submit(payload, printer, label, cleanup_delay)

        spooler = BuggySpooler()
        scheduler, _ = make_scheduler(spooler, recording_sleep)
        report = asyncio.run(scheduler.transmit(three_sections(), PrintPacing.FAST))
        assert report.failed_sections == [1]
        assert report.sections_sent == 2
        assert [r.payload for r in spooler.records] == [b"TWO", b"THREE"]
        assert recording_sleep.delays == [0.05, 0.05]


class TestSingleShot:
    """Tests for one-job transmission."""

    def test_pacing_off_sends_one_job(self, recording_sleep):
        spooler = ClockedSpooler(recording_sleep)
        scheduler, _ = make_scheduler(spooler, recording_sleep)

        report = asyncio.run(scheduler.transmit(three_sections(), PrintPacing.OFF, label="job"))

        assert [r.payload for r in spooler.records] == [b"ONETWOTHREE"]
        assert spooler.records[0].label == "job"
        assert spooler.cleanup_delays == [5.0]
        assert recording_sleep.delays == []
        assert not report.paced

    def test_single_section_is_not_paced(self, recording_sleep):
        spooler = ClockedSpooler(recording_sleep)
        scheduler, _ = make_scheduler(spooler, recording_sleep)
        stream = CommandStream().text("ONLY").section_break()

        report = asyncio.run(scheduler.transmit(stream, PrintPacing.SLOW))

        assert [r.payload for r in spooler.records] == [b"ONLY"]
        assert recording_sleep.delays == []
        assert report.sections_total == 1

    def test_failure_propagates(self, recording_sleep):
        spooler = ClockedSpooler(recording_sleep, fail_labels={"job"})
        scheduler, _ = make_scheduler(spooler, recording_sleep)
        with pytest.raises(SpoolSubmissionError):
            asyncio.run(scheduler.transmit(three_sections(), PrintPacing.OFF, label="job"))

    def test_os_error_is_mapped(self, recording_sleep):
        class BrokenSpooler(DryRunSpooler):
            async def submit(self, payload, printer, label, cleanup_delay=0.0):
                raise FileNotFoundError("lp")

        scheduler, _ = make_scheduler(BrokenSpooler(), recording_sleep)
        with pytest.raises(SpoolSubmissionError, match="Print command not found"):
            asyncio.run(scheduler.transmit(three_sections(), PrintPacing.OFF))


class TestDiscovery:
    """Tests for printer resolution during transmission."""

    def test_printer_name_is_used(self, recording_sleep):
        spooler = DryRunSpooler()
        scheduler, _ = make_scheduler(spooler, recording_sleep)
        report = asyncio.run(scheduler.transmit(three_sections(), PrintPacing.OFF))
        assert report.printer == "EPSON_TM_T20III"
        assert spooler.records[0].printer == "EPSON_TM_T20III"

    def test_miss_uses_default_printer(self, recording_sleep):
        spooler = DryRunSpooler()
        scheduler, _ = make_scheduler(spooler, recording_sleep, printer=None)
        report = asyncio.run(scheduler.transmit(three_sections(), PrintPacing.OFF))
        assert report.printer is None
        assert spooler.records[0].printer is None

    def test_discovery_runs_once(self, recording_sleep):
        scheduler, directory = make_scheduler(DryRunSpooler(), recording_sleep)

        async def two_jobs():
            await scheduler.transmit(three_sections(), PrintPacing.OFF)
            await scheduler.transmit(three_sections(), PrintPacing.OFF)

        asyncio.run(two_jobs())
        assert directory.calls == 1
