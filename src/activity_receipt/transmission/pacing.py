"""
Print Pacing
============

Slow-print modes. Older thermal printers drop data when a large receipt
arrives in one burst, so the receipt can be sent section by section with
a fixed pause in between.
"""

from enum import Enum


class PrintPacing(str, Enum):
    """Slow-print mode and its inter-section delay."""

    OFF = "off"
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"

    @property
    def delay_ms(self) -> int:
        """Pause between sections in milliseconds."""
        return _DELAYS_MS[self]

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0

    @classmethod
    def parse(cls, value: str) -> "PrintPacing":
        """Parse a mode name, case-insensitive."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown slow-print mode: {value}")


_DELAYS_MS = {
    PrintPacing.OFF: 0,
    PrintPacing.FAST: 50,
    PrintPacing.MEDIUM: 150,
    PrintPacing.SLOW: 300,
}
