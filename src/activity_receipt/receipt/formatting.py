"""
Receipt Formatting
==================

Number formatting and fixed-width column helpers for the receipt text.

All rounding here is half-up (2.5 -> 3), not Python's banker's rounding,
so printed values match what a person would compute by hand.
"""

import math
from datetime import datetime, timezone
from typing import List, Optional, Sequence


METERS_TO_MILES = 0.000621371
METERS_TO_FEET = 3.28084

LINE_WIDTH = 48

NOT_AVAILABLE = "N/A"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def meters_to_miles(meters: float) -> float:
    return meters * METERS_TO_MILES


def format_miles(meters: Optional[float]) -> str:
    """Distance in miles with two decimals: 1609.34 -> '1.00'."""
    return f"{meters_to_miles(meters or 0.0):.2f}"


def format_pace(meters: Optional[float], seconds: Optional[float]) -> str:
    """
    Pace as 'M:SS min/mi'.

    Seconds per mile are rounded first, so a pace never prints ':60'.
    Returns 'N/A' without a distance or a time.
    """
    miles = meters_to_miles(meters or 0.0)
    if miles <= 0 or not seconds:
        return NOT_AVAILABLE

    total = round_half_up(seconds / miles)
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d} min/mi"


def format_elevation(meters: Optional[float]) -> str:
    """Elevation gain in whole feet: 100 -> '328 ft'."""
    if not meters:
        return NOT_AVAILABLE
    return f"{round_half_up(meters * METERS_TO_FEET)} ft"


def format_heart_rate(bpm: Optional[float]) -> str:
    """Average heart rate in whole bpm."""
    if not bpm:
        return NOT_AVAILABLE
    return f"{round_half_up(bpm)} bpm"


def format_duration(seconds: Optional[float]) -> str:
    """Duration as '1h 5m', '5m 3s' or '42s'."""
    if not seconds:
        return NOT_AVAILABLE
    total = round_half_up(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_timestamp(moment: datetime) -> str:
    """
    Receipt date line, e.g. 'SUN, OCT 19, 2026, 7:05 AM UTC'.

    Naive timestamps are taken as UTC; the result is shown in the
    server's local time zone.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone()

    hour = local.hour % 12 or 12
    text = (
        f"{local:%a}, {local:%b} {local.day}, {local.year}, "
        f"{hour}:{local:%M} {local:%p} {local.tzname() or ''}"
    )
    return text.strip().upper()


def three_col(
    col1: str,
    col2: str,
    col3: str,
    widths: Sequence[int] = (8, 24, 12),
) -> str:
    """
    Three fixed-width columns separated by single spaces.

    Column 1 and column 3 are right-aligned (padded on the left),
    column 2 is left-aligned. Overlong values are not truncated.
    """
    w1, w2, w3 = widths
    return f"{str(col1):>{w1}} {str(col2):<{w2}} {str(col3):>{w3}}"


def wrap_text(text: str, width: int = LINE_WIDTH) -> List[str]:
    """
    Greedy word wrap.

    Words are packed into lines of at most ``width`` characters; a word
    longer than the width is force-broken into width-sized chunks.
    """
    lines: List[str] = []
    line = ""
    for word in str(text).split():
        candidate = f"{line} {word}" if line else word
        if len(candidate) <= width:
            line = candidate
            continue

        if line:
            lines.append(line)
        if len(word) > width:
            lines.extend(word[i:i + width] for i in range(0, len(word), width))
            line = ""
        else:
            line = word

    if line:
        lines.append(line)
    return lines
