"""
Duration and wall-clock helpers.

Clock times carry no date: arrival and cutoff strings are compared as
minutes since midnight of the same day.
"""

import math
import re
from datetime import datetime, timedelta

from ..exceptions import ValidationError

MINUTES_PER_DAY = 1440

_CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*([AaPp][Mm])?\s*$")


def format_duration(total_minutes: float) -> str:
    """Format time in minutes as an HH:MM:SS string."""
    hours = math.floor(total_minutes / 60)
    minutes = math.floor(total_minutes % 60)
    seconds = round((total_minutes % 1) * 60)
    if seconds == 60:
        seconds = 0
        minutes += 1
        if minutes == 60:
            minutes = 0
            hours += 1
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_duration(duration: str) -> float:
    """Parse an HH:MM:SS or HH:MM duration string into minutes (0 for other shapes)."""
    parts = duration.strip().split(":")
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise ValidationError(f"Invalid duration '{duration}'") from None
    if any(v < 0 for v in values):
        raise ValidationError(f"Negative duration '{duration}'")
    
    if len(values) == 3:
        return values[0] * 60 + values[1] + values[2] / 60
    if len(values) == 2:
        return values[0] * 60 + values[1]
    return 0


def parse_time_to_minutes(time_str: str) -> int:
    """
    Parse a clock time (24-hour "HH:MM" or 12-hour "h:mm AM") to minutes since midnight.
    """
    match = _CLOCK_PATTERN.match(time_str or "")
    if not match:
        raise ValidationError(f"Invalid clock time '{time_str}'")
    
    hours, minutes, period = int(match.group(1)), int(match.group(2)), match.group(3)
    if minutes > 59:
        raise ValidationError(f"Invalid clock time '{time_str}'")
    
    if period:
        if not 1 <= hours <= 12:
            raise ValidationError(f"Invalid 12-hour time '{time_str}'")
        period = period.upper()
        if period == "PM" and hours != 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
    elif hours > 23:
        raise ValidationError(f"Invalid 24-hour time '{time_str}'")
    
    return hours * 60 + minutes


def _format_12_hour(hours: int, minutes: int) -> str:
    period = "PM" if hours >= 12 else "AM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{minutes:02d} {period}"


def format_cutoff_time(time_str: str) -> str:
    """Convert a clock time to 12-hour "h:mm AM/PM" form."""
    total = parse_time_to_minutes(time_str)
    return _format_12_hour(total // 60, total % 60)


def calculate_arrival_time(start_time: str, elapsed_minutes: float) -> str:
    """
    Wall-clock arrival after elapsed_minutes from a "HH:MM" start, as "h:mm AM/PM".
    Wraps past midnight.
    """
    start = parse_time_to_minutes(start_time)
    base = datetime(2000, 1, 1, start // 60, start % 60)
    arrival = base + timedelta(minutes=elapsed_minutes)
    return _format_12_hour(arrival.hour, arrival.minute)


def calculate_cutoff_margin(arrival_time: str, cutoff_time: str) -> int:
    """Minutes between arrival and cutoff (positive = ahead of the cutoff)."""
    return parse_time_to_minutes(cutoff_time) - parse_time_to_minutes(arrival_time)
