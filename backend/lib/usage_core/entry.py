# backend/lib/usage_core/entry.py
import math
import re
from typing import Iterator, Optional

from .errors import (
    ExtraFields,
    MalformedDate,
    MalformedTime,
    MalformedUsage,
    MissingField,
    MissingNote,
    UnknownEntryType,
    UnknownMeridiem,
    UnknownUnit,
)
from .models import UsageDate, UsageEntry

ENTRY_TYPE = "Electric usage"

MERIDIEM_OFFSETS = {"AM": 0, "am": 0, "PM": 12, "pm": 12}

# multiplier to kWh
UNIT_MULTIPLIERS = {"kWh": 1.0}

# plain decimal, optionally space padded; no "1_0", "nan" or "inf"
USAGE_PATTERN = re.compile(r" *[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)? *", re.ASCII)


def _parse_unsigned(text: str, bits: int) -> Optional[int]:
    """Parse a plain decimal integer that fits in `bits` unsigned bits, else None."""
    if not text or not text.isascii() or not text.isdigit():
        return None
    value = int(text)
    if value >= 1 << bits:
        return None
    return value


def _parse_date(text: str) -> UsageDate:
    """MM/DD/YYYY -> (year, month, day)"""
    parts = text.split("/")
    for name, index in (("Month", 0), ("Day", 1), ("Year", 2)):
        if len(parts) <= index:
            raise MalformedDate(f"Expected {name} in date {text!r}")
    if len(parts) > 3:
        raise MalformedDate(f"Unexpected trailing date components in {text!r}")

    month = _parse_unsigned(parts[0], 8)
    day = _parse_unsigned(parts[1], 8)
    year = _parse_unsigned(parts[2], 16)
    if month is None:
        raise MalformedDate(f"Invalid month {parts[0]!r} in date {text!r}")
    if day is None:
        raise MalformedDate(f"Invalid day {parts[1]!r} in date {text!r}")
    if year is None:
        raise MalformedDate(f"Invalid year {parts[2]!r} in date {text!r}")
    return (year, month, day)


def _parse_hour(text: str) -> int:
    """
    Parse 'H:00 AM' style times into a 0-23 hour.
    Only whole hours are supported; '12' is treated as 0 before the meridiem offset.
    """
    hour_text, sep, rest = text.partition(":")
    if not sep:
        raise MalformedTime(f"Invalid time {text!r}")
    minutes, sep, meridiem = rest.partition(" ")
    if not sep:
        raise MalformedTime(f"Invalid time {text!r}")

    if minutes != "00":
        raise MalformedTime(
            f"Non-zero minutes unsupported in time {text!r}, only whole hours can be handled"
        )

    hour = _parse_unsigned(hour_text, 8)
    if hour is None:
        raise MalformedTime(f"Invalid hour {hour_text!r} in time {text!r}")

    if meridiem not in MERIDIEM_OFFSETS:
        raise UnknownMeridiem(f"Unknown meridiem {meridiem!r}, AM/PM or am/pm accepted")
    return hour % 12 + MERIDIEM_OFFSETS[meridiem]


def _next_field(fields: Iterator[str], expected: str) -> str:
    value = next(fields, None)
    if value is None:
        raise MissingField(f"Insufficient entries in line, expected {expected}")
    return value


def parse_entry(line: str) -> UsageEntry:
    """
    Parse one data line of a usage export:
        Electric usage,06/21/2025,1:00 AM,2:00 AM,0.5 ,kWh,

    Exactly seven comma separated fields are required (the note may be empty).
    Raises a ParseError subclass describing the first field that fails.
    """
    fields = iter(line.split(","))

    entry_type = next(fields)
    if entry_type != ENTRY_TYPE:
        raise UnknownEntryType(f"Unknown entry type {entry_type!r}")

    date = _parse_date(_next_field(fields, "date"))
    interval_start_hour = _parse_hour(_next_field(fields, "start time"))
    interval_end_hour = _parse_hour(_next_field(fields, "end time"))

    usage_text = _next_field(fields, "usage and unit")
    unit = _next_field(fields, "usage and unit")
    if not USAGE_PATTERN.fullmatch(usage_text):
        raise MalformedUsage(f"Invalid usage value {usage_text!r}")
    scalar = float(usage_text)
    if not math.isfinite(scalar):
        raise MalformedUsage(f"Usage value {usage_text!r} is out of range")
    if unit not in UNIT_MULTIPLIERS:
        raise UnknownUnit(f"Unknown unit {unit!r}")
    kilowatt_hours = scalar * UNIT_MULTIPLIERS[unit]

    note = next(fields, None)
    if note is None:
        raise MissingNote("Expected final entry for note (may be empty, but comma is expected)")

    if next(fields, None) is not None:
        raise ExtraFields("Extra entries in the line")

    return UsageEntry(
        date=date,
        interval_start_hour=interval_start_hour,
        interval_end_hour=interval_end_hour,
        kilowatt_hours=kilowatt_hours,
        note=note,
    )
