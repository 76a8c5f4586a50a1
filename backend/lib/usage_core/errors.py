# backend/lib/usage_core/errors.py
from typing import Optional


class ParseError(ValueError):
    """Base class for every failure raised while reading a usage export."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def at_line(self, line_number: int) -> "ParseError":
        """Attach the physical (1-based) line number the error came from."""
        self.line_number = line_number
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"On line {self.line_number}: {self.message}"


class MalformedHeader(ParseError):
    """Address, blank separator or column header line is wrong."""


class UnknownEntryType(ParseError):
    """TYPE field is not "Electric usage"."""


class MalformedDate(ParseError):
    """Date is missing a component or a component is not a valid integer."""


class MalformedTime(ParseError):
    """Time is not shaped like H:00 AM, or has non-zero minutes."""


class UnknownMeridiem(ParseError):
    """AM/PM token not recognised."""


class UnknownUnit(ParseError):
    """Unit other than kWh."""


class MalformedUsage(ParseError):
    """Usage value is not a number."""


class MissingField(ParseError):
    """Fewer than seven fields in an entry line."""


class ExtraFields(ParseError):
    """More than seven fields in an entry line."""


class MissingNote(ParseError):
    """Note field (the seventh) is absent."""
