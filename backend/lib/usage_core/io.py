# backend/lib/usage_core/io.py
import logging
from typing import List

from .entry import parse_entry
from .errors import MalformedHeader, ParseError
from .models import UsageData, UsageEntry

logger = logging.getLogger(__name__)

HEADER_LINE = "TYPE,DATE,START TIME,END TIME,USAGE,UNITS,NOTES"
# address, blank separator, column header
HEADER_LINE_COUNT = 3


def parse_document(text: str) -> UsageData:
    """
    Parse a whole usage export:

        123 Main St

        TYPE,DATE,START TIME,END TIME,USAGE,UNITS,NOTES
        Electric usage,06/21/2025,1:00 AM,2:00 AM,0.5 ,kWh,

    The three header lines are checked before any entry is read. Blank data
    lines are skipped. The first bad entry aborts the parse; its error keeps
    its type and is tagged with the physical line number.
    """
    lines = text.split("\n")

    address = lines[0]
    if not address:
        raise MalformedHeader("Expected an address at the top of the file")
    if len(lines) < 2 or lines[1] != "":
        raise MalformedHeader("Expected second line to be blank")
    if len(lines) < 3 or lines[2] != HEADER_LINE:
        raise MalformedHeader(f"Incorrect headers, expected {HEADER_LINE!r}")

    entries: List[UsageEntry] = []
    for line_number, line in enumerate(lines[HEADER_LINE_COUNT:], start=HEADER_LINE_COUNT + 1):
        if not line:
            continue
        try:
            entries.append(parse_entry(line))
        except ParseError as e:
            raise e.at_line(line_number)

    logger.debug("Parsed %d entries for %r", len(entries), address)
    return UsageData(address=address, entries=tuple(entries))
