# backend/run_local.py
import logging
import os
import sys
from pathlib import Path

from backend.lib.usage_core.errors import ParseError
from backend.lib.usage_core.io import parse_document
from backend.lib.usage_core.processor import UsageAnalyzer


def main(export_path) -> int:
    try:
        text = Path(export_path).read_text(encoding="utf-8")
    except UnicodeDecodeError:
        print(f"Could not load {export_path}: file is not valid UTF-8 text", file=sys.stderr)
        return 1

    try:
        data = parse_document(text)
    except ParseError as e:
        print(f"Could not load {export_path}: {e}", file=sys.stderr)
        return 1

    print(f"{data.address}: {len(data.entries)} entries")
    for day, kwh in sorted(UsageAnalyzer(data).daily_usage().items()):
        print(f" - {day} : {kwh:.3f} kWh")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    path = sys.argv[1] if len(sys.argv) > 1 else "tests/sample_usage.csv"
    sys.exit(main(path))
