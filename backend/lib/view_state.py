"""
View settings persisted by the shell between runs.

Only the last viewed date is kept; the parsed document itself is never
written to disk.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewSettings:
    year: int = 2025
    month: int = 6
    day: int = 21

    @property
    def date(self) -> Tuple[int, int, int]:
        return (self.year, self.month, self.day)

    def with_date(self, date: Tuple[int, int, int]) -> "ViewSettings":
        year, month, day = date
        return replace(self, year=year, month=month, day=day)

    def iso_date(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


def load_view_settings(path: Path) -> ViewSettings:
    """
    Read settings from a JSON file.
    Missing or unreadable files give the defaults; unknown keys are ignored
    so older or newer files still load.
    """
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return ViewSettings()
    except (OSError, ValueError) as e:
        logger.warning("Could not read view settings from %s: %s", path, e)
        return ViewSettings()

    if not isinstance(raw, dict):
        logger.warning("Ignoring view settings in %s: expected a JSON object", path)
        return ViewSettings()

    known = {f.name for f in fields(ViewSettings)}
    values = {k: v for k, v in raw.items() if k in known and isinstance(v, int)}
    return ViewSettings(**values)


def save_view_settings(settings: ViewSettings, path: Path) -> None:
    path = Path(path)
    os.makedirs(path.parent, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(settings), f)
