# backend/lib/usage_core/models.py
from dataclasses import dataclass
from typing import Optional, Tuple

# (year, month, day), not checked against a calendar
UsageDate = Tuple[int, int, int]


@dataclass(frozen=True)
class UsageEntry:
    date: UsageDate
    interval_start_hour: int
    interval_end_hour: int
    kilowatt_hours: float
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "date": list(self.date),
            "interval_start_hour": self.interval_start_hour,
            "interval_end_hour": self.interval_end_hour,
            "kilowatt_hours": self.kilowatt_hours,
            "note": self.note,
        }


@dataclass(frozen=True)
class UsageData:
    address: str
    entries: Tuple[UsageEntry, ...] = ()

    def __post_init__(self):
        # entries are fixed once the document is built
        object.__setattr__(self, "entries", tuple(self.entries))

    @property
    def last_entry(self) -> Optional[UsageEntry]:
        return self.entries[-1] if self.entries else None

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "entries": [e.to_dict() for e in self.entries],
        }
