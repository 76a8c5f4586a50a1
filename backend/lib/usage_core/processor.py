# backend/lib/usage_core/processor.py
from collections import defaultdict
from typing import Dict, List

from .models import UsageData, UsageDate, UsageEntry


class UsageAnalyzer:
    def __init__(self, data: UsageData):
        self.data = data

    def dates(self) -> List[UsageDate]:
        """Distinct entry dates, in the order they first appear in the file."""
        seen = {}
        for e in self.data.entries:
            seen.setdefault(e.date, None)
        return list(seen)

    def entries_for(self, date: UsageDate) -> List[UsageEntry]:
        return [e for e in self.data.entries if e.date == tuple(date)]

    def hourly_bars(self, date: UsageDate) -> List[Dict[str, float]]:
        """
        Bar chart series for one day: one bar per interval, placed at the
        interval's start hour, one hour wide.
        """
        return [
            {"hour": e.interval_start_hour, "kwh": e.kilowatt_hours, "width": 1.0}
            for e in self.entries_for(date)
        ]

    def daily_usage(self) -> Dict[str, float]:
        """
        Returns a dict keyed by 'YYYY-MM-DD' -> total_kwh.
        """
        daily = defaultdict(float)
        for e in self.data.entries:
            year, month, day = e.date
            daily[f"{year:04d}-{month:02d}-{day:02d}"] += e.kilowatt_hours
        return dict(daily)
