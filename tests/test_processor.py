from backend.lib.usage_core.models import UsageData, UsageEntry
from backend.lib.usage_core.processor import UsageAnalyzer


def make_data():
    return UsageData("123 Main St", [
        UsageEntry((2025, 6, 20), 23, 0, 0.75),
        UsageEntry((2025, 6, 21), 0, 1, 0.25),
        UsageEntry((2025, 6, 21), 1, 2, 0.5, "estimated"),
    ])


def test_dates_in_first_seen_order():
    analyzer = UsageAnalyzer(make_data())
    assert analyzer.dates() == [(2025, 6, 20), (2025, 6, 21)]


def test_hourly_bars_for_one_day():
    analyzer = UsageAnalyzer(make_data())
    bars = analyzer.hourly_bars((2025, 6, 21))
    assert bars == [
        {"hour": 0, "kwh": 0.25, "width": 1.0},
        {"hour": 1, "kwh": 0.5, "width": 1.0},
    ]
    assert analyzer.hourly_bars((2025, 6, 22)) == []


def test_entries_for_accepts_list_dates():
    analyzer = UsageAnalyzer(make_data())
    assert len(analyzer.entries_for([2025, 6, 20])) == 1


def test_daily_usage():
    daily = UsageAnalyzer(make_data()).daily_usage()
    assert daily == {"2025-06-20": 0.75, "2025-06-21": 0.75}
