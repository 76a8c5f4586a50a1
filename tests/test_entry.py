from backend.lib.usage_core.entry import parse_entry
from backend.lib.usage_core.errors import (
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
import pytest


def make_line(type_="Electric usage", date="06/21/2025", start="1:00 AM",
              end="2:00 AM", usage="0.5", unit="kWh", note=""):
    return ",".join([type_, date, start, end, usage, unit, note])


def test_parse_well_formed_line():
    entry = parse_entry("Electric usage,06/21/2025,1:00 AM,2:00 AM,0.5 ,kWh,")
    assert entry.date == (2025, 6, 21)
    assert entry.interval_start_hour == 1
    assert entry.interval_end_hour == 2
    assert entry.kilowatt_hours == 0.5
    assert entry.note == ""


def test_line_rebuilt_from_entry_parses_to_same_entry():
    entry = parse_entry(make_line(start="9:00 pm", end="10:00 pm", usage="1.25", note="peak"))
    year, month, day = entry.date
    rebuilt = make_line(
        date=f"{month}/{day}/{year}",
        start=f"{entry.interval_start_hour % 12 or 12}:00 {'PM' if entry.interval_start_hour >= 12 else 'AM'}",
        end=f"{entry.interval_end_hour % 12 or 12}:00 {'PM' if entry.interval_end_hour >= 12 else 'AM'}",
        usage=str(entry.kilowatt_hours),
        note=entry.note,
    )
    assert parse_entry(rebuilt) == entry


@pytest.mark.parametrize("text,hour", [
    ("12:00 AM", 0),
    ("12:00 PM", 12),
    ("1:00 PM", 13),
    ("11:00 pm", 23),
    ("3:00 am", 3),
    ("13:00 PM", 13),
])
def test_hour_normalisation(text, hour):
    assert parse_entry(make_line(start=text)).interval_start_hour == hour


def test_unknown_entry_type():
    with pytest.raises(UnknownEntryType) as exc:
        parse_entry(make_line(type_="Gas usage"))
    assert "'Gas usage'" in str(exc.value)


def test_empty_line_is_unknown_type():
    with pytest.raises(UnknownEntryType):
        parse_entry("")


@pytest.mark.parametrize("date,expected", [
    ("06", "Expected Day"),
    ("06/21", "Expected Year"),
])
def test_date_missing_components(date, expected):
    with pytest.raises(MalformedDate) as exc:
        parse_entry(make_line(date=date))
    assert expected in str(exc.value)


@pytest.mark.parametrize("date", ["xx/21/2025", "06/-1/2025", "06/21/70000", "256/01/2025", "06/21/2025/1"])
def test_date_bad_components(date):
    with pytest.raises(MalformedDate):
        parse_entry(make_line(date=date))


def test_calendar_validity_not_checked():
    assert parse_entry(make_line(date="02/31/2025")).date == (2025, 2, 31)


@pytest.mark.parametrize("minutes", ["15", "30", "01", "59"])
def test_non_zero_minutes_rejected(minutes):
    with pytest.raises(MalformedTime) as exc:
        parse_entry(make_line(start=f"1:{minutes} AM"))
    assert "Non-zero minutes" in str(exc.value)


def test_non_zero_minutes_in_end_time_rejected():
    with pytest.raises(MalformedTime):
        parse_entry(make_line(end="2:45 AM"))


@pytest.mark.parametrize("time", ["100 AM", "1:00AM", "1"])
def test_malformed_time_shape(time):
    with pytest.raises(MalformedTime) as exc:
        parse_entry(make_line(start=time))
    assert repr(time) in str(exc.value)


def test_bad_hour_number():
    with pytest.raises(MalformedTime):
        parse_entry(make_line(start="one:00 AM"))


@pytest.mark.parametrize("meridiem", ["Am", "noon", "P.M.", ""])
def test_unknown_meridiem(meridiem):
    with pytest.raises(UnknownMeridiem) as exc:
        parse_entry(make_line(start=f"1:00 {meridiem}"))
    assert repr(meridiem) in str(exc.value)


def test_unknown_unit():
    with pytest.raises(UnknownUnit) as exc:
        parse_entry(make_line(unit="MWh"))
    assert "'MWh'" in str(exc.value)


@pytest.mark.parametrize("usage", [
    "abc", "", "0x", "1.2.3", "1_0", "nan", "inf", "-inf", "\t0.5\t", "1e999",
])
def test_malformed_usage(usage):
    with pytest.raises(MalformedUsage):
        parse_entry(make_line(usage=usage))


def test_extra_fields():
    with pytest.raises(ExtraFields):
        parse_entry(make_line(note="note") + ",extra")


def test_missing_note():
    with pytest.raises(MissingNote):
        parse_entry("Electric usage,06/21/2025,1:00 AM,2:00 AM,0.5,kWh")


def test_note_kept_verbatim():
    assert parse_entry(make_line(note=" meter swapped ")).note == " meter swapped "


@pytest.mark.parametrize("line", [
    "Electric usage",
    "Electric usage,06/21/2025",
    "Electric usage,06/21/2025,1:00 AM",
    "Electric usage,06/21/2025,1:00 AM,2:00 AM",
    "Electric usage,06/21/2025,1:00 AM,2:00 AM,0.5",
])
def test_missing_fields(line):
    with pytest.raises(MissingField):
        parse_entry(line)


@pytest.mark.parametrize("usage,kwh", [(".5", 0.5), ("+2", 2.0), ("1e-3", 0.001), (" 0.25 ", 0.25)])
def test_plain_decimal_usage_accepted(usage, kwh):
    assert parse_entry(make_line(usage=usage)).kilowatt_hours == kwh
