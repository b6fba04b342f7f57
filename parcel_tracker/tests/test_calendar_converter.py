"""
Tests for Buddhist Era carrier date conversion.
"""

import logging
import pytest
from datetime import datetime, timedelta, timezone

from parcel_tracker.app.services.calendar_converter import (
    BUDDHIST_ERA_OFFSET,
    convert_carrier_datetime,
    parse_carrier_datetime,
)

ICT = timezone(timedelta(hours=7))

MALFORMED_DATES = [
    "2025-07-20T10:00:00+07:00",      # already ISO
    "20-07-2568 10:00:00+07:00",      # wrong date separator
    "20/07/2568T10:00:00+07:00",      # no whitespace before time
    "20/07/2568 10.00.00+07:00",      # wrong time separator
    "ab/07/2568 10:00:00+07:00",      # non-numeric day
    "20/07/2568 10:00+07:00",         # missing seconds
    "20/07/2568 10:00:00",            # missing offset
    "20/07/2568 10:00:00+0700",       # offset without colon
    "30/02/2568 10:00:00+07:00",      # February 30th
    "20/13/2568 10:00:00+07:00",      # month 13
    "20/07/2568 25:00:00+07:00",      # hour 25
    "20/07/0543 10:00:00+07:00",      # year zero
    "20/07/2568 10:00:00+07:00 extra",
    "",
]


def test_known_carrier_date():
    """A real carrier timestamp converts to the Gregorian equivalent."""
    converted = convert_carrier_datetime("19/07/2562 18:12:26+07:00")

    assert converted == datetime(2019, 7, 19, 18, 12, 26, tzinfo=ICT)
    assert converted.isoformat() == "2019-07-19T18:12:26+07:00"


@pytest.mark.parametrize("era_year", [544, 2000, 2562, 2568, 3000, 9999])
def test_year_shift_keeps_everything_else(era_year):
    raw = f"05/11/{era_year:04d} 23:59:01-03:30"

    converted = convert_carrier_datetime(raw)

    assert converted.year == era_year - BUDDHIST_ERA_OFFSET
    assert (converted.month, converted.day) == (11, 5)
    assert (converted.hour, converted.minute, converted.second) == (23, 59, 1)
    assert converted.utcoffset() == -timedelta(hours=3, minutes=30)


def test_literal_offset_is_preserved():
    """The offset from the input is kept, not normalized to UTC."""
    converted = convert_carrier_datetime("20/07/2568 10:00:00+07:00")

    assert converted.isoformat() == "2025-07-20T10:00:00+07:00"


def test_leap_day_in_leap_year():
    assert parse_carrier_datetime("29/02/2567 08:00:00+07:00").value == datetime(2024, 2, 29, 8, tzinfo=ICT)
    assert not parse_carrier_datetime("29/02/2568 08:00:00+07:00").ok


def test_surrounding_whitespace_is_ignored():
    assert parse_carrier_datetime("  20/07/2568 10:00:00+07:00\n").ok


def test_thai_digits_are_rejected():
    assert not parse_carrier_datetime("๒๐/07/2568 10:00:00+07:00").ok


@pytest.mark.parametrize("raw", MALFORMED_DATES)
def test_parse_reports_failure_explicitly(raw):
    result = parse_carrier_datetime(raw)

    assert not result.ok
    assert result.value is None
    assert result.error


@pytest.mark.parametrize("raw", MALFORMED_DATES)
def test_convert_falls_back_to_now_and_logs(raw, caplog):
    """Malformed input never raises; it degrades to 'now' and is logged."""
    caplog.set_level(logging.ERROR, logger="parcel_tracker.calendar")

    before = datetime.now(timezone.utc)
    converted = convert_carrier_datetime(raw)
    after = datetime.now(timezone.utc)

    assert before - timedelta(seconds=2) <= converted <= after + timedelta(seconds=2)
    assert any(
        record.name == "parcel_tracker.calendar" and record.levelno == logging.ERROR
        for record in caplog.records
    )


def test_sentinel_is_distinguishable_from_conversion(caplog):
    """An injected sentinel is returned as-is on failure and only then."""
    sentinel = datetime(1970, 1, 1, tzinfo=timezone.utc)

    assert convert_carrier_datetime("not a date", now=sentinel) is sentinel
    assert convert_carrier_datetime("20/07/2568 10:00:00+07:00", now=sentinel) != sentinel


def test_valid_conversion_does_not_log(caplog):
    caplog.set_level(logging.DEBUG, logger="parcel_tracker.calendar")

    convert_carrier_datetime("20/07/2568 10:00:00+07:00")

    assert not [r for r in caplog.records if r.name == "parcel_tracker.calendar"]
