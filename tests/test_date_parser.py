"""Tests for date parsing."""

from datetime import date, datetime, timedelta

import pytest

from myfinance.utils.date_parser import parse_date, parse_ofx_date


def test_parse_absolute_date():
    """Test parsing ISO dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_iso_datetime_keeps_date():
    assert parse_date("2024-01-15T10:30:00Z") == date(2024, 1, 15)


def test_parse_day_first():
    """Slash dates are read day first."""
    assert parse_date("05/02/2024") == date(2024, 2, 5)


def test_parse_relative_dates():
    today = date.today()
    assert parse_date("today") == today
    assert parse_date("Yesterday") == today - timedelta(days=1)
    assert parse_date("tomorrow") == today + timedelta(days=1)


def test_date_objects_pass_through():
    assert parse_date(date(2024, 3, 1)) == date(2024, 3, 1)
    assert parse_date(datetime(2024, 3, 1, 23, 59)) == date(2024, 3, 1)


@pytest.mark.parametrize("value", ["", "not a date"])
def test_parse_invalid(value):
    with pytest.raises(ValueError):
        parse_date(value)


def test_parse_ofx_date():
    assert parse_ofx_date("20240115120000[-3:BRT]") == date(2024, 1, 15)
    assert parse_ofx_date("20240115") == date(2024, 1, 15)


def test_parse_ofx_date_invalid():
    with pytest.raises(ValueError):
        parse_ofx_date("2024")
