"""Tests for display formatting helpers."""
from tradejournal.core.formatting import format_currency, format_hour, format_percent


def test_format_currency():
    assert format_currency(1234.5) == '$1,234.50'
    assert format_currency(-1234.5) == '-$1,234.50'
    assert format_currency(0) == '$0.00'


def test_format_hour():
    """12-hour clock with midnight and noon handled."""
    assert format_hour(0) == '12:00 AM'
    assert format_hour(9) == '9:00 AM'
    assert format_hour(12) == '12:00 PM'
    assert format_hour(14) == '2:00 PM'


def test_format_percent():
    assert format_percent(66.666) == '66.7%'
    assert format_percent(5, decimals=0) == '5%'
