"""Tests for yen amount parsing and formatting."""

import pytest

from kakeibo.utils.amount_parser import format_yen, parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1500", 1500),
        ("¥1,500", 1500),
        ("￥1,500", 1500),
        ("-1500", -1500),
        ("-¥125,000", -125000),
        ("1,500円", 1500),
        ("(500)", -500),
        (" 300000 ", 300000),
    ],
)
def test_parse_amount(text, expected):
    """Test the accepted amount formats."""
    assert parse_amount(text) == expected


def test_parse_amount_rejects_fractional_yen():
    """Test fractional yen are rejected."""
    with pytest.raises(ValueError, match="fractional"):
        parse_amount("12.5")


def test_parse_amount_rejects_garbage():
    with pytest.raises(ValueError):
        parse_amount("abc")
    with pytest.raises(ValueError):
        parse_amount("")


def test_format_yen():
    """Test yen formatting with thousands separators."""
    assert format_yen(125000) == "¥125,000"
    assert format_yen(-5000) == "-¥5,000"
    assert format_yen(0) == "¥0"
