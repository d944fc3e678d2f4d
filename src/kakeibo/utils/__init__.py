"""Utility functions for kakeibo."""

from kakeibo.utils.date_parser import parse_date, parse_billing_month
from kakeibo.utils.amount_parser import parse_amount, format_yen
from kakeibo.utils.text_normalizer import normalize_text, normalize_description

__all__ = [
    "parse_date",
    "parse_billing_month",
    "parse_amount",
    "format_yen",
    "normalize_text",
    "normalize_description",
]
