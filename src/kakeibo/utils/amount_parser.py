"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> int:
    """Parse an amount string into integer yen.

    Handles various formats:
    - "1500"
    - "¥1,500" / "￥1,500"
    - "-1500"
    - "-¥125,000"
    - "1,500円"
    - "(500)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Amount in yen

    Raises:
        ValueError: If amount string cannot be parsed or has fractional yen
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and the yen suffix
    amount_str = re.sub(r"[¥￥$円]", "", amount_str)

    # Remove thousands separators
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if amount != amount.to_integral_value():
        raise ValueError(f"Amount '{amount_str}' has fractional yen")

    value = int(amount)
    return -value if is_negative else value


def format_yen(amount: int) -> str:
    """Format integer yen for display, e.g. ¥125,000 or -¥5,000."""
    sign = "-" if amount < 0 else ""
    return f"{sign}¥{abs(amount):,}"
