"""Billing periods of credit cards with a fixed closing day.

A card closes on the same day every month and is paid on a fixed day of the
following month. A closing day of 0 or 31 means the last day of the month,
and a closing or payment day missing from a short month (the 30th in
February) falls on that month's last day.
"""

from datetime import date, datetime, timedelta
from typing import Iterable

from dateutil.relativedelta import relativedelta

from kakeibo.domain.entities import Discount, MonthlyCardSummary, Transaction
from kakeibo.domain.errors import InvalidInputError

MONTH_END_CLOSING_DAYS = (0, 31)


def _check_closing_day(closing_day: int) -> None:
    if not 0 <= closing_day <= 31:
        raise InvalidInputError(f"Closing day must be between 0 and 31, got {closing_day}")


def _first_of_month(billing_month: str) -> date:
    try:
        return datetime.strptime(billing_month, "%Y-%m").date()
    except ValueError:
        raise InvalidInputError(
            f"Billing month must be in YYYY-MM format, got '{billing_month}'"
        )


def determine_billing_month(transaction_date: date, closing_day: int) -> str:
    """Billing month (YYYY-MM) a card transaction is charged in.

    Transactions up to and including the closing date are billed in their
    own month, later ones in the next month.

    Raises:
        InvalidInputError: If the closing day is out of range
    """
    month = transaction_date.strftime("%Y-%m")
    if transaction_date <= closing_date_for(month, closing_day):
        return month
    return (transaction_date + relativedelta(months=1)).strftime("%Y-%m")


def closing_date_for(billing_month: str, closing_day: int) -> date:
    """Closing date of a billing month.

    Raises:
        InvalidInputError: If the month or closing day is invalid
    """
    _check_closing_day(closing_day)
    day = 31 if closing_day in MONTH_END_CLOSING_DAYS else closing_day
    return _first_of_month(billing_month) + relativedelta(day=day)


def payment_date_for(closing_date: date, payment_day: int) -> date:
    """Payment date in the month after the closing date.

    Raises:
        InvalidInputError: If the payment day is out of range
    """
    if not 1 <= payment_day <= 31:
        raise InvalidInputError(f"Payment day must be between 1 and 31, got {payment_day}")
    return closing_date + relativedelta(months=1, day=payment_day)


def billing_period(billing_month: str, closing_day: int) -> tuple[date, date]:
    """First and last transaction date billed in a month, inclusive."""
    closing = closing_date_for(billing_month, closing_day)
    previous_month = (_first_of_month(billing_month) - relativedelta(months=1)).strftime("%Y-%m")
    return closing_date_for(previous_month, closing_day) + timedelta(days=1), closing


def build_summary(
    card_id: str,
    card_name: str,
    billing_month: str,
    closing_day: int,
    payment_day: int,
    line_items: Iterable[Transaction],
    discounts: Iterable[Discount] = (),
) -> MonthlyCardSummary:
    """Aggregate card transactions into the summary of one billing month.

    Purchases are negative amounts on the card account and refunds positive,
    so the billed total is the negated sum of the month's line items.
    Line items billed in other months are ignored.

    Raises:
        InvalidInputError: If no line item falls in the month, or the
            closing or payment day is invalid
    """
    items = tuple(
        sorted(
            (t for t in line_items if determine_billing_month(t.date, closing_day) == billing_month),
            key=lambda t: (t.date, t.id or 0),
        )
    )
    if not items:
        raise InvalidInputError(f"No card transactions are billed in {billing_month}")

    closing = closing_date_for(billing_month, closing_day)
    return MonthlyCardSummary(
        card_id=card_id,
        card_name=card_name,
        billing_month=billing_month,
        closing_date=closing,
        payment_due_date=payment_date_for(closing, payment_day),
        total_amount=-sum(t.amount for t in items),
        transactions=items,
        discounts=tuple(discounts),
    )
