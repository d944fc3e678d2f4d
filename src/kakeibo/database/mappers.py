"""Mapper functions to convert between domain models and SQLAlchemy models.

SQLite stores naive datetimes; timestamps are written in UTC and tagged as
UTC again when read back.
"""

from datetime import date, datetime, UTC
from typing import Any, Optional

from kakeibo.domain import entities as domain
from kakeibo.database.models import (
    Account as ORMAccount,
    Alert as ORMAlert,
    CardSummary as ORMCardSummary,
    Merchant as ORMMerchant,
    Subcategory as ORMSubcategory,
    Transaction as ORMTransaction,
)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        institution=orm_account.institution,
        created_at=_as_utc(orm_account.created_at),
    )


def subcategory_to_domain(orm_sub: ORMSubcategory) -> domain.Subcategory:
    """Convert SQLAlchemy Subcategory model to domain Subcategory entity."""
    return domain.Subcategory(
        id=orm_sub.id,
        category_type=domain.CategoryType(orm_sub.category_type),
        name=orm_sub.name,
        parent_id=orm_sub.parent_id,
        display_order=orm_sub.display_order,
        is_default=orm_sub.is_default,
        is_active=orm_sub.is_active,
    )


def merchant_to_domain(orm_merchant: ORMMerchant) -> domain.Merchant:
    """Convert SQLAlchemy Merchant model to domain Merchant entity."""
    return domain.Merchant(
        id=orm_merchant.id,
        name=orm_merchant.name,
        default_subcategory_id=orm_merchant.default_subcategory_id,
        aliases=tuple(orm_merchant.aliases or ()),
        confidence=orm_merchant.confidence,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    reason = orm_transaction.classification_reason
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        description=orm_transaction.description,
        main_category=domain.CategoryType(orm_transaction.main_category),
        subcategory_id=orm_transaction.subcategory_id,
        classification_confidence=orm_transaction.classification_confidence,
        classification_reason=domain.ClassificationReason(reason) if reason else None,
        merchant_id=orm_transaction.merchant_id,
        confirmed_at=_as_utc(orm_transaction.confirmed_at),
        imported_at=_as_utc(orm_transaction.imported_at),
    )


def card_summary_to_domain(orm_summary: ORMCardSummary) -> domain.MonthlyCardSummary:
    """Convert SQLAlchemy CardSummary model to domain MonthlyCardSummary entity."""
    return domain.MonthlyCardSummary(
        id=orm_summary.id,
        card_id=orm_summary.card_id,
        card_name=orm_summary.card_name,
        billing_month=orm_summary.billing_month,
        closing_date=orm_summary.closing_date,
        payment_due_date=orm_summary.payment_due_date,
        total_amount=orm_summary.total_amount,
        discounts=tuple(
            domain.Discount(description=d.description, amount=d.amount)
            for d in sorted(orm_summary.discounts, key=lambda d: d.id)
        ),
        status=domain.PaymentStatus(orm_summary.status),
    )


def alert_details_to_dict(details: domain.AlertDetails) -> dict[str, Any]:
    """Serialize AlertDetails for the JSON column."""
    return {
        "card_id": details.card_id,
        "card_name": details.card_name,
        "billing_month": details.billing_month,
        "expected_amount": details.expected_amount,
        "actual_amount": details.actual_amount,
        "discrepancy": details.discrepancy,
        "payment_due_date": (
            details.payment_due_date.isoformat() if details.payment_due_date else None
        ),
        "days_elapsed": details.days_elapsed,
        "related_transaction_ids": list(details.related_transaction_ids),
    }


def alert_details_from_dict(data: dict[str, Any]) -> domain.AlertDetails:
    """Deserialize AlertDetails from the JSON column."""
    due = data.get("payment_due_date")
    return domain.AlertDetails(
        card_id=data.get("card_id"),
        card_name=data.get("card_name"),
        billing_month=data.get("billing_month"),
        expected_amount=data.get("expected_amount"),
        actual_amount=data.get("actual_amount"),
        discrepancy=data.get("discrepancy"),
        payment_due_date=date.fromisoformat(due) if due else None,
        days_elapsed=data.get("days_elapsed"),
        related_transaction_ids=tuple(data.get("related_transaction_ids") or ()),
    )


def alert_actions_to_list(actions: tuple[domain.AlertAction, ...]) -> list[dict[str, Any]]:
    """Serialize alert actions for the JSON column."""
    return [
        {"id": a.id, "label": a.label, "action": a.action.value, "is_primary": a.is_primary}
        for a in actions
    ]


def alert_to_domain(orm_alert: ORMAlert) -> domain.Alert:
    """Convert SQLAlchemy Alert model to domain Alert entity."""
    return domain.Alert(
        id=orm_alert.id,
        type=domain.AlertType(orm_alert.type),
        level=domain.AlertLevel(orm_alert.level),
        title=orm_alert.title,
        message=orm_alert.message,
        details=alert_details_from_dict(orm_alert.details or {}),
        created_at=_as_utc(orm_alert.created_at),
        status=domain.AlertStatus(orm_alert.status),
        actions=tuple(
            domain.AlertAction(
                id=a["id"],
                label=a["label"],
                action=domain.ActionType(a["action"]),
                is_primary=a["is_primary"],
            )
            for a in orm_alert.actions or ()
        ),
        resolved_at=_as_utc(orm_alert.resolved_at),
        resolved_by=orm_alert.resolved_by,
        resolution_note=orm_alert.resolution_note,
    )
