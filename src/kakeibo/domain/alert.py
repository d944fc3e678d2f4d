"""Alert generation and lifecycle."""

import logging
import uuid
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Iterable, Optional

from kakeibo.domain import errors
from kakeibo.domain.config import AlertConfig
from kakeibo.domain.entities import (
    ActionType,
    Alert,
    AlertAction,
    AlertDetails,
    AlertLevel,
    AlertStatus,
    AlertType,
    ClassificationResult,
    DiscrepancyReason,
    ReconciliationResult,
    Transaction,
)
from kakeibo.domain.errors import InvalidTransitionError, NotFoundError
from kakeibo.utils.amount_parser import format_yen

if TYPE_CHECKING:
    from kakeibo.database.base import Database

logger = logging.getLogger(__name__)

ACTION_LABELS = {
    ActionType.VIEW_DETAILS: "詳細を確認",
    ActionType.MANUAL_MATCH: "手動で照合",
    ActionType.CONTACT_BANK: "カード会社に問い合わせ",
    ActionType.MARK_RESOLVED: "解決済みにする",
    ActionType.MANUAL_CLASSIFY: "手動で分類",
    ActionType.IGNORE: "無視する",
}

TITLES = {
    AlertType.AMOUNT_MISMATCH: "クレジットカード引落額が一致しません",
    AlertType.PAYMENT_NOT_FOUND: "クレジットカード引落が検出されませんでした",
    AlertType.OVERDUE: "クレジットカード支払いが延滞しています",
    AlertType.MULTIPLE_CANDIDATES: "複数の照合候補が見つかりました",
    AlertType.LOW_CONFIDENCE_CLASSIFICATION: "取引の分類を確認してください",
}


def build_actions(action_types: Iterable[ActionType], primary: ActionType) -> tuple[AlertAction, ...]:
    """Build an action list with exactly one primary action.

    Raises:
        ValueError: If primary is not one of the action types
    """
    action_types = list(action_types)
    if primary not in action_types:
        raise ValueError(f"Primary action {primary.value} is not in the action set")
    return tuple(
        AlertAction(
            id=str(uuid.uuid4()),
            label=ACTION_LABELS[action_type],
            action=action_type,
            is_primary=action_type == primary,
        )
        for action_type in action_types
    )


class AlertGenerator:
    """Turns reconciliation and classification outcomes into alerts."""

    def __init__(self, config: Optional[AlertConfig] = None):
        self.config = config or AlertConfig()

    def from_reconciliation(
        self,
        result: ReconciliationResult,
        as_of: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Alert]:
        """Create the alert a reconciliation result calls for, if any.

        A missing payment outranks an amount mismatch, which outranks
        ambiguous candidates; at most one alert is returned.

        Args:
            result: Reconciliation outcome
            as_of: Reference date for due-date comparisons (defaults to today)
            now: Creation timestamp (defaults to the current time)

        Returns:
            Alert, or None when the bill is matched cleanly
        """
        as_of = as_of or date.today()
        summary = result.summary
        discrepancy = result.discrepancy
        days_past_due = (as_of - summary.payment_due_date).days
        related = (result.transaction.id,) if result.transaction is not None else ()
        details = AlertDetails(
            card_id=summary.card_id,
            card_name=summary.card_name,
            billing_month=summary.billing_month,
            expected_amount=summary.net_payment_amount,
            actual_amount=discrepancy.actual_amount if discrepancy else None,
            discrepancy=discrepancy.difference if discrepancy else None,
            payment_due_date=summary.payment_due_date,
            days_elapsed=max(0, days_past_due),
            related_transaction_ids=related,
        )

        if not result.matched:
            if days_past_due > self.config.overdue_escalation_days:
                alert_type, level = AlertType.OVERDUE, AlertLevel.CRITICAL
                actions = build_actions(
                    [ActionType.VIEW_DETAILS, ActionType.CONTACT_BANK], ActionType.CONTACT_BANK
                )
                message = (
                    f"{summary.card_name}の{summary.billing_month}分の支払いが延滞しています。"
                    f"未払い金額: {format_yen(summary.net_payment_amount)} "
                    f"延滞日数: {days_past_due}日"
                )
            else:
                alert_type = AlertType.PAYMENT_NOT_FOUND
                level = AlertLevel.WARNING if days_past_due < 0 else AlertLevel.ERROR
                primary = (
                    ActionType.MANUAL_MATCH if level == AlertLevel.WARNING
                    else ActionType.CONTACT_BANK
                )
                actions = build_actions(
                    [ActionType.VIEW_DETAILS, ActionType.MANUAL_MATCH, ActionType.CONTACT_BANK],
                    primary,
                )
                message = (
                    f"{summary.card_name}の{summary.billing_month}分の引落が検出されませんでした。"
                    f"請求額: {format_yen(summary.net_payment_amount)} "
                    f"引落予定日: {summary.payment_due_date.isoformat()}"
                )
        elif discrepancy is not None and discrepancy.reason == DiscrepancyReason.AMOUNT_MISMATCH:
            alert_type = AlertType.AMOUNT_MISMATCH
            level = (
                AlertLevel.ERROR
                if abs(discrepancy.difference) > self.config.large_discrepancy_threshold
                else AlertLevel.WARNING
            )
            actions = build_actions(
                [ActionType.VIEW_DETAILS, ActionType.MARK_RESOLVED], ActionType.VIEW_DETAILS
            )
            message = (
                f"{summary.card_name}の{summary.billing_month}分の引落額に差異があります。"
                f"請求額: {format_yen(discrepancy.expected_amount)} "
                f"引落額: {format_yen(discrepancy.actual_amount)} "
                f"差額: {format_yen(discrepancy.difference)}"
            )
        elif result.multiple_candidates:
            alert_type, level = AlertType.MULTIPLE_CANDIDATES, AlertLevel.INFO
            actions = build_actions(
                [ActionType.MANUAL_MATCH, ActionType.IGNORE], ActionType.MANUAL_MATCH
            )
            details = replace(
                details,
                related_transaction_ids=tuple(c.transaction.id for c in result.contenders),
            )
            message = (
                f"{summary.card_name}の{summary.billing_month}分の照合で、"
                f"複数の候補取引が見つかりました。手動で照合を選択してください。"
            )
        else:
            return None

        logger.info(
            "%s alert (%s) for %s %s", alert_type.value, level.value,
            summary.card_id, summary.billing_month,
        )
        return Alert(
            id=str(uuid.uuid4()),
            type=alert_type,
            level=level,
            title=TITLES[alert_type],
            message=message,
            details=details,
            created_at=now or datetime.now(UTC),
            actions=actions,
        )

    def from_classification(
        self,
        result: ClassificationResult,
        transaction: Optional[Transaction] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Alert]:
        """Create a LOW_CONFIDENCE_CLASSIFICATION alert when confidence is low.

        Returns:
            Alert, or None when the confidence reaches the threshold
        """
        if result.confidence >= self.config.low_confidence_threshold:
            return None
        description = transaction.description if transaction else result.subcategory_id
        details = AlertDetails(
            actual_amount=transaction.amount if transaction else None,
            related_transaction_ids=(transaction.id,) if transaction else (),
        )
        return Alert(
            id=str(uuid.uuid4()),
            type=AlertType.LOW_CONFIDENCE_CLASSIFICATION,
            level=AlertLevel.INFO,
            title=TITLES[AlertType.LOW_CONFIDENCE_CLASSIFICATION],
            message=(
                f"「{description}」を{result.subcategory_id}に分類しました"
                f"（信頼度 {result.confidence:.2f}、根拠 {result.reason.value}）。"
            ),
            details=details,
            created_at=now or datetime.now(UTC),
            actions=build_actions(
                [ActionType.VIEW_DETAILS, ActionType.MANUAL_CLASSIFY, ActionType.IGNORE],
                ActionType.MANUAL_CLASSIFY,
            ),
        )


def mark_as_read(alert: Alert) -> Alert:
    """Mark an alert as read; READ and RESOLVED alerts are returned unchanged."""
    if alert.status != AlertStatus.UNREAD:
        return alert
    return replace(alert, status=AlertStatus.READ)


def mark_as_resolved(
    alert: Alert,
    resolved_by: Optional[str] = None,
    note: Optional[str] = None,
    at: Optional[datetime] = None,
) -> Alert:
    """Resolve an UNREAD or READ alert.

    Raises:
        InvalidTransitionError: If the alert is already resolved
    """
    if alert.status == AlertStatus.RESOLVED:
        raise InvalidTransitionError(
            errors.invalid_transition("alert", alert.status.value, AlertStatus.RESOLVED.value)
        )
    return replace(
        alert,
        status=AlertStatus.RESOLVED,
        resolved_at=at or datetime.now(UTC),
        resolved_by=resolved_by,
        resolution_note=note,
    )


def sort_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    """Most severe first, newest first within a level."""
    return sorted(alerts, key=lambda a: (a.level.severity, a.created_at), reverse=True)


class AlertService:
    """Service for reading and resolving stored alerts."""

    def __init__(self, db: "Database"):
        """Initialize alert service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_alerts(
        self,
        status: Optional[AlertStatus] = None,
        min_level: Optional[AlertLevel] = None,
    ) -> list[Alert]:
        """List alerts, most severe first.

        Args:
            status: Only alerts with this status
            min_level: Only alerts at or above this level
        """
        alerts = self.db.list_alerts(status=status)
        if min_level is not None:
            alerts = [a for a in alerts if a.level >= min_level]
        return sort_alerts(alerts)

    def get(self, alert_id: str) -> Alert:
        """Get an alert.

        Raises:
            NotFoundError: If the alert doesn't exist
        """
        alert = self.db.get_alert(alert_id)
        if alert is None:
            raise NotFoundError(errors.alert_not_found(alert_id))
        return alert

    def mark_read(self, alert_id: str) -> Alert:
        """Mark an alert as read.

        Raises:
            NotFoundError: If the alert doesn't exist
        """
        alert = self.get(alert_id)
        updated = mark_as_read(alert)
        if updated is not alert:
            self.db.update_alert(updated)
        return updated

    def resolve(
        self, alert_id: str, resolved_by: Optional[str] = None, note: Optional[str] = None
    ) -> Alert:
        """Resolve an alert.

        Raises:
            NotFoundError: If the alert doesn't exist
            InvalidTransitionError: If the alert is already resolved
        """
        updated = mark_as_resolved(self.get(alert_id), resolved_by=resolved_by, note=note)
        self.db.update_alert(updated)
        return updated
