"""Card bill reconciliation against bank withdrawals.

A card summary is matched by scoring every outgoing bank transaction in the
search window on amount, date and description closeness. The best candidate
wins; "nothing found" is a normal, reportable result rather than an error.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date, timedelta
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from kakeibo.domain import errors
from kakeibo.domain.alert import AlertGenerator
from kakeibo.domain.billing_period import billing_period, build_summary
from kakeibo.domain.config import AlertConfig, ReconciliationConfig
from kakeibo.domain.entities import (
    Alert,
    AlertStatus,
    Discount,
    Discrepancy,
    DiscrepancyReason,
    MonthlyCardSummary,
    ReconciliationResult,
    ScoredCandidate,
    Transaction,
)
from kakeibo.domain.errors import InvalidInputError, NotFoundError
from kakeibo.domain.payment_status import derive_payment_status
from kakeibo.utils.amount_parser import format_yen
from kakeibo.utils.text_normalizer import compact, normalize_text

if TYPE_CHECKING:
    from kakeibo.database.base import Database

logger = logging.getLogger(__name__)

# Issuer names as they appear in card names, with the spellings banks use in
# withdrawal descriptions. Keys and aliases are matched after normalization.
ISSUER_ALIASES = {
    "三井住友": ("三井住友", "smbc", "ミツイスミトモ"),
    "三菱ufj": ("三菱ufj", "mufg", "ミツビシufj"),
    "みずほ": ("みずほ", "mizuho", "ミズホ"),
    "楽天": ("楽天", "rakuten", "ラクテン"),
    "jcb": ("jcb",),
    "アメリカンエクスプレス": ("アメリカンエクスプレス", "アメックス", "amex"),
    "ダイナース": ("ダイナース", "diners"),
    "イオン": ("イオン", "aeon"),
    "セゾン": ("セゾン", "saison"),
}

GENERIC_CARD_KEYWORDS = ("カード", "クレジット")


def issuer_keywords(card_name: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Split the keywords for a card name into issuer-specific and generic ones.

    Args:
        card_name: Card name as registered, e.g. "三井住友カード"

    Returns:
        (specific, generic) keyword tuples, both compacted and normalized
    """
    name = compact(normalize_text(card_name))
    specific: list[str] = []
    for issuer, aliases in ISSUER_ALIASES.items():
        if issuer in name:
            specific.extend(aliases)
    if not specific and name:
        specific.append(name)
    generic = [kw for kw in GENERIC_CARD_KEYWORDS if kw in name] or list(GENERIC_CARD_KEYWORDS)
    return tuple(specific), tuple(generic)


def description_score(description: str, card_name: str) -> float:
    """1.0 for an issuer match, 0.5 for a generic card keyword, else 0.0."""
    text = compact(normalize_text(description))
    specific, generic = issuer_keywords(card_name)
    if any(kw in text for kw in specific):
        return 1.0
    if any(kw in text for kw in generic):
        return 0.5
    return 0.0


class ReconciliationCandidateFinder:
    """Enumerates and scores bank withdrawals that could pay a card bill."""

    def __init__(self, config: Optional[ReconciliationConfig] = None):
        self.config = config or ReconciliationConfig()

    def window(self, summary: MonthlyCardSummary) -> tuple[date, date]:
        """Search window: closing date through due date plus grace period."""
        return (
            summary.closing_date,
            summary.payment_due_date + timedelta(days=self.config.grace_period_days),
        )

    def amount_score(self, expected: int, actual: int) -> float:
        """Score amount closeness; exact (within tolerance) scores 1.0."""
        diff = abs(actual - expected)
        if diff <= self.config.amount_tolerance:
            return 1.0
        span = expected * self.config.max_amount_deviation_ratio
        if span <= 0:
            return 0.0
        return max(0.0, 1.0 - (diff - self.config.amount_tolerance) / span)

    def date_score(self, days_from_due: int) -> float:
        """Score date closeness to the due date, decaying linearly."""
        return max(0.0, 1.0 - abs(days_from_due) / self.config.date_decay_days)

    def is_candidate(self, summary: MonthlyCardSummary, transaction: Transaction) -> bool:
        start, end = self.window(summary)
        if not start <= transaction.date <= end:
            return False
        if transaction.amount >= 0:
            return False
        expected = summary.net_payment_amount
        limit = max(self.config.amount_tolerance, expected * self.config.max_amount_deviation_ratio)
        return abs(-transaction.amount - expected) <= limit

    def score(self, summary: MonthlyCardSummary, transaction: Transaction) -> ScoredCandidate:
        """Score one candidate on a 0-100 scale."""
        cfg = self.config
        days_from_due = (transaction.date - summary.payment_due_date).days
        amount = self.amount_score(summary.net_payment_amount, -transaction.amount)
        when = self.date_score(days_from_due)
        text = description_score(transaction.description, summary.card_name)
        confidence = round(
            amount * cfg.amount_weight + when * cfg.date_weight + text * cfg.description_weight
        )
        return ScoredCandidate(
            transaction=transaction,
            confidence=min(100, max(0, confidence)),
            amount_score=amount,
            date_score=when,
            description_score=text,
            days_from_due=days_from_due,
        )

    def find(
        self, summary: MonthlyCardSummary, transactions: Iterable[Transaction]
    ) -> list[ScoredCandidate]:
        """Return scored candidates, best first.

        Ties are broken by closeness to the due date, then by the larger
        absolute amount, then by transaction id, so the order never depends
        on input order.
        """
        scored = [self.score(summary, t) for t in transactions if self.is_candidate(summary, t)]
        scored.sort(
            key=lambda c: (
                -c.confidence,
                abs(c.days_from_due),
                -abs(c.transaction.amount),
                c.transaction.id,
            )
        )
        for candidate in scored:
            logger.debug(
                "Candidate %s for %s %s: %d (amount %.2f, date %.2f, text %.2f)",
                candidate.transaction.id,
                summary.card_id,
                summary.billing_month,
                candidate.confidence,
                candidate.amount_score,
                candidate.date_score,
                candidate.description_score,
            )
        return scored


class DiscrepancyEvaluator:
    """Compares expected and actual payment amounts."""

    def __init__(self, tolerance: int = 5):
        self.tolerance = tolerance

    def evaluate(self, expected: int, actual: int) -> Optional[Discrepancy]:
        """Return an AMOUNT_MISMATCH discrepancy, or None within tolerance."""
        difference = actual - expected
        if abs(difference) <= self.tolerance:
            return None
        return Discrepancy(
            expected_amount=expected,
            actual_amount=actual,
            difference=difference,
            reason=DiscrepancyReason.AMOUNT_MISMATCH,
            message=(
                f"Paid {format_yen(actual)} but {format_yen(expected)} was billed "
                f"(difference {format_yen(difference)})"
            ),
        )

    @staticmethod
    def not_found(expected: int) -> Discrepancy:
        return Discrepancy(
            expected_amount=expected,
            actual_amount=0,
            difference=-expected,
            reason=DiscrepancyReason.PAYMENT_NOT_FOUND,
            message=f"No bank withdrawal found for {format_yen(expected)}",
        )


class ReconciliationMatcher:
    """Reconciles one card summary against bank transactions."""

    def __init__(self, config: Optional[ReconciliationConfig] = None):
        self.config = config or ReconciliationConfig()
        self.finder = ReconciliationCandidateFinder(self.config)
        self.evaluator = DiscrepancyEvaluator(self.config.discrepancy_tolerance)

    def reconcile(
        self, summary: MonthlyCardSummary, bank_transactions: Iterable[Transaction]
    ) -> ReconciliationResult:
        """Match a card summary to its bank withdrawal.

        Args:
            summary: Card billing cycle to prove paid
            bank_transactions: Transactions of the paying account; anything
                outside the search window is ignored

        Returns:
            ReconciliationResult; matched=False when no candidate is good enough

        Raises:
            InvalidInputError: If the summary's total amount is not positive
        """
        if summary.total_amount <= 0:
            raise InvalidInputError(
                f"Card summary total must be positive, got {summary.total_amount}"
            )
        expected = summary.net_payment_amount
        if expected == 0:
            # Discounts cover the whole bill; there is nothing to withdraw.
            return ReconciliationResult(matched=True, confidence=100, summary=summary)

        candidates = tuple(self.finder.find(summary, bank_transactions))
        cleared = [c for c in candidates if c.confidence >= self.config.low_threshold]
        if not cleared:
            logger.info(
                "No payment found for %s %s (%d candidates)",
                summary.card_id,
                summary.billing_month,
                len(candidates),
            )
            return ReconciliationResult(
                matched=False,
                confidence=candidates[0].confidence if candidates else 0,
                summary=summary,
                discrepancy=self.evaluator.not_found(expected),
                candidates=candidates,
            )

        best = cleared[0]
        # Below the high threshold any runner-up makes the match ambiguous; above
        # it only a runner-up that also clears the high threshold does.
        ambiguous = len(cleared) > 1 and (
            best.confidence < self.config.high_threshold
            or cleared[1].confidence >= self.config.high_threshold
        )
        result = ReconciliationResult(
            matched=True,
            confidence=best.confidence,
            summary=summary,
            transaction=best.transaction,
            discrepancy=self.evaluator.evaluate(expected, -best.transaction.amount),
            candidates=candidates,
            contenders=tuple(cleared),
            multiple_candidates=ambiguous,
        )
        logger.info(
            "Matched %s %s to transaction %s (confidence %d)",
            summary.card_id,
            summary.billing_month,
            best.transaction.id,
            best.confidence,
        )
        return result


def reconcile_batch(
    summaries: Sequence[MonthlyCardSummary],
    bank_transactions: Sequence[Transaction],
    config: Optional[ReconciliationConfig] = None,
    max_workers: int = 4,
) -> list[ReconciliationResult]:
    """Reconcile many summaries against one pool of bank transactions.

    Results are returned in the order of the summaries. Each summary only
    looks at its own window, so results are independent of each other.
    """
    if not summaries:
        return []
    matcher = ReconciliationMatcher(config)
    pool = tuple(bank_transactions)
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(summaries)))) as executor:
        return list(executor.map(lambda s: matcher.reconcile(s, pool), summaries))


class ReconciliationService:
    """Service for reconciling stored card summaries."""

    def __init__(
        self,
        db: "Database",
        config: Optional[ReconciliationConfig] = None,
        alert_config: Optional[AlertConfig] = None,
    ):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            config: Reconciliation settings
            alert_config: Alert thresholds for generated alerts
        """
        self.db = db
        self.config = config or ReconciliationConfig()
        self.matcher = ReconciliationMatcher(self.config)
        self.alerts = AlertGenerator(alert_config)

    def add_summary(self, summary: MonthlyCardSummary) -> int:
        """Register a monthly card summary.

        Raises:
            InvalidInputError: If the billed total is not positive
            ConflictError: If the card already has a summary for the month
        """
        if summary.total_amount <= 0:
            raise InvalidInputError(
                f"Card summary total must be positive, got {summary.total_amount}"
            )
        return self.db.create_card_summary(summary)

    def list_summaries(self, card_id: Optional[str] = None) -> list[MonthlyCardSummary]:
        return self.db.list_card_summaries(card_id)

    def aggregate_summary(
        self,
        card_id: str,
        card_name: str,
        billing_month: str,
        closing_day: int,
        payment_day: int,
        card_account_id: int,
        discounts: Sequence[Discount] = (),
    ) -> MonthlyCardSummary:
        """Build a card summary from the transactions of a card account.

        The summary is returned, not stored; pass it to add_summary.

        Raises:
            NotFoundError: If the card account doesn't exist
            InvalidInputError: If nothing is billed in the month
        """
        if self.db.get_account(card_account_id) is None:
            raise NotFoundError(errors.account_not_found(card_account_id))
        start, end = billing_period(billing_month, closing_day)
        line_items = self.db.list_transactions(
            account_id=card_account_id, start_date=start, end_date=end
        )
        logger.debug(
            "Aggregating %d line items for %s %s (%s to %s)",
            len(line_items),
            card_id,
            billing_month,
            start,
            end,
        )
        return build_summary(
            card_id, card_name, billing_month, closing_day, payment_day, line_items, discounts
        )

    def reconcile(
        self,
        card_id: str,
        billing_month: str,
        account_id: int,
        as_of: Optional[date] = None,
    ) -> tuple[ReconciliationResult, Optional[Alert]]:
        """Reconcile a stored card summary against an account's withdrawals.

        Updates the summary's payment status and stores any alert raised.

        Args:
            card_id: Card identifier
            billing_month: Billing month (YYYY-MM)
            account_id: Bank account expected to contain the payment
            as_of: Reference date for due-date comparisons (defaults to today)

        Returns:
            Tuple of (result, alert or None)

        Raises:
            NotFoundError: If the summary or account doesn't exist
        """
        summary = self.db.get_card_summary(card_id, billing_month)
        if summary is None:
            raise NotFoundError(errors.card_summary_not_found(card_id, billing_month))
        if self.db.get_account(account_id) is None:
            raise NotFoundError(errors.account_not_found(account_id))

        as_of = as_of or date.today()
        start, end = self.matcher.finder.window(summary)
        bank_transactions = self.db.transactions_in_window(account_id, start, end)
        result = self.matcher.reconcile(summary, bank_transactions)

        status = derive_payment_status(
            summary.status,
            result,
            summary.payment_due_date,
            as_of,
            self.config.processing_lead_days,
        )
        if status != summary.status:
            logger.info(
                "Payment status of %s %s: %s -> %s",
                card_id,
                billing_month,
                summary.status.value,
                status.value,
            )
            summary = replace(summary, status=status)
            self.db.update_card_summary_status(summary)
            result = replace(result, summary=summary)

        alert = self.alerts.from_reconciliation(result, as_of=as_of)
        if alert is not None:
            alert = self._store_alert(alert)
        return result, alert

    def _store_alert(self, alert: Alert) -> Alert:
        """Save an alert, or refresh the open alert of the same type for the bill.

        The refreshed alert keeps its ID, status and creation time.
        """
        details = alert.details
        for existing in self.db.list_alerts_for(details.card_id, details.billing_month):
            if existing.type == alert.type and existing.status != AlertStatus.RESOLVED:
                refreshed = replace(
                    alert,
                    id=existing.id,
                    status=existing.status,
                    created_at=existing.created_at,
                )
                self.db.update_alert(refreshed)
                logger.debug(
                    "Refreshed alert %s for %s %s",
                    existing.id,
                    details.card_id,
                    details.billing_month,
                )
                return refreshed
        self.db.save_alert(alert)
        return alert
