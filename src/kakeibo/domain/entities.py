"""Domain model entities for kakeibo.

These are pure data classes representing business concepts, independent of
database schema. Amounts are integer yen; confidences are 0.0-1.0 floats for
classification and 0-100 integers for reconciliation.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from kakeibo.domain.errors import InvalidInputError, ValidationError

BILLING_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class CategoryType(str, Enum):
    """Main category of a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    REPAYMENT = "REPAYMENT"
    INVESTMENT = "INVESTMENT"


class ClassificationReason(str, Enum):
    """Which signal produced a classification."""

    MERCHANT_MATCH = "MERCHANT_MATCH"
    KEYWORD_MATCH = "KEYWORD_MATCH"
    AMOUNT_INFERENCE = "AMOUNT_INFERENCE"
    RECURRING_PATTERN = "RECURRING_PATTERN"
    DEFAULT = "DEFAULT"
    MANUAL = "MANUAL"


class PaymentStatus(str, Enum):
    """Payment status of a monthly card bill."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PAID = "PAID"
    PARTIAL = "PARTIAL"
    DISPUTED = "DISPUTED"
    OVERDUE = "OVERDUE"
    MANUAL_CONFIRMED = "MANUAL_CONFIRMED"
    CANCELLED = "CANCELLED"


class DiscrepancyReason(str, Enum):
    """Why a reconciliation result carries a discrepancy."""

    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"


class AlertType(str, Enum):
    """Kind of situation an alert reports."""

    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    OVERDUE = "OVERDUE"
    MULTIPLE_CANDIDATES = "MULTIPLE_CANDIDATES"
    LOW_CONFIDENCE_CLASSIFICATION = "LOW_CONFIDENCE_CLASSIFICATION"


_ALERT_SEVERITY = {"INFO": 0, "WARNING": 1, "ERROR": 2, "CRITICAL": 3}


class AlertLevel(str, Enum):
    """Alert severity. Compares by severity, not by name."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        return _ALERT_SEVERITY[self.value]

    def __lt__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity >= other.severity


class AlertStatus(str, Enum):
    """Alert lifecycle status."""

    UNREAD = "UNREAD"
    READ = "READ"
    RESOLVED = "RESOLVED"


class ActionType(str, Enum):
    """Suggested follow-up actions attached to an alert."""

    VIEW_DETAILS = "VIEW_DETAILS"
    MANUAL_MATCH = "MANUAL_MATCH"
    CONTACT_BANK = "CONTACT_BANK"
    MARK_RESOLVED = "MARK_RESOLVED"
    MANUAL_CLASSIFY = "MANUAL_CLASSIFY"
    IGNORE = "IGNORE"


def _check_confidence(value: Optional[float], label: str) -> None:
    if value is not None and not 0.0 <= value <= 1.0:
        raise ValidationError(f"{label} must be between 0.0 and 1.0, got {value}")


@dataclass(frozen=True)
class Account:
    """Bank or card account domain entity."""

    id: int
    name: str
    institution: str
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    Positive amounts are credits (income), negative amounts are debits.
    """

    id: int
    account_id: int
    date: date
    amount: int
    description: str
    main_category: CategoryType
    subcategory_id: Optional[str] = None
    classification_confidence: Optional[float] = None
    classification_reason: Optional[ClassificationReason] = None
    merchant_id: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    imported_at: Optional[datetime] = None

    def __post_init__(self):
        _check_confidence(self.classification_confidence, "Classification confidence")

    @property
    def is_confirmed(self) -> bool:
        return self.confirmed_at is not None


@dataclass(frozen=True)
class Subcategory:
    """Subcategory node in the two-level tree under a main category."""

    id: str
    category_type: CategoryType
    name: str
    parent_id: Optional[str] = None
    display_order: int = 0
    is_default: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class Merchant:
    """Merchant directory entry."""

    id: str
    name: str
    default_subcategory_id: str
    aliases: tuple[str, ...] = ()
    confidence: float = 0.9

    def __post_init__(self):
        _check_confidence(self.confidence, "Merchant confidence")


@dataclass(frozen=True)
class ClassificationRequest:
    """Input to the classifier: the facts known about one transaction."""

    description: str
    amount: int
    main_category: CategoryType
    date: Optional[date] = None
    account_id: Optional[int] = None
    transaction_id: Optional[int] = None

    @classmethod
    def from_transaction(cls, transaction: "Transaction") -> "ClassificationRequest":
        return cls(
            description=transaction.description,
            amount=transaction.amount,
            main_category=transaction.main_category,
            date=transaction.date,
            account_id=transaction.account_id,
            transaction_id=transaction.id,
        )


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a single transaction."""

    subcategory_id: str
    category_type: CategoryType
    confidence: float
    reason: ClassificationReason
    merchant_id: Optional[str] = None
    merchant_name: Optional[str] = None

    def __post_init__(self):
        _check_confidence(self.confidence, "Confidence")

    def to_dict(self) -> dict[str, Any]:
        return {
            "subcategoryId": self.subcategory_id,
            "confidence": self.confidence,
            "reason": self.reason.value,
            "merchantId": self.merchant_id,
            "merchantName": self.merchant_name,
        }


@dataclass(frozen=True)
class Discount:
    """Discount applied to a card bill (points, campaigns)."""

    description: str
    amount: int

    def __post_init__(self):
        if self.amount <= 0:
            raise ValidationError(f"Discount amount must be positive, got {self.amount}")


@dataclass(frozen=True)
class MonthlyCardSummary:
    """One credit card billing cycle."""

    card_id: str
    card_name: str
    billing_month: str
    closing_date: date
    payment_due_date: date
    total_amount: int
    transactions: tuple[Transaction, ...] = ()
    discounts: tuple[Discount, ...] = ()
    status: PaymentStatus = PaymentStatus.PENDING
    id: Optional[int] = None

    def __post_init__(self):
        if not BILLING_MONTH_PATTERN.match(self.billing_month):
            raise InvalidInputError(
                f"Billing month must be in YYYY-MM format, got '{self.billing_month}'"
            )
        if self.payment_due_date < self.closing_date:
            raise InvalidInputError("Payment due date must not precede the closing date")
        if self.total_amount < 0:
            raise InvalidInputError("Total amount must be non-negative")
        if self.net_payment_amount < 0:
            raise InvalidInputError("Discounts exceed the billed total")

    @property
    def discount_total(self) -> int:
        return sum(d.amount for d in self.discounts)

    @property
    def net_payment_amount(self) -> int:
        return self.total_amount - self.discount_total


@dataclass(frozen=True)
class Discrepancy:
    """Mismatch between the expected and the observed payment."""

    expected_amount: int
    actual_amount: int
    difference: int
    reason: DiscrepancyReason
    message: str


@dataclass(frozen=True)
class ScoredCandidate:
    """A bank transaction scored against a card summary."""

    transaction: Transaction
    confidence: int
    amount_score: float
    date_score: float
    description_score: float
    days_from_due: int


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of reconciling one card summary against bank transactions."""

    matched: bool
    confidence: int
    summary: MonthlyCardSummary
    transaction: Optional[Transaction] = None
    discrepancy: Optional[Discrepancy] = None
    candidates: tuple[ScoredCandidate, ...] = ()
    # Candidates scoring at or above the low threshold, best first.
    contenders: tuple[ScoredCandidate, ...] = ()
    multiple_candidates: bool = False

    def to_dict(self) -> dict[str, Any]:
        discrepancy = None
        if self.discrepancy is not None:
            discrepancy = {
                "expectedAmount": self.discrepancy.expected_amount,
                "actualAmount": self.discrepancy.actual_amount,
                "difference": self.discrepancy.difference,
                "reason": self.discrepancy.reason.value,
                "message": self.discrepancy.message,
            }
        return {
            "cardId": self.summary.card_id,
            "billingMonth": self.summary.billing_month,
            "matched": self.matched,
            "confidence": self.confidence,
            "bankTransactionId": self.transaction.id if self.transaction else None,
            "multipleCandidates": self.multiple_candidates,
            "discrepancy": discrepancy,
        }


@dataclass(frozen=True)
class AlertDetails:
    """Structured facts behind an alert."""

    card_id: Optional[str] = None
    card_name: Optional[str] = None
    billing_month: Optional[str] = None
    expected_amount: Optional[int] = None
    actual_amount: Optional[int] = None
    discrepancy: Optional[int] = None
    payment_due_date: Optional[date] = None
    days_elapsed: Optional[int] = None
    related_transaction_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class AlertAction:
    """Suggested next step for an alert."""

    id: str
    label: str
    action: ActionType
    is_primary: bool = False


@dataclass(frozen=True)
class Alert:
    """Alert raised when reconciliation or classification needs attention."""

    id: str
    type: AlertType
    level: AlertLevel
    title: str
    message: str
    details: AlertDetails
    created_at: datetime
    status: AlertStatus = AlertStatus.UNREAD
    actions: tuple[AlertAction, ...] = ()
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolution_note: Optional[str] = None

    @property
    def primary_action(self) -> Optional[AlertAction]:
        for action in self.actions:
            if action.is_primary:
                return action
        return None


@dataclass(frozen=True)
class BatchClassificationItem:
    """One entry of a BatchClassificationRequest."""

    transaction_id: str
    description: str
    amount: int
    main_category: CategoryType
    date: Optional[date] = None


@dataclass(frozen=True)
class BatchItemResult:
    """Per-item outcome of a batch classification."""

    transaction_id: str
    success: bool
    result: Optional[ClassificationResult] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "transactionId": self.transaction_id,
            "success": self.success,
        }
        if self.result is not None:
            data["data"] = self.result.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class BatchClassificationResponse:
    """Results of a batch classification, in request order."""

    results: tuple[BatchItemResult, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return self.total - self.success_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.failure_count == 0,
            "results": [r.to_dict() for r in self.results],
            "summary": {
                "total": self.total,
                "success": self.success_count,
                "failure": self.failure_count,
            },
        }
