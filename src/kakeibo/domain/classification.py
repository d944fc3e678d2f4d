"""Subcategory classification.

Signals are tried in a fixed priority order and the first one that fires
wins; there is no blending, so every result names exactly one reason.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Protocol, Sequence, Union

from kakeibo.domain import errors
from kakeibo.domain.amount_inference import AmountInferenceEngine
from kakeibo.domain.alert import AlertGenerator
from kakeibo.domain.catalog import ClassificationContext, MerchantDirectory, SubcategoryCatalog
from kakeibo.domain.config import AlertConfig, ClassificationConfig
from kakeibo.domain.entities import (
    BatchClassificationItem,
    BatchClassificationResponse,
    BatchItemResult,
    CategoryType,
    ClassificationReason,
    ClassificationRequest,
    ClassificationResult,
    Subcategory,
    Transaction,
)
from kakeibo.domain.errors import DomainError, InvalidInputError, NotFoundError, ValidationError
from kakeibo.domain.keyword_classifier import KeywordClassifier
from kakeibo.domain.merchant_matcher import MerchantMatcher
from kakeibo.domain.recurring_pattern import RecurringPatternDetector

if TYPE_CHECKING:
    from kakeibo.database.base import Database

logger = logging.getLogger(__name__)

# Required amount sign per main category; 0 means either sign.
AMOUNT_SIGNS = {
    CategoryType.INCOME: 1,
    CategoryType.EXPENSE: -1,
    CategoryType.REPAYMENT: -1,
    CategoryType.TRANSFER: 0,
    CategoryType.INVESTMENT: 0,
}


class Signal(Protocol):
    """A classification signal: returns a result or None when it does not fire."""

    def match(
        self, request: ClassificationRequest, context: ClassificationContext
    ) -> Optional[ClassificationResult]:
        ...


def validate_request(request: ClassificationRequest) -> None:
    """Reject malformed classification input.

    Raises:
        InvalidInputError: If the description is blank, the amount is zero,
            or its sign contradicts the main category
    """
    if not request.description or not request.description.strip():
        raise InvalidInputError("Description must not be empty")
    if request.amount == 0:
        raise InvalidInputError(errors.amount_sign_mismatch(0, request.main_category.value))
    sign = AMOUNT_SIGNS[request.main_category]
    if sign and (request.amount > 0) != (sign > 0):
        raise InvalidInputError(
            errors.amount_sign_mismatch(request.amount, request.main_category.value)
        )


def default_signals(config: ClassificationConfig) -> list[Signal]:
    """Signals in priority order: merchant, keyword, recurrence, amount."""
    return [
        MerchantMatcher(),
        KeywordClassifier(
            exact_confidence=config.keyword_exact_confidence,
            partial_confidence=config.keyword_partial_confidence,
        ),
        RecurringPatternDetector(
            amount_tolerance=config.recurring_amount_tolerance,
            day_window=config.recurring_day_window,
            min_occurrences=config.recurring_min_occurrences,
            base_confidence=config.recurring_base_confidence,
            step_confidence=config.recurring_step_confidence,
            max_confidence=config.recurring_max_confidence,
        ),
        AmountInferenceEngine(),
    ]


class ClassificationOrchestrator:
    """Runs the signals in order and returns exactly one classification."""

    def __init__(
        self,
        config: Optional[ClassificationConfig] = None,
        signals: Optional[Sequence[Signal]] = None,
    ):
        self.config = config or ClassificationConfig()
        self.signals = list(signals) if signals is not None else default_signals(self.config)

    def classify(
        self, request: ClassificationRequest, context: ClassificationContext
    ) -> ClassificationResult:
        """Classify one transaction.

        Args:
            request: Transaction facts
            context: Subcategory catalog, merchant directory and history snapshot

        Returns:
            The first signal's result, or the category's DEFAULT subcategory
            with confidence 0.0

        Raises:
            InvalidInputError: If the request is malformed
            NotFoundError: If no signal fires and the category has no default
        """
        validate_request(request)
        for signal in self.signals:
            result = signal.match(request, context)
            if result is None:
                continue
            if not context.catalog.belongs_to(result.subcategory_id, request.main_category):
                logger.warning(
                    "%s proposed %s outside %s, ignoring",
                    type(signal).__name__,
                    result.subcategory_id,
                    request.main_category.value,
                )
                continue
            logger.debug(
                "Classified '%s' as %s (%s, %.2f)",
                request.description,
                result.subcategory_id,
                result.reason.value,
                result.confidence,
            )
            return result

        default = context.catalog.default_for(request.main_category)
        logger.debug("No signal fired for '%s', using %s", request.description, default.id)
        return ClassificationResult(
            subcategory_id=default.id,
            category_type=request.main_category,
            confidence=0.0,
            reason=ClassificationReason.DEFAULT,
        )

    def classify_batch(
        self,
        items: Iterable[Union[BatchClassificationItem, Mapping[str, Any]]],
        context: ClassificationContext,
        max_workers: Optional[int] = None,
    ) -> BatchClassificationResponse:
        """Classify many items independently.

        Items may be BatchClassificationItem values or raw request dicts; a
        raw dict that cannot be parsed fails on its own like any other item.
        Results keep request order.
        """
        items = list(items)
        if not items:
            return BatchClassificationResponse(results=())
        workers = max_workers or self.config.batch_max_workers
        with ThreadPoolExecutor(max_workers=max(1, min(workers, len(items)))) as executor:
            results = tuple(executor.map(lambda item: self._classify_item(item, context), items))
        response = BatchClassificationResponse(results=results)
        logger.info(
            "Batch classification: %d succeeded, %d failed",
            response.success_count,
            response.failure_count,
        )
        return response

    def _classify_item(
        self,
        raw: Union[BatchClassificationItem, Mapping[str, Any]],
        context: ClassificationContext,
    ) -> BatchItemResult:
        transaction_id = _raw_transaction_id(raw)
        try:
            item = raw if isinstance(raw, BatchClassificationItem) else parse_batch_item(raw)
            request = ClassificationRequest(
                description=item.description,
                amount=item.amount,
                main_category=item.main_category,
                date=item.date,
            )
            result = self.classify(request, context)
        except DomainError as e:
            logger.warning("Batch item %s failed: %s", transaction_id, e)
            return BatchItemResult(transaction_id=transaction_id, success=False, error=str(e))
        return BatchItemResult(transaction_id=transaction_id, success=True, result=result)


def _raw_transaction_id(raw: Union[BatchClassificationItem, Mapping[str, Any]]) -> str:
    if isinstance(raw, BatchClassificationItem):
        return raw.transaction_id
    if isinstance(raw, Mapping):
        return str(raw.get("transactionId", ""))
    return ""


def parse_batch_item(raw: Mapping[str, Any]) -> BatchClassificationItem:
    """Parse one camelCase batch item.

    Raises:
        InvalidInputError: If a field is missing or has the wrong type
    """
    if not isinstance(raw, Mapping):
        raise InvalidInputError("Batch item must be an object")
    try:
        transaction_id = str(raw["transactionId"])
        description = raw["description"]
        amount = raw["amount"]
        category = CategoryType(str(raw["mainCategory"]).upper())
    except KeyError as e:
        raise InvalidInputError(f"Batch item is missing field {e}") from e
    except ValueError as e:
        raise InvalidInputError(f"Unknown main category: {raw.get('mainCategory')}") from e
    if not isinstance(description, str):
        raise InvalidInputError("description must be a string")
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInputError("amount must be an integer number of yen")
    item_date = None
    if raw.get("date"):
        try:
            item_date = date.fromisoformat(str(raw["date"])[:10])
        except ValueError as e:
            raise InvalidInputError(f"Invalid date: {raw['date']}") from e
    return BatchClassificationItem(
        transaction_id=transaction_id,
        description=description,
        amount=amount,
        main_category=category,
        date=item_date,
    )


def parse_batch_request(payload: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """Return the raw items of a BatchClassificationRequest payload.

    Raises:
        InvalidInputError: If the payload has no ``transactions`` list
    """
    if not isinstance(payload, Mapping) or not isinstance(payload.get("transactions"), list):
        raise InvalidInputError("Batch request must contain a 'transactions' list")
    return list(payload["transactions"])


def apply_classification(transaction: Transaction, result: ClassificationResult) -> Transaction:
    """Return the transaction with the classification applied.

    Confirmed transactions are returned unchanged; a manual choice is never
    overwritten by automatic classification.
    """
    if transaction.is_confirmed:
        return transaction
    if result.category_type != transaction.main_category:
        raise ValidationError(
            errors.category_type_mismatch(
                result.subcategory_id,
                transaction.main_category.value,
                result.category_type.value,
            )
        )
    return replace(
        transaction,
        subcategory_id=result.subcategory_id,
        classification_confidence=result.confidence,
        classification_reason=result.reason,
        merchant_id=result.merchant_id,
    )


def confirm_subcategory(
    transaction: Transaction,
    subcategory: Subcategory,
    confirmed_at: Optional[datetime] = None,
) -> Transaction:
    """Apply a manual subcategory choice.

    Raises:
        ValidationError: If the subcategory belongs to another category type
    """
    if subcategory.category_type != transaction.main_category:
        raise ValidationError(
            errors.category_type_mismatch(
                subcategory.id,
                transaction.main_category.value,
                subcategory.category_type.value,
            )
        )
    return replace(
        transaction,
        subcategory_id=subcategory.id,
        classification_confidence=1.0,
        classification_reason=ClassificationReason.MANUAL,
        merchant_id=None,
        confirmed_at=confirmed_at or datetime.now(UTC),
    )


class ClassificationService:
    """Service for classifying stored and ad-hoc transactions."""

    def __init__(
        self,
        db: "Database",
        config: Optional[ClassificationConfig] = None,
        alert_config: Optional[AlertConfig] = None,
    ):
        """Initialize classification service.

        Args:
            db: Database instance
            config: Classification settings
            alert_config: Thresholds for low-confidence alerts
        """
        self.db = db
        self.config = config or ClassificationConfig()
        self.orchestrator = ClassificationOrchestrator(self.config)
        self.alerts = AlertGenerator(alert_config)

    def load_context(
        self, account_id: Optional[int] = None, as_of: Optional[date] = None
    ) -> ClassificationContext:
        """Snapshot the catalog, the directory and (optionally) account history."""
        history: tuple[Transaction, ...] = ()
        if account_id is not None:
            history = tuple(
                self.db.recent_transactions(
                    account_id,
                    lookback_days=self.config.history_lookback_days,
                    before=as_of or date.today(),
                )
            )
        return ClassificationContext(
            catalog=SubcategoryCatalog(self.db.list_subcategories()),
            directory=MerchantDirectory(self.db.list_merchants()),
            history=history,
        )

    def classify(
        self,
        description: str,
        amount: int,
        main_category: CategoryType,
        transaction_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> ClassificationResult:
        """Classify a description without storing anything."""
        request = ClassificationRequest(
            description=description,
            amount=amount,
            main_category=main_category,
            date=transaction_date,
            account_id=account_id,
        )
        context = self.load_context(account_id, as_of=transaction_date)
        return self.orchestrator.classify(request, context)

    def classify_account(
        self,
        account_id: int,
        apply: bool = False,
        min_confidence: float = 0.0,
        raise_alerts: bool = False,
    ) -> list[tuple[Transaction, ClassificationResult]]:
        """Classify every unconfirmed transaction of an account.

        Args:
            account_id: Account ID
            apply: If True, store results whose confidence reaches min_confidence
            min_confidence: Acceptance threshold for storing a result
            raise_alerts: If True, store a LOW_CONFIDENCE_CLASSIFICATION alert
                for every result below the alert threshold

        Returns:
            (transaction, result) pairs in date order

        Raises:
            NotFoundError: If the account doesn't exist
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(errors.account_not_found(account_id))

        context = self.load_context(account_id)
        outcomes = []
        for txn in self.db.list_transactions(account_id=account_id):
            if txn.is_confirmed:
                continue
            result = self.orchestrator.classify(ClassificationRequest.from_transaction(txn), context)
            outcomes.append((txn, result))
            if apply and result.confidence >= min_confidence:
                self.db.update_transaction_classification(apply_classification(txn, result))
            if raise_alerts:
                alert = self.alerts.from_classification(result, txn)
                if alert is not None:
                    self.db.save_alert(alert)
        return outcomes

    def classify_batch(self, payload: Mapping[str, Any]) -> BatchClassificationResponse:
        """Classify a BatchClassificationRequest payload."""
        items = parse_batch_request(payload)
        return self.orchestrator.classify_batch(items, self.load_context())

    def confirm(self, transaction_id: int, subcategory_id: str) -> Transaction:
        """Manually set a transaction's subcategory.

        Raises:
            NotFoundError: If the transaction or subcategory doesn't exist
            ValidationError: If the subcategory belongs to another category
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(errors.transaction_not_found(transaction_id))
        subcategory = self.db.get_subcategory(subcategory_id)
        if subcategory is None:
            raise NotFoundError(errors.subcategory_not_found(subcategory_id))
        updated = confirm_subcategory(txn, subcategory)
        self.db.update_transaction_classification(updated)
        return updated
