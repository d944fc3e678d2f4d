"""Recurring transaction detection."""

import logging
from collections import Counter
from datetime import date
from typing import Optional

from kakeibo.domain.catalog import ClassificationContext
from kakeibo.domain.entities import (
    ClassificationReason,
    ClassificationRequest,
    ClassificationResult,
    Transaction,
)
from kakeibo.utils.date_parser import day_of_month_distance

logger = logging.getLogger(__name__)


class RecurringPatternDetector:
    """Reuses the subcategory of earlier transactions that look like this one.

    An earlier transaction counts as an occurrence when it has the same main
    category and sign, an amount within ``amount_tolerance`` (a ratio) and a
    day-of-month within ``day_window`` days. Transactions that were only
    classified by the DEFAULT fallback are ignored unless the user confirmed
    them.
    """

    reason = ClassificationReason.RECURRING_PATTERN

    def __init__(
        self,
        amount_tolerance: float = 0.01,
        day_window: int = 3,
        min_occurrences: int = 2,
        base_confidence: float = 0.6,
        step_confidence: float = 0.05,
        max_confidence: float = 0.85,
    ):
        self.amount_tolerance = amount_tolerance
        self.day_window = day_window
        self.min_occurrences = min_occurrences
        self.base_confidence = base_confidence
        self.step_confidence = step_confidence
        self.max_confidence = max_confidence

    def is_occurrence(self, request: ClassificationRequest, past: Transaction) -> bool:
        """Return True if an earlier transaction matches the request's pattern."""
        if request.date is None or past.subcategory_id is None:
            return False
        if request.transaction_id is not None and past.id == request.transaction_id:
            return False
        if past.date >= request.date or past.main_category != request.main_category:
            return False
        if past.classification_reason == ClassificationReason.DEFAULT and not past.is_confirmed:
            return False
        if (past.amount > 0) != (request.amount > 0):
            return False
        if abs(past.amount - request.amount) > abs(request.amount) * self.amount_tolerance:
            return False
        return day_of_month_distance(past.date, request.date) <= self.day_window

    def confidence_for(self, occurrences: int) -> float:
        extra = occurrences - self.min_occurrences
        return min(self.max_confidence, self.base_confidence + self.step_confidence * extra)

    def match(
        self, request: ClassificationRequest, context: ClassificationContext
    ) -> Optional[ClassificationResult]:
        if request.date is None or not context.history:
            return None

        counts: Counter[str] = Counter()
        last_seen: dict[str, date] = {}
        for past in context.history:
            if not self.is_occurrence(request, past):
                continue
            if not context.catalog.belongs_to(past.subcategory_id, request.main_category):
                continue
            counts[past.subcategory_id] += 1
            if past.subcategory_id not in last_seen or past.date > last_seen[past.subcategory_id]:
                last_seen[past.subcategory_id] = past.date

        if not counts:
            return None

        # Most occurrences, then most recent, then id for a stable answer.
        subcategory_id = sorted(
            counts, key=lambda s: (-counts[s], -last_seen[s].toordinal(), s)
        )[0]
        occurrences = counts[subcategory_id]
        if occurrences < self.min_occurrences:
            return None

        logger.debug("Recurring pattern %s seen %d times", subcategory_id, occurrences)
        return ClassificationResult(
            subcategory_id=subcategory_id,
            category_type=request.main_category,
            confidence=self.confidence_for(occurrences),
            reason=self.reason,
        )
