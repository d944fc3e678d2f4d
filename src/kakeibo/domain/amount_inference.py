"""Amount-based subcategory inference."""

from dataclasses import dataclass
from typing import Optional, Sequence

from kakeibo.domain.catalog import ClassificationContext
from kakeibo.domain.entities import (
    CategoryType,
    ClassificationReason,
    ClassificationRequest,
    ClassificationResult,
)


@dataclass(frozen=True)
class AmountRule:
    """Infer a subcategory from the sign and magnitude of an amount.

    ``sign`` is 1 for credits, -1 for debits and 0 for either.
    """

    category_type: CategoryType
    subcategory_id: str
    min_amount: int
    max_amount: Optional[int] = None
    sign: int = 0
    confidence: float = 0.3

    def applies_to(self, request: ClassificationRequest) -> bool:
        if request.main_category != self.category_type:
            return False
        if self.sign > 0 and request.amount <= 0:
            return False
        if self.sign < 0 and request.amount >= 0:
            return False
        magnitude = abs(request.amount)
        if magnitude < self.min_amount:
            return False
        return self.max_amount is None or magnitude <= self.max_amount


DEFAULT_AMOUNT_RULES: tuple[AmountRule, ...] = (
    AmountRule(CategoryType.INCOME, "income_salary", 100000, sign=1, confidence=0.5),
    AmountRule(CategoryType.INVESTMENT, "investment_funds", 10000, sign=-1, confidence=0.4),
    AmountRule(CategoryType.REPAYMENT, "repayment_loan", 30000, sign=-1, confidence=0.4),
    AmountRule(CategoryType.EXPENSE, "housing_rent", 50000, 300000, sign=-1, confidence=0.3),
)


class AmountInferenceEngine:
    """Applies the first amount rule that fits the request."""

    reason = ClassificationReason.AMOUNT_INFERENCE

    def __init__(self, rules: Sequence[AmountRule] = DEFAULT_AMOUNT_RULES):
        self.rules = tuple(rules)

    def match(
        self, request: ClassificationRequest, context: ClassificationContext
    ) -> Optional[ClassificationResult]:
        for rule in self.rules:
            if not rule.applies_to(request):
                continue
            if not context.catalog.belongs_to(rule.subcategory_id, request.main_category):
                continue
            return ClassificationResult(
                subcategory_id=rule.subcategory_id,
                category_type=request.main_category,
                confidence=rule.confidence,
                reason=self.reason,
            )
        return None
