"""Merchant directory matching."""

import logging
from typing import Optional

from kakeibo.domain.catalog import ClassificationContext
from kakeibo.domain.entities import (
    ClassificationReason,
    ClassificationRequest,
    ClassificationResult,
    Merchant,
)
from kakeibo.utils.text_normalizer import normalize_description, tokens

logger = logging.getLogger(__name__)

MAX_NGRAM = 3


def candidate_keys(description: str) -> list[str]:
    """Lookup keys for a description, most specific first.

    The whole normalized description comes first, then runs of up to three
    tokens from longest to shortest, left to right. Every key is an exact
    lookup; nothing is fuzzy.
    """
    text = normalize_description(description)
    if not text:
        return []
    words = tokens(text)
    keys = [text]
    for size in range(min(MAX_NGRAM, len(words)), 0, -1):
        for start in range(len(words) - size + 1):
            key = " ".join(words[start:start + size])
            if key not in keys:
                keys.append(key)
    return keys


class MerchantMatcher:
    """Looks the description up against merchant names and aliases."""

    reason = ClassificationReason.MERCHANT_MATCH

    def find_merchant(self, description: str, context: ClassificationContext) -> Optional[Merchant]:
        """Return the first merchant whose name or alias equals a lookup key."""
        directory = context.directory
        for key in candidate_keys(description):
            merchant = directory.lookup(key) or directory.find_by_alias(key)
            if merchant is not None:
                return merchant
        return None

    def match(
        self, request: ClassificationRequest, context: ClassificationContext
    ) -> Optional[ClassificationResult]:
        merchant = self.find_merchant(request.description, context)
        if merchant is None:
            return None
        if not context.catalog.belongs_to(merchant.default_subcategory_id, request.main_category):
            logger.debug(
                "Merchant %s maps to %s, not usable for %s",
                merchant.id,
                merchant.default_subcategory_id,
                request.main_category.value,
            )
            return None
        return ClassificationResult(
            subcategory_id=merchant.default_subcategory_id,
            category_type=request.main_category,
            confidence=merchant.confidence,
            reason=self.reason,
            merchant_id=merchant.id,
            merchant_name=merchant.name,
        )
