"""Keyword-based subcategory classification."""

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from kakeibo.domain.catalog import ClassificationContext
from kakeibo.domain.entities import (
    CategoryType,
    ClassificationReason,
    ClassificationRequest,
    ClassificationResult,
    Subcategory,
)
from kakeibo.utils.text_normalizer import compact, is_ascii, normalize_description, normalize_text, tokens

# Keywords per main category and subcategory id.
DEFAULT_KEYWORDS: dict[CategoryType, dict[str, tuple[str, ...]]] = {
    CategoryType.EXPENSE: {
        "food_groceries": ("スーパー", "食料品", "生鮮", "イオン", "ライフ", "西友"),
        "food_dining_out": ("レストラン", "外食", "居酒屋", "定食", "ランチ"),
        "food_cafe": ("カフェ", "スターバックス", "コーヒー", "喫茶"),
        "transport_train_bus": ("定期券", "JR", "地下鉄", "バス", "鉄道", "Suica", "PASMO"),
        "transport_taxi": ("タクシー", "Uber", "ハイヤー"),
        "transport_parking": ("駐車場", "パーキング", "駐輪場"),
        "daily_supplies": ("ドラッグストア", "日用品", "雑貨", "マツキヨ"),
        "daily_clothes": ("衣料品", "ユニクロ", "しまむら", "アパレル"),
        "communication_mobile": ("携帯", "スマホ", "docomo", "au", "SoftBank"),
        "communication_internet": ("インターネット", "光回線", "Wi-Fi", "プロバイダ"),
        "utilities_electricity": ("電気", "電力", "東京電力", "関西電力"),
        "utilities_gas": ("ガス", "都市ガス"),
        "utilities_water": ("水道",),
        "housing_rent": ("家賃", "賃料", "管理費"),
    },
    CategoryType.INCOME: {
        "income_salary": ("給与", "給料", "給与振込", "賞与", "ボーナス", "月給"),
        "income_business": ("売上", "報酬", "事業"),
        "income_other": ("利息", "還付", "キャッシュバック"),
    },
    CategoryType.TRANSFER: {
        "transfer_between_accounts": ("振替", "口座振替", "資金移動"),
    },
    CategoryType.REPAYMENT: {
        "repayment_card": ("カード返済", "クレジット", "カード"),
        "repayment_loan": ("ローン", "住宅ローン", "返済"),
    },
    CategoryType.INVESTMENT: {
        "investment_stocks": ("株式", "証券"),
        "investment_funds": ("投信", "投資信託", "積立", "nisa"),
    },
}


@dataclass(frozen=True)
class KeywordHit:
    """A keyword found in a description."""

    subcategory: Subcategory
    keyword: str
    exact: bool

    @property
    def length(self) -> int:
        return len(self.keyword)


class KeywordClassifier:
    """Scans the description for subcategory keywords.

    The longest matching keyword wins. A keyword that equals a whole token
    (or the whole description) is an exact hit; a keyword found inside a
    longer word is a partial hit. ASCII keywords only ever match whole
    tokens, so "au" does not fire on "restaurant".
    """

    reason = ClassificationReason.KEYWORD_MATCH

    def __init__(
        self,
        keywords: Optional[Mapping[CategoryType, Mapping[str, Sequence[str]]]] = None,
        exact_confidence: float = 0.9,
        partial_confidence: float = 0.7,
    ):
        self.keywords = keywords if keywords is not None else DEFAULT_KEYWORDS
        self.exact_confidence = exact_confidence
        self.partial_confidence = partial_confidence

    def find_hits(
        self, description: str, subcategories: Sequence[Subcategory]
    ) -> list[KeywordHit]:
        """Return every keyword hit, best first."""
        if not subcategories:
            return []
        category_keywords = self.keywords.get(subcategories[0].category_type, {})
        text = normalize_description(description)
        words = set(tokens(text))
        squeezed = compact(text)

        hits = []
        for sub in subcategories:
            for keyword in category_keywords.get(sub.id, ()):
                normalized = normalize_text(keyword)
                if not normalized:
                    continue
                exact = normalized in words or normalized == text
                if is_ascii(normalized):
                    found = exact or _contains_word(text, normalized)
                else:
                    found = compact(normalized) in squeezed
                    exact = exact or compact(normalized) == squeezed
                if found:
                    hits.append(KeywordHit(subcategory=sub, keyword=normalized, exact=exact))

        hits.sort(key=lambda h: (-h.length, not h.exact, h.subcategory.display_order, h.subcategory.id))
        return hits

    def match(
        self, request: ClassificationRequest, context: ClassificationContext
    ) -> Optional[ClassificationResult]:
        hits = self.find_hits(
            request.description, context.catalog.list_by_category(request.main_category)
        )
        if not hits:
            return None
        best = hits[0]
        return ClassificationResult(
            subcategory_id=best.subcategory.id,
            category_type=request.main_category,
            confidence=self.exact_confidence if best.exact else self.partial_confidence,
            reason=self.reason,
        )


def _contains_word(text: str, word: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(word)}(?![a-z0-9])", text) is not None
