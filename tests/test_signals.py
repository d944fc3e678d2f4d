"""Tests for the individual classification signals."""

from datetime import date

import pytest

from kakeibo.domain.amount_inference import AmountInferenceEngine, AmountRule
from kakeibo.domain.catalog import ClassificationContext
from kakeibo.domain.entities import (
    CategoryType,
    ClassificationReason,
    ClassificationRequest,
    Transaction,
)
from kakeibo.domain.keyword_classifier import KeywordClassifier
from kakeibo.domain.merchant_matcher import MerchantMatcher, candidate_keys
from kakeibo.domain.recurring_pattern import RecurringPatternDetector


def _expense(description, amount=-1000, **kwargs):
    return ClassificationRequest(
        description=description, amount=amount, main_category=CategoryType.EXPENSE, **kwargs
    )


class TestMerchantMatcher:
    """Tests for merchant directory matching."""

    def test_candidate_keys_most_specific_first(self):
        keys = candidate_keys("スターバックス コーヒー 渋谷店")
        assert keys[0] == "スターバックス コーヒー 渋谷店"
        assert "スターバックス コーヒー" in keys
        assert keys.index("スターバックス コーヒー") < keys.index("スターバックス")

    def test_matches_name_token(self, context):
        result = MerchantMatcher().match(_expense("スターバックス コーヒー 渋谷店"), context)
        assert result.subcategory_id == "food_cafe"
        assert result.reason == ClassificationReason.MERCHANT_MATCH
        assert result.confidence == 0.95
        assert result.merchant_name == "スターバックス"

    def test_matches_alias_case_insensitively(self, context):
        result = MerchantMatcher().match(_expense("STARBUCKS SHIBUYA"), context)
        assert result.merchant_id == "merchant_cafe_starbucks"

    def test_matches_after_card_prefix(self, context):
        result = MerchantMatcher().match(_expense("VISAデビット ユニクロ 新宿"), context)
        assert result.subcategory_id == "daily_clothes"

    def test_no_fuzzy_matching(self, context):
        """Test a merchant name inside a longer word is not a match."""
        assert MerchantMatcher().match(_expense("スターバックスカード入金"), context) is None

    def test_merchant_outside_category_ignored(self, context):
        request = ClassificationRequest(
            description="スターバックス", amount=1000, main_category=CategoryType.INCOME
        )
        assert MerchantMatcher().match(request, context) is None


class TestKeywordClassifier:
    """Tests for keyword classification."""

    def test_exact_token_is_high_confidence(self, empty_directory_context):
        result = KeywordClassifier().match(
            _expense("スターバックス コーヒー 渋谷店"), empty_directory_context
        )
        assert result.subcategory_id == "food_cafe"
        assert result.reason == ClassificationReason.KEYWORD_MATCH
        assert result.confidence == 0.9

    def test_partial_hit_is_lower_confidence(self, empty_directory_context):
        result = KeywordClassifier().match(_expense("東京駅前タクシー"), empty_directory_context)
        assert result.subcategory_id == "transport_taxi"
        assert result.confidence == 0.7

    def test_longest_keyword_wins(self, empty_directory_context):
        """Test the longest hit decides between subcategories."""
        request = ClassificationRequest(
            description="給与振込 株式会社ABC", amount=300000, main_category=CategoryType.INCOME
        )
        result = KeywordClassifier().match(request, empty_directory_context)
        assert result.subcategory_id == "income_salary"
        assert result.confidence == 0.9

    def test_ascii_keyword_needs_whole_word(self, empty_directory_context):
        """Test 'au' does not fire inside 'restaurant'."""
        assert KeywordClassifier().match(_expense("restaurant xyz"), empty_directory_context) is None
        result = KeywordClassifier().match(_expense("au 携帯料金"), empty_directory_context)
        assert result.subcategory_id == "communication_mobile"

    def test_only_keywords_of_the_main_category(self, empty_directory_context):
        request = ClassificationRequest(
            description="家賃", amount=1000, main_category=CategoryType.INCOME
        )
        assert KeywordClassifier().match(request, empty_directory_context) is None

    def test_custom_keywords(self, empty_directory_context):
        classifier = KeywordClassifier(
            keywords={CategoryType.EXPENSE: {"food_cafe": ("喫茶",)}},
            exact_confidence=0.8,
        )
        result = classifier.match(_expense("喫茶"), empty_directory_context)
        assert result.confidence == 0.8


class TestRecurringPatternDetector:
    """Tests for recurring transaction detection."""

    @pytest.fixture
    def history(self):
        def past(
            txn_id,
            txn_date,
            amount=-85000,
            subcategory="housing_rent",
            reason=ClassificationReason.MANUAL,
        ):
            return Transaction(
                id=txn_id,
                account_id=1,
                date=txn_date,
                amount=amount,
                description="ヤマダ不動産",
                main_category=CategoryType.EXPENSE,
                subcategory_id=subcategory,
                classification_reason=reason,
            )

        return past

    def test_two_occurrences_fire(self, catalog, empty_directory_context, history):
        context = ClassificationContext(
            catalog=catalog,
            directory=empty_directory_context.directory,
            history=(history(1, date(2025, 1, 27)), history(2, date(2025, 2, 26))),
        )
        request = _expense("ヤマダ不動産", amount=-85000, date=date(2025, 3, 27))
        result = RecurringPatternDetector().match(request, context)
        assert result.subcategory_id == "housing_rent"
        assert result.reason == ClassificationReason.RECURRING_PATTERN
        assert result.confidence == pytest.approx(0.6)

    def test_confidence_grows_with_occurrences(self, catalog, directory, history):
        context = ClassificationContext(
            catalog=catalog,
            directory=directory,
            history=tuple(history(i, date(2024, i, 27)) for i in range(1, 13)),
        )
        request = _expense("ヤマダ不動産", amount=-85000, date=date(2025, 1, 27))
        result = RecurringPatternDetector().match(request, context)
        assert result.confidence == pytest.approx(0.85)

    def test_single_occurrence_is_not_enough(self, catalog, directory, history):
        context = ClassificationContext(
            catalog=catalog, directory=directory, history=(history(1, date(2025, 2, 27)),)
        )
        request = _expense("ヤマダ不動産", amount=-85000, date=date(2025, 3, 27))
        assert RecurringPatternDetector().match(request, context) is None

    def test_amount_and_day_must_be_close(self, catalog, directory, history):
        context = ClassificationContext(
            catalog=catalog,
            directory=directory,
            history=(
                history(1, date(2025, 1, 27), amount=-70000),
                history(2, date(2025, 2, 10)),
            ),
        )
        request = _expense("ヤマダ不動産", amount=-85000, date=date(2025, 3, 27))
        assert RecurringPatternDetector().match(request, context) is None

    def test_unconfirmed_default_results_ignored(self, catalog, directory, history):
        """Test earlier DEFAULT fallbacks do not reinforce themselves."""
        context = ClassificationContext(
            catalog=catalog,
            directory=directory,
            history=(
                history(1, date(2025, 1, 27), subcategory="other_expense", reason=ClassificationReason.DEFAULT),
                history(2, date(2025, 2, 27), subcategory="other_expense", reason=ClassificationReason.DEFAULT),
            ),
        )
        request = _expense("ヤマダ不動産", amount=-85000, date=date(2025, 3, 27))
        assert RecurringPatternDetector().match(request, context) is None

    def test_needs_a_date(self, catalog, directory, history):
        context = ClassificationContext(
            catalog=catalog,
            directory=directory,
            history=(history(1, date(2025, 1, 27)), history(2, date(2025, 2, 27))),
        )
        assert RecurringPatternDetector().match(_expense("ヤマダ不動産", amount=-85000), context) is None


class TestAmountInferenceEngine:
    """Tests for amount-based inference."""

    def test_large_income_is_salary(self, context):
        request = ClassificationRequest(
            description="ABC", amount=500000, main_category=CategoryType.INCOME
        )
        result = AmountInferenceEngine().match(request, context)
        assert result.subcategory_id == "income_salary"
        assert result.reason == ClassificationReason.AMOUNT_INFERENCE
        assert result.confidence == 0.5

    def test_rent_sized_expense(self, context):
        result = AmountInferenceEngine().match(_expense("ヤマダ不動産", amount=-85000), context)
        assert result.subcategory_id == "housing_rent"
        assert result.confidence == 0.3

    def test_small_amount_does_not_fire(self, context):
        assert AmountInferenceEngine().match(_expense("ABC", amount=-500), context) is None

    def test_rule_for_unknown_subcategory_skipped(self, context):
        engine = AmountInferenceEngine(
            rules=[AmountRule(CategoryType.EXPENSE, "no_such_subcategory", 1)]
        )
        assert engine.match(_expense("ABC"), context) is None
