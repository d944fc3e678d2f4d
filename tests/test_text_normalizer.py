"""Tests for description normalization."""

from kakeibo.utils.text_normalizer import (
    compact,
    is_ascii,
    normalize_description,
    normalize_text,
    strip_prefixes,
    tokens,
)


def test_full_width_alphanumerics_are_folded():
    """Test full-width letters become lower-case half-width."""
    assert normalize_text("ＳＴＡＲＢＵＣＫＳ　１２３") == "starbucks 123"


def test_half_width_kana_become_full_width():
    """Test half-width katakana (with voiced marks) is composed."""
    assert normalize_text("ｽﾀｰﾊﾞｯｸｽ") == "スターバックス"


def test_punctuation_and_whitespace_collapse():
    """Test punctuation turns into single spaces."""
    assert normalize_text("  TULLY'S   COFFEE!! ") == "tully s coffee"


def test_empty_text():
    assert normalize_text("") == ""
    assert normalize_text("   ") == ""


def test_card_prefix_is_stripped():
    """Test card network prefixes are dropped from descriptions."""
    assert normalize_description("VISAデビット スターバックス") == "スターバックス"
    assert normalize_description("ＰＯＳ　ユニクロ") == "ユニクロ"


def test_prefix_kept_when_nothing_remains():
    """Test a description that is only a prefix is left alone."""
    assert strip_prefixes("visa") == "visa"


def test_helpers():
    assert compact("jr 東日本") == "jr東日本"
    assert tokens("a  b c") == ["a", "b", "c"]
    assert is_ascii("docomo")
    assert not is_ascii("ドコモ")
