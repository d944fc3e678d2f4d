"""Text normalization shared by merchant, keyword and issuer matching."""

import re
import unicodedata

# Prefixes card networks and banks put in front of the merchant name.
COMMON_PREFIXES = (
    "visaデビット",
    "jcbデビット",
    "デビット",
    "カード利用",
    "visa",
    "pos",
)

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Normalize free text for matching.

    Applies NFKC folding (full-width alphanumerics become half-width and
    half-width kana become full-width), case-folding, punctuation removal
    and whitespace collapsing. Japanese letters and the long vowel mark are
    word characters and survive.

    Args:
        text: Raw description text

    Returns:
        Normalized text (may be empty)
    """
    if not text:
        return ""
    folded = unicodedata.normalize("NFKC", text).casefold()
    folded = _PUNCTUATION.sub(" ", folded).replace("_", " ")
    return _WHITESPACE.sub(" ", folded).strip()


def strip_prefixes(normalized: str) -> str:
    """Remove one leading card/bank prefix from already-normalized text.

    The prefix is only removed when something remains after it.
    """
    for prefix in COMMON_PREFIXES:
        if normalized.startswith(prefix):
            rest = normalized[len(prefix):].strip()
            if rest:
                return rest
    return normalized


def normalize_description(text: str) -> str:
    """Normalize a transaction description and drop card/bank prefixes."""
    return strip_prefixes(normalize_text(text))


def compact(normalized: str) -> str:
    """Remove all whitespace, for substring matching across word breaks."""
    return normalized.replace(" ", "")


def tokens(normalized: str) -> list[str]:
    """Split normalized text into tokens."""
    return [t for t in normalized.split(" ") if t]


def is_ascii(text: str) -> bool:
    """Return True if the text only contains ASCII characters."""
    return all(ord(ch) < 128 for ch in text)
