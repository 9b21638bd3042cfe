"""Heuristic language tagging for comment text."""

import re
from typing import List, Tuple

# Checked in order; first match wins.
_SCRIPT_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = [
    ("hi", re.compile(r"[\u0900-\u097F]")),  # Devanagari
    ("ar", re.compile(r"[\u0600-\u06FF]")),
    ("zh", re.compile(r"[\u4E00-\u9FFF]")),  # CJK unified ideographs
    ("ja", re.compile(r"[\u3040-\u309F\u30A0-\u30FF]")),  # Hiragana / Katakana
    ("ko", re.compile(r"[\uAC00-\uD7AF]")),  # Hangul syllables
]

_KEYWORD_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = [
    ("es", re.compile(r"\b(gracias|muy|bien|bueno|hola|como)\b", re.IGNORECASE)),
    ("fr", re.compile(r"\b(merci|très|bien|bonjour|comment)\b", re.IGNORECASE)),
]

DEFAULT_LANGUAGE = "en"


def detect_language(text: str) -> str:
    """
    Best-guess ISO 639-1 tag for ``text``.

    Coarse signal for display and prompt context only: script ranges first,
    then a handful of Spanish/French function words, else English.
    """
    if not text:
        return DEFAULT_LANGUAGE

    for language, pattern in _SCRIPT_PATTERNS:
        if pattern.search(text):
            return language

    for language, pattern in _KEYWORD_PATTERNS:
        if pattern.search(text):
            return language

    return DEFAULT_LANGUAGE
