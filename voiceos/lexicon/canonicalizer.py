"""Canonicalization and primitive extractors for German utterances.

All functions are pure: same input, same output, no clock, no I/O.
"""

from __future__ import annotations

import re
from functools import lru_cache

from voiceos.lexicon.de import (
    BARE_RANGE_UNITS,
    FILLER_MAX_LENGTH,
    FILLER_WORDS,
    MAX_RANGE_DAYS,
    MEDICATION_CATEGORIES,
    NAMED_RANGES,
    NUMBER_WORDS,
    NUMERIC_RANGE,
    OBJECTS,
    OPERATORS,
    ORDINALS,
    PAIN_LEVEL_WORDS,
    POLITE_PREFIX,
    RANGE_UNITS,
    RATING_EXPRESSIONS,
    ObjectType,
    OperatorType,
)

_WHITESPACE = re.compile(r"\s+")
_QUOTES = re.compile(r"[\"'„“”«»]")
# Only at the end of a token, so "14:30" and "#2" survive
_TRAILING_PUNCT = re.compile(r"[.,!?;:]+(?=\s|$)")

_EXPLICIT_RATING = re.compile(r"(?:mit|auf|bewertung|rating|wirkung)\s*:?\s*(\d{1,3})(?!\d)")
_NEGATED_EFFECT = re.compile(r"\b(?:nicht|kaum|null)\b.*\b(?:gewirkt|geholfen)\b")
_IMPLICIT_EFFECT = re.compile(r"\b(?:geholfen|gewirkt)\b")
_EXPLICIT_PAIN_LEVEL = re.compile(r"\b(?:schmerzstärke|stärke|level|stufe)\s*:?\s*(\d{1,3})\b")
_HASH_ORDINAL = re.compile(r"#(\d{1,3})\b")
_DIGITS = re.compile(r"\b(\d{1,3})\b")

# Longest phrase first so "sehr gut" wins over "gut"
_RATING_PHRASES = sorted(RATING_EXPRESSIONS, key=len, reverse=True)
_NAMED_PHRASES = sorted(NAMED_RANGES, key=len, reverse=True)


def canonicalize(text: str) -> str:
    """Normalize an utterance for matching.

    lowercase → collapse whitespace → strip punctuation → strip leading
    polite phrases → drop short filler words. Filler removal never erases
    the whole sentence; in that case the pre-filter text is returned.
    """
    normalized = _WHITESPACE.sub(" ", text.lower()).strip()
    normalized = _QUOTES.sub("", normalized)
    normalized = _TRAILING_PUNCT.sub("", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()

    while True:
        stripped = POLITE_PREFIX.sub("", normalized, count=1)
        if stripped == normalized:
            break
        normalized = stripped

    if not normalized:
        return ""

    kept = [
        token for token in normalized.split(" ")
        if token not in FILLER_WORDS or len(token) > FILLER_MAX_LENGTH
    ]
    if not kept:
        return normalized
    return " ".join(kept)


@lru_cache(maxsize=512)
def _word_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b")


def contains_keyword(text: str, keyword: str) -> bool:
    """Keyword test shared by every matcher.

    Keywords of up to three characters must match as whole words ("zu" must
    not fire inside "zuletzt"); longer keywords match as substrings so
    inflected and compound forms are found.
    """
    keyword = keyword.lower()
    if len(keyword) <= 3:
        return _word_pattern(keyword).search(text.lower()) is not None
    return keyword in text.lower()


def has_explicit_operator(text: str, operator: OperatorType) -> bool:
    """Whether any keyword of one operator family occurs in the text."""
    return any(contains_keyword(text, kw) for kw in OPERATORS[operator])


def detect_operator(text: str) -> OperatorType | None:
    """First operator family (in table order) with a keyword in the text."""
    for operator in OPERATORS:
        if has_explicit_operator(text, operator):
            return operator
    return None


def detect_object(text: str) -> ObjectType | None:
    """First object domain (in table order) mentioned in the text."""
    for obj, words in OBJECTS.items():
        if any(contains_keyword(text, w) for w in words):
            return obj
    return None


def extract_ordinal(text: str) -> int | None:
    """Position word ("letzte", "vorletzte", "zweite") or ``#n``."""
    for token in text.lower().split():
        if token in ORDINALS:
            return ORDINALS[token]

    match = _HASH_ORDINAL.search(text)
    if match:
        return int(match.group(1))
    return None


def extract_rating(text: str) -> int | None:
    """Effect rating 0-10.

    An explicit number ("mit 8", "bewertung: 3") wins, then a negated effect
    ("hat nicht gewirkt"), then the phrase table longest phrase first, then a
    bare "geholfen"/"gewirkt" as a good effect.
    """
    lower = text.lower()

    match = _EXPLICIT_RATING.search(lower)
    if match:
        value = int(match.group(1))
        if 0 <= value <= 10:
            return value

    if _NEGATED_EFFECT.search(lower):
        return 1

    for phrase in _RATING_PHRASES:
        if _word_pattern(phrase).search(lower):
            return RATING_EXPRESSIONS[phrase]

    if _IMPLICIT_EFFECT.search(lower):
        return 7
    return None


def extract_pain_level(text: str) -> int | None:
    """Pain level 0-10 from "stärke 7" or words like "stark", "leicht"."""
    lower = text.lower()

    match = _EXPLICIT_PAIN_LEVEL.search(lower)
    if match:
        return min(10, max(0, int(match.group(1))))

    for pattern, level in PAIN_LEVEL_WORDS:
        if pattern.search(lower):
            return level
    return None


def extract_time_range(text: str) -> int | None:
    """Time range in days, at most MAX_RANGE_DAYS.

    Numeric ranges override named ones.
    """
    lower = text.lower()

    match = NUMERIC_RANGE.search(lower)
    if match:
        count = match.group(1)
        if len(count) > 4:
            return MAX_RANGE_DAYS
        return min(MAX_RANGE_DAYS, int(count) * RANGE_UNITS[match.group(2)])

    for phrase in _NAMED_PHRASES:
        if _word_pattern(phrase).search(lower):
            return NAMED_RANGES[phrase]

    for unit, days in BARE_RANGE_UNITS.items():
        if _word_pattern(unit).search(lower):
            return days
    return None


def extract_numbers(text: str) -> list[int]:
    """Digits 0-100 and number words zero to ten, in order of appearance."""
    found: list[tuple[int, int]] = []
    lower = text.lower()

    for match in _DIGITS.finditer(lower):
        value = int(match.group(1))
        if 0 <= value <= 100:
            found.append((match.start(), value))

    for word, value in NUMBER_WORDS.items():
        for match in _word_pattern(word).finditer(lower):
            found.append((match.start(), value))

    numbers: list[int] = []
    for _, value in sorted(found):
        if value not in numbers:
            numbers.append(value)
    return numbers


def find_medication_category(name: str) -> str | None:
    """Map a free-text drug name to a therapeutic category."""
    lower = name.lower().strip()
    if not lower:
        return None

    for category, keywords in MEDICATION_CATEGORIES.items():
        for kw in keywords:
            if contains_keyword(lower, kw):
                return category
            if len(lower) >= 4 and lower in kw:
                return category
    return None


__all__ = [
    "canonicalize",
    "contains_keyword",
    "detect_object",
    "detect_operator",
    "extract_numbers",
    "extract_ordinal",
    "extract_pain_level",
    "extract_rating",
    "extract_time_range",
    "find_medication_category",
    "has_explicit_operator",
]
