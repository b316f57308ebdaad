"""German lexicon: word tables, canonicalization and primitive extractors."""

from voiceos.lexicon.canonicalizer import (
    canonicalize,
    contains_keyword,
    detect_object,
    detect_operator,
    extract_numbers,
    extract_ordinal,
    extract_pain_level,
    extract_rating,
    extract_time_range,
    find_medication_category,
    has_explicit_operator,
)
from voiceos.lexicon.de import ObjectType, OperatorType

__all__ = [
    "ObjectType",
    "OperatorType",
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
