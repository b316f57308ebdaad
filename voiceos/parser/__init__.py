"""Utterance parsing: noise guard, medication matching, entity extraction."""

from voiceos.parser.entity_extractor import (
    TimeExpression,
    extract_entities,
    parse_time_expression,
)
from voiceos.parser.medication_matcher import (
    MatchType,
    MedicationMatch,
    extract_medications,
    match_medication,
)
from voiceos.parser.noise_guard import (
    NoiseGuardResult,
    SuggestedAction,
    check_noise_guard,
    get_noise_message,
)

__all__ = [
    "MatchType",
    "MedicationMatch",
    "NoiseGuardResult",
    "SuggestedAction",
    "TimeExpression",
    "check_noise_guard",
    "extract_entities",
    "extract_medications",
    "get_noise_message",
    "match_medication",
    "parse_time_expression",
]
