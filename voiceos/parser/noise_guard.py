"""Noise guard: reject utterances that should never trigger an action.

Runs before any skill. Filters empty input, lone filler or greeting words
and stopword-only sentences, and flags a bare number ("7") that needs a
follow-up question. The result is advisory; the planner skips the guard
while it waits for a slot-filling answer, where a bare number is expected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

STOPWORDS = frozenset({
    # Fillers
    "äh", "ah", "aeh", "ähm", "aehm", "öhm", "oehm", "uhm", "hm", "hmm", "äää",
    # Confirmations without context
    "ok", "okay", "ja", "jo", "jap", "jep", "jup", "nein", "ne", "nö", "noe",
    # Greetings
    "hallo", "hi", "hey", "tschüss", "tschuess", "bye",
    # Fragments
    "also", "und", "oder", "aber", "dann", "so", "eben", "halt",
})

AMBIGUOUS_ALONE = frozenset({
    "test", "bitte", "danke", "moment", "warte", "stop", "stopp",
})

NOISE_MESSAGE = "Ich habe dich nicht klar verstanden, versuch es bitte nochmal."

_BARE_NUMBER = re.compile(r"^(\d{1,2})$")
_TRAILING_PUNCT = re.compile(r"[.,!?;:]+(?=\s|$)")


class SuggestedAction(str, Enum):
    RETRY = "retry"
    DISAMBIGUATION = "disambiguation"
    CONTINUE = "continue"


@dataclass(frozen=True)
class NoiseGuardResult:
    is_noise: bool
    is_ambiguous_number: bool = False
    reason: str | None = None
    suggested_action: SuggestedAction = SuggestedAction.CONTINUE
    disambiguation_question: str | None = None
    number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_noise": self.is_noise,
            "is_ambiguous_number": self.is_ambiguous_number,
            "reason": self.reason,
            "suggested_action": self.suggested_action.value,
            "disambiguation_question": self.disambiguation_question,
            "number": self.number,
        }


def fold_umlauts(text: str) -> str:
    return (
        text.replace("ä", "ae")
        .replace("ö", "oe")
        .replace("ü", "ue")
        .replace("ß", "ss")
    )


def _is_stopword(token: str) -> bool:
    return token in STOPWORDS or fold_umlauts(token) in STOPWORDS


def _noise(reason: str) -> NoiseGuardResult:
    return NoiseGuardResult(
        is_noise=True,
        reason=reason,
        suggested_action=SuggestedAction.RETRY,
    )


def check_noise_guard(raw_text: str, min_meaningful_tokens: int = 1) -> NoiseGuardResult:
    """Classify a raw transcript. Rules are applied in priority order."""
    trimmed = _TRAILING_PUNCT.sub("", raw_text.lower()).strip()
    folded = fold_umlauts(trimmed)

    # A single digit is handled by the ambiguous-number rule
    if not trimmed or (len(trimmed) < 2 and not trimmed.isdigit()):
        return _noise("too_short")

    if trimmed in STOPWORDS or folded in STOPWORDS:
        return _noise("filler_only")

    tokens = trimmed.split()

    if len(tokens) == 1 and folded in AMBIGUOUS_ALONE:
        return _noise("ambiguous_single_word")

    match = _BARE_NUMBER.match(trimmed)
    if match:
        number = int(match.group(1))
        if 0 <= number <= 10:
            return NoiseGuardResult(
                is_noise=False,
                is_ambiguous_number=True,
                reason="ambiguous_number",
                suggested_action=SuggestedAction.DISAMBIGUATION,
                disambiguation_question=f"Meinst du Schmerzstärke {number}?",
                number=number,
            )

    meaningful = [t for t in tokens if not _is_stopword(t)]
    if not meaningful:
        return _noise("stopwords_only")

    if len(meaningful) < min_meaningful_tokens:
        return _noise("too_few_tokens")

    return NoiseGuardResult(is_noise=False)


def get_noise_message(result: NoiseGuardResult) -> str:
    """User-facing text for a guard result."""
    if result.is_ambiguous_number and result.disambiguation_question:
        return result.disambiguation_question
    return NOISE_MESSAGE


__all__ = [
    "AMBIGUOUS_ALONE",
    "NOISE_MESSAGE",
    "STOPWORDS",
    "NoiseGuardResult",
    "SuggestedAction",
    "check_noise_guard",
    "fold_umlauts",
    "get_noise_message",
]
