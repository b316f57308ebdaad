"""Find medications in an utterance.

Lookup order, strongest first:
    1. The user's own medications, by full name or by base name without
       strength ("Sumatriptan 50mg" is found by "sumatriptan")
    2. Fuzzy match against the user's medications to survive speech
       recognition errors ("sumatripan", "suma triptan")
    3. Category keywords ("triptan", "schmerzmittel", "ibuprofen")
    4. Drug-name endings ("...triptan", "...profen")

Uses string similarity (difflib) for the fuzzy step.
"""

from __future__ import annotations

import difflib
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from voiceos.lexicon.canonicalizer import contains_keyword
from voiceos.lexicon.de import MEDICATION_CATEGORIES, MEDICATION_SUFFIX
from voiceos.models import UserMedication
from voiceos.parser.noise_guard import fold_umlauts

EXACT_CONFIDENCE = 0.95
SPECIFIC_KEYWORD_CONFIDENCE = 0.9
CATEGORY_CONFIDENCE = 0.8
PATTERN_CONFIDENCE = 0.75

FUZZY_THRESHOLD = 0.85
FUZZY_MIN_LENGTH = 5

# Words that must never fuzzy-match a medication name
SKIP_WORDS = frozenset({
    "vor", "nach", "mit", "und", "oder", "bei", "wegen", "durch",
    "ich", "habe", "hab", "heute", "gestern", "jetzt", "gerade", "dann", "noch",
    "schmerz", "schmerzen", "kopfschmerz", "kopfschmerzen", "migräne", "migraene",
    "stark", "starke", "stärke", "staerke",
    "genommen", "eingenommen", "nehmen", "tablette", "tabletten",
    "büro", "buero", "stress", "trigger", "geschlafen", "arbeit",
    "müde", "muede", "wenig", "morgen", "schlaf", "schlecht",
    "wetter", "sport", "training", "essen", "trinken", "getrunken",
    "kaffee", "alkohol", "periode", "zyklus", "reise",
    "lärm", "laerm", "erschöpft", "erschoepft", "verspannt",
    "bildschirm", "termine", "sitzen", "gearbeitet", "überstunden",
    "zuletzt", "letzten", "letzte", "eintrag", "wirkung", "bewerte", "bewerten",
    "erinnere", "erinnerung", "medikament", "medikamente",
})

_STRENGTH = re.compile(r"\b\d+(?:[.,]\d+)?\s*(?:mg|ml|µg|mcg|g)?\b")
_TOKEN = re.compile(r"[a-zäöüß]+")


class MatchType(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    SPLIT_TOKEN = "split_token"
    CATEGORY = "category"
    PATTERN = "pattern"


@dataclass(frozen=True)
class MedicationMatch:
    name: str
    confidence: float
    match_type: MatchType
    medication_id: str | None = None
    raw: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "match_type": self.match_type.value,
            "medication_id": self.medication_id,
            "raw": self.raw,
        }


def base_name(name: str) -> str:
    """Medication name without strength: "Ibuprofen 400 mg" → "ibuprofen"."""
    stripped = _STRENGTH.sub("", name.lower())
    return " ".join(stripped.split())


def _exact_user_match(lower: str, med: UserMedication) -> MedicationMatch | None:
    full = med.name.lower().strip()
    base = base_name(med.name)
    for form in (full, base):
        if form and contains_keyword(lower, form):
            return MedicationMatch(
                name=med.name,
                confidence=EXACT_CONFIDENCE,
                match_type=MatchType.EXACT,
                medication_id=med.id,
                raw=form,
            )
    return None


def _candidate_tokens(lower: str) -> list[tuple[str, MatchType]]:
    tokens = [t for t in _TOKEN.findall(lower) if t not in SKIP_WORDS]
    candidates = [(fold_umlauts(t), MatchType.FUZZY) for t in tokens if len(t) >= FUZZY_MIN_LENGTH]
    # STT splits long drug names: "suma triptan"
    for first, second in zip(tokens, tokens[1:]):
        joined = fold_umlauts(first + second)
        if len(joined) >= FUZZY_MIN_LENGTH:
            candidates.append((joined, MatchType.SPLIT_TOKEN))
    return candidates


def _fuzzy_user_match(lower: str, meds: Iterable[UserMedication]) -> MedicationMatch | None:
    best: MedicationMatch | None = None
    best_ratio = 0.0
    candidates = _candidate_tokens(lower)

    for med in meds:
        targets = {fold_umlauts(w) for w in base_name(med.name).split() if len(w) >= FUZZY_MIN_LENGTH}
        for candidate, match_type in candidates:
            for target in targets:
                ratio = difflib.SequenceMatcher(None, candidate, target).ratio()
                if ratio >= FUZZY_THRESHOLD and ratio > best_ratio:
                    best_ratio = ratio
                    best = MedicationMatch(
                        name=med.name,
                        confidence=round(0.9 * ratio, 3),
                        match_type=match_type,
                        medication_id=med.id,
                        raw=candidate,
                    )
    return best


def _category_match(lower: str) -> MedicationMatch | None:
    for category, keywords in MEDICATION_CATEGORIES.items():
        hits = [kw for kw in keywords if contains_keyword(lower, kw)]
        if not hits:
            continue
        specific = max((kw for kw in hits if len(kw) > 4), key=len, default=None)
        if specific:
            return MedicationMatch(
                name=specific,
                confidence=SPECIFIC_KEYWORD_CONFIDENCE,
                match_type=MatchType.CATEGORY,
                raw=specific,
            )
        return MedicationMatch(
            name=category,
            confidence=CATEGORY_CONFIDENCE,
            match_type=MatchType.CATEGORY,
            raw=hits[0],
        )
    return None


def match_medication(
    text: str,
    user_meds: Iterable[UserMedication] = (),
) -> MedicationMatch | None:
    """Best medication mention in ``text``, or None."""
    lower = text.lower()
    meds = tuple(user_meds)

    for med in meds:
        hit = _exact_user_match(lower, med)
        if hit:
            return hit

    hit = _fuzzy_user_match(lower, meds)
    if hit:
        return hit

    hit = _category_match(lower)
    if hit:
        return hit

    match = MEDICATION_SUFFIX.search(lower)
    if match:
        return MedicationMatch(
            name=match.group(1),
            confidence=PATTERN_CONFIDENCE,
            match_type=MatchType.PATTERN,
            raw=match.group(1),
        )
    return None


def extract_medications(text: str, user_meds: Iterable[UserMedication] = ()) -> list[str]:
    """All of the user's medications mentioned in ``text``.

    Falls back to the single best non-user match when none of the user's
    medications is mentioned.
    """
    lower = text.lower()
    found: list[str] = []
    for med in user_meds:
        if _exact_user_match(lower, med) or _fuzzy_user_match(lower, (med,)):
            found.append(med.name)

    if not found:
        hit = match_medication(text, ())
        if hit:
            found.append(hit.name)
    return found


__all__ = [
    "MatchType",
    "MedicationMatch",
    "SKIP_WORDS",
    "base_name",
    "extract_medications",
    "match_medication",
]
