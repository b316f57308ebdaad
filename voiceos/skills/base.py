"""Skill base types and scoring helpers.

A skill is one thing the user can ask for ("open the diary", "when did I
last take a triptan"). Each skill scores an utterance with ``match()`` and
turns the extracted slots into a plan with ``build_plan()``. When a required
slot is missing, ``build_plan()`` returns a SlotFillingPlan asking for it
instead of guessing.

Every skill combines three signals:

    confidence = 0.5 * keyword + 0.3 * best example overlap + 0.2 * bonus

Navigation skills take the keyword signal from their keyword list. Query,
action and control skills take it from a small table of cue combinations
(see ``Skill.weigh``); their bonus is the skill's own operator word or
defining cue. Deferrals to a better fitting skill stay fixed low scores.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable

from voiceos.errors import SlotConfigurationError
from voiceos.lexicon.canonicalizer import (
    canonicalize,
    contains_keyword,
    has_explicit_operator,
)
from voiceos.lexicon.de import OperatorType
from voiceos.models import (
    PartialPlan,
    Plan,
    RiskLevel,
    SkillCategory,
    SlotFillingPlan,
    SlotSuggestion,
    SlotType,
    UserContext,
)

# =============================================================================
# Scoring constants
# =============================================================================

KEYWORD_WEIGHT = 0.5
EXAMPLE_WEIGHT = 0.3
BONUS_WEIGHT = 0.2

# Two keyword hits already count as a full keyword score
KEYWORD_SATURATION = 2
ANTI_KEYWORD_PENALTY = 0.3

MAX_SUGGESTIONS = 4

RISK_BY_CATEGORY: dict[SkillCategory, RiskLevel] = {
    SkillCategory.NAV: RiskLevel.LOW,
    SkillCategory.QUERY: RiskLevel.LOW,
    SkillCategory.HELP: RiskLevel.LOW,
    SkillCategory.ACTION: RiskLevel.LOW,
    SkillCategory.EDIT: RiskLevel.MEDIUM,
    SkillCategory.RATE: RiskLevel.MEDIUM,
    SkillCategory.DELETE: RiskLevel.HIGH,
}


# =============================================================================
# Shared cue patterns
# =============================================================================

# "eintrag", "einträge", "schmerzeintrag"; not the verb "eintragen"
ENTRY_CUE = re.compile(r"eintr(?:äge|ag)(?!en\b)")
LATEST_CUE = re.compile(r"\b(?:letzt\w*|vorletzt\w*|vorhin|zuletzt)\b")
COUNT_CUE = re.compile(r"\b(?:wie\s+oft|wie\s*viele?n?|anzahl|zähl\w*|insgesamt|summe)\b")
QUESTION_START = re.compile(r"^(?:wie|wann|was|welche\w*|wo|warum)\b")

# Words that sound like deleting but are not delete operators
SOFT_DELETE_CUE = re.compile(r"\b(?:streich\w*|tilg\w*|rückgängig|ausradier\w*)\b")


def has_mutation_cue(text: str) -> bool:
    """Whether the text asks to change or remove something."""
    return (
        has_explicit_operator(text, OperatorType.EDIT)
        or has_explicit_operator(text, OperatorType.DELETE)
        or SOFT_DELETE_CUE.search(text) is not None
    )


def has_delete_cue(text: str) -> bool:
    return (
        has_explicit_operator(text, OperatorType.DELETE)
        or SOFT_DELETE_CUE.search(text) is not None
    )


# =============================================================================
# Scoring helpers
# =============================================================================

def keyword_score(
    text: str,
    keywords: Iterable[str],
    anti_keywords: Iterable[str] = (),
) -> float:
    """Keyword hits (saturating at two) minus a penalty per anti-keyword."""
    hits = sum(1 for kw in keywords if contains_keyword(text, kw))
    anti = sum(1 for kw in anti_keywords if contains_keyword(text, kw))
    score = min(1.0, hits / KEYWORD_SATURATION)
    return max(0.0, score - ANTI_KEYWORD_PENALTY * anti)


def example_score(text: str, examples: Iterable[str]) -> float:
    """Best share of an example's words that occur in the text."""
    words = set(text.split())
    best = 0.0
    for example in examples:
        example_words = example.split()
        if not example_words:
            continue
        overlap = sum(1 for w in example_words if w in words) / len(example_words)
        best = max(best, overlap)
    return best


def combine_scores(keyword: float, example: float, bonus: float = 0.0) -> float:
    weighted = KEYWORD_WEIGHT * keyword + EXAMPLE_WEIGHT * example + BONUS_WEIGHT * bonus
    # Rounded so tier boundaries like 0.8 compare exactly
    return min(1.0, round(weighted, 6))


# =============================================================================
# Skill types
# =============================================================================

@dataclass(frozen=True)
class MatchResult:
    confidence: float
    slots: dict[str, Any] = field(default_factory=dict)
    reasons: tuple[str, ...] = ()

    @classmethod
    def deferred(cls, confidence: float, reason: str) -> MatchResult:
        """Low fixed score when a competing skill clearly fits better."""
        return cls(confidence=confidence, reasons=(reason,))

    @classmethod
    def no_match(cls, reason: str) -> MatchResult:
        return cls(confidence=0.0, reasons=(reason,))


class _PromptValues(dict):
    def __missing__(self, key: str) -> str:
        return "das Medikament" if key == "med_name" else ""


@dataclass(frozen=True)
class SlotDefinition:
    """A named value a skill needs.

    ``prompt`` may reference already filled slots, e.g. "{med_name}".
    """

    name: str
    type: SlotType
    required: bool = True
    prompt: str = ""
    suggestions: tuple[SlotSuggestion, ...] = ()

    def render_prompt(self, slots: dict[str, Any]) -> str:
        values = _PromptValues({k: v for k, v in slots.items() if v is not None})
        return self.prompt.format_map(values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "prompt": self.prompt,
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


def slot_is_filled(slots: dict[str, Any], name: str) -> bool:
    value = slots.get(name)
    return value is not None and value != ""


class Skill(ABC):
    """Abstract base for all skills. Immutable after construction."""

    def __init__(
        self,
        *,
        id: str,
        name: str,
        category: SkillCategory,
        examples: Iterable[str] = (),
        keywords: Iterable[str] = (),
        anti_keywords: Iterable[str] = (),
        required_slots: Iterable[SlotDefinition] = (),
        optional_slots: Iterable[SlotDefinition] = (),
    ):
        self.id = id
        self.name = name
        self.category = category
        # Compared against canonical text, so stored canonical
        self.examples = tuple(canonicalize(e) for e in examples)
        self.keywords = tuple(keywords)
        self.anti_keywords = tuple(anti_keywords)
        self.required_slots = tuple(required_slots)
        self.optional_slots = tuple(optional_slots)

        names = [s.name for s in self.required_slots + self.optional_slots]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise SlotConfigurationError(
                f"Skill {id} declares duplicate slots: {', '.join(duplicates)}"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, category={self.category.value})"

    @property
    def risk(self) -> RiskLevel:
        return RISK_BY_CATEGORY[self.category]

    @abstractmethod
    def match(
        self,
        raw_text: str,
        canonical: str,
        context: UserContext,
        now: datetime,
    ) -> MatchResult:
        """Score the utterance and extract slots."""

    @abstractmethod
    def create_plan(
        self,
        slots: dict[str, Any],
        context: UserContext,
        confidence: float,
        now: datetime,
    ) -> Plan:
        """Build the final plan. Called only when all required slots are set."""

    def build_plan(
        self,
        slots: dict[str, Any],
        context: UserContext,
        confidence: float,
        now: datetime,
    ) -> Plan:
        """Final plan, or a SlotFillingPlan for the first missing slot."""
        missing = self.missing_required(slots)
        if missing:
            return self.missing_slot_plan(missing[0], slots, context, confidence, now)
        return self.create_plan(slots, context, confidence, now)

    def slot(self, name: str) -> SlotDefinition | None:
        for definition in self.required_slots + self.optional_slots:
            if definition.name == name:
                return definition
        return None

    def missing_required(self, slots: dict[str, Any]) -> list[SlotDefinition]:
        return [s for s in self.required_slots if not slot_is_filled(slots, s.name)]

    def keyword_score(self, text: str) -> float:
        return keyword_score(text, self.keywords, self.anti_keywords)

    def example_score(self, text: str) -> float:
        return example_score(text, self.examples)

    def weigh(self, cue: float, canonical: str, bonus: float = 0.0) -> float:
        """Confidence for a cue-table skill.

        The cue value stands in for the keyword signal. No cue means no match,
        whatever the examples say.
        """
        if cue <= 0.0:
            return 0.0
        return combine_scores(cue, self.example_score(canonical), bonus)

    def missing_slot_plan(
        self,
        slot: SlotDefinition,
        slots: dict[str, Any],
        context: UserContext,
        confidence: float,
        now: datetime,
    ) -> SlotFillingPlan:
        return SlotFillingPlan(
            summary=self.name,
            confidence=confidence,
            missing_slot=slot.name,
            prompt=slot.render_prompt(slots),
            suggestions=suggestions_for(slot, context, now),
            partial=PartialPlan(
                target_skill_id=self.id,
                collected_slots={k: v for k, v in slots.items() if v is not None},
            ),
        )


# =============================================================================
# Slot suggestions
# =============================================================================

_DEFAULT_MED_SUGGESTIONS = (
    SlotSuggestion(label="Triptan", value="triptan"),
    SlotSuggestion(label="Schmerzmittel", value="schmerzmittel"),
)


def suggestions_for(
    slot: SlotDefinition,
    context: UserContext,
    now: datetime,
) -> tuple[SlotSuggestion, ...]:
    """Ranked answers for a slot question, two to four of them."""
    if slot.suggestions:
        return slot.suggestions[:MAX_SUGGESTIONS]

    if slot.type == SlotType.MEDICATION:
        suggestions = [SlotSuggestion(label=m.name, value=m.name) for m in context.user_meds]
        for default in _DEFAULT_MED_SUGGESTIONS:
            if len(suggestions) >= 2:
                break
            if all(s.value.lower() != default.value for s in suggestions):
                suggestions.append(default)
        return tuple(suggestions[:MAX_SUGGESTIONS])

    if slot.type == SlotType.DATE_TIME:
        tomorrow = (now + timedelta(days=1)).replace(hour=8, minute=0, second=0, microsecond=0)
        return (
            SlotSuggestion(label="In 1 Stunde", value=(now + timedelta(hours=1)).isoformat()),
            SlotSuggestion(label="In 2 Stunden", value=(now + timedelta(hours=2)).isoformat()),
            SlotSuggestion(label="Morgen früh (8 Uhr)", value=tomorrow.isoformat()),
        )

    return ()


__all__ = [
    "ANTI_KEYWORD_PENALTY",
    "BONUS_WEIGHT",
    "COUNT_CUE",
    "ENTRY_CUE",
    "EXAMPLE_WEIGHT",
    "KEYWORD_SATURATION",
    "KEYWORD_WEIGHT",
    "LATEST_CUE",
    "MAX_SUGGESTIONS",
    "MatchResult",
    "QUESTION_START",
    "RISK_BY_CATEGORY",
    "SOFT_DELETE_CUE",
    "Skill",
    "SlotDefinition",
    "combine_scores",
    "example_score",
    "has_delete_cue",
    "has_mutation_cue",
    "keyword_score",
    "slot_is_filled",
    "suggestions_for",
]
