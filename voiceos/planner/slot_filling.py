"""Multi-turn slot filling.

A dialogue starts when a skill matches but a required slot is missing. The
planner answers with a SlotFillingPlan that carries a PartialPlan; the caller
hands that PartialPlan back together with the user's answer. The state here
is a plain value rebuilt from the PartialPlan on each turn, so nothing is
kept between calls.

Answers are parsed per slot type:
    NUMBER      pain level 0-10 from digits, number words or "stark"/"leicht"
    RATING      0-10 from digits, number words or "sehr gut"/"nicht geholfen"
    MEDICATION  the user's medication list, then drug categories
    DATE_TIME   "morgen früh", "um 14 uhr", or an ISO timestamp
    TIME_RANGE  days, e.g. "letzte woche"
    STRING      the answer as spoken
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from voiceos.lexicon.canonicalizer import (
    canonicalize,
    extract_numbers,
    extract_pain_level,
    extract_rating,
    extract_time_range,
)
from voiceos.logging_config import get_logger
from voiceos.models import PartialPlan, SlotType, UserContext
from voiceos.parser.entity_extractor import parse_time_expression
from voiceos.parser.medication_matcher import match_medication
from voiceos.skills.base import Skill, SlotDefinition, slot_is_filled

logger = get_logger(__name__)

_CANCEL_ANYWHERE = re.compile(
    r"\b(?:abbrechen|abbruch|vergiss es|vergiss das|lass es|lass mal|cancel)\b"
)
_CANCEL_ALONE = re.compile(r"^(?:stopp?|halt|nein|nein danke|egal|nichts|doch nicht)$")
_PUNCT = re.compile(r"[.!?,;:]+")


class DialogueStatus(str, Enum):
    COLLECTING = "collecting"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SlotFillingState:
    skill_id: str
    filled_slots: dict[str, Any] = field(default_factory=dict)
    missing_required_slots: tuple[str, ...] = ()
    status: DialogueStatus = DialogueStatus.COLLECTING
    # Answers accepted in this dialogue
    cursor: int = 0

    @property
    def is_complete(self) -> bool:
        return self.status == DialogueStatus.COMPLETE

    def to_dict(self) -> dict[str, Any]:
        return {
            "skill_id": self.skill_id,
            "filled_slots": dict(self.filled_slots),
            "missing_required_slots": list(self.missing_required_slots),
            "status": self.status.value,
            "cursor": self.cursor,
        }


# =============================================================================
# State transitions
# =============================================================================

def init_slot_filling(
    skill: Skill,
    initial_slots: dict[str, Any] | None = None,
) -> SlotFillingState:
    """Start a dialogue for ``skill`` with whatever the first turn found."""
    required = [s.name for s in skill.required_slots]
    filled = {k: v for k, v in (initial_slots or {}).items() if v is not None}
    missing = tuple(name for name in required if not slot_is_filled(filled, name))
    return SlotFillingState(
        skill_id=skill.id,
        filled_slots=filled,
        missing_required_slots=missing,
        status=DialogueStatus.COLLECTING if missing else DialogueStatus.COMPLETE,
    )


def next_slot_to_fill(state: SlotFillingState, skill: Skill) -> SlotDefinition | None:
    if state.status != DialogueStatus.COLLECTING or not state.missing_required_slots:
        return None
    return skill.slot(state.missing_required_slots[0])


def fill_slot(state: SlotFillingState, name: str, value: Any) -> SlotFillingState:
    """Record one answer. Never removes other filled slots."""
    if state.status == DialogueStatus.CANCELLED:
        return state

    if slot_is_filled(state.filled_slots, name):
        logger.warning("slot_refilled", skill_id=state.skill_id, slot=name)

    filled = {**state.filled_slots, name: value}
    missing = tuple(n for n in state.missing_required_slots if not slot_is_filled(filled, n))
    return replace(
        state,
        filled_slots=filled,
        missing_required_slots=missing,
        status=DialogueStatus.COLLECTING if missing else DialogueStatus.COMPLETE,
        cursor=state.cursor + 1,
    )


def cancel(state: SlotFillingState) -> SlotFillingState:
    return replace(state, status=DialogueStatus.CANCELLED)


def is_cancel_utterance(text: str) -> bool:
    lower = _PUNCT.sub("", text.lower()).strip()
    if not lower:
        return False
    return bool(_CANCEL_ANYWHERE.search(lower) or _CANCEL_ALONE.match(lower))


def state_from_partial(partial: PartialPlan, skill: Skill) -> SlotFillingState:
    return init_slot_filling(skill, partial.collected_slots)


def to_partial(state: SlotFillingState, source_text: str = "") -> PartialPlan:
    return PartialPlan(
        target_skill_id=state.skill_id,
        collected_slots=dict(state.filled_slots),
        source_text=source_text,
    )


# =============================================================================
# Answer parsing
# =============================================================================

def _first_scale_number(text: str) -> int | None:
    for value in extract_numbers(text):
        if 0 <= value <= 10:
            return value
    return None


def _parse_iso(text: str) -> str | None:
    try:
        return datetime.fromisoformat(text.strip()).isoformat()
    except ValueError:
        return None


def parse_slot_value(
    slot: SlotDefinition,
    text: str,
    context: UserContext,
    now: datetime,
) -> Any | None:
    """Value for ``slot`` from a follow-up answer, or None if unusable."""
    canonical = canonicalize(text)
    if not canonical:
        return None

    if slot.type == SlotType.NUMBER:
        value = _first_scale_number(canonical)
        return value if value is not None else extract_pain_level(canonical)

    if slot.type == SlotType.RATING:
        value = _first_scale_number(canonical)
        return value if value is not None else extract_rating(canonical)

    if slot.type == SlotType.MEDICATION:
        match = match_medication(canonical, context.user_meds)
        return match.name if match else None

    if slot.type == SlotType.DATE_TIME:
        iso = _parse_iso(text)
        if iso:
            return iso
        expression = parse_time_expression(canonical, now)
        return expression.iso() if expression else None

    if slot.type == SlotType.TIME_RANGE:
        return extract_time_range(canonical)

    return text.strip() or None


__all__ = [
    "DialogueStatus",
    "SlotFillingState",
    "cancel",
    "fill_slot",
    "init_slot_filling",
    "is_cancel_utterance",
    "next_slot_to_fill",
    "parse_slot_value",
    "state_from_partial",
    "to_partial",
]
