"""Action skills: create data.

- create_reminder: medication or appointment reminder
- save_voice_note: free-text context note
- rate_intake: rate how well a medication worked
- quick_pain_entry: log a pain entry with a level

Creating skills carry an undo window where the result is cheap to take
back. The undo plan itself is a delete, so it carries risk=high like every
delete; the caller runs it only from the undo toast.
"""

from __future__ import annotations

import re
from datetime import datetime

from voiceos.lexicon.canonicalizer import (
    extract_pain_level,
    extract_rating,
    has_explicit_operator,
)
from voiceos.lexicon.de import FILLER_WORDS, OperatorType
from voiceos.models import (
    DeletePayload,
    DeleteTarget,
    MutationPlan,
    MutationType,
    PainEntryPayload,
    RatingPayload,
    ReminderPayload,
    Repeat,
    RiskLevel,
    SkillCategory,
    SlotSuggestion,
    SlotType,
    UndoSpec,
    VoiceNotePayload,
)
from voiceos.parser.entity_extractor import parse_time_expression
from voiceos.parser.medication_matcher import extract_medications, match_medication
from voiceos.skills.base import (
    QUESTION_START,
    MatchResult,
    Skill,
    SlotDefinition,
    has_delete_cue,
    has_mutation_cue,
)

UNDO_WINDOW_MS = 8000

_REMINDER_VERB = re.compile(r"\berinner(?:e|n)?\b|\breminder\b|\bwecker\b|\berinnerung\b")

_NOTE_EXPLICIT = re.compile(r"als\s+notiz|notiz\s*:")
_NOTE_VERB = re.compile(r"\b(?:notier\w*|merk(?:e|en)?|speicher\w*|aufschreib\w*)\b")
_NOTE_NOUN = re.compile(r"\bnotiz\b")
_NOTE_COMMAND = re.compile(
    r"\b(?:als\s+notiz|speicher\w*|notier\w*|notiz|merk(?:e|en)?|aufschreib\w*)\b\s*:?\s*",
    re.IGNORECASE,
)
# Left over after removing the command words; not worth saving
_NOTE_LEFTOVER = FILLER_WORDS | {"dir", "dies", "als", "ich", "bitte", "mal", "jetzt"}

_RATE_VERB = re.compile(r"\bbewert\w*|\brating\b")
_EFFECT = re.compile(r"\b(?:wirkung|effekt|geholfen|gewirkt|hilft|half|wirkt)\b")

_PAIN = re.compile(r"\b(?:kopfschmerz|migräne|schmerz)\w*")
_EXPLICIT_LEVEL = re.compile(r"\b(?:schmerzstärke|stärke|level|stufe)\s*:?\s*\d+")


def _undo_delete(mutation_type: MutationType, target: DeleteTarget, summary: str) -> UndoSpec:
    return UndoSpec(
        window_ms=UNDO_WINDOW_MS,
        undo_plan=MutationPlan(
            summary=summary,
            confidence=1.0,
            mutation_type=mutation_type,
            payload=DeletePayload(target_id=-1, target_type=target),
            risk=RiskLevel.HIGH,
        ),
    )


# =============================================================================
# create_reminder
# =============================================================================

class CreateReminderSkill(Skill):
    def __init__(self):
        super().__init__(
            id="create_reminder",
            name="Erinnerung erstellen",
            category=SkillCategory.ACTION,
            examples=(
                "erinnere mich an triptan um 14 uhr",
                "erinnerung für medikament morgen früh",
                "erinnere mich täglich an prophylaxe",
            ),
            keywords=("erinner", "erinnerung", "reminder", "wecker", "uhr"),
            required_slots=(
                SlotDefinition(
                    name="date_time",
                    type=SlotType.DATE_TIME,
                    prompt="Wann soll ich dich erinnern?",
                ),
            ),
            optional_slots=(
                SlotDefinition(name="title", type=SlotType.STRING, required=False),
                SlotDefinition(name="medications", type=SlotType.MEDICATION, required=False),
                SlotDefinition(name="repeat", type=SlotType.STRING, required=False),
            ),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_delete_cue(canonical):
            return MatchResult.deferred(0.2, "delete_cue")

        has_verb = _REMINDER_VERB.search(canonical) is not None
        when = parse_time_expression(canonical, now)
        med = match_medication(canonical, context.user_meds)

        cue = 0.0
        if has_verb and when:
            cue = 0.9
        elif has_verb:
            cue = 0.75
        elif when and med:
            cue = 0.6

        reasons = []
        if has_verb:
            reasons.append("reminder_verb")
        if when:
            reasons.append(f"time:{when.iso()}")
        if med:
            reasons.append(f"medication:{med.name}")

        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if has_verb else 0.0),
            slots={
                "title": f"{med.name} nehmen" if med else "Erinnerung",
                "date_time": when.iso() if when else None,
                "repeat": when.repeat if when else Repeat.NONE,
                "medications": (med.name,) if med else (),
            },
            reasons=tuple(reasons),
        )

    def create_plan(self, slots, context, confidence, now) -> MutationPlan:
        title = slots.get("title") or "Erinnerung"
        date_time = slots["date_time"]
        when = datetime.fromisoformat(date_time)
        return MutationPlan(
            summary=f'Erinnerung: "{title}" am {when:%d.%m.} um {when:%H:%M}',
            confidence=confidence,
            mutation_type=MutationType.CREATE_REMINDER,
            payload=ReminderPayload(
                title=title,
                date_time=date_time,
                medications=tuple(slots.get("medications") or ()),
                repeat=Repeat(slots.get("repeat") or Repeat.NONE),
            ),
            risk=self.risk,
        )


# =============================================================================
# save_voice_note
# =============================================================================

def note_text(raw_text: str) -> str:
    """The note body: the utterance without the command words.

    Empty when nothing but filler is left ("speichere das als notiz").
    """
    text = _NOTE_COMMAND.sub("", raw_text).strip(" \t.,;:!?")
    tokens = text.lower().split()
    if all(t.strip(".,;:!?") in _NOTE_LEFTOVER for t in tokens):
        return ""
    return text


class SaveVoiceNoteSkill(Skill):
    def __init__(self):
        super().__init__(
            id="save_voice_note",
            name="Notiz speichern",
            category=SkillCategory.ACTION,
            examples=(
                "speichere das als notiz",
                "notiere das",
                "notiz: kopfschmerzen nach kaffee",
                "notiz speichern",
            ),
            keywords=("speicher", "notiz", "notiere", "merk", "aufschreiben"),
            required_slots=(
                SlotDefinition(
                    name="text",
                    type=SlotType.STRING,
                    prompt="Was soll ich notieren?",
                    suggestions=(
                        SlotSuggestion(label="Stress", value="Stress"),
                        SlotSuggestion(label="Wenig geschlafen", value="Wenig geschlafen"),
                        SlotSuggestion(label="Wetterwechsel", value="Wetterwechsel"),
                    ),
                ),
            ),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_delete_cue(canonical):
            return MatchResult.no_match("delete_cue")

        lower = raw_text.lower()
        has_verb = _NOTE_VERB.search(canonical) is not None
        has_noun = _NOTE_NOUN.search(canonical) is not None

        if _NOTE_EXPLICIT.search(lower):
            cue = 0.95
        elif has_verb and has_noun:
            cue = 0.85
        elif has_verb:
            cue = 0.7
        elif has_noun:
            cue = 0.5
        elif has_explicit_operator(canonical, OperatorType.CREATE):
            cue = 0.3
        else:
            cue = 0.0

        text = note_text(raw_text)
        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if text else 0.0),
            slots={"text": text or None},
            reasons=("note_cue",) if cue else (),
        )

    def create_plan(self, slots, context, confidence, now) -> MutationPlan:
        text = slots["text"]
        preview = text if len(text) <= 40 else text[:40] + "..."
        return MutationPlan(
            summary=f'Notiz: "{preview}"',
            confidence=confidence,
            mutation_type=MutationType.SAVE_VOICE_NOTE,
            payload=VoiceNotePayload(text=text, occurred_at=now.isoformat()),
            risk=self.risk,
            undo=_undo_delete(
                MutationType.DELETE_VOICE_NOTE,
                DeleteTarget.NOTE,
                "Notiz rückgängig machen",
            ),
        )


# =============================================================================
# rate_intake
# =============================================================================

def rating_label(rating: int) -> str:
    if rating >= 8:
        return "sehr gut"
    if rating >= 5:
        return "gut"
    if rating >= 3:
        return "mäßig"
    return "schlecht"


class RateIntakeSkill(Skill):
    def __init__(self):
        super().__init__(
            id="rate_intake",
            name="Medikamentenwirkung bewerten",
            category=SkillCategory.RATE,
            examples=(
                "bewerte die wirkung von triptan",
                "wirkung bewerten",
                "das triptan hat gut geholfen",
            ),
            keywords=("bewert", "wirkung", "gewirkt", "geholfen", "rating"),
            required_slots=(
                SlotDefinition(
                    name="med_name",
                    type=SlotType.MEDICATION,
                    prompt="Welches Medikament möchtest du bewerten?",
                ),
                SlotDefinition(
                    name="rating",
                    type=SlotType.RATING,
                    prompt="Wie gut hat {med_name} gewirkt?",
                    suggestions=(
                        SlotSuggestion(label="Sehr gut (9)", value="9"),
                        SlotSuggestion(label="Gut (7)", value="7"),
                        SlotSuggestion(label="Etwas (4)", value="4"),
                        SlotSuggestion(label="Gar nicht (1)", value="1"),
                    ),
                ),
            ),
            optional_slots=(
                SlotDefinition(name="entry_id", type=SlotType.NUMBER, required=False),
                SlotDefinition(name="notes", type=SlotType.STRING, required=False),
            ),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_delete_cue(canonical):
            return MatchResult.deferred(0.2, "delete_cue")

        has_verb = _RATE_VERB.search(canonical) is not None
        has_effect = _EFFECT.search(canonical) is not None
        med = match_medication(canonical, context.user_meds)
        rating = extract_rating(canonical)

        cue = 0.0
        if has_verb and med:
            cue = 0.9
        elif has_effect and med:
            cue = 0.8
        elif has_verb:
            cue = 0.75
        elif med and rating is not None:
            cue = 0.55
        elif has_effect:
            cue = 0.3

        reasons = []
        if has_verb:
            reasons.append("rate_verb")
        if has_effect:
            reasons.append("effect_cue")
        if med:
            reasons.append(f"medication:{med.name}")
        if rating is not None:
            reasons.append(f"rating:{rating}")

        asks_rating = has_explicit_operator(canonical, OperatorType.RATE)
        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if asks_rating else 0.0),
            slots={"med_name": med.name if med else None, "rating": rating},
            reasons=tuple(reasons),
        )

    def create_plan(self, slots, context, confidence, now) -> MutationPlan:
        med_name = slots["med_name"]
        rating = int(slots["rating"])
        return MutationPlan(
            summary=f'{med_name} als "{rating_label(rating)}" ({rating}/10) bewerten',
            confidence=confidence,
            mutation_type=MutationType.RATE_INTAKE,
            payload=RatingPayload(
                entry_id=slots.get("entry_id") or -1,
                med_name=med_name,
                rating=rating,
                notes=slots.get("notes"),
            ),
            risk=self.risk,
        )


# =============================================================================
# quick_pain_entry
# =============================================================================

class QuickPainEntrySkill(Skill):
    def __init__(self):
        super().__init__(
            id="quick_pain_entry",
            name="Schneller Schmerzeintrag",
            category=SkillCategory.ACTION,
            examples=(
                "kopfschmerzen stärke 7",
                "migräne eintragen",
                "starke migräne",
                "leichte kopfschmerzen",
            ),
            keywords=("kopfschmerz", "migräne", "schmerz", "stärke"),
            required_slots=(
                SlotDefinition(
                    name="pain_level",
                    type=SlotType.NUMBER,
                    prompt="Wie stark sind die Schmerzen? (0-10)",
                    suggestions=(
                        SlotSuggestion(label="Leicht (3)", value="3"),
                        SlotSuggestion(label="Mittel (5)", value="5"),
                        SlotSuggestion(label="Stark (7)", value="7"),
                        SlotSuggestion(label="Sehr stark (9)", value="9"),
                    ),
                ),
            ),
            optional_slots=(
                SlotDefinition(name="medications", type=SlotType.MEDICATION, required=False),
                SlotDefinition(name="notes", type=SlotType.STRING, required=False),
            ),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_mutation_cue(canonical):
            return MatchResult.deferred(0.25, "mutation_cue")

        has_pain = _PAIN.search(canonical) is not None
        has_explicit_level = _EXPLICIT_LEVEL.search(canonical) is not None
        has_create = has_explicit_operator(canonical, OperatorType.CREATE)
        level = extract_pain_level(canonical)

        if level is None and has_explicit_operator(canonical, OperatorType.OPEN):
            return MatchResult.deferred(0.25, "open_cue")

        cue = 0.0
        if has_pain and level is not None:
            cue = 0.9
        elif has_explicit_level:
            cue = 0.8
        elif has_pain and has_create:
            cue = 0.8
        elif has_pain:
            cue = 0.6

        confidence = self.weigh(cue, canonical, 1.0 if level is not None else 0.0)
        # "wie stark waren die schmerzen" asks, it does not log
        if QUESTION_START.search(canonical):
            confidence /= 2

        return MatchResult(
            confidence=confidence,
            slots={
                "pain_level": level,
                "medications": tuple(extract_medications(canonical, context.user_meds)),
                "notes": raw_text.strip() or None,
            },
            reasons=(f"pain_level:{level}",) if level is not None else (),
        )

    def create_plan(self, slots, context, confidence, now) -> MutationPlan:
        level = int(slots["pain_level"])
        medications = tuple(slots.get("medications") or ())
        med_text = f" mit {', '.join(medications)}" if medications else ""
        return MutationPlan(
            summary=f"Schmerz Stärke {level}{med_text}",
            confidence=confidence,
            mutation_type=MutationType.QUICK_PAIN_ENTRY,
            payload=PainEntryPayload(
                pain_level=level,
                medications=medications,
                notes=slots.get("notes"),
                timestamp=now.isoformat(),
            ),
            risk=self.risk,
            undo=_undo_delete(
                MutationType.DELETE_ENTRY,
                DeleteTarget.ENTRY,
                "Eintrag rückgängig machen",
            ),
        )


ACTION_SKILLS: tuple[Skill, ...] = (
    CreateReminderSkill(),
    SaveVoiceNoteSkill(),
    RateIntakeSkill(),
    QuickPainEntrySkill(),
)


__all__ = [
    "ACTION_SKILLS",
    "CreateReminderSkill",
    "QuickPainEntrySkill",
    "RateIntakeSkill",
    "SaveVoiceNoteSkill",
    "UNDO_WINDOW_MS",
    "note_text",
    "rating_label",
]
