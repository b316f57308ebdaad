"""Control skills: help, edit and delete.

Edit and delete skills recognize both explicit operator words ("ändere",
"lösche") and softer phrasings ("das stimmt nicht", "streiche"). Matching
on the softer phrasing lets the safety policy answer with an instructive
NotSupported naming the word to use.
"""

from __future__ import annotations

import re

from voiceos.lexicon.canonicalizer import (
    extract_ordinal,
    extract_pain_level,
    has_explicit_operator,
)
from voiceos.lexicon.de import OperatorType
from voiceos.models import (
    DeletePayload,
    DeleteTarget,
    EditEntryPayload,
    MutationPlan,
    MutationType,
    NavigatePlan,
    SkillCategory,
    SlotSuggestion,
    SlotType,
    TargetView,
)
from voiceos.parser.medication_matcher import match_medication
from voiceos.skills.base import (
    ENTRY_CUE,
    SOFT_DELETE_CUE,
    MatchResult,
    Skill,
    SlotDefinition,
    has_delete_cue,
)

COMMAND_CATALOGUE: dict[str, list[dict[str, str]]] = {
    "Navigation": [
        {"command": "Öffne [Bereich]", "example": "Öffne Tagebuch"},
        {"command": "Zeig [Bereich]", "example": "Zeig meine Medikamente"},
        {"command": "Bericht erstellen", "example": "Arztbericht öffnen"},
    ],
    "Abfragen": [
        {"command": "Letzter Eintrag", "example": "Zeig letzten Eintrag"},
        {"command": "Wann zuletzt [Medikament]?", "example": "Wann zuletzt Triptan genommen?"},
        {"command": "Wie oft [Medikament]?", "example": "Wie oft Triptan im letzten Monat?"},
        {"command": "Wie viele Migränetage?", "example": "Wie viele Migränetage diesen Monat?"},
        {"command": "Durchschnittlicher Schmerz", "example": "Durchschnittliche Schmerzstärke letzte Woche"},
    ],
    "Eintragen": [
        {"command": "[Schmerz] Stärke [0-10]", "example": "Kopfschmerzen Stärke 6"},
        {"command": "Notiz: [Text]", "example": "Notiz: Stress bei der Arbeit"},
        {"command": "Erinnere mich [Zeit] an [Medikament]", "example": "Erinnere mich um 14 Uhr an Triptan"},
        {"command": "Bewerte [Medikament] mit [0-10]", "example": "Bewerte Sumatriptan mit 8"},
    ],
    "Ändern": [
        {"command": "Ändere letzten Eintrag auf Stärke [0-10]", "example": "Ändere letzten Eintrag auf Stärke 5"},
        {"command": "Lösche letzten Eintrag", "example": "Entferne den letzten Eintrag mit Ibuprofen"},
        {"command": "Lösche letzte Notiz", "example": "Lösche die letzte Notiz"},
    ],
    "Steuerung": [
        {"command": "Hilfe", "example": "Was kann ich sagen?"},
        {"command": "Abbrechen", "example": "Aktuelle Rückfrage abbrechen"},
    ],
}

_HELP_CUE = re.compile(r"\b(?:hilfe|help|befehle|kommandos|anleitung|funktionen)\b")
_WHAT_CAN_I_SAY = re.compile(r"\bwas kann ich (?:sagen|machen|tun|fragen)\b")
_HOW_DOES_IT_WORK = re.compile(r"\bwie (?:geht das|funktioniert)\b")

_SOFT_EDIT_CUE = re.compile(r"\b(?:falsch|stimmt nicht|war doch)\b")
_STRONG_DELETE_VERB = re.compile(r"\b(?:lösch\w*|entfern\w*)\b")
_NOTES_NOUN = re.compile(r"\b(?:notiz(?:en)?|sprachnotiz(?:en)?|anmerkung(?:en)?)\b")

_PAIN_LEVEL_SUGGESTIONS = (
    SlotSuggestion(label="Leicht (3)", value="3"),
    SlotSuggestion(label="Mittel (5)", value="5"),
    SlotSuggestion(label="Stark (7)", value="7"),
    SlotSuggestion(label="Sehr stark (9)", value="9"),
)


# =============================================================================
# help
# =============================================================================

class HelpSkill(Skill):
    def __init__(self):
        super().__init__(
            id="help",
            name="Hilfe",
            category=SkillCategory.HELP,
            examples=("hilfe", "was kann ich sagen", "welche befehle gibt es"),
            keywords=("hilfe", "help", "befehle", "kommandos", "anleitung"),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if _WHAT_CAN_I_SAY.search(canonical):
            cue, reason = 0.95, "what_can_i_say"
        elif _HELP_CUE.search(canonical):
            cue, reason = 0.9, "help_word"
        elif _HOW_DOES_IT_WORK.search(canonical):
            cue, reason = 0.7, "how_does_it_work"
        else:
            return MatchResult.no_match("no_help_cue")

        asks_help = has_explicit_operator(canonical, OperatorType.HELP)
        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if asks_help else 0.0),
            reasons=(reason,),
        )

    def create_plan(self, slots, context, confidence, now) -> NavigatePlan:
        return NavigatePlan(
            summary="Hilfe anzeigen",
            confidence=confidence,
            target_view=TargetView.HELP,
            payload={"commands": COMMAND_CATALOGUE},
        )


# =============================================================================
# edit_entry
# =============================================================================

class EditEntrySkill(Skill):
    def __init__(self):
        super().__init__(
            id="edit_entry",
            name="Eintrag bearbeiten",
            category=SkillCategory.EDIT,
            examples=(
                "ändere letzten eintrag",
                "korrigiere die schmerzstärke auf 5",
                "setze den letzten eintrag auf stärke 4",
            ),
            keywords=("ändere", "korrigiere", "bearbeite", "eintrag", "stärke"),
            required_slots=(
                SlotDefinition(
                    name="pain_level",
                    type=SlotType.NUMBER,
                    prompt="Welche Schmerzstärke soll der Eintrag bekommen? (0-10)",
                    suggestions=_PAIN_LEVEL_SUGGESTIONS,
                ),
            ),
            optional_slots=(
                SlotDefinition(name="ordinal", type=SlotType.NUMBER, required=False),
            ),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_delete_cue(canonical):
            return MatchResult.deferred(0.2, "delete_cue")

        has_edit = has_explicit_operator(canonical, OperatorType.EDIT)
        has_entry = ENTRY_CUE.search(canonical) is not None
        level = extract_pain_level(canonical)

        cue = 0.0
        if has_edit and has_entry:
            cue = 0.9
        elif has_edit and level is not None:
            cue = 0.85
        elif _SOFT_EDIT_CUE.search(canonical):
            cue = 0.6
        elif has_edit:
            cue = 0.4

        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if has_edit else 0.0),
            slots={"pain_level": level, "ordinal": extract_ordinal(canonical) or 1},
            reasons=("edit_operator",) if has_edit else (),
        )

    def create_plan(self, slots, context, confidence, now) -> MutationPlan:
        level = int(slots["pain_level"])
        ordinal = slots.get("ordinal") or 1
        return MutationPlan(
            summary=f"Eintrag auf Stärke {level} ändern",
            confidence=confidence,
            mutation_type=MutationType.EDIT_ENTRY,
            payload=EditEntryPayload(entry_id=-ordinal, pain_level=level),
            risk=self.risk,
        )


# =============================================================================
# delete_entry / delete_voice_note
# =============================================================================

class DeleteEntrySkill(Skill):
    def __init__(self):
        super().__init__(
            id="delete_entry",
            name="Eintrag löschen",
            category=SkillCategory.DELETE,
            examples=(
                "lösche letzten eintrag",
                "entferne letzten eintrag mit ibuprofen",
            ),
            keywords=("lösche", "entferne", "eintrag"),
            optional_slots=(
                SlotDefinition(name="ordinal", type=SlotType.NUMBER, required=False),
                SlotDefinition(name="med_name", type=SlotType.MEDICATION, required=False),
            ),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        explicit = has_explicit_operator(canonical, OperatorType.DELETE)
        soft = SOFT_DELETE_CUE.search(canonical) is not None
        if not (explicit or soft):
            return MatchResult.no_match("no_delete_cue")
        if _NOTES_NOUN.search(canonical):
            return MatchResult.deferred(0.25, "notes_noun")

        has_entry = ENTRY_CUE.search(canonical) is not None
        med = match_medication(canonical, context.user_meds)

        cue = 0.0
        if has_entry:
            cue = 0.9
        elif med:
            cue = 0.8
        elif _STRONG_DELETE_VERB.search(canonical):
            cue = 0.5

        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if explicit else 0.0),
            slots={
                "ordinal": extract_ordinal(canonical) or 1,
                "med_name": med.name if med else None,
            },
            reasons=("explicit_delete" if explicit else "soft_delete",),
        )

    def create_plan(self, slots, context, confidence, now) -> MutationPlan:
        ordinal = slots.get("ordinal") or 1
        med_name = slots.get("med_name")
        med_text = f" mit {med_name}" if med_name else ""
        return MutationPlan(
            summary=f"Letzten Eintrag{med_text} löschen",
            confidence=confidence,
            mutation_type=MutationType.DELETE_ENTRY,
            payload=DeletePayload(
                target_id=-ordinal,
                target_type=DeleteTarget.ENTRY,
                med_name=med_name,
            ),
            risk=self.risk,
        )


class DeleteVoiceNoteSkill(Skill):
    def __init__(self):
        super().__init__(
            id="delete_voice_note",
            name="Notiz löschen",
            category=SkillCategory.DELETE,
            examples=("lösche letzte notiz", "entferne die notiz"),
            keywords=("lösche", "entferne", "notiz"),
            optional_slots=(
                SlotDefinition(name="ordinal", type=SlotType.NUMBER, required=False),
            ),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if not has_delete_cue(canonical):
            return MatchResult.no_match("no_delete_cue")
        if not _NOTES_NOUN.search(canonical):
            return MatchResult.no_match("no_notes_noun")
        explicit = has_explicit_operator(canonical, OperatorType.DELETE)
        return MatchResult(
            confidence=self.weigh(0.9, canonical, 1.0 if explicit else 0.0),
            slots={"ordinal": extract_ordinal(canonical) or 1},
            reasons=("delete_cue", "notes_noun"),
        )

    def create_plan(self, slots, context, confidence, now) -> MutationPlan:
        ordinal = slots.get("ordinal") or 1
        return MutationPlan(
            summary="Notiz löschen",
            confidence=confidence,
            mutation_type=MutationType.DELETE_VOICE_NOTE,
            payload=DeletePayload(target_id=-ordinal, target_type=DeleteTarget.NOTE),
            risk=self.risk,
        )


CONTROL_SKILLS: tuple[Skill, ...] = (
    HelpSkill(),
    EditEntrySkill(),
    DeleteEntrySkill(),
    DeleteVoiceNoteSkill(),
)


__all__ = [
    "COMMAND_CATALOGUE",
    "CONTROL_SKILLS",
    "DeleteEntrySkill",
    "DeleteVoiceNoteSkill",
    "EditEntrySkill",
    "HelpSkill",
]
