"""Query skills: read-only questions about the diary.

- last_entry: open the latest (or n-th latest) entry
- last_entry_with_med: latest entry with a medication
- last_intake_med: when a medication was last taken
- count_med_range: days with a medication in a range
- count_migraine_range: migraine days in a range
- avg_pain_range: average pain level in a range
- list_notes_range: voice notes of a range

Each skill scores a small table of cue combinations. A skill defers with a
low fixed score when a competing skill fits the sentence better, e.g.
``last_entry`` when a medication is named.
"""

from __future__ import annotations

import re

from voiceos.lexicon.canonicalizer import (
    detect_object,
    extract_ordinal,
    extract_time_range,
    has_explicit_operator,
)
from voiceos.lexicon.de import ObjectType, OperatorType
from voiceos.models import (
    EntryFilter,
    ListType,
    OpenEntryPlan,
    OpenListPlan,
    QueryParams,
    QueryPlan,
    QueryType,
    SkillCategory,
    SlotType,
)
from voiceos.parser.entity_extractor import time_range_for
from voiceos.parser.medication_matcher import match_medication
from voiceos.skills.base import (
    COUNT_CUE,
    ENTRY_CUE,
    LATEST_CUE,
    MatchResult,
    Skill,
    SlotDefinition,
    has_delete_cue,
    has_mutation_cue,
)

DEFAULT_RANGE_DAYS = 30

_WANN_ZULETZT = re.compile(
    r"\bwann\b.*\b(?:zuletzt|letzte[nrs]?|letztmals)\b"
    r"|\b(?:zuletzt|letzte[nrs]?)\b.*\bwann\b"
)
_INTAKE = re.compile(r"\b(?:einnahme\w*|genommen|nahm|nehmen|eingenommen|tablette\w*)\b")
_DAY = re.compile(r"tag(?:e|en)?\b")
_MIGRAINE = re.compile(r"\b(?:migräne|kopfschmerz|schmerz)\w*")
_PAIN = re.compile(r"\b(?:\w*schmerz\w*|stärke|level|intensität)\b")
_STATS = re.compile(
    r"\b(?:durchschnitt\w*|schnitt|mittlere[nrs]?|mittelwert|trend\w*|entwicklung|verlauf)\b"
)
_NOTES_NOUN = re.compile(r"\b(?:notiz(?:en)?|sprachnotiz(?:en)?|anmerkung(?:en)?)\b")

_MEDICATION_SLOT = SlotDefinition(
    name="med_name",
    type=SlotType.MEDICATION,
    prompt="Welches Medikament meinst du?",
)
_ORDINAL_SLOT = SlotDefinition(name="ordinal", type=SlotType.NUMBER, required=False)
_DAYS_SLOT = SlotDefinition(name="days", type=SlotType.TIME_RANGE, required=False)


def _ordinal_text(ordinal: int) -> str:
    if ordinal == 1:
        return "letzten"
    if ordinal == 2:
        return "vorletzten"
    return f"{ordinal}.-letzten"


def _range_days(canonical: str) -> int:
    return extract_time_range(canonical) or DEFAULT_RANGE_DAYS


# =============================================================================
# last_entry
# =============================================================================

class LastEntrySkill(Skill):
    def __init__(self):
        super().__init__(
            id="last_entry",
            name="Letzter Eintrag",
            category=SkillCategory.QUERY,
            examples=(
                "zeig mir meinen letzten eintrag",
                "öffne den letzten eintrag",
                "letzter eintrag",
                "zeig letzten schmerzeintrag",
                "wann war mein letzter eintrag",
            ),
            keywords=("letzter", "letzte", "eintrag", "öffne", "zeig"),
            optional_slots=(_ORDINAL_SLOT,),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_mutation_cue(canonical):
            return MatchResult.deferred(0.25, "mutation_cue")
        if COUNT_CUE.search(canonical) or extract_time_range(canonical):
            return MatchResult.deferred(0.25, "range_question")
        if match_medication(canonical, context.user_meds):
            return MatchResult.deferred(0.3, "medication_mentioned")

        has_latest = LATEST_CUE.search(canonical) is not None
        has_entry = ENTRY_CUE.search(canonical) is not None
        has_open = (
            has_explicit_operator(canonical, OperatorType.OPEN)
            or has_explicit_operator(canonical, OperatorType.LATEST)
        )

        reasons = []
        if has_latest:
            reasons.append("latest_cue")
        if has_entry:
            reasons.append("entry_cue")
        if has_open:
            reasons.append("open_cue")

        cue = 0.0
        if has_latest and has_entry:
            cue = 0.85
        elif has_entry and has_open:
            cue = 0.75
        elif has_latest and has_open and detect_object(canonical) in (None, ObjectType.ENTRIES):
            cue = 0.6

        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if has_open else 0.0),
            slots={"ordinal": extract_ordinal(canonical) or 1},
            reasons=tuple(reasons),
        )

    def create_plan(self, slots, context, confidence, now) -> OpenEntryPlan:
        ordinal = slots.get("ordinal") or 1
        return OpenEntryPlan(
            summary=f"Öffne {_ordinal_text(ordinal)} Eintrag",
            confidence=confidence,
            entry_id=-ordinal,
        )


# =============================================================================
# last_entry_with_med
# =============================================================================

class LastEntryWithMedSkill(Skill):
    def __init__(self):
        super().__init__(
            id="last_entry_with_med",
            name="Letzter Eintrag mit Medikament",
            category=SkillCategory.QUERY,
            examples=(
                "zeig den letzten eintrag mit sumatriptan",
                "öffne letzten eintrag mit triptan",
                "letzter eintrag mit ibuprofen",
            ),
            keywords=("letzter", "eintrag", "mit", "triptan", "medikament"),
            required_slots=(_MEDICATION_SLOT,),
            optional_slots=(_ORDINAL_SLOT,),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        med = match_medication(canonical, context.user_meds)
        if med is None:
            return MatchResult.no_match("no_medication")
        if has_mutation_cue(canonical):
            return MatchResult.deferred(0.25, "mutation_cue")

        has_latest = LATEST_CUE.search(canonical) is not None
        has_entry = ENTRY_CUE.search(canonical) is not None
        has_open = has_explicit_operator(canonical, OperatorType.OPEN)

        if has_latest and has_entry:
            cue = 0.9
        elif has_entry:
            cue = 0.75
        elif has_latest and has_open:
            cue = 0.65
        else:
            cue = 0.3

        return MatchResult(
            confidence=self.weigh(cue * med.confidence, canonical, 1.0 if has_open else 0.0),
            slots={"med_name": med.name, "ordinal": extract_ordinal(canonical) or 1},
            reasons=(f"medication:{med.name}", f"cue:{cue}"),
        )

    def create_plan(self, slots, context, confidence, now) -> QueryPlan:
        med_name = slots["med_name"]
        return QueryPlan(
            summary=f"Öffne letzten Eintrag mit {med_name}",
            confidence=confidence,
            query_type=QueryType.LAST_ENTRY_WITH_MED,
            params=QueryParams(med_name=med_name, limit=slots.get("ordinal") or 1),
        )


# =============================================================================
# last_intake_med
# =============================================================================

class LastIntakeMedSkill(Skill):
    def __init__(self):
        super().__init__(
            id="last_intake_med",
            name="Letzte Medikamenteneinnahme",
            category=SkillCategory.QUERY,
            examples=(
                "wann habe ich zuletzt triptan genommen",
                "wann war die letzte triptan einnahme",
                "wann zuletzt sumatriptan",
                "letzte einnahme triptan",
            ),
            keywords=("wann", "zuletzt", "letzte", "einnahme", "genommen"),
            required_slots=(_MEDICATION_SLOT,),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_mutation_cue(canonical):
            return MatchResult.deferred(0.25, "mutation_cue")

        wann_zuletzt = _WANN_ZULETZT.search(canonical) is not None
        has_latest = LATEST_CUE.search(canonical) is not None
        has_intake = _INTAKE.search(canonical) is not None

        med = match_medication(canonical, context.user_meds)
        if med is None:
            if wann_zuletzt and has_intake:
                return MatchResult(
                    confidence=self.weigh(0.5, canonical, 1.0),
                    slots={"med_name": "tabletten"},
                    reasons=("generic_intake_question",),
                )
            return MatchResult.no_match("no_medication")

        if wann_zuletzt:
            cue = 0.95
        elif has_latest and has_intake:
            cue = 0.85
        elif has_latest:
            cue = 0.7
        else:
            cue = 0.5

        asks_latest = has_explicit_operator(canonical, OperatorType.LATEST)
        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if asks_latest else 0.0),
            slots={"med_name": med.name},
            reasons=(f"medication:{med.name}",) + (("wann_zuletzt",) if wann_zuletzt else ()),
        )

    def create_plan(self, slots, context, confidence, now) -> QueryPlan:
        med_name = slots["med_name"]
        return QueryPlan(
            summary=f"Wann zuletzt {med_name} genommen?",
            confidence=confidence,
            query_type=QueryType.LAST_INTAKE_MED,
            params=QueryParams(med_name=med_name),
        )


# =============================================================================
# count_med_range
# =============================================================================

class CountMedRangeSkill(Skill):
    def __init__(self):
        super().__init__(
            id="count_med_range",
            name="Medikamententage zählen",
            category=SkillCategory.QUERY,
            examples=(
                "wie oft habe ich triptan genommen",
                "an wie vielen tagen triptan",
                "wie viele tage mit schmerzmittel",
                "anzahl triptan tage diesen monat",
            ),
            keywords=("wie oft", "wie viele", "tage", "zähle", "anzahl"),
            required_slots=(_MEDICATION_SLOT,),
            optional_slots=(_DAYS_SLOT,),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        med = match_medication(canonical, context.user_meds)
        if med is None:
            return MatchResult.no_match("no_medication")
        if has_mutation_cue(canonical):
            return MatchResult.deferred(0.25, "mutation_cue")

        has_count = COUNT_CUE.search(canonical) is not None
        has_day = _DAY.search(canonical) is not None

        if has_count:
            cue = 0.9
        elif has_day:
            cue = 0.7
        else:
            cue = 0.5

        asks_count = has_explicit_operator(canonical, OperatorType.COUNT)
        days = _range_days(canonical)
        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if asks_count else 0.0),
            slots={"med_name": med.name, "days": days},
            reasons=(f"medication:{med.name}", f"time_range:{days}d"),
        )

    def create_plan(self, slots, context, confidence, now) -> QueryPlan:
        med_name = slots["med_name"]
        days = slots.get("days") or DEFAULT_RANGE_DAYS
        return QueryPlan(
            summary=f"Zähle {med_name}-Tage ({days} Tage)",
            confidence=confidence,
            query_type=QueryType.COUNT_MED_RANGE,
            params=QueryParams(med_name=med_name, time_range=time_range_for(days, now)),
        )


# =============================================================================
# count_migraine_range
# =============================================================================

class CountMigraineRangeSkill(Skill):
    def __init__(self):
        super().__init__(
            id="count_migraine_range",
            name="Migränetage zählen",
            category=SkillCategory.QUERY,
            examples=(
                "wie viele migränetage hatte ich",
                "wie oft hatte ich kopfschmerzen",
                "zähle meine kopfschmerztage",
                "anzahl migränetage letzte 30 tage",
            ),
            keywords=("wie viele", "migräne", "kopfschmerz", "tage", "zähle"),
            optional_slots=(_DAYS_SLOT,),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        med = match_medication(canonical, context.user_meds)
        if med is not None and med.confidence > 0.7:
            return MatchResult.deferred(0.2, "medication_mentioned")
        if has_mutation_cue(canonical):
            return MatchResult.deferred(0.2, "mutation_cue")

        has_count = COUNT_CUE.search(canonical) is not None
        has_migraine = _MIGRAINE.search(canonical) is not None
        has_day = _DAY.search(canonical) is not None

        cue = 0.0
        if has_count and has_migraine:
            cue = 0.9
        elif has_migraine and has_day:
            cue = 0.75
        elif has_count and has_day:
            cue = 0.5

        asks_count = has_explicit_operator(canonical, OperatorType.COUNT)
        days = _range_days(canonical)
        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if asks_count else 0.0),
            slots={"days": days},
            reasons=(f"time_range:{days}d",),
        )

    def create_plan(self, slots, context, confidence, now) -> QueryPlan:
        days = slots.get("days") or DEFAULT_RANGE_DAYS
        return QueryPlan(
            summary=f"Zähle Migränetage ({days} Tage)",
            confidence=confidence,
            query_type=QueryType.COUNT_MIGRAINE_RANGE,
            params=QueryParams(time_range=time_range_for(days, now)),
        )


# =============================================================================
# avg_pain_range
# =============================================================================

class AvgPainRangeSkill(Skill):
    def __init__(self):
        super().__init__(
            id="avg_pain_range",
            name="Durchschnittlicher Schmerz",
            category=SkillCategory.QUERY,
            examples=(
                "wie stark waren meine schmerzen durchschnittlich",
                "durchschnittlicher schmerzlevel",
                "mittlere schmerzstärke",
                "durchschnitt schmerzstärke letzte woche",
            ),
            keywords=("durchschnitt", "schnitt", "mittel", "schmerz", "stärke"),
            optional_slots=(_DAYS_SLOT,),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_mutation_cue(canonical):
            return MatchResult.deferred(0.2, "mutation_cue")

        has_stats = _STATS.search(canonical) is not None
        has_pain = _PAIN.search(canonical) is not None

        cue = 0.0
        if has_stats and has_pain:
            cue = 0.85
        elif has_stats:
            cue = 0.5

        asks_stats = has_explicit_operator(canonical, OperatorType.STATS)
        days = _range_days(canonical)
        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if asks_stats else 0.0),
            slots={"days": days},
            reasons=(f"time_range:{days}d",),
        )

    def create_plan(self, slots, context, confidence, now) -> QueryPlan:
        days = slots.get("days") or DEFAULT_RANGE_DAYS
        return QueryPlan(
            summary=f"Durchschnittlicher Schmerz ({days} Tage)",
            confidence=confidence,
            query_type=QueryType.AVG_PAIN_RANGE,
            params=QueryParams(time_range=time_range_for(days, now)),
        )


# =============================================================================
# list_notes_range
# =============================================================================

class ListNotesRangeSkill(Skill):
    def __init__(self):
        super().__init__(
            id="list_notes_range",
            name="Notizen anzeigen",
            category=SkillCategory.QUERY,
            examples=(
                "zeig notizen der letzten woche",
                "notizen letzte 7 tage",
                "welche notizen habe ich diesen monat",
            ),
            keywords=("notiz", "notizen", "anmerkungen"),
            optional_slots=(_DAYS_SLOT,),
        )

    def match(self, raw_text, canonical, context, now) -> MatchResult:
        if has_delete_cue(canonical):
            return MatchResult.deferred(0.2, "delete_cue")
        if not _NOTES_NOUN.search(canonical):
            return MatchResult.no_match("no_notes_noun")

        days = extract_time_range(canonical)
        has_list_verb = (
            has_explicit_operator(canonical, OperatorType.OPEN)
            or has_explicit_operator(canonical, OperatorType.FIND)
        )

        if days:
            cue = 0.9
        elif has_list_verb:
            cue = 0.4
        else:
            cue = 0.0

        return MatchResult(
            confidence=self.weigh(cue, canonical, 1.0 if has_list_verb else 0.0),
            slots={"days": days},
            reasons=("notes_noun",) + ((f"time_range:{days}d",) if days else ()),
        )

    def create_plan(self, slots, context, confidence, now) -> OpenListPlan:
        days = slots.get("days")
        return OpenListPlan(
            summary=f"Notizen der letzten {days} Tage" if days else "Notizen anzeigen",
            confidence=confidence,
            list_type=ListType.NOTES,
            filter=EntryFilter(time_range=time_range_for(days, now)) if days else None,
        )


QUERY_SKILLS: tuple[Skill, ...] = (
    LastEntrySkill(),
    LastEntryWithMedSkill(),
    LastIntakeMedSkill(),
    CountMedRangeSkill(),
    CountMigraineRangeSkill(),
    AvgPainRangeSkill(),
    ListNotesRangeSkill(),
)


__all__ = [
    "AvgPainRangeSkill",
    "CountMedRangeSkill",
    "CountMigraineRangeSkill",
    "DEFAULT_RANGE_DAYS",
    "LastEntrySkill",
    "LastEntryWithMedSkill",
    "LastIntakeMedSkill",
    "ListNotesRangeSkill",
    "QUERY_SKILLS",
]
