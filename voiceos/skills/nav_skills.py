"""Navigation skills: open a screen of the app.

All navigation skills share one matcher. They score on their keywords and
example phrases and get a bonus when an explicit "open" word ("öffne",
"zeig", "gehe zu") comes with a matching keyword.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from voiceos.lexicon.canonicalizer import has_explicit_operator
from voiceos.lexicon.de import OperatorType
from voiceos.models import NavigatePlan, SkillCategory, TargetView, UserContext
from voiceos.skills.base import MatchResult, Skill, combine_scores


class NavSkill(Skill):
    """Opens one target view."""

    def __init__(
        self,
        *,
        id: str,
        name: str,
        target_view: TargetView,
        keywords: Iterable[str],
        examples: Iterable[str],
        anti_keywords: Iterable[str] = (),
        triggers: Iterable[OperatorType] = (OperatorType.OPEN,),
    ):
        super().__init__(
            id=id,
            name=name,
            category=SkillCategory.NAV,
            examples=examples,
            keywords=keywords,
            anti_keywords=anti_keywords,
        )
        self.target_view = target_view
        self.triggers = tuple(triggers)

    def match(
        self,
        raw_text: str,
        canonical: str,
        context: UserContext,
        now: datetime,
    ) -> MatchResult:
        reasons: list[str] = []

        has_trigger = any(has_explicit_operator(canonical, op) for op in self.triggers)
        kw = self.keyword_score(canonical)
        ex = self.example_score(canonical)
        bonus = 1.0 if has_trigger and kw > 0 else 0.0

        if has_trigger:
            reasons.append("open_operator")
        if kw > 0:
            reasons.append(f"keyword_score:{kw:.2f}")
        if ex > 0:
            reasons.append(f"example_score:{ex:.2f}")

        return MatchResult(
            confidence=combine_scores(kw, ex, bonus),
            reasons=tuple(reasons),
        )

    def create_plan(
        self,
        slots: dict[str, Any],
        context: UserContext,
        confidence: float,
        now: datetime,
    ) -> NavigatePlan:
        return NavigatePlan(
            summary=f"{self.name} öffnen",
            confidence=confidence,
            target_view=self.target_view,
        )


# =============================================================================
# Navigation catalogue
# =============================================================================

NAV_ANALYSIS = NavSkill(
    id="nav_analysis",
    name="Auswertung",
    target_view=TargetView.ANALYSIS,
    keywords=("auswertung", "analyse", "statistik", "trends", "muster", "übersicht"),
    examples=(
        "öffne auswertung",
        "zeige mir die analyse",
        "zeig statistik",
        "gehe zu statistiken",
        "öffne die übersicht",
        "auswertung anzeigen",
    ),
    anti_keywords=("bericht", "pdf", "export"),
)

NAV_DIARY = NavSkill(
    id="nav_diary",
    name="Tagebuch",
    target_view=TargetView.DIARY,
    keywords=("tagebuch", "einträge", "diary", "aufzeichnungen", "verlauf"),
    examples=(
        "öffne tagebuch",
        "zeige einträge",
        "zeig tagebuch",
        "gehe zum tagebuch",
        "meine einträge anzeigen",
    ),
    anti_keywords=("kopfschmerztagebuch",),
)

NAV_MEDICATIONS = NavSkill(
    id="nav_medications",
    name="Medikamente",
    target_view=TargetView.MEDICATIONS,
    keywords=("medikamente", "medikamentenliste", "tabletten", "medikation"),
    examples=(
        "öffne medikamente",
        "zeige meine medikamente",
        "zeig medikamente",
        "medikamentenliste anzeigen",
        "gehe zu medikamenten",
    ),
)

NAV_REMINDERS = NavSkill(
    id="nav_reminders",
    name="Erinnerungen",
    target_view=TargetView.REMINDERS,
    keywords=("erinnerungen", "reminder", "termine", "wecker"),
    examples=(
        "öffne erinnerungen",
        "zeige meine termine",
        "zeig erinnerungen",
        "erinnerungen anzeigen",
        "gehe zu reminder",
    ),
)

NAV_SETTINGS = NavSkill(
    id="nav_settings",
    name="Einstellungen",
    target_view=TargetView.SETTINGS,
    keywords=("einstellungen", "settings", "konfiguration", "optionen"),
    examples=(
        "öffne einstellungen",
        "zeig einstellungen",
        "gehe zu settings",
        "einstellungen anzeigen",
    ),
)

NAV_DOCTORS = NavSkill(
    id="nav_doctors",
    name="Ärzte",
    target_view=TargetView.DOCTORS,
    keywords=("ärzte", "arzt", "arztdaten", "ärzteliste", "neurologe", "hausarzt"),
    examples=(
        "öffne arztdaten",
        "zeige meine ärzte",
        "ärzteliste anzeigen",
        "gehe zu arzt",
    ),
    anti_keywords=("bericht", "arztbericht"),
)

NAV_PROFILE = NavSkill(
    id="nav_profile",
    name="Profil",
    target_view=TargetView.PROFILE,
    keywords=("profil", "persönliche daten", "stammdaten", "patientendaten"),
    examples=(
        "öffne profil",
        "meine daten anzeigen",
        "zeig profil",
        "profil bearbeiten",
    ),
)

NAV_VOICE_NOTES = NavSkill(
    id="nav_voice_notes",
    name="Sprachnotizen",
    target_view=TargetView.VOICE_NOTES,
    keywords=("sprachnotizen", "notizen", "kontextnotizen", "anmerkungen"),
    examples=(
        "öffne notizen",
        "zeige notizen",
        "zeige sprachnotizen",
        "meine notizen anzeigen",
        "kontextnotizen öffnen",
    ),
)

NAV_REPORT = NavSkill(
    id="nav_report",
    name="Bericht",
    target_view=TargetView.DIARY_REPORT,
    keywords=("bericht", "arztbericht", "pdf", "export", "report", "kopfschmerztagebuch"),
    examples=(
        "erstelle bericht",
        "bericht erstellen",
        "arztbericht generieren",
        "pdf erstellen",
        "bericht für arzt",
        "export starten",
    ),
    triggers=(OperatorType.OPEN, OperatorType.CREATE),
)

NAV_MEDICATION_EFFECTS = NavSkill(
    id="nav_medication_effects",
    name="Medikamentenwirkung",
    target_view=TargetView.MEDICATION_EFFECTS,
    keywords=("wirkung", "medikamentenwirkung", "effekt", "bewertungen"),
    examples=(
        "öffne wirkung",
        "medikamentenwirkung anzeigen",
        "zeige bewertungen",
        "effekte anzeigen",
    ),
)

NAV_SKILLS: tuple[NavSkill, ...] = (
    NAV_ANALYSIS,
    NAV_DIARY,
    NAV_MEDICATIONS,
    NAV_REMINDERS,
    NAV_SETTINGS,
    NAV_DOCTORS,
    NAV_PROFILE,
    NAV_VOICE_NOTES,
    NAV_REPORT,
    NAV_MEDICATION_EFFECTS,
)


__all__ = [
    "NAV_SKILLS",
    "NavSkill",
]
