"""German word tables for the voice planner.

Operator words (what to do), object words (what to do it to), ordinals,
rating phrases, time ranges and medication categories. The tables are plain
data; matching rules live in ``voiceos.lexicon.canonicalizer``.
"""

from __future__ import annotations

import re
from enum import Enum


# =============================================================================
# Filler words and polite phrases
# =============================================================================

FILLER_WORDS = frozenset({
    # Polite padding
    "bitte", "mal", "kurz", "eben", "schnell", "gerne",
    # Hesitation
    "äh", "ähm", "hmm", "hm", "also", "halt", "ja", "ne", "naja",
    "eigentlich", "sozusagen", "quasi", "irgendwie",
    # Polite openers
    "kannst", "könntest", "würdest", "könnten", "würden",
    "du", "mir", "mich", "uns",
    # Articles
    "der", "die", "das", "den", "dem", "des",
    "ein", "eine", "einen", "einem", "einer",
    # Possessives
    "mein", "meine", "meinen", "meinem", "meiner",
})

# Filler tokens longer than this are kept ("bitte", "meine", ...)
FILLER_MAX_LENGTH = 3

POLITE_PREFIX = re.compile(
    r"^(?:(?:kannst|könntest|würdest) du(?: mir)?|ich möchte|ich will|ich hätte gerne?)\s+"
)


# =============================================================================
# Operators
# =============================================================================

class OperatorType(str, Enum):
    OPEN = "OPEN"
    FIND = "FIND"
    LATEST = "LATEST"
    COUNT = "COUNT"
    STATS = "STATS"
    CREATE = "CREATE"
    EDIT = "EDIT"
    DELETE = "DELETE"
    RATE = "RATE"
    HELP = "HELP"


# Checked in this order by detect_operator()
OPERATORS: dict[OperatorType, tuple[str, ...]] = {
    OperatorType.OPEN: (
        "öffne", "öffnen", "aufmachen", "zeig", "zeige", "anzeigen",
        "bring", "geh", "gehe", "navigiere", "wechsle", "wechsel",
        "starte", "start", "zu", "auf",
    ),
    OperatorType.FIND: (
        "zeig", "liste", "such", "suche", "finde", "filter", "filtere",
        "gib", "alle", "welche",
    ),
    OperatorType.LATEST: (
        "zuletzt", "letzte", "letzter", "letzten", "letztes",
        "neueste", "neuester", "neuesten",
        "vorhin", "kürzlich", "eben", "wann",
    ),
    OperatorType.COUNT: (
        "zähle", "zählen", "anzahl", "summe", "insgesamt",
        "wie", "viele", "oft",
    ),
    OperatorType.STATS: (
        "durchschnitt", "durchschnittlich", "schnitt", "mittel",
        "trend", "trends", "entwicklung", "verlauf",
        "verglichen", "vergleich", "gegenüber",
        "mehr", "weniger", "steigend", "fallend",
    ),
    OperatorType.CREATE: (
        "erstelle", "erstellen", "anlegen", "neu", "neue", "neuen", "neuer",
        "mach", "mache", "richte", "einrichten",
        "hinzufügen", "hinzu", "eintragen", "speicher", "speichere", "speichern",
        "merke", "merken", "notiere", "notieren",
    ),
    OperatorType.EDIT: (
        "bearbeite", "bearbeiten", "ändere", "ändern", "änderung",
        "korrigiere", "korrigieren", "anpassen", "aktualisiere", "aktualisieren",
        "setze", "setzen", "ersetze", "ersetzen",
        "ergänze", "ergänzen", "nachtragen",
    ),
    OperatorType.DELETE: (
        "lösche", "löschen", "entferne", "entfernen",
        "weg", "wegmachen", "verwerfen", "verwerfe",
        "raus", "rausnehmen",
    ),
    OperatorType.RATE: (
        "bewerte", "bewerten", "bewertung",
        "wirkung", "wirksam", "wirkt", "gewirkt",
        "geholfen", "hilft", "half",
        "effekt", "effektiv",
    ),
    OperatorType.HELP: (
        "hilfe", "help", "anleitung", "erklär", "erkläre", "erklären",
        "befehle", "kommandos", "funktionen",
        "was", "kann", "sagen",
        "wie", "geht",
    ),
}


# =============================================================================
# Objects
# =============================================================================

class ObjectType(str, Enum):
    ENTRIES = "ENTRIES"
    NOTES = "NOTES"
    REMINDERS = "REMINDERS"
    ANALYSIS = "ANALYSIS"
    REPORT = "REPORT"
    MEDPLAN = "MEDPLAN"
    MEDS = "MEDS"
    PROFILE = "PROFILE"
    SETTINGS = "SETTINGS"
    DOCTORS = "DOCTORS"


OBJECTS: dict[ObjectType, tuple[str, ...]] = {
    ObjectType.ENTRIES: (
        "eintrag", "einträge", "entry",
        "schmerzeintrag", "schmerzeinträge",
        "migräneeintrag", "migräneeinträge",
        "kopfschmerzeintrag", "kopfschmerzeinträge",
        "tagebuch", "diary",
        "aufzeichnung", "aufzeichnungen",
    ),
    ObjectType.NOTES: (
        "notiz", "notizen", "note", "notes",
        "kontext", "kontextnotiz", "kontextnotizen",
        "anmerkung", "anmerkungen",
        "kommentar", "kommentare", "hinweis", "hinweise",
    ),
    ObjectType.REMINDERS: (
        "erinnerung", "erinnerungen", "reminder",
        "termin", "termine", "appointment",
        "arzttermin", "arzttermine",
        "wecker", "alarm",
    ),
    ObjectType.ANALYSIS: (
        "auswertung", "auswertungen",
        "analyse", "analysen", "analysis",
        "statistik", "statistiken",
        "trends", "muster", "pattern",
        "übersicht",
    ),
    ObjectType.REPORT: (
        "bericht", "berichte", "report",
        "pdf", "export",
        "arztbericht", "arztberichte",
        "kopfschmerztagebuch",
    ),
    ObjectType.MEDPLAN: (
        "medikationsplan", "medikamentplan",
        "medplan", "therapieplan",
        "prophylaxeplan", "behandlungsplan",
    ),
    ObjectType.MEDS: (
        "medikament", "medikamente", "medication",
        "tablette", "tabletten", "pille", "pillen",
        "spritze", "spritzen", "injektion",
        "einnahme", "einnahmen",
        "dosis", "dosierung",
    ),
    ObjectType.PROFILE: (
        "profil", "profile",
        "persönliche", "daten", "stammdaten",
        "patientendaten",
    ),
    ObjectType.SETTINGS: (
        "einstellungen", "settings",
        "konfiguration", "optionen",
        "präferenzen",
    ),
    ObjectType.DOCTORS: (
        "arzt", "ärzte", "doktor", "doktoren",
        "arztdaten", "ärzteliste",
        "neurologe", "neurologen",
        "hausarzt", "hausärzte",
    ),
}


# =============================================================================
# Modifiers
# =============================================================================

ORDINALS: dict[str, int] = {
    "letzter": 1, "letzte": 1, "letzten": 1, "letztes": 1,
    "vorletzter": 2, "vorletzte": 2, "vorletzten": 2, "vorletztes": 2,
    "drittletzter": 3, "drittletzte": 3, "drittletzten": 3,
    "viertletzter": 4, "viertletzte": 4, "viertletzten": 4,
    "erster": 1, "erste": 1, "ersten": 1,
    "zweiter": 2, "zweite": 2, "zweiten": 2,
    "dritter": 3, "dritte": 3, "dritten": 3,
}

NUMBER_WORDS: dict[str, int] = {
    "null": 0, "eins": 1, "zwei": 2, "drei": 3, "vier": 4,
    "fünf": 5, "sechs": 6, "sieben": 7, "acht": 8, "neun": 9, "zehn": 10,
}

RATING_EXPRESSIONS: dict[str, int] = {
    # Very negative
    "gar nicht": 0, "überhaupt nicht": 0, "keine wirkung": 0,
    "nichts": 0, "wirkungslos": 0,
    "sehr schlecht": 0, "katastrophal": 0,
    "schlecht": 1, "kaum": 1, "minimal": 1,
    # Negative
    "wenig": 2, "schwach": 2,
    "etwas": 3, "ein bisschen": 3,
    "mäßig": 4, "mittelmäßig": 4,
    # Neutral
    "mittel": 5, "durchschnittlich": 5, "okay": 5, "ok": 5,
    # Positive
    "ganz gut": 6, "ordentlich": 6,
    "gut": 7, "wirksam": 7,
    "sehr gut": 8, "stark": 8,
    # Very positive
    "super": 9, "toll": 9, "prima": 9,
    "hervorragend": 10, "perfekt": 10, "bestens": 10,
    "ausgezeichnet": 10, "sehr wirksam": 10,
}

# Implicit pain levels, most severe first
PAIN_LEVEL_WORDS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"\b(?:sehr\s+stark\w*|extrem\w*|unerträglich\w*)"), 9),
    (re.compile(r"\b(?:stark\w*|heftig\w*|schlimm\w*)"), 7),
    (re.compile(r"\b(?:mittel(?:stark)?\w*|mäßig\w*)"), 5),
    (re.compile(r"\b(?:leicht\w*|gering\w*)"), 3),
)


# =============================================================================
# Time ranges (in days)
# =============================================================================

# Longer ranges are clamped; the diary never holds more
MAX_RANGE_DAYS = 3650

RANGE_UNITS: dict[str, int] = {
    "tag": 1, "tage": 1, "tagen": 1,
    "woche": 7, "wochen": 7,
    "monat": 30, "monate": 30, "monaten": 30,
    "jahr": 365, "jahre": 365, "jahren": 365,
}

NUMERIC_RANGE = re.compile(
    r"\b(\d+)\s*(tagen|tage|tag|wochen|woche|monaten|monate|monat|jahren|jahre|jahr)\b"
)

NAMED_RANGES: dict[str, int] = {
    "eine woche": 7, "diese woche": 7, "letzte woche": 7, "vergangene woche": 7,
    "zwei wochen": 14, "drei wochen": 21,
    "einen monat": 30, "ein monat": 30, "diesen monat": 30, "letzten monat": 30,
    "drei monate": 90, "quartal": 90,
    "sechs monate": 180, "halbes jahr": 180,
    "dieses jahr": 365, "letztes jahr": 365, "ein jahr": 365,
}

# Bare units left over after canonicalization removed the article
BARE_RANGE_UNITS: dict[str, int] = {"woche": 7, "monat": 30, "jahr": 365}


# =============================================================================
# Medication categories
# =============================================================================

MEDICATION_CATEGORIES: dict[str, tuple[str, ...]] = {
    "triptan": (
        "triptan", "triptane",
        "sumatriptan", "rizatriptan", "zolmitriptan",
        "eletriptan", "naratriptan", "almotriptan", "frovatriptan",
        "imigran", "maxalt", "ascotop", "relert", "relpax",
    ),
    "schmerzmittel": (
        "schmerzmittel", "schmerztablette", "schmerztabletten",
        "ibuprofen", "paracetamol", "aspirin", "acetylsalicylsäure",
        "diclofenac", "naproxen", "novalgin", "metamizol",
    ),
    "prophylaxe": (
        "prophylaxe", "vorbeugung",
        "ajovy", "fremanezumab", "aimovig", "erenumab",
        "emgality", "galcanezumab",
        "topiramat", "topamax",
        "betablocker", "metoprolol", "propranolol",
        "amitriptylin", "flunarizin",
    ),
    "antiemetikum": (
        "antiemetikum", "gegen übelkeit",
        "metoclopramid", "mcp", "domperidon", "vomex", "dimenhydrinat",
    ),
}

# Drug-name endings that identify an unknown medication
MEDICATION_SUFFIX = re.compile(r"\b([a-zäöü]+(?:triptan|profen|tamol|pirin|xen))\b")


__all__ = [
    "BARE_RANGE_UNITS",
    "MAX_RANGE_DAYS",
    "FILLER_MAX_LENGTH",
    "FILLER_WORDS",
    "MEDICATION_CATEGORIES",
    "MEDICATION_SUFFIX",
    "NAMED_RANGES",
    "NUMBER_WORDS",
    "NUMERIC_RANGE",
    "OBJECTS",
    "OPERATORS",
    "ORDINALS",
    "ObjectType",
    "OperatorType",
    "PAIN_LEVEL_WORDS",
    "POLITE_PREFIX",
    "RANGE_UNITS",
    "RATING_EXPRESSIONS",
]
