"""Tests for voiceos/lexicon/canonicalizer.py

Verifies normalization of spoken German and the primitive extractors for
operators, objects, ordinals, ratings, pain levels, ranges and numbers.
"""

import pytest

from voiceos.lexicon import (
    ObjectType,
    OperatorType,
    canonicalize,
    contains_keyword,
    detect_object,
    detect_operator,
    extract_numbers,
    extract_ordinal,
    extract_pain_level,
    extract_rating,
    extract_time_range,
    find_medication_category,
    has_explicit_operator,
)
from voiceos.lexicon.de import MAX_RANGE_DAYS


class TestCanonicalize:
    """Test utterance normalization."""

    def test_lowercases_and_strips_punctuation(self):
        assert canonicalize("Öffne das Tagebuch!") == "öffne tagebuch"

    def test_collapses_whitespace(self):
        assert canonicalize("  zeig   letzten \t eintrag ") == "zeig letzten eintrag"

    def test_strips_polite_prefix(self):
        assert canonicalize("Kannst du mir den letzten Eintrag zeigen?") == "letzten eintrag zeigen"

    def test_keeps_clock_times(self):
        assert canonicalize("Erinnere mich um 14:30.") == "erinnere mich um 14:30"

    def test_filler_only_is_not_erased(self):
        assert canonicalize("äh") == "äh"

    def test_empty(self):
        assert canonicalize("") == ""
        assert canonicalize("   ") == ""

    @pytest.mark.parametrize(
        "text",
        [
            "Öffne das Tagebuch!",
            "Kannst du mir den letzten Eintrag zeigen?",
            "äh ja",
            "Wie oft habe ich Triptan genommen?",
            "Notiz: Stress bei der Arbeit",
        ],
    )
    def test_idempotent(self, text):
        once = canonicalize(text)
        assert canonicalize(once) == once


class TestKeywords:
    """Test keyword containment and operator / object detection."""

    def test_short_keyword_needs_whole_word(self):
        assert not contains_keyword("wann zuletzt genommen", "zu")
        assert contains_keyword("geh zu tagebuch", "zu")

    def test_long_keyword_matches_inside_compounds(self):
        assert contains_keyword("schmerzeintrag öffnen", "eintrag")

    def test_case_insensitive(self):
        assert contains_keyword("Tagebuch", "tagebuch")

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("öffne tagebuch", OperatorType.OPEN),
            ("entferne notiz", OperatorType.DELETE),
            ("wie oft triptan genommen", OperatorType.COUNT),
            ("bewerte sumatriptan", OperatorType.RATE),
        ],
    )
    def test_detect_operator(self, text, expected):
        assert detect_operator(text) == expected

    def test_detect_operator_none(self):
        assert detect_operator("triptan") is None

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("öffne tagebuch", ObjectType.ENTRIES),
            ("zeig einstellungen", ObjectType.SETTINGS),
            ("zeige ärzte", ObjectType.DOCTORS),
            ("lösche notiz", ObjectType.NOTES),
        ],
    )
    def test_detect_object(self, text, expected):
        assert detect_object(text) == expected

    def test_has_explicit_operator(self):
        assert has_explicit_operator("lösche letzten eintrag", OperatorType.DELETE)
        assert not has_explicit_operator("streiche letzten eintrag", OperatorType.DELETE)


class TestOrdinals:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("letzten eintrag", 1),
            ("vorletzten eintrag", 2),
            ("drittletzte notiz", 3),
            ("eintrag #4", 4),
            ("öffne tagebuch", None),
        ],
    )
    def test_extract_ordinal(self, text, expected):
        assert extract_ordinal(text) == expected


class TestRatings:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("bewerte mit 8", 8),
            ("bewertung: 3", 3),
            ("hat nicht geholfen", 1),
            ("sehr gut", 8),
            ("gut", 7),
            ("super", 9),
            ("hat geholfen", 7),
            ("öffne tagebuch", None),
        ],
    )
    def test_extract_rating(self, text, expected):
        assert extract_rating(text) == expected

    def test_out_of_scale_number_is_ignored(self):
        assert extract_rating("bewerte mit 42") is None


class TestPainLevels:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("stärke 7", 7),
            ("schmerzstärke: 4", 4),
            ("sehr starke schmerzen", 9),
            ("starke migräne", 7),
            ("leichte kopfschmerzen", 3),
            ("stärke 15", 10),
            ("öffne tagebuch", None),
        ],
    )
    def test_extract_pain_level(self, text, expected):
        assert extract_pain_level(text) == expected


class TestTimeRanges:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("letzte 14 tage", 14),
            ("letzten 2 wochen", 14),
            ("3 monate", 90),
            ("letzte woche", 7),
            ("letzten monat", 30),
            ("quartal", 90),
            ("wie oft triptan", None),
        ],
    )
    def test_extract_time_range(self, text, expected):
        assert extract_time_range(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["letzten 10000 jahren", "letzten 11 jahre", "in den letzten " + "9" * 40 + " tagen"],
    )
    def test_long_ranges_are_clamped(self, text):
        assert extract_time_range(text) == MAX_RANGE_DAYS

    def test_ten_years_is_kept(self):
        assert extract_time_range("letzte 520 wochen") == 3640


class TestNumbers:
    def test_digits_and_words_in_order(self):
        assert extract_numbers("stärke 7 und zwei") == [7, 2]

    def test_ignores_large_numbers(self):
        assert extract_numbers("123") == []

    def test_deduplicates(self):
        assert extract_numbers("7 oder sieben") == [7]

    def test_long_digit_runs_are_ignored(self):
        assert extract_numbers("9" * 5000) == []
        assert extract_ordinal("#" + "9" * 5000) is None


class TestMedicationCategory:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Sumatriptan 50mg", "triptan"),
            ("Ibuprofen 400", "schmerzmittel"),
            ("Ajovy", "prophylaxe"),
            ("MCP Tropfen", "antiemetikum"),
            ("Vitamin D", None),
            ("", None),
        ],
    )
    def test_find_medication_category(self, name, expected):
        assert find_medication_category(name) == expected
