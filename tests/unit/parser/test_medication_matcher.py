"""Tests for voiceos/parser/medication_matcher.py"""

import pytest

from voiceos.parser.medication_matcher import (
    MatchType,
    base_name,
    extract_medications,
    match_medication,
)


class TestUserMedications:
    """Lookups against the user's own medication list."""

    def test_exact_base_name(self, user_context):
        match = match_medication("sumatriptan genommen", user_context.user_meds)
        assert match.name == "Sumatriptan 50mg"
        assert match.match_type == MatchType.EXACT
        assert match.medication_id == "med-1"
        assert match.confidence == pytest.approx(0.95)

    def test_exact_full_name(self, user_context):
        match = match_medication("ibuprofen 400 genommen", user_context.user_meds)
        assert match.name == "Ibuprofen 400"
        assert match.match_type == MatchType.EXACT

    def test_fuzzy_recognition_error(self, user_context):
        match = match_medication("wann zuletzt sumatripan", user_context.user_meds)
        assert match.name == "Sumatriptan 50mg"
        assert match.match_type == MatchType.FUZZY
        assert match.confidence < 0.95

    def test_split_tokens(self, user_context):
        match = match_medication("suma triptan genommen", user_context.user_meds)
        assert match.name == "Sumatriptan 50mg"
        assert match.match_type == MatchType.SPLIT_TOKEN

    def test_no_match(self, user_context):
        assert match_medication("öffne tagebuch", user_context.user_meds) is None


class TestCategoriesAndPatterns:
    def test_category_word(self, user_context):
        match = match_medication("triptan genommen", user_context.user_meds)
        assert match.name == "triptan"
        assert match.match_type == MatchType.CATEGORY

    def test_known_drug_without_user_list(self):
        match = match_medication("ibuprofen genommen")
        assert match.name == "ibuprofen"
        assert match.match_type == MatchType.CATEGORY

    def test_drug_name_ending(self):
        match = match_medication("dexketoprofen genommen")
        assert match.name == "dexketoprofen"
        assert match.match_type == MatchType.PATTERN
        assert match.confidence == pytest.approx(0.75)


class TestExtractMedications:
    def test_all_user_meds_in_order(self, user_context):
        found = extract_medications("sumatriptan und ibuprofen", user_context.user_meds)
        assert found == ["Sumatriptan 50mg", "Ibuprofen 400"]

    def test_falls_back_to_category(self, user_context):
        assert extract_medications("triptan genommen", user_context.user_meds) == ["triptan"]

    def test_nothing(self, user_context):
        assert extract_medications("öffne tagebuch", user_context.user_meds) == []


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Ibuprofen 400 mg", "ibuprofen"),
        ("Sumatriptan 50mg", "sumatriptan"),
        ("Ajovy", "ajovy"),
    ],
)
def test_base_name(name, expected):
    assert base_name(name) == expected
