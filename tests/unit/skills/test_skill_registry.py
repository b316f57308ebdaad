"""Tests for voiceos/skills/registry.py and the Skill base class."""

import pytest

from tests.conftest import ExplodingSkill, FixedSkill
from voiceos.errors import SkillRegistrationError, SlotConfigurationError, UnknownSkillError
from voiceos.models import SkillCategory, SlotSuggestion, SlotType, UserContext
from voiceos.skills import ALL_SKILLS, build_default_registry
from voiceos.skills.base import (
    KEYWORD_SATURATION,
    RISK_BY_CATEGORY,
    MatchResult,
    Skill,
    SlotDefinition,
    combine_scores,
    example_score,
    keyword_score,
    suggestions_for,
)
from voiceos.skills.registry import SkillRegistry, SkillRegistryBuilder


class TestBuilder:
    def test_builds_in_registration_order(self):
        registry = (
            SkillRegistryBuilder()
            .register(FixedSkill("a", 0.5))
            .register(FixedSkill("b", 0.5))
            .build()
        )
        assert registry.ids == ("a", "b")
        assert len(registry) == 2

    def test_duplicate_id_rejected(self):
        builder = SkillRegistryBuilder().register(FixedSkill("a", 0.5))
        with pytest.raises(SkillRegistrationError):
            builder.register(FixedSkill("a", 0.9))

    def test_duplicate_id_rejected_by_registry(self):
        with pytest.raises(SkillRegistrationError):
            SkillRegistry([FixedSkill("a", 0.5), FixedSkill("a", 0.6)])

    def test_empty_id_rejected(self):
        with pytest.raises(SkillRegistrationError):
            SkillRegistry([FixedSkill("", 0.5)])

    def test_default_registry_has_every_skill(self):
        registry = build_default_registry()
        assert len(registry) == len(ALL_SKILLS)
        for skill_id in ("nav_diary", "last_intake_med", "create_reminder", "delete_entry", "help"):
            assert skill_id in registry


class TestLookup:
    def test_get(self):
        registry = SkillRegistry([FixedSkill("a", 0.5)])
        assert registry.get("a").id == "a"

    def test_unknown_skill(self):
        registry = SkillRegistry([FixedSkill("a", 0.5)])
        with pytest.raises(UnknownSkillError) as exc:
            registry.get("missing")
        assert exc.value.skill_id == "missing"

    def test_by_category(self, registry):
        deletes = registry.by_category(SkillCategory.DELETE)
        assert {s.id for s in deletes} == {"delete_entry", "delete_voice_note"}

    def test_with_skill_returns_new_registry(self):
        original = SkillRegistry([FixedSkill("a", 0.5)])
        updated = original.with_skill(FixedSkill("b", 0.5))
        assert original.ids == ("a",)
        assert updated.ids == ("a", "b")

    def test_with_skill_replaces_same_id(self):
        original = SkillRegistry([FixedSkill("a", 0.5), FixedSkill("b", 0.5)])
        replacement = FixedSkill("a", 0.9)
        updated = original.with_skill(replacement)
        assert updated.ids == ("a", "b")
        assert updated.get("a") is replacement


class TestFindMatches:
    def test_sorted_best_first(self, empty_context, now):
        registry = SkillRegistry([FixedSkill("low", 0.4), FixedSkill("high", 0.9)])
        matches = registry.find_matches("x", "x", empty_context, now)
        assert [m.skill.id for m in matches] == ["high", "low"]

    def test_ties_keep_registration_order(self, empty_context, now):
        registry = SkillRegistry([FixedSkill("first", 0.6), FixedSkill("second", 0.6)])
        matches = registry.find_matches("x", "x", empty_context, now)
        assert [m.skill.id for m in matches] == ["first", "second"]

    @pytest.mark.parametrize("confidence", [0.0, 0.1, 0.2])
    def test_floor_drops_weak_candidates(self, confidence, empty_context, now):
        registry = SkillRegistry([FixedSkill("weak", confidence)])
        assert registry.find_matches("x", "x", empty_context, now) == []

    def test_confidence_is_clamped(self, empty_context, now):
        registry = SkillRegistry([FixedSkill("over", 1.7)])
        (match,) = registry.find_matches("x", "x", empty_context, now)
        assert match.confidence == 1.0

    def test_faulty_skill_is_skipped(self, empty_context, now):
        registry = SkillRegistry([ExplodingSkill(), FixedSkill("ok", 0.8)])
        matches = registry.find_matches("x", "x", empty_context, now)
        assert [m.skill.id for m in matches] == ["ok"]

    def test_explain_matches(self, registry, user_context, now):
        text = registry.explain_matches(
            "wie oft triptan genommen", "wie oft triptan genommen", user_context, now
        )
        assert "count_med_range" in text
        assert text.startswith("Transcript: wie oft triptan genommen")


class TestScoringHelpers:
    def test_keyword_score_saturates(self):
        assert keyword_score("tagebuch einträge", ["tagebuch", "einträge"]) == 1.0
        assert keyword_score("tagebuch", ["tagebuch", "einträge"]) == 0.5

    def test_anti_keyword_penalty(self):
        score = keyword_score("bericht tagebuch", ["tagebuch"], anti_keywords=["bericht"])
        assert score == pytest.approx(0.2)

    def test_keyword_score_never_negative(self):
        assert keyword_score("bericht pdf", ["tagebuch"], ["bericht", "pdf"]) == 0.0

    def test_example_score_best_overlap(self):
        assert example_score("öffne tagebuch", ["öffne tagebuch", "zeig tagebuch"]) == 1.0
        assert example_score("tagebuch", ["öffne tagebuch"]) == 0.5

    def test_combine_scores_weights(self):
        assert combine_scores(0.5, 1.0, 1.0) == pytest.approx(0.75)
        assert combine_scores(1.0, 1.0, 1.0) == 1.0

    def test_keyword_score_counts_hits_not_share(self):
        keywords = ["tagebuch", "eintrag", "einträge", "diary", "journal", "kalender"]
        assert KEYWORD_SATURATION == 2
        assert keyword_score("tagebuch", keywords) == 0.5
        assert keyword_score("tagebuch journal kalender", keywords) == 1.0

    def test_combine_scores_hits_tier_boundary_exactly(self):
        assert combine_scores(0.8, 2 / 3, 1.0) == 0.8

    def test_weigh_without_cue_is_no_match(self):
        skill = FixedSkill("s", 0.5)
        assert skill.weigh(0.0, "öffne tagebuch", 1.0) == 0.0
        assert skill.weigh(0.5, "öffne tagebuch", 1.0) == pytest.approx(0.45)


class TestSkillBase:
    def test_duplicate_slot_names_rejected(self):
        class Broken(FixedSkill):
            def __init__(self):
                Skill.__init__(
                    self,
                    id="broken",
                    name="Broken",
                    category=SkillCategory.ACTION,
                    required_slots=(SlotDefinition("text", SlotType.STRING),),
                    optional_slots=(SlotDefinition("text", SlotType.STRING, required=False),),
                )

        with pytest.raises(SlotConfigurationError):
            Broken()

    @pytest.mark.parametrize("category,risk", list(RISK_BY_CATEGORY.items()))
    def test_risk_follows_category(self, category, risk):
        assert FixedSkill("s", 0.5, category=category).risk == risk

    def test_prompt_renders_filled_slots(self):
        slot = SlotDefinition("rating", SlotType.RATING, prompt="Wie gut hat {med_name} gewirkt?")
        assert slot.render_prompt({"med_name": "Ibuprofen 400"}) == "Wie gut hat Ibuprofen 400 gewirkt?"
        assert slot.render_prompt({}) == "Wie gut hat das Medikament gewirkt?"

    def test_match_result_helpers(self):
        assert MatchResult.no_match("x").confidence == 0.0
        deferred = MatchResult.deferred(0.25, "mutation_cue")
        assert deferred.confidence == 0.25
        assert deferred.reasons == ("mutation_cue",)


class TestSuggestions:
    def test_static_suggestions_win(self, user_context, now):
        static = (SlotSuggestion("A", "a"), SlotSuggestion("B", "b"))
        slot = SlotDefinition("x", SlotType.STRING, suggestions=static)
        assert suggestions_for(slot, user_context, now) == static

    def test_medication_suggestions_from_user_list(self, user_context, now):
        slot = SlotDefinition("med_name", SlotType.MEDICATION)
        values = [s.value for s in suggestions_for(slot, user_context, now)]
        assert values == ["Sumatriptan 50mg", "Ibuprofen 400"]

    def test_medication_suggestions_padded_to_two(self, now):
        slot = SlotDefinition("med_name", SlotType.MEDICATION)
        context = UserContext(user_meds=("Ajovy",))
        values = [s.value for s in suggestions_for(slot, context, now)]
        assert values == ["Ajovy", "triptan"]

    def test_medication_suggestions_capped_at_four(self, now):
        slot = SlotDefinition("med_name", SlotType.MEDICATION)
        context = UserContext(user_meds=("A", "B", "C", "D", "E"))
        assert len(suggestions_for(slot, context, now)) == 4

    def test_date_time_suggestions(self, user_context, now):
        slot = SlotDefinition("date_time", SlotType.DATE_TIME)
        suggestions = suggestions_for(slot, user_context, now)
        assert [s.label for s in suggestions] == ["In 1 Stunde", "In 2 Stunden", "Morgen früh (8 Uhr)"]
        assert suggestions[2].value == "2025-03-11T08:00:00+01:00"
