"""Tests for voiceos/models.py: plan invariants and serialization."""

import pytest

from voiceos.errors import InvalidPlanError
from voiceos.models import (
    ConfirmPlan,
    ConfirmType,
    DeletePayload,
    DeleteTarget,
    MutationPlan,
    MutationType,
    NavigatePlan,
    PainEntryPayload,
    RatingPayload,
    RiskLevel,
    SafetyDowngrade,
    TargetView,
    UserContext,
    UserMedication,
    Utterance,
    VoiceNotePayload,
    iter_plans,
    not_supported,
)


def pain_plan(**overrides):
    values = dict(
        summary="Schmerz Stärke 7",
        confidence=0.9,
        mutation_type=MutationType.QUICK_PAIN_ENTRY,
        payload=PainEntryPayload(pain_level=7),
        risk=RiskLevel.LOW,
    )
    values.update(overrides)
    return MutationPlan(**values)


class TestInvariants:
    def test_delete_must_be_high_risk(self):
        with pytest.raises(InvalidPlanError):
            MutationPlan(
                summary="Löschen",
                confidence=0.9,
                mutation_type=MutationType.DELETE_ENTRY,
                payload=DeletePayload(target_id=-1, target_type=DeleteTarget.ENTRY),
                risk=RiskLevel.MEDIUM,
            )

    def test_payload_must_match_mutation_type(self):
        with pytest.raises(InvalidPlanError):
            pain_plan(payload=VoiceNotePayload(text="Stress"))

    @pytest.mark.parametrize("level", [-1, 11])
    def test_pain_level_range(self, level):
        with pytest.raises(InvalidPlanError):
            PainEntryPayload(pain_level=level)

    @pytest.mark.parametrize("rating", [-1, 11])
    def test_rating_range(self, rating):
        with pytest.raises(InvalidPlanError):
            RatingPayload(entry_id=-1, med_name="Ajovy", rating=rating)

    def test_plans_are_frozen(self):
        plan = pain_plan()
        with pytest.raises(AttributeError):
            plan.confidence = 0.1


class TestUserContext:
    def test_plain_names_become_medications(self):
        context = UserContext(user_meds=["Ajovy", UserMedication("Ibuprofen 400", id="m2")])
        assert context.user_meds == (UserMedication("Ajovy"), UserMedication("Ibuprofen 400", id="m2"))
        assert context.med_names == ["Ajovy", "Ibuprofen 400"]

    def test_defaults(self):
        context = UserContext()
        assert context.timezone == "Europe/Berlin"
        assert context.language == "de-DE"


class TestSerialization:
    def test_mutation_to_dict(self):
        data = pain_plan().to_dict()
        assert data["kind"] == "mutation"
        assert data["mutation_type"] == "quick_pain_entry"
        assert data["risk"] == "low"
        assert data["payload"]["pain_level"] == 7
        assert "diagnostics" not in data

    def test_not_supported_to_dict(self):
        plan = not_supported("Nein.", downgrade=SafetyDowngrade.MISSING_DELETE_OPERATOR)
        data = plan.to_dict()
        assert data["summary"] == "Nein."
        assert data["downgrade"] == "missing_delete_operator"
        assert data["suggestions"] == []

    def test_confirm_nests_pending(self):
        pending = pain_plan()
        confirm = ConfirmPlan(
            summary="?",
            confidence=0.5,
            confirm_type=ConfirmType.AMBIGUOUS,
            question="Meinst du Schmerzstärke 7?",
            pending=pending,
        )
        data = confirm.to_dict()
        assert data["confirm_type"] == "ambiguous"
        assert data["pending"] == pending.to_dict()


class TestIterPlans:
    def test_walks_nested_plans(self):
        nav = NavigatePlan(summary="Hilfe", confidence=1.0, target_view=TargetView.HELP)
        pending = pain_plan()
        confirm = ConfirmPlan(
            summary="?",
            confidence=0.5,
            confirm_type=ConfirmType.AMBIGUOUS,
            question="?",
            pending=pending,
        )
        assert list(iter_plans(confirm)) == [confirm, pending]
        assert list(iter_plans(nav)) == [nav]

    def test_no_nested_delete_is_below_high_risk(self, planner, user_context, now):
        for text in ("notiz: stress", "starke migräne", "lösche die letzte notiz", "7"):
            plan = planner.plan(Utterance(text), user_context, now).plan
            for nested in iter_plans(plan):
                if isinstance(nested, MutationPlan) and nested.mutation_type.is_delete:
                    assert nested.risk == RiskLevel.HIGH
