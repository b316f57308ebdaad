"""Tests for voiceos/planner/safety_policy.py"""

import pytest

from voiceos.config_models import ThresholdsConfig
from voiceos.models import (
    ConfirmPlan,
    ConfirmType,
    DeletePayload,
    DeleteTarget,
    EditEntryPayload,
    InputSource,
    MutationPlan,
    MutationType,
    NavigatePlan,
    NotSupportedPlan,
    RatingPayload,
    RiskLevel,
    SafetyDowngrade,
    TargetView,
    Utterance,
    VoiceNotePayload,
)
from voiceos.planner.safety_policy import (
    DELETE_HINT,
    DELETE_QUESTION,
    EDIT_HINT,
    RATE_HINT,
    ExecutionAction,
    apply_safety_policy,
    decide_execution,
    get_plan_risk,
    should_auto_execute,
    should_confirm,
)


def delete_plan(confidence=0.9):
    return MutationPlan(
        summary="Letzten Eintrag löschen",
        confidence=confidence,
        mutation_type=MutationType.DELETE_ENTRY,
        payload=DeletePayload(target_id=-1, target_type=DeleteTarget.ENTRY),
        risk=RiskLevel.HIGH,
    )


def edit_plan(confidence=0.9):
    return MutationPlan(
        summary="Eintrag auf Stärke 5 ändern",
        confidence=confidence,
        mutation_type=MutationType.EDIT_ENTRY,
        payload=EditEntryPayload(entry_id=-1, pain_level=5),
        risk=RiskLevel.MEDIUM,
    )


def rate_plan(confidence=0.9):
    return MutationPlan(
        summary="Sumatriptan bewerten",
        confidence=confidence,
        mutation_type=MutationType.RATE_INTAKE,
        payload=RatingPayload(entry_id=-1, med_name="Sumatriptan 50mg", rating=8),
        risk=RiskLevel.MEDIUM,
    )


def note_plan(confidence=0.95):
    return MutationPlan(
        summary="Notiz",
        confidence=confidence,
        mutation_type=MutationType.SAVE_VOICE_NOTE,
        payload=VoiceNotePayload(text="Stress", occurred_at="2025-03-10T09:00:00+01:00"),
        risk=RiskLevel.LOW,
    )


def nav_plan(confidence=0.9):
    return NavigatePlan(summary="Tagebuch öffnen", confidence=confidence, target_view=TargetView.DIARY)


class TestDeleteRule:
    @pytest.mark.parametrize("raw", ["lösche den letzten eintrag", "Entferne die Notiz", "LÖSCHEN"])
    def test_explicit_delete_is_wrapped_in_danger_confirm(self, raw):
        plan = delete_plan()
        outcome = apply_safety_policy(plan, raw)
        assert isinstance(outcome.plan, ConfirmPlan)
        assert outcome.plan.confirm_type == ConfirmType.DANGER
        assert outcome.plan.question == DELETE_QUESTION
        assert outcome.plan.pending is plan
        assert outcome.downgrade is None

    @pytest.mark.parametrize("raw", ["streiche den letzten eintrag", "mach das rückgängig", "tilge das"])
    def test_delete_without_operator_is_refused(self, raw):
        outcome = apply_safety_policy(delete_plan(), raw)
        assert isinstance(outcome.plan, NotSupportedPlan)
        assert outcome.plan.reason == DELETE_HINT
        assert outcome.plan.downgrade == SafetyDowngrade.MISSING_DELETE_OPERATOR
        assert outcome.downgrade == SafetyDowngrade.MISSING_DELETE_OPERATOR

    def test_confidence_is_kept_on_refusal(self):
        outcome = apply_safety_policy(delete_plan(0.8), "streiche das")
        assert outcome.plan.confidence == pytest.approx(0.8)


class TestEditAndRateRules:
    def test_edit_with_operator_passes(self):
        plan = edit_plan()
        assert apply_safety_policy(plan, "ändere den eintrag").plan is plan

    def test_edit_without_operator(self):
        outcome = apply_safety_policy(edit_plan(), "das war doch stärke 5")
        assert outcome.plan.reason == EDIT_HINT
        assert outcome.downgrade == SafetyDowngrade.MISSING_EDIT_OPERATOR

    def test_rate_with_operator_passes(self):
        plan = rate_plan()
        assert apply_safety_policy(plan, "bewerte sumatriptan mit 8").plan is plan

    def test_rate_without_operator(self):
        outcome = apply_safety_policy(rate_plan(), "sumatriptan super")
        assert outcome.plan.reason == RATE_HINT
        assert outcome.downgrade == SafetyDowngrade.MISSING_RATE_OPERATOR

    @pytest.mark.parametrize("plan", [note_plan(), nav_plan()])
    def test_other_plans_pass_unchanged(self, plan):
        outcome = apply_safety_policy(plan, "irgendwas")
        assert outcome.plan is plan
        assert outcome.downgrade is None


class TestPlanRisk:
    def test_mutation_risk(self):
        assert get_plan_risk(edit_plan()) == RiskLevel.MEDIUM

    def test_danger_confirm_is_high(self):
        confirm = apply_safety_policy(delete_plan(), "lösche").plan
        assert get_plan_risk(confirm) == RiskLevel.HIGH

    def test_ambiguous_confirm_uses_pending_risk(self):
        confirm = ConfirmPlan(
            summary="?",
            confidence=0.5,
            confirm_type=ConfirmType.AMBIGUOUS,
            question="Meinst du:",
            pending=rate_plan(),
        )
        assert get_plan_risk(confirm) == RiskLevel.MEDIUM

    def test_navigation_is_low(self):
        assert get_plan_risk(nav_plan()) == RiskLevel.LOW


class TestDecideExecution:
    @pytest.mark.parametrize(
        "plan,action,reason",
        [
            (nav_plan(0.9), ExecutionAction.AUTO_EXECUTE, "low_risk_confident"),
            (nav_plan(0.7), ExecutionAction.CONFIRM, "low_risk_below_auto"),
            (rate_plan(0.9), ExecutionAction.AUTO_EXECUTE, "medium_risk_confident"),
            (rate_plan(0.85), ExecutionAction.CONFIRM, "medium_risk_below_auto"),
            (delete_plan(1.0), ExecutionAction.CONFIRM, "high_risk"),
        ],
    )
    def test_by_risk_and_confidence(self, plan, action, reason):
        decision = decide_execution(plan, Utterance("x"))
        assert decision.action == action
        assert decision.reason == reason

    def test_questions_are_presented(self):
        confirm = apply_safety_policy(delete_plan(), "lösche").plan
        refused = apply_safety_policy(delete_plan(), "streiche").plan
        for plan in (confirm, refused):
            assert decide_execution(plan, Utterance("x")).action == ExecutionAction.PRESENT

    def test_dictation_fallback_mutation_is_confirmed(self):
        utterance = Utterance("notiz stress", source=InputSource.DICTATION_FALLBACK)
        decision = decide_execution(note_plan(), utterance)
        assert decision.action == ExecutionAction.CONFIRM
        assert decision.reason == "dictation_fallback"

    def test_dictation_fallback_navigation_may_run(self):
        utterance = Utterance("öffne tagebuch", source=InputSource.DICTATION_FALLBACK)
        assert decide_execution(nav_plan(0.95), utterance).action == ExecutionAction.AUTO_EXECUTE

    def test_low_stt_confidence_mutation_is_confirmed(self):
        decision = decide_execution(note_plan(), Utterance("notiz stress", stt_confidence=0.5))
        assert decision.reason == "low_stt_confidence"

    def test_typed_input_ignores_stt_confidence(self):
        utterance = Utterance("notiz stress", stt_confidence=0.1, source=InputSource.TYPED)
        assert decide_execution(note_plan(), utterance).action == ExecutionAction.AUTO_EXECUTE

    def test_custom_thresholds(self):
        thresholds = ThresholdsConfig(auto_low=0.95, confirm_low=0.5)
        assert decide_execution(nav_plan(0.9), Utterance("x"), thresholds).action == ExecutionAction.CONFIRM

    def test_decision_to_dict(self):
        decision = decide_execution(nav_plan(0.9), Utterance("x"))
        assert decision.to_dict() == {"action": "auto_execute", "reason": "low_risk_confident"}


class TestShortcuts:
    def test_should_auto_execute(self):
        assert should_auto_execute(note_plan())
        assert not should_auto_execute(note_plan(), source=InputSource.DICTATION_FALLBACK)

    def test_should_confirm(self):
        assert should_confirm(delete_plan())
        assert should_confirm(note_plan(), stt_confidence=0.3)
        assert not should_confirm(nav_plan(0.9))
