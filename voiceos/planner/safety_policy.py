"""Safety policy for voice plans.

Rules:
    - delete: the raw utterance must contain a delete word ("lösche",
      "entferne", ...). Without one the plan becomes a NotSupported that
      names the word to use. With one it is always wrapped in a danger
      confirmation.
    - edit, rate: the raw utterance must contain an edit / rate word.
    - everything else passes through unchanged.

Also decides, for the caller, whether a plan may run right away, needs a
confirmation, or is itself a question to present. Mutations from the
dictation fallback or with low speech-recognition confidence never run
without confirmation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from voiceos.config_models import ThresholdsConfig
from voiceos.lexicon.canonicalizer import has_explicit_operator
from voiceos.lexicon.de import OperatorType
from voiceos.logging_config import get_logger
from voiceos.models import (
    ConfirmPlan,
    ConfirmType,
    InputSource,
    MutationPlan,
    MutationType,
    NotSupportedPlan,
    Plan,
    RiskLevel,
    SafetyDowngrade,
    SlotFillingPlan,
    Utterance,
    not_supported,
)

logger = get_logger(__name__)

DELETE_QUESTION = "Wirklich löschen?"
DELETE_HINT = 'Zum Löschen sage bitte explizit "lösche" oder "entferne".'
EDIT_HINT = 'Zum Ändern sage bitte explizit "ändere" oder "korrigiere".'
RATE_HINT = 'Zum Bewerten sage bitte explizit "bewerte".'

# mutation type → (required operator, downgrade, hint)
_GUARDED: dict[MutationType, tuple[OperatorType, SafetyDowngrade, str]] = {
    MutationType.EDIT_ENTRY: (OperatorType.EDIT, SafetyDowngrade.MISSING_EDIT_OPERATOR, EDIT_HINT),
    MutationType.RATE_INTAKE: (OperatorType.RATE, SafetyDowngrade.MISSING_RATE_OPERATOR, RATE_HINT),
}


@dataclass(frozen=True)
class SafetyOutcome:
    plan: Plan
    downgrade: SafetyDowngrade | None = None


def _downgrade(plan: MutationPlan, downgrade: SafetyDowngrade, hint: str) -> SafetyOutcome:
    logger.info(
        "safety_downgrade",
        mutation_type=plan.mutation_type.value,
        downgrade=downgrade.value,
    )
    return SafetyOutcome(
        plan=not_supported(hint, confidence=plan.confidence, downgrade=downgrade),
        downgrade=downgrade,
    )


def apply_safety_policy(plan: Plan, raw_text: str) -> SafetyOutcome:
    """Check a freshly built plan against the explicit-operator rules."""
    if not isinstance(plan, MutationPlan):
        return SafetyOutcome(plan)

    if plan.mutation_type.is_delete:
        if not has_explicit_operator(raw_text, OperatorType.DELETE):
            return _downgrade(plan, SafetyDowngrade.MISSING_DELETE_OPERATOR, DELETE_HINT)
        return SafetyOutcome(
            ConfirmPlan(
                summary=plan.summary,
                confidence=plan.confidence,
                confirm_type=ConfirmType.DANGER,
                question=DELETE_QUESTION,
                pending=plan,
            )
        )

    guarded = _GUARDED.get(plan.mutation_type)
    if guarded:
        operator, downgrade, hint = guarded
        if not has_explicit_operator(raw_text, operator):
            return _downgrade(plan, downgrade, hint)

    return SafetyOutcome(plan)


# =============================================================================
# Execution decisions
# =============================================================================

class ExecutionAction(str, Enum):
    AUTO_EXECUTE = "auto_execute"
    CONFIRM = "confirm"
    PRESENT = "present"


@dataclass(frozen=True)
class ExecutionDecision:
    action: ExecutionAction
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action.value, "reason": self.reason}


def get_plan_risk(plan: Plan) -> RiskLevel:
    if isinstance(plan, MutationPlan):
        return plan.risk
    if isinstance(plan, ConfirmPlan):
        if plan.confirm_type == ConfirmType.DANGER:
            return RiskLevel.HIGH
        return get_plan_risk(plan.pending)
    return RiskLevel.LOW


def _auto_threshold(risk: RiskLevel, thresholds: ThresholdsConfig) -> float | None:
    if risk == RiskLevel.LOW:
        return thresholds.auto_low
    if risk == RiskLevel.MEDIUM:
        return thresholds.auto_medium
    return None


def _is_presentation(plan: Plan) -> bool:
    return isinstance(plan, (ConfirmPlan, SlotFillingPlan, NotSupportedPlan))


def _untrusted_input(
    source: InputSource,
    stt_confidence: float | None,
    thresholds: ThresholdsConfig,
) -> str | None:
    if source == InputSource.DICTATION_FALLBACK:
        return "dictation_fallback"
    if (
        source == InputSource.STT
        and stt_confidence is not None
        and stt_confidence < thresholds.min_stt_confidence_for_auto
    ):
        return "low_stt_confidence"
    return None


def decide_execution(
    plan: Plan,
    utterance: Utterance,
    thresholds: ThresholdsConfig | None = None,
) -> ExecutionDecision:
    """What the caller should do with a plan."""
    thresholds = thresholds or ThresholdsConfig()

    if _is_presentation(plan):
        return ExecutionDecision(ExecutionAction.PRESENT, plan.kind.value)

    risk = get_plan_risk(plan)
    auto = _auto_threshold(risk, thresholds)
    if auto is None:
        return ExecutionDecision(ExecutionAction.CONFIRM, "high_risk")

    if isinstance(plan, MutationPlan):
        untrusted = _untrusted_input(utterance.source, utterance.stt_confidence, thresholds)
        if untrusted:
            return ExecutionDecision(ExecutionAction.CONFIRM, untrusted)

    if plan.confidence >= auto:
        return ExecutionDecision(ExecutionAction.AUTO_EXECUTE, f"{risk.value}_risk_confident")
    return ExecutionDecision(ExecutionAction.CONFIRM, f"{risk.value}_risk_below_auto")


def should_auto_execute(
    plan: Plan,
    source: InputSource = InputSource.STT,
    stt_confidence: float | None = None,
    thresholds: ThresholdsConfig | None = None,
) -> bool:
    utterance = Utterance(text="", stt_confidence=stt_confidence, source=source)
    decision = decide_execution(plan, utterance, thresholds)
    return decision.action == ExecutionAction.AUTO_EXECUTE


def should_confirm(
    plan: Plan,
    source: InputSource = InputSource.STT,
    stt_confidence: float | None = None,
    thresholds: ThresholdsConfig | None = None,
) -> bool:
    utterance = Utterance(text="", stt_confidence=stt_confidence, source=source)
    decision = decide_execution(plan, utterance, thresholds)
    return decision.action == ExecutionAction.CONFIRM


__all__ = [
    "DELETE_HINT",
    "DELETE_QUESTION",
    "EDIT_HINT",
    "ExecutionAction",
    "ExecutionDecision",
    "RATE_HINT",
    "SafetyOutcome",
    "apply_safety_policy",
    "decide_execution",
    "get_plan_risk",
    "should_auto_execute",
    "should_confirm",
]
