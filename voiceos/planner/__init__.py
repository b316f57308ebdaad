"""Planning: one utterance in, one plan out.

Usage:
    from voiceos.planner import VoicePlanner

    planner = VoicePlanner.default()
    result = planner.plan(Utterance("zeig letzten eintrag"), context)
"""

from voiceos.planner.safety_policy import (
    ExecutionAction,
    ExecutionDecision,
    SafetyOutcome,
    apply_safety_policy,
    decide_execution,
    get_plan_risk,
    should_auto_execute,
    should_confirm,
)
from voiceos.planner.slot_filling import (
    DialogueStatus,
    SlotFillingState,
    cancel,
    fill_slot,
    init_slot_filling,
    is_cancel_utterance,
    next_slot_to_fill,
    parse_slot_value,
)
from voiceos.planner.voice_planner import (
    AMBIGUOUS_QUESTION,
    CANCELLED,
    NOT_SURE,
    NOT_UNDERSTOOD,
    PlannerResult,
    VoicePlanner,
)

__all__ = [
    "AMBIGUOUS_QUESTION",
    "CANCELLED",
    "DialogueStatus",
    "ExecutionAction",
    "ExecutionDecision",
    "NOT_SURE",
    "NOT_UNDERSTOOD",
    "PlannerResult",
    "SafetyOutcome",
    "SlotFillingState",
    "VoicePlanner",
    "apply_safety_policy",
    "cancel",
    "decide_execution",
    "fill_slot",
    "get_plan_risk",
    "init_slot_filling",
    "is_cancel_utterance",
    "next_slot_to_fill",
    "parse_slot_value",
    "should_auto_execute",
    "should_confirm",
]
