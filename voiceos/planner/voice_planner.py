"""Voice planner.

Turns one utterance into exactly one plan:

    noise guard → canonicalize → skill matching → thresholds / ambiguity
        → build plan (or ask for a slot) → safety policy → diagnostics

The planner never executes anything. It never raises for user input either:
unknown, noisy or unsafe commands come back as NotSupported or Confirm plans.

Usage:
    from voiceos.planner import VoicePlanner
    from voiceos.models import Utterance, UserContext

    planner = VoicePlanner.default()
    result = planner.plan(Utterance("öffne tagebuch"), UserContext())
    result.plan.to_dict()
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from voiceos.config_models import PlannerConfig, load_planner_config
from voiceos.lexicon.canonicalizer import canonicalize, detect_object, detect_operator
from voiceos.logging_config import get_logger
from voiceos.models import (
    CandidateScore,
    ConfirmPlan,
    ConfirmType,
    Diagnostics,
    ExtractedEntities,
    NavigatePlan,
    PartialPlan,
    Plan,
    PlanChoice,
    RiskLevel,
    SafetyDowngrade,
    SlotFillingPlan,
    TargetView,
    Utterance,
    UserContext,
    not_supported,
)
from voiceos.parser.entity_extractor import extract_entities
from voiceos.parser.noise_guard import check_noise_guard, get_noise_message
from voiceos.planner.safety_policy import (
    ExecutionDecision,
    apply_safety_policy,
    decide_execution,
)
from voiceos.planner.slot_filling import (
    SlotFillingState,
    cancel,
    fill_slot,
    is_cancel_utterance,
    next_slot_to_fill,
    parse_slot_value,
    state_from_partial,
    to_partial,
)
from voiceos.skills import COMMAND_CATALOGUE, SkillMatch, SkillRegistry, build_default_registry
from voiceos.skills.base import Skill

logger = get_logger(__name__)

QUICK_PAIN_SKILL_ID = "quick_pain_entry"

NOT_UNDERSTOOD = "Ich konnte den Befehl nicht verstehen."
NOT_SURE = "Ich bin mir nicht sicher, was du meinst."
AMBIGUOUS_QUESTION = "Meinst du:"
CANCELLED = "Okay, abgebrochen."
HELP_LABEL = "Hilfe anzeigen"


@dataclass(frozen=True)
class PlannerResult:
    """One planning turn.

    ``dialogue`` is set while a slot-filling dialogue is running or has just
    finished. ``decision`` tells the caller whether to run the plan now.
    """

    plan: Plan
    diagnostics: Diagnostics
    decision: ExecutionDecision
    dialogue: SlotFillingState | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "plan": self.plan.to_dict(),
            "decision": self.decision.to_dict(),
            "dialogue": self.dialogue.to_dict() if self.dialogue else None,
        }


def _help_plan() -> NavigatePlan:
    return NavigatePlan(
        summary=HELP_LABEL,
        confidence=1.0,
        target_view=TargetView.HELP,
        payload={"commands": COMMAND_CATALOGUE},
    )


def _fallback_suggestions() -> tuple[PlanChoice, ...]:
    return (
        PlanChoice(label=HELP_LABEL, plan=_help_plan()),
        PlanChoice(
            label="Tagebuch öffnen",
            plan=NavigatePlan(summary="Tagebuch öffnen", confidence=1.0, target_view=TargetView.DIARY),
        ),
        PlanChoice(
            label="Auswertung öffnen",
            plan=NavigatePlan(summary="Auswertung öffnen", confidence=1.0, target_view=TargetView.ANALYSIS),
        ),
    )


class VoicePlanner:
    """Stateless planner over an immutable skill registry."""

    def __init__(self, registry: SkillRegistry, config: PlannerConfig | None = None):
        self.registry = registry
        self.config = config or PlannerConfig()

    @classmethod
    def default(cls, config: PlannerConfig | None = None) -> VoicePlanner:
        """Planner with all built-in skills and the config from args/."""
        config = config or load_planner_config()
        return cls(build_default_registry(config.thresholds.candidate_floor), config)

    # -------------------------------------------------------------------------
    # Thresholds
    # -------------------------------------------------------------------------

    def confirm_threshold(self, risk: RiskLevel) -> float:
        thresholds = self.config.thresholds
        if risk == RiskLevel.LOW:
            return thresholds.confirm_low
        if risk == RiskLevel.MEDIUM:
            return thresholds.confirm_medium
        return thresholds.confirm_high

    # -------------------------------------------------------------------------
    # Single turn
    # -------------------------------------------------------------------------

    def plan(
        self,
        utterance: Utterance,
        context: UserContext,
        now: datetime | None = None,
    ) -> PlannerResult:
        """Plan one utterance. ``now`` defaults to the user's local time."""
        started = time.monotonic()
        now = now or datetime.now(ZoneInfo(context.timezone))
        raw = utterance.text
        canonical = canonicalize(raw)

        operator = detect_operator(canonical)
        obj = detect_object(canonical)
        diagnostics = Diagnostics(
            canonical_text=canonical,
            detected_operator=operator.value if operator else None,
            detected_object=obj.value if obj else None,
        )

        guard_cfg = self.config.noise_guard
        if guard_cfg.enabled:
            guard = check_noise_guard(raw, min_meaningful_tokens=guard_cfg.min_meaningful_tokens)
            if guard.is_noise:
                plan = not_supported(get_noise_message(guard))
                diagnostics = replace(diagnostics, noise_reason=guard.reason)
                return self._finish(plan, diagnostics, utterance, started)
            if guard.is_ambiguous_number and QUICK_PAIN_SKILL_ID in self.registry:
                plan = self._ambiguous_number_plan(guard.number, raw, context, now)
                diagnostics = replace(diagnostics, noise_reason=guard.reason)
                return self._finish(plan, diagnostics, utterance, started)

        entities = extract_entities(raw, canonical, context, now)
        matches = self.registry.find_matches(raw, canonical, context, now)
        top_n = self.config.scoring.top_candidates_in_diagnostics
        diagnostics = replace(
            diagnostics,
            extracted_entities=entities,
            candidate_scores=tuple(
                CandidateScore(m.skill.id, m.confidence, m.match.reasons) for m in matches[:top_n]
            ),
        )

        if not matches:
            plan = not_supported(NOT_UNDERSTOOD, suggestions=_fallback_suggestions())
            return self._finish(plan, diagnostics, utterance, started)

        top = matches[0]
        diagnostics = replace(diagnostics, matched_skill_id=top.skill.id)

        if top.confidence < self.confirm_threshold(top.skill.risk):
            plan = self._action_picker(matches, raw, context, now)
            return self._finish(plan, diagnostics, utterance, started)

        if len(matches) > 1 and self._is_ambiguous(top, matches[1]):
            plan, downgrade = self._ambiguous_plan(matches, raw, context, now)
        else:
            plan, downgrade = self._build(top, raw, context, now)

        diagnostics = replace(diagnostics, safety_downgrade=downgrade)
        return self._finish(plan, diagnostics, utterance, started)

    def _is_ambiguous(self, top: SkillMatch, second: SkillMatch) -> bool:
        gap = round(top.confidence - second.confidence, 6)
        return gap < self.config.thresholds.ambiguity_gap

    def _build(
        self,
        match: SkillMatch,
        raw: str,
        context: UserContext,
        now: datetime,
    ) -> tuple[Plan, SafetyDowngrade | None]:
        plan = match.skill.build_plan(dict(match.match.slots), context, match.confidence, now)
        plan = self._with_source(plan, raw)
        outcome = apply_safety_policy(plan, raw)
        return outcome.plan, outcome.downgrade

    def _with_source(self, plan: Plan, source_text: str) -> Plan:
        if not isinstance(plan, SlotFillingPlan):
            return plan
        return replace(
            plan,
            suggestions=plan.suggestions[: self.config.slot_filling.max_suggestions],
            partial=replace(plan.partial, source_text=source_text),
        )

    def _ambiguous_plan(
        self,
        matches: list[SkillMatch],
        raw: str,
        context: UserContext,
        now: datetime,
    ) -> tuple[Plan, SafetyDowngrade | None]:
        candidates = matches[: self.config.scoring.ambiguous_alternatives]
        built = [self._build(m, raw, context, now) for m in candidates]
        pending, downgrade = built[0]
        plan = ConfirmPlan(
            summary=AMBIGUOUS_QUESTION,
            confidence=matches[0].confidence,
            confirm_type=ConfirmType.AMBIGUOUS,
            question=AMBIGUOUS_QUESTION,
            pending=pending,
            alternatives=tuple(
                PlanChoice(label=m.skill.name, plan=p) for m, (p, _) in zip(candidates, built)
            ),
        )
        return plan, downgrade

    def _action_picker(
        self,
        matches: list[SkillMatch],
        raw: str,
        context: UserContext,
        now: datetime,
    ) -> Plan:
        size = self.config.scoring.action_picker_size
        choices = [
            PlanChoice(label=m.skill.name, plan=self._build(m, raw, context, now)[0])
            for m in matches[:size]
        ]
        choices.append(PlanChoice(label=HELP_LABEL, plan=_help_plan()))
        return not_supported(NOT_SURE, suggestions=choices, confidence=matches[0].confidence)

    def _ambiguous_number_plan(
        self,
        number: int,
        raw: str,
        context: UserContext,
        now: datetime,
    ) -> Plan:
        skill = self.registry.get(QUICK_PAIN_SKILL_ID)
        pending = skill.build_plan({"pain_level": number, "notes": raw}, context, 1.0, now)
        label = f"Schmerzstärke {number} eintragen"
        return ConfirmPlan(
            summary=label,
            confidence=0.5,
            confirm_type=ConfirmType.AMBIGUOUS,
            question=f"Meinst du Schmerzstärke {number}?",
            pending=pending,
            alternatives=(
                PlanChoice(label=label, plan=pending),
                PlanChoice(label=HELP_LABEL, plan=_help_plan()),
            ),
        )

    def _finish(
        self,
        plan: Plan,
        diagnostics: Diagnostics,
        utterance: Utterance,
        started: float,
        dialogue: SlotFillingState | None = None,
    ) -> PlannerResult:
        elapsed_ms = (time.monotonic() - started) * 1000
        diagnostics = replace(diagnostics, processing_time_ms=elapsed_ms)
        plan = replace(plan, diagnostics=diagnostics)
        decision = decide_execution(plan, utterance, self.config.thresholds)

        logger.info(
            "plan_created",
            kind=plan.kind.value,
            skill_id=diagnostics.matched_skill_id,
            confidence=round(plan.confidence, 4),
            decision=decision.action.value,
            processing_time_ms=round(elapsed_ms, 3),
        )
        return PlannerResult(plan=plan, diagnostics=diagnostics, decision=decision, dialogue=dialogue)

    # -------------------------------------------------------------------------
    # Follow-up turns
    # -------------------------------------------------------------------------

    def continue_slot_filling(
        self,
        partial: PartialPlan,
        utterance: Utterance,
        context: UserContext,
        now: datetime | None = None,
    ) -> PlannerResult:
        """Feed the answer to a slot question back into the dialogue.

        Raises UnknownSkillError if the partial plan names a skill that is
        not registered.
        """
        started = time.monotonic()
        now = now or datetime.now(ZoneInfo(context.timezone))
        skill = self.registry.get(partial.target_skill_id)
        answer = utterance.text
        diagnostics = Diagnostics(
            canonical_text=canonicalize(answer),
            matched_skill_id=skill.id,
        )

        state = state_from_partial(partial, skill)
        if is_cancel_utterance(answer):
            state = cancel(state)
            plan = not_supported(CANCELLED)
            return self._finish(plan, diagnostics, utterance, started, dialogue=state)

        slot = next_slot_to_fill(state, skill)
        if slot is not None:
            value = parse_slot_value(slot, answer, context, now)
            if value is None:
                plan = self._ask(skill, state, partial.source_text, context, now)
                return self._finish(plan, diagnostics, utterance, started, dialogue=state)
            state = fill_slot(state, slot.name, value)

        if not state.is_complete:
            plan = self._ask(skill, state, partial.source_text, context, now)
            return self._finish(plan, diagnostics, utterance, started, dialogue=state)

        confidence = self.config.slot_filling.resume_confidence
        plan = skill.build_plan(dict(state.filled_slots), context, confidence, now)
        outcome = apply_safety_policy(plan, f"{partial.source_text} {answer}")
        diagnostics = replace(
            diagnostics,
            extracted_entities=self._answer_entities(answer, context, now),
            safety_downgrade=outcome.downgrade,
        )
        return self._finish(outcome.plan, diagnostics, utterance, started, dialogue=state)

    def _ask(
        self,
        skill: Skill,
        state: SlotFillingState,
        source_text: str,
        context: UserContext,
        now: datetime,
    ) -> Plan:
        slot = next_slot_to_fill(state, skill)
        plan = skill.missing_slot_plan(
            slot,
            dict(state.filled_slots),
            context,
            self.config.slot_filling.resume_confidence,
            now,
        )
        plan = replace(plan, partial=to_partial(state, source_text))
        return self._with_source(plan, source_text)

    @staticmethod
    def _answer_entities(answer: str, context: UserContext, now: datetime) -> ExtractedEntities:
        return extract_entities(answer, canonicalize(answer), context, now)


__all__ = [
    "AMBIGUOUS_QUESTION",
    "CANCELLED",
    "NOT_SURE",
    "NOT_UNDERSTOOD",
    "PlannerResult",
    "QUICK_PAIN_SKILL_ID",
    "VoicePlanner",
]
