"""Voice planner data models.

Defines the values that flow through one planning turn:
    Utterance + UserContext → Plan (+ Diagnostics)

Plans are a closed set of frozen dataclasses sharing ``summary``,
``confidence`` and ``diagnostics``. Each variant carries a class-level
``kind`` discriminator, so callers dispatch on ``plan.kind`` or with
``isinstance``. Every value has a ``to_dict()`` for the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from voiceos.errors import InvalidPlanError


# =============================================================================
# Enums
# =============================================================================

class InputSource(str, Enum):
    """Where the utterance text came from."""

    STT = "stt"
    DICTATION_FALLBACK = "dictation_fallback"
    TYPED = "typed"


class PlanKind(str, Enum):
    NAVIGATE = "navigate"
    OPEN_ENTRY = "open_entry"
    OPEN_LIST = "open_list"
    QUERY = "query"
    MUTATION = "mutation"
    CONFIRM = "confirm"
    SLOT_FILLING = "slot_filling"
    NOT_SUPPORTED = "not_supported"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SkillCategory(str, Enum):
    """Skill families, used for risk assessment."""

    NAV = "nav"
    QUERY = "query"
    ACTION = "action"
    EDIT = "edit"
    DELETE = "delete"
    RATE = "rate"
    HELP = "help"


class MutationType(str, Enum):
    CREATE_REMINDER = "create_reminder"
    SAVE_VOICE_NOTE = "save_voice_note"
    RATE_INTAKE = "rate_intake"
    EDIT_ENTRY = "edit_entry"
    DELETE_ENTRY = "delete_entry"
    DELETE_VOICE_NOTE = "delete_voice_note"
    QUICK_PAIN_ENTRY = "quick_pain_entry"

    @property
    def is_delete(self) -> bool:
        return self.value.startswith("delete")


class QueryType(str, Enum):
    LAST_ENTRY_WITH_MED = "last_entry_with_med"
    LAST_INTAKE_MED = "last_intake_med"
    COUNT_MED_RANGE = "count_med_range"
    COUNT_MIGRAINE_RANGE = "count_migraine_range"
    AVG_PAIN_RANGE = "avg_pain_range"


class TargetView(str, Enum):
    ANALYSIS = "analysis"
    DIARY = "diary"
    MEDICATIONS = "medications"
    REMINDERS = "reminders"
    SETTINGS = "settings"
    DOCTORS = "doctors"
    PROFILE = "profile"
    VOICE_NOTES = "voice_notes"
    DIARY_REPORT = "diary_report"
    MEDICATION_EFFECTS = "medication_effects"
    HELP = "help"


class ListType(str, Enum):
    ENTRIES = "entries"
    NOTES = "notes"
    REMINDERS = "reminders"


class ConfirmType(str, Enum):
    DANGER = "danger"
    AMBIGUOUS = "ambiguous"


class SafetyDowngrade(str, Enum):
    """Why the safety policy replaced a mutation plan."""

    MISSING_DELETE_OPERATOR = "missing_delete_operator"
    MISSING_EDIT_OPERATOR = "missing_edit_operator"
    MISSING_RATE_OPERATOR = "missing_rate_operator"


class Repeat(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"


class DeleteTarget(str, Enum):
    ENTRY = "entry"
    NOTE = "note"
    REMINDER = "reminder"


class SlotType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    RATING = "rating"
    MEDICATION = "medication"
    DATE_TIME = "date_time"
    TIME_RANGE = "time_range"


# =============================================================================
# Input
# =============================================================================

@dataclass(frozen=True)
class Utterance:
    """One raw user input for a planning turn."""

    text: str
    stt_confidence: float | None = None
    source: InputSource = InputSource.STT

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "stt_confidence": self.stt_confidence,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class UserMedication:
    name: str
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "id": self.id}


@dataclass(frozen=True)
class UserContext:
    """Read-only snapshot of what the planner may know about the user."""

    user_meds: tuple[UserMedication, ...] = ()
    recent_entry_ids: tuple[int, ...] = ()
    last_entry_id: int | None = None
    timezone: str = "Europe/Berlin"
    language: str = "de-DE"

    def __post_init__(self):
        # Accept lists and plain names from callers, store tuples
        meds = tuple(
            m if isinstance(m, UserMedication) else UserMedication(name=str(m))
            for m in self.user_meds
        )
        object.__setattr__(self, "user_meds", meds)
        object.__setattr__(self, "recent_entry_ids", tuple(self.recent_entry_ids))

    @property
    def med_names(self) -> list[str]:
        return [m.name for m in self.user_meds]

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_meds": [m.to_dict() for m in self.user_meds],
            "recent_entry_ids": list(self.recent_entry_ids),
            "last_entry_id": self.last_entry_id,
            "timezone": self.timezone,
            "language": self.language,
        }


# =============================================================================
# Plan parameters
# =============================================================================

@dataclass(frozen=True)
class TimeRange:
    days: int
    from_date: str = ""
    to_date: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.from_date, "to": self.to_date, "days": self.days}


@dataclass(frozen=True)
class QueryParams:
    med_name: str | None = None
    med_category: str | None = None
    time_range: TimeRange | None = None
    limit: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "med_name": self.med_name,
            "med_category": self.med_category,
            "time_range": self.time_range.to_dict() if self.time_range else None,
            "limit": self.limit,
        }


@dataclass(frozen=True)
class EntryFilter:
    med_name: str | None = None
    med_category: str | None = None
    time_range: TimeRange | None = None
    pain_level_min: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "med_name": self.med_name,
            "med_category": self.med_category,
            "time_range": self.time_range.to_dict() if self.time_range else None,
            "pain_level_min": self.pain_level_min,
        }


# =============================================================================
# Mutation payloads (one per mutation family)
# =============================================================================

@dataclass(frozen=True)
class ReminderPayload:
    title: str
    date_time: str
    medications: tuple[str, ...] = ()
    repeat: Repeat = Repeat.NONE
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "date_time": self.date_time,
            "medications": list(self.medications),
            "repeat": self.repeat.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class VoiceNotePayload:
    text: str
    occurred_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "occurred_at": self.occurred_at}


@dataclass(frozen=True)
class RatingPayload:
    entry_id: int
    med_name: str
    rating: int
    notes: str | None = None

    def __post_init__(self):
        if not 0 <= self.rating <= 10:
            raise InvalidPlanError(f"Rating must be between 0 and 10, got {self.rating}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "med_name": self.med_name,
            "rating": self.rating,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class EditEntryPayload:
    entry_id: int
    pain_level: int | None = None
    notes: str | None = None
    medications: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "updates": {
                "pain_level": self.pain_level,
                "notes": self.notes,
                "medications": list(self.medications),
            },
        }


@dataclass(frozen=True)
class DeletePayload:
    target_id: int | str
    target_type: DeleteTarget
    med_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_id": self.target_id,
            "target_type": self.target_type.value,
            "med_name": self.med_name,
        }


@dataclass(frozen=True)
class PainEntryPayload:
    pain_level: int
    medications: tuple[str, ...] = ()
    notes: str | None = None
    timestamp: str | None = None

    def __post_init__(self):
        if not 0 <= self.pain_level <= 10:
            raise InvalidPlanError(f"Pain level must be between 0 and 10, got {self.pain_level}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "pain_level": self.pain_level,
            "medications": list(self.medications),
            "notes": self.notes,
            "timestamp": self.timestamp,
        }


MutationPayload = (
    ReminderPayload
    | VoiceNotePayload
    | RatingPayload
    | EditEntryPayload
    | DeletePayload
    | PainEntryPayload
)

PAYLOAD_TYPES: dict[MutationType, type] = {
    MutationType.CREATE_REMINDER: ReminderPayload,
    MutationType.SAVE_VOICE_NOTE: VoiceNotePayload,
    MutationType.RATE_INTAKE: RatingPayload,
    MutationType.EDIT_ENTRY: EditEntryPayload,
    MutationType.DELETE_ENTRY: DeletePayload,
    MutationType.DELETE_VOICE_NOTE: DeletePayload,
    MutationType.QUICK_PAIN_ENTRY: PainEntryPayload,
}


# =============================================================================
# Dialogue helpers
# =============================================================================

@dataclass(frozen=True)
class SlotSuggestion:
    label: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class PartialPlan:
    """A plan waiting for more slots.

    ``source_text`` is the raw utterance that started the dialogue; the
    safety policy is applied to it when the dialogue completes.
    """

    target_skill_id: str
    collected_slots: dict[str, Any] = field(default_factory=dict)
    source_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_skill_id": self.target_skill_id,
            "collected_slots": dict(self.collected_slots),
            "source_text": self.source_text,
        }


@dataclass(frozen=True)
class PlanChoice:
    """A selectable suggestion, optionally backed by a ready plan."""

    label: str
    plan: Plan | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "plan": self.plan.to_dict() if self.plan else None,
        }


@dataclass(frozen=True)
class UndoSpec:
    """Descriptive undo window. The caller runs the timer."""

    window_ms: int
    undo_plan: Plan
    kind: str = "toast_undo"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "window_ms": self.window_ms,
            "undo_plan": self.undo_plan.to_dict(),
        }


# =============================================================================
# Diagnostics
# =============================================================================

@dataclass(frozen=True)
class CandidateScore:
    skill_id: str
    score: float
    reasons: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "skill_id": self.skill_id,
            "score": round(self.score, 4),
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class ExtractedEntities:
    medications: tuple[str, ...] = ()
    time_range: TimeRange | None = None
    numbers: tuple[int, ...] = ()
    ordinals: tuple[int, ...] = ()
    rating: int | None = None
    date_time: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "medications": list(self.medications),
            "time_range": self.time_range.to_dict() if self.time_range else None,
            "numbers": list(self.numbers),
            "ordinals": list(self.ordinals),
            "rating": self.rating,
            "date_time": self.date_time,
        }


@dataclass(frozen=True)
class Diagnostics:
    """Explainability data for one turn. Never affects behavior."""

    canonical_text: str
    detected_operator: str | None = None
    detected_object: str | None = None
    matched_skill_id: str | None = None
    candidate_scores: tuple[CandidateScore, ...] = ()
    extracted_entities: ExtractedEntities = field(default_factory=ExtractedEntities)
    processing_time_ms: float = 0.0
    noise_reason: str | None = None
    safety_downgrade: SafetyDowngrade | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "canonical_text": self.canonical_text,
            "detected_operator": self.detected_operator,
            "detected_object": self.detected_object,
            "matched_skill_id": self.matched_skill_id,
            "candidate_scores": [c.to_dict() for c in self.candidate_scores],
            "extracted_entities": self.extracted_entities.to_dict(),
            "processing_time_ms": round(self.processing_time_ms, 3),
            "noise_reason": self.noise_reason,
            "safety_downgrade": self.safety_downgrade.value if self.safety_downgrade else None,
        }


# =============================================================================
# Plans
# =============================================================================

@dataclass(frozen=True, kw_only=True)
class Plan:
    """Base for all plan variants."""

    kind: ClassVar[PlanKind]

    summary: str
    confidence: float
    diagnostics: Diagnostics | None = None

    def _base_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "summary": self.summary,
            "confidence": round(self.confidence, 4),
        }

    def _finish(self, data: dict[str, Any]) -> dict[str, Any]:
        if self.diagnostics is not None:
            data["diagnostics"] = self.diagnostics.to_dict()
        return data

    def to_dict(self) -> dict[str, Any]:
        return self._finish(self._base_dict())


@dataclass(frozen=True, kw_only=True)
class NavigatePlan(Plan):
    kind: ClassVar[PlanKind] = PlanKind.NAVIGATE

    target_view: TargetView
    payload: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["target_view"] = self.target_view.value
        data["payload"] = self.payload
        return self._finish(data)


@dataclass(frozen=True, kw_only=True)
class OpenEntryPlan(Plan):
    """Open one diary entry. A negative id ``-n`` means the n-th most recent."""

    kind: ClassVar[PlanKind] = PlanKind.OPEN_ENTRY

    entry_id: int

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["entry_id"] = self.entry_id
        return self._finish(data)


@dataclass(frozen=True, kw_only=True)
class OpenListPlan(Plan):
    kind: ClassVar[PlanKind] = PlanKind.OPEN_LIST

    list_type: ListType
    filter: EntryFilter | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["list_type"] = self.list_type.value
        data["filter"] = self.filter.to_dict() if self.filter else None
        return self._finish(data)


@dataclass(frozen=True, kw_only=True)
class QueryPlan(Plan):
    """A read-only question. The caller runs it and fills ``result``."""

    kind: ClassVar[PlanKind] = PlanKind.QUERY

    query_type: QueryType
    params: QueryParams = field(default_factory=QueryParams)
    result: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["query_type"] = self.query_type.value
        data["params"] = self.params.to_dict()
        data["result"] = self.result
        return self._finish(data)


@dataclass(frozen=True, kw_only=True)
class MutationPlan(Plan):
    kind: ClassVar[PlanKind] = PlanKind.MUTATION

    mutation_type: MutationType
    payload: MutationPayload
    risk: RiskLevel
    undo: UndoSpec | None = None

    def __post_init__(self):
        expected = PAYLOAD_TYPES[self.mutation_type]
        if not isinstance(self.payload, expected):
            raise InvalidPlanError(
                f"{self.mutation_type.value} expects {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )
        if self.mutation_type.is_delete and self.risk != RiskLevel.HIGH:
            raise InvalidPlanError(
                f"{self.mutation_type.value} must carry risk=high, got {self.risk.value}"
            )

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["mutation_type"] = self.mutation_type.value
        data["payload"] = self.payload.to_dict()
        data["risk"] = self.risk.value
        data["undo"] = self.undo.to_dict() if self.undo else None
        return self._finish(data)


@dataclass(frozen=True, kw_only=True)
class ConfirmPlan(Plan):
    kind: ClassVar[PlanKind] = PlanKind.CONFIRM

    confirm_type: ConfirmType
    question: str
    pending: Plan
    alternatives: tuple[PlanChoice, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["confirm_type"] = self.confirm_type.value
        data["question"] = self.question
        data["pending"] = self.pending.to_dict()
        data["alternatives"] = [a.to_dict() for a in self.alternatives]
        return self._finish(data)


@dataclass(frozen=True, kw_only=True)
class SlotFillingPlan(Plan):
    kind: ClassVar[PlanKind] = PlanKind.SLOT_FILLING

    missing_slot: str
    prompt: str
    suggestions: tuple[SlotSuggestion, ...]
    partial: PartialPlan

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["missing_slot"] = self.missing_slot
        data["prompt"] = self.prompt
        data["suggestions"] = [s.to_dict() for s in self.suggestions]
        data["partial"] = self.partial.to_dict()
        return self._finish(data)


@dataclass(frozen=True, kw_only=True)
class NotSupportedPlan(Plan):
    kind: ClassVar[PlanKind] = PlanKind.NOT_SUPPORTED

    reason: str
    suggestions: tuple[PlanChoice, ...] = ()
    downgrade: SafetyDowngrade | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self._base_dict()
        data["reason"] = self.reason
        data["suggestions"] = [s.to_dict() for s in self.suggestions]
        data["downgrade"] = self.downgrade.value if self.downgrade else None
        return self._finish(data)


def not_supported(
    reason: str,
    suggestions: tuple[PlanChoice, ...] | list[PlanChoice] = (),
    confidence: float = 0.0,
    downgrade: SafetyDowngrade | None = None,
    summary: str | None = None,
) -> NotSupportedPlan:
    """Build a NotSupportedPlan whose summary defaults to the reason."""
    return NotSupportedPlan(
        summary=summary or reason,
        confidence=confidence,
        reason=reason,
        suggestions=tuple(suggestions),
        downgrade=downgrade,
    )


def iter_plans(plan: Plan):
    """Yield a plan and every plan nested in it (pending, alternatives, undo)."""
    yield plan
    if isinstance(plan, ConfirmPlan):
        yield from iter_plans(plan.pending)
        for choice in plan.alternatives:
            if choice.plan is not None:
                yield from iter_plans(choice.plan)
    elif isinstance(plan, NotSupportedPlan):
        for choice in plan.suggestions:
            if choice.plan is not None:
                yield from iter_plans(choice.plan)
    elif isinstance(plan, MutationPlan) and plan.undo is not None:
        yield from iter_plans(plan.undo.undo_plan)
