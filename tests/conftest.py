"""Shared test fixtures for voiceos tests.

This module provides common fixtures used across all test modules:
- A user context with two medications
- A fixed clock, so time-relative parsing is deterministic
- The default skill registry and planner
- Stub skills for registry and planner edge cases

Usage:
    def test_something(planner, user_context, now):
        result = planner.plan(Utterance("öffne tagebuch"), user_context, now)
        ...
"""

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from voiceos.config_models import PlannerConfig
from voiceos.models import (
    NavigatePlan,
    SkillCategory,
    TargetView,
    Utterance,
    UserContext,
    UserMedication,
)
from voiceos.planner import VoicePlanner
from voiceos.skills import build_default_registry
from voiceos.skills.base import MatchResult, Skill


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"


# ─────────────────────────────────────────────────────────────────────────────
# Context Fixtures
# ─────────────────────────────────────────────────────────────────────────────

BERLIN = ZoneInfo("Europe/Berlin")


@pytest.fixture
def now() -> datetime:
    """Monday 2025-03-10, 09:00 Berlin time."""
    return datetime(2025, 3, 10, 9, 0, tzinfo=BERLIN)


@pytest.fixture
def user_context() -> UserContext:
    return UserContext(
        user_meds=(
            UserMedication(name="Sumatriptan 50mg", id="med-1"),
            UserMedication(name="Ibuprofen 400", id="med-2"),
        ),
        recent_entry_ids=(42, 41, 40),
        last_entry_id=42,
    )


@pytest.fixture
def empty_context() -> UserContext:
    return UserContext()


# ─────────────────────────────────────────────────────────────────────────────
# Planner Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def planner(registry) -> VoicePlanner:
    return VoicePlanner(registry, PlannerConfig())


@pytest.fixture
def plan_text(planner, user_context, now):
    """Plan a text with the default planner, context and clock."""

    def _plan(text: str, **utterance_kwargs):
        return planner.plan(Utterance(text, **utterance_kwargs), user_context, now)

    return _plan


# ─────────────────────────────────────────────────────────────────────────────
# Stub Skills
# ─────────────────────────────────────────────────────────────────────────────


class FixedSkill(Skill):
    """Reports a fixed confidence for every utterance and opens a view."""

    def __init__(
        self,
        id: str,
        confidence: float,
        category: SkillCategory = SkillCategory.NAV,
        target_view: TargetView = TargetView.DIARY,
    ):
        super().__init__(id=id, name=f"Stub {id}", category=category)
        self.confidence = confidence
        self.target_view = target_view

    def match(self, raw_text, canonical, context, now):
        return MatchResult(confidence=self.confidence, reasons=("fixed",))

    def create_plan(self, slots, context, confidence, now):
        return NavigatePlan(
            summary=self.name,
            confidence=confidence,
            target_view=self.target_view,
        )


class ExplodingSkill(Skill):
    """Raises from match(), to check fault isolation."""

    def __init__(self, id: str = "exploding"):
        super().__init__(id=id, name="Exploding", category=SkillCategory.NAV)

    def match(self, raw_text, canonical, context, now):
        raise RuntimeError("matcher bug")

    def create_plan(self, slots, context, confidence, now):
        raise AssertionError("never planned")


@pytest.fixture
def fixed_skill():
    return FixedSkill
