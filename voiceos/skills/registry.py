"""Skill registry.

The registry is an immutable value built once with SkillRegistryBuilder and
passed into the planner. Hot-reload goes through ``with_skill()``, which
returns a new registry; readers holding the old one keep a complete set.

Matching isolates faulty skills: a skill whose matcher raises is logged and
skipped, and matching continues with the others.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, Mapping

from voiceos.errors import SkillRegistrationError, UnknownSkillError
from voiceos.logging_config import get_logger
from voiceos.models import SkillCategory, UserContext
from voiceos.skills.base import MatchResult, Skill

logger = get_logger(__name__)

# Matches at or below this confidence are dropped
DEFAULT_CANDIDATE_FLOOR = 0.2


@dataclass(frozen=True)
class SkillMatch:
    skill: Skill
    match: MatchResult

    @property
    def confidence(self) -> float:
        return self.match.confidence


class SkillRegistry:
    """Immutable set of skills in registration order."""

    def __init__(
        self,
        skills: Iterable[Skill] = (),
        candidate_floor: float = DEFAULT_CANDIDATE_FLOOR,
    ):
        ordered = tuple(skills)
        by_id: dict[str, Skill] = {}
        for skill in ordered:
            if not skill.id:
                raise SkillRegistrationError("Skill id must not be empty")
            if skill.id in by_id:
                raise SkillRegistrationError(f"Duplicate skill id: {skill.id}")
            by_id[skill.id] = skill

        self._skills = ordered
        self._by_id: Mapping[str, Skill] = MappingProxyType(by_id)
        self.candidate_floor = candidate_floor

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._by_id

    @property
    def skills(self) -> tuple[Skill, ...]:
        return self._skills

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(s.id for s in self._skills)

    def get(self, skill_id: str) -> Skill:
        try:
            return self._by_id[skill_id]
        except KeyError:
            raise UnknownSkillError(skill_id) from None

    def by_category(self, category: SkillCategory) -> list[Skill]:
        return [s for s in self._skills if s.category == category]

    def with_skill(self, skill: Skill) -> SkillRegistry:
        """New registry with ``skill`` added, or replacing the one with its id."""
        if skill.id in self._by_id:
            skills = [skill if s.id == skill.id else s for s in self._skills]
        else:
            skills = [*self._skills, skill]
        return SkillRegistry(skills, candidate_floor=self.candidate_floor)

    def find_matches(
        self,
        raw_text: str,
        canonical: str,
        context: UserContext,
        now: datetime,
    ) -> list[SkillMatch]:
        """All matches above the candidate floor, best first.

        Ties keep registration order.
        """
        matches: list[SkillMatch] = []
        for skill in self._skills:
            try:
                result = skill.match(raw_text, canonical, context, now)
            except Exception:
                logger.exception("skill_match_failed", skill_id=skill.id)
                continue

            confidence = min(1.0, max(0.0, result.confidence))
            if confidence != result.confidence:
                result = MatchResult(confidence, result.slots, result.reasons)
            if confidence > self.candidate_floor:
                matches.append(SkillMatch(skill=skill, match=result))

        # sort() is stable
        matches.sort(key=lambda m: m.confidence, reverse=True)
        return matches

    def explain_matches(
        self,
        raw_text: str,
        canonical: str,
        context: UserContext,
        now: datetime,
        limit: int = 5,
    ) -> str:
        """Printable ranking of the best matches, for debugging."""
        matches = self.find_matches(raw_text, canonical, context, now)
        lines = [
            f"Transcript: {raw_text}",
            f"Canonical:  {canonical}",
            f"Matches:    {len(matches)}",
        ]
        for m in matches[:limit]:
            lines.append(f"  {m.skill.id}: {m.confidence * 100:.1f}%")
            if m.match.slots:
                lines.append(f"    slots:   {dict(m.match.slots)}")
            if m.match.reasons:
                lines.append(f"    reasons: {', '.join(m.match.reasons)}")
        return "\n".join(lines)


class SkillRegistryBuilder:
    """Collects skills, then builds an immutable SkillRegistry."""

    def __init__(self, candidate_floor: float = DEFAULT_CANDIDATE_FLOOR):
        self._skills: list[Skill] = []
        self._ids: set[str] = set()
        self._candidate_floor = candidate_floor

    def register(self, skill: Skill) -> SkillRegistryBuilder:
        if skill.id in self._ids:
            raise SkillRegistrationError(f"Duplicate skill id: {skill.id}")
        self._skills.append(skill)
        self._ids.add(skill.id)
        return self

    def register_all(self, skills: Iterable[Skill]) -> SkillRegistryBuilder:
        for skill in skills:
            self.register(skill)
        return self

    def build(self) -> SkillRegistry:
        registry = SkillRegistry(self._skills, candidate_floor=self._candidate_floor)
        for skill in registry.skills:
            logger.debug("skill_registered", skill_id=skill.id, category=skill.category.value)
        return registry


__all__ = [
    "DEFAULT_CANDIDATE_FLOOR",
    "SkillMatch",
    "SkillRegistry",
    "SkillRegistryBuilder",
]
