"""Voice skills and the skill registry.

Usage:
    from voiceos.skills import build_default_registry

    registry = build_default_registry()
    matches = registry.find_matches(raw, canonical, context, now)
"""

from voiceos.skills.action_skills import ACTION_SKILLS
from voiceos.skills.base import MatchResult, Skill, SlotDefinition
from voiceos.skills.control_skills import COMMAND_CATALOGUE, CONTROL_SKILLS
from voiceos.skills.nav_skills import NAV_SKILLS, NavSkill
from voiceos.skills.query_skills import QUERY_SKILLS
from voiceos.skills.registry import (
    DEFAULT_CANDIDATE_FLOOR,
    SkillMatch,
    SkillRegistry,
    SkillRegistryBuilder,
)

ALL_SKILLS = NAV_SKILLS + QUERY_SKILLS + ACTION_SKILLS + CONTROL_SKILLS


def build_default_registry(candidate_floor: float = DEFAULT_CANDIDATE_FLOOR) -> SkillRegistry:
    """Registry with every built-in skill."""
    return SkillRegistryBuilder(candidate_floor=candidate_floor).register_all(ALL_SKILLS).build()


__all__ = [
    "ALL_SKILLS",
    "COMMAND_CATALOGUE",
    "MatchResult",
    "NavSkill",
    "Skill",
    "SkillMatch",
    "SkillRegistry",
    "SkillRegistryBuilder",
    "SlotDefinition",
    "build_default_registry",
]
