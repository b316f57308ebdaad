"""Exceptions raised by the voice planner.

Planning itself never raises for user input: noise, unknown commands and
safety downgrades all come back as plans. These exceptions flag programming
or configuration mistakes (bad skill definitions, unknown skill ids, plans
that violate their own invariants).
"""

from __future__ import annotations


class VoicePlannerError(Exception):
    """Base class for all voiceos errors."""


class SkillRegistrationError(VoicePlannerError):
    """A skill could not be registered (duplicate id, empty id)."""


class UnknownSkillError(VoicePlannerError):
    """A skill id was referenced that the registry does not know."""

    def __init__(self, skill_id: str):
        super().__init__(f"Unknown skill: {skill_id}")
        self.skill_id = skill_id


class SlotConfigurationError(VoicePlannerError):
    """A skill declares its slots inconsistently."""


class InvalidPlanError(VoicePlannerError):
    """A plan was constructed in violation of its invariants."""


class ConfigError(VoicePlannerError):
    """Planner configuration could not be loaded."""


__all__ = [
    "ConfigError",
    "InvalidPlanError",
    "SkillRegistrationError",
    "SlotConfigurationError",
    "UnknownSkillError",
    "VoicePlannerError",
]
