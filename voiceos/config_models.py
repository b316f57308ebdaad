from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from voiceos import CONFIG_PATH
from voiceos.errors import ConfigError
from voiceos.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# PlannerConfig (args/voice_planner.yaml)
# =============================================================================

class ThresholdsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    auto_low: float = Field(default=0.80, ge=0.0, le=1.0)
    confirm_low: float = Field(default=0.55, ge=0.0, le=1.0)
    auto_medium: float = Field(default=0.90, ge=0.0, le=1.0)
    confirm_medium: float = Field(default=0.70, ge=0.0, le=1.0)
    confirm_high: float = Field(default=0.0, ge=0.0, le=1.0)
    ambiguity_gap: float = Field(default=0.15, ge=0.0, le=1.0)
    candidate_floor: float = Field(default=0.2, ge=0.0, le=1.0)
    min_stt_confidence_for_auto: float = Field(default=0.6, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _confirm_below_auto(self) -> "ThresholdsConfig":
        if self.confirm_low > self.auto_low:
            raise ValueError("confirm_low must not exceed auto_low")
        if self.confirm_medium > self.auto_medium:
            raise ValueError("confirm_medium must not exceed auto_medium")
        return self


class ScoringConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    top_candidates_in_diagnostics: int = Field(default=5, ge=1)
    ambiguous_alternatives: int = Field(default=3, ge=2)
    action_picker_size: int = Field(default=4, ge=1)


class NoiseGuardConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    enabled: bool = Field(default=True)
    min_meaningful_tokens: int = Field(default=1, ge=1)


class SlotFillingConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    resume_confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    max_suggestions: int = Field(default=4, ge=2, le=4)


class PlannerConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    noise_guard: NoiseGuardConfig = Field(default_factory=NoiseGuardConfig)
    slot_filling: SlotFillingConfig = Field(default_factory=SlotFillingConfig)


def load_planner_config(path: Path | str | None = None, strict: bool = False) -> PlannerConfig:
    """Load and validate the planner configuration.

    A missing file yields the defaults. A file that fails to parse or
    validate is logged as ``config_invalid`` and also yields the defaults,
    or raises ConfigError when ``strict`` is set.
    """
    yaml_path = Path(path) if path is not None else CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return PlannerConfig.model_validate(raw)
    except Exception as e:
        if strict:
            raise ConfigError(f"Invalid planner config {yaml_path}: {e}") from e
        logger.warning("config_invalid", path=str(yaml_path), error=str(e))
        return PlannerConfig()


__all__ = [
    "NoiseGuardConfig",
    "PlannerConfig",
    "ScoringConfig",
    "SlotFillingConfig",
    "ThresholdsConfig",
    "load_planner_config",
]
