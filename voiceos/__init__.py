"""Voice OS - Rule-based voice command planning (German)

Philosophy:
    Voice is a low-friction way to log and look things up while a migraine
    makes screens hard to use. The planner turns one short utterance into one
    typed plan and never performs an irreversible action on a guess.

Components:
    models.py: Data models (plans, payloads, user context, diagnostics)
    lexicon/: German word tables, canonicalization, primitive extractors
    parser/: Noise guard, medication matching, entity extraction
    skills/: Skill base types, navigation/query/action/control skills, registry
    planner/: Voice planner, safety policy, slot-filling dialogue state
    debug.py: Developer CLI for inspecting plans and candidate scores

Design Principles:
    - Deterministic: same utterance, context and clock give the same plan
    - Explicit trigger words for delete, edit and rate
    - Ask for missing information instead of guessing it
    - Diagnostics are returned, never printed

Usage:
    from voiceos.models import Utterance, UserContext
    from voiceos.planner import VoicePlanner

    planner = VoicePlanner.default()
    result = planner.plan(Utterance("öffne tagebuch"), UserContext())
    print(result.plan.to_dict())
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "voice_planner.yaml"

__version__ = "0.1.0"

__all__ = [
    "ARGS_DIR",
    "CONFIG_PATH",
    "PROJECT_ROOT",
    "__version__",
]
