"""voiceos test suite.

Everything runs offline against a fixed clock (2025-03-10 09:00,
Europe/Berlin) and a small medication list, see conftest.py.

Test organization:
- unit/lexicon/: canonicalizer, numbers, operators and time ranges
- unit/parser/: time expressions, medication matching, noise guard
- unit/skills/: skill registry, scoring helpers and the built-in skills
- unit/planner/: voice planner, slot filling, safety policy, config
- unit/models/: plan dataclasses and their JSON shape
- unit/cli/: the voiceos-debug command
- unit/test_logging_config.py: structlog setup and the component field

Running tests:
    # All tests
    pytest tests/

    # One area
    pytest tests/unit/planner/

    # By name
    pytest -k noise
"""
