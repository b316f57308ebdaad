"""Tests for the voiceos-debug command (voiceos/debug.py)."""

import json

from voiceos import __version__
from voiceos.debug import main

NOW = "2025-03-10T09:00:00+01:00"


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"voiceos {__version__}"


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_plan_json(capsys):
    code = main([
        "--log-level", "WARNING",
        "plan", "Bewerte Sumatriptan mit 8",
        "--med", "Sumatriptan 50mg",
        "--now", NOW,
        "--json",
    ])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["plan"]["kind"] == "mutation"
    assert data["plan"]["payload"]["rating"] == 8
    assert data["plan"]["diagnostics"]["matched_skill_id"] == "rate_intake"


def test_plan_text_output(capsys):
    assert main(["--log-level", "WARNING", "plan", "öffne tagebuch", "--now", NOW]) == 0
    out = capsys.readouterr().out
    assert "Kind:       navigate" in out
    assert "nav_diary" in out


def test_explain(capsys):
    assert main(["--log-level", "WARNING", "explain", "zeig letzten eintrag", "--now", NOW]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Transcript: zeig letzten eintrag")
    assert "last_entry" in out


def test_skills(capsys):
    assert main(["--log-level", "WARNING", "skills"]) == 0
    out = capsys.readouterr().out
    assert "delete_entry" in out
    assert "high" in out
