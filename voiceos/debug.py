#!/usr/bin/env python3
"""
Voice planner debug CLI

Shows the plan for an utterance together with the ranked skill candidates.
Meant for tuning keywords and thresholds, never for production use.

Usage:
    python -m voiceos.debug plan "wann zuletzt triptan genommen"
    python -m voiceos.debug plan "bewerte sumatriptan mit 8" --med "Sumatriptan 50mg" --json
    python -m voiceos.debug explain "zeig letzten eintrag"
    python -m voiceos.debug skills
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime

from voiceos import __version__
from voiceos.lexicon.canonicalizer import canonicalize
from voiceos.logging_config import setup_logging
from voiceos.models import InputSource, Utterance, UserContext
from voiceos.planner import VoicePlanner


def _context(args) -> UserContext:
    return UserContext(user_meds=args.med or (), timezone=args.timezone)


def _now(args) -> datetime | None:
    if not args.now:
        return None
    return datetime.fromisoformat(args.now)


def cmd_plan(args) -> int:
    planner = VoicePlanner.default()
    context = _context(args)
    utterance = Utterance(
        text=args.text,
        stt_confidence=args.stt_confidence,
        source=InputSource(args.source),
    )
    result = planner.plan(utterance, context, now=_now(args))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0

    plan = result.plan
    print(f"Kind:       {plan.kind.value}")
    print(f"Summary:    {plan.summary}")
    print(f"Confidence: {plan.confidence * 100:.1f}%")
    print(f"Decision:   {result.decision.action.value} ({result.decision.reason})")
    for candidate in result.diagnostics.candidate_scores:
        print(f"  {candidate.skill_id}: {candidate.score * 100:.1f}%")
    return 0


def cmd_explain(args) -> int:
    planner = VoicePlanner.default()
    context = _context(args)
    now = _now(args) or datetime.now()
    print(planner.registry.explain_matches(args.text, canonicalize(args.text), context, now))
    return 0


def cmd_skills(args) -> int:
    planner = VoicePlanner.default()
    for skill in planner.registry.skills:
        slots = ", ".join(s.name for s in skill.required_slots) or "-"
        print(f"{skill.id:<28} {skill.category.value:<8} {skill.risk.value:<7} {slots}")
    return 0


def _add_context_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("text", help="Utterance to plan")
    parser.add_argument(
        "--med", action="append", help="User medication name (repeatable)"
    )
    parser.add_argument(
        "--timezone", default="Europe/Berlin", help="IANA timezone (default: Europe/Berlin)"
    )
    parser.add_argument(
        "--now", help="Fixed clock as ISO timestamp, e.g. 2025-03-10T09:00:00+01:00"
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="voiceos-debug",
        description="Voice OS - inspect plans and skill scores",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level (default: VOICEOS_LOG_LEVEL or INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    plan_parser = subparsers.add_parser("plan", help="Plan one utterance")
    _add_context_args(plan_parser)
    plan_parser.add_argument(
        "--source",
        default=InputSource.STT.value,
        choices=[s.value for s in InputSource],
        help="Input source (default: stt)",
    )
    plan_parser.add_argument(
        "--stt-confidence", type=float, default=None, help="Speech recognition confidence"
    )
    plan_parser.add_argument("--json", action="store_true", help="Print the full plan as JSON")
    plan_parser.set_defaults(func=cmd_plan)

    explain_parser = subparsers.add_parser("explain", help="Rank skill candidates")
    _add_context_args(explain_parser)
    explain_parser.set_defaults(func=cmd_explain)

    skills_parser = subparsers.add_parser("skills", help="List registered skills")
    skills_parser.set_defaults(func=cmd_skills)

    args = parser.parse_args(argv)

    if args.version:
        print(f"voiceos {__version__}")
        return 0

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
