"""Entity extraction from voice command transcripts.

Extracts structured entities (medications, time ranges, ordinals, numbers,
ratings, reminder times) from German voice input. Time-relative extraction
always takes ``now`` as an argument; nothing here reads the clock.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from voiceos.lexicon.canonicalizer import (
    extract_numbers,
    extract_ordinal,
    extract_rating,
    extract_time_range,
)
from voiceos.models import ExtractedEntities, Repeat, TimeRange, UserContext
from voiceos.parser.medication_matcher import extract_medications

DEFAULT_HOUR = 8

# "in N stunden" beyond a year is not a reminder time
MAX_OFFSET_HOURS = 24 * 365
MAX_OFFSET_MINUTES = 60 * MAX_OFFSET_HOURS

_DAILY = re.compile(r"\b(?:täglich|jeden\s*tag|immer)\b")
_WEEKLY = re.compile(r"\b(?:wöchentlich|jede\s*woche)\b")
_IN_HOURS = re.compile(r"\bin\s*(\d{1,7})\s*(?:stunden|stunde|std|h)\b")
_IN_MINUTES = re.compile(r"\bin\s*(\d{1,7})\s*(?:minuten|minute|min)\b")
_CLOCK_UHR = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*uhr\b")
_CLOCK_COLON = re.compile(r"\b(\d{1,2}):(\d{2})\b")

# Daypart → hour
_DAYPARTS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"\b(?:morgens|früh)\b"), 8),
    (re.compile(r"\b(?:mittags?)\b"), 12),
    (re.compile(r"\b(?:nachmittags?)\b"), 15),
    (re.compile(r"\b(?:abends?|heute abend)\b"), 18),
    (re.compile(r"\b(?:nachts?|spät)\b"), 22),
)

# Relative day → offset
_DAYS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"\bübermorgen\b"), 2),
    (re.compile(r"\bmorgen\b"), 1),
    (re.compile(r"\bheute\b"), 0),
)


@dataclass(frozen=True)
class TimeExpression:
    date_time: datetime
    repeat: Repeat = Repeat.NONE

    def iso(self) -> str:
        return self.date_time.isoformat()


def parse_time_expression(text: str, now: datetime) -> TimeExpression | None:
    """Parse a reminder time like "morgen früh", "um 14 uhr", "in 2 stunden".

    Returns None when the text carries no time cue at all, so callers can
    ask for the time instead of guessing it, and also when a relative
    offset is out of range ("in 99999 stunden"). A clock time that already
    passed today moves to tomorrow unless a day or a repeat was given.
    """
    lower = text.lower()

    repeat = Repeat.NONE
    if _DAILY.search(lower):
        repeat = Repeat.DAILY
    elif _WEEKLY.search(lower):
        repeat = Repeat.WEEKLY

    match = _IN_HOURS.search(lower)
    if match:
        hours = int(match.group(1))
        if hours > MAX_OFFSET_HOURS:
            return None
        return TimeExpression(now + timedelta(hours=hours), repeat)

    match = _IN_MINUTES.search(lower)
    if match:
        minutes = int(match.group(1))
        if minutes > MAX_OFFSET_MINUTES:
            return None
        return TimeExpression(now + timedelta(minutes=minutes), repeat)

    hour: int | None = None
    minute = 0
    match = _CLOCK_UHR.search(lower) or _CLOCK_COLON.search(lower)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if hour > 23 or minute > 59:
            hour, minute = None, 0
    if hour is None:
        for pattern, daypart_hour in _DAYPARTS:
            if pattern.search(lower):
                hour = daypart_hour
                break

    day_offset: int | None = None
    for pattern, offset in _DAYS:
        if pattern.search(lower):
            day_offset = offset
            break

    if hour is None and day_offset is None and repeat == Repeat.NONE:
        return None

    target = now.replace(
        hour=DEFAULT_HOUR if hour is None else hour,
        minute=minute,
        second=0,
        microsecond=0,
    ) + timedelta(days=day_offset or 0)

    if target <= now and repeat == Repeat.NONE and day_offset is None:
        target += timedelta(days=1)

    return TimeExpression(target, repeat)


def time_range_for(days: int, now: datetime) -> TimeRange:
    """Closed date range ending today."""
    return TimeRange(
        days=days,
        from_date=(now - timedelta(days=days)).date().isoformat(),
        to_date=now.date().isoformat(),
    )


def extract_entities(
    raw_text: str,
    canonical: str,
    context: UserContext,
    now: datetime,
) -> ExtractedEntities:
    """Run all extractors and combine the results.

    Attached to diagnostics regardless of which skill wins.
    """
    days = extract_time_range(canonical)
    ordinal = extract_ordinal(canonical)
    time_expr = parse_time_expression(canonical, now)

    return ExtractedEntities(
        medications=tuple(extract_medications(canonical, context.user_meds)),
        time_range=time_range_for(days, now) if days else None,
        numbers=tuple(extract_numbers(canonical)),
        ordinals=(ordinal,) if ordinal is not None else (),
        rating=extract_rating(canonical),
        date_time=time_expr.iso() if time_expr else None,
    )


__all__ = [
    "MAX_OFFSET_HOURS",
    "MAX_OFFSET_MINUTES",
    "TimeExpression",
    "extract_entities",
    "extract_numbers",
    "parse_time_expression",
    "time_range_for",
]
