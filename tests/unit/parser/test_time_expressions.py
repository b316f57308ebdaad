"""Tests for time parsing and entity extraction in voiceos/parser/entity_extractor.py

Every case runs against a fixed clock (Monday 2025-03-10, 09:00 Berlin).
"""

import pytest

from voiceos.lexicon import canonicalize
from voiceos.models import Repeat
from voiceos.parser.entity_extractor import (
    MAX_OFFSET_HOURS,
    extract_entities,
    parse_time_expression,
    time_range_for,
)


class TestParseTimeExpression:
    """Test reminder time parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("um 14 uhr", "2025-03-10T14:00:00+01:00"),
            ("um 14:30", "2025-03-10T14:30:00+01:00"),
            ("morgen früh", "2025-03-11T08:00:00+01:00"),
            ("übermorgen", "2025-03-12T08:00:00+01:00"),
            ("heute abend", "2025-03-10T18:00:00+01:00"),
            ("in 2 stunden", "2025-03-10T11:00:00+01:00"),
            ("in 30 minuten", "2025-03-10T09:30:00+01:00"),
        ],
    )
    def test_absolute_and_relative_times(self, text, expected, now):
        assert parse_time_expression(text, now).iso() == expected

    def test_past_clock_time_moves_to_tomorrow(self, now):
        result = parse_time_expression("um 8 uhr", now)
        assert result.iso() == "2025-03-11T08:00:00+01:00"

    def test_daily_repeat(self, now):
        result = parse_time_expression("täglich um 20 uhr", now)
        assert result.repeat == Repeat.DAILY
        assert result.date_time.hour == 20

    def test_weekly_repeat(self, now):
        assert parse_time_expression("jede woche", now).repeat == Repeat.WEEKLY

    def test_invalid_clock_time_is_ignored(self, now):
        assert parse_time_expression("um 25 uhr", now) is None

    def test_no_time_cue(self, now):
        assert parse_time_expression("erinnere mich an triptan", now) is None

    @pytest.mark.parametrize(
        "text",
        ["in 99999999 stunden", "in 9000 stunden", "in 600000 minuten", "in 99999999999 minuten"],
    )
    def test_offset_out_of_range(self, text, now):
        assert parse_time_expression(text, now) is None

    def test_offset_at_limit(self, now):
        result = parse_time_expression(f"in {MAX_OFFSET_HOURS} stunden", now)
        assert result.date_time.date().isoformat() == "2026-03-10"


class TestTimeRange:
    def test_range_ends_today(self, now):
        time_range = time_range_for(7, now)
        assert time_range.days == 7
        assert time_range.from_date == "2025-03-03"
        assert time_range.to_date == "2025-03-10"

    def test_to_dict_keys(self, now):
        assert set(time_range_for(30, now).to_dict()) == {"from", "to", "days"}


class TestExtractEntities:
    """All extractors combined, as attached to diagnostics."""

    def test_medication_and_range(self, user_context, now):
        raw = "Wie oft Sumatriptan in den letzten 14 Tagen?"
        entities = extract_entities(raw, canonicalize(raw), user_context, now)
        assert entities.medications == ("Sumatriptan 50mg",)
        assert entities.time_range.days == 14
        assert 14 in entities.numbers

    def test_ordinal_and_rating(self, user_context, now):
        raw = "bewerte den vorletzten Eintrag mit 8"
        entities = extract_entities(raw, canonicalize(raw), user_context, now)
        assert entities.ordinals == (2,)
        assert entities.rating == 8

    def test_reminder_time(self, user_context, now):
        raw = "Erinnere mich morgen früh an Triptan"
        entities = extract_entities(raw, canonicalize(raw), user_context, now)
        assert entities.date_time == "2025-03-11T08:00:00+01:00"
        assert entities.medications == ("triptan",)

    def test_huge_numbers_do_not_fail(self, user_context, now):
        raw = "erinnere mich in 99999999 stunden an triptan, letzten 10000 jahren"
        entities = extract_entities(raw, canonicalize(raw), user_context, now)
        assert entities.date_time is None
        assert entities.time_range.days == 3650

    def test_empty_for_navigation(self, user_context, now):
        entities = extract_entities("öffne tagebuch", "öffne tagebuch", user_context, now)
        assert entities.medications == ()
        assert entities.time_range is None
        assert entities.date_time is None
