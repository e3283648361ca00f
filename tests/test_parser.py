"""
Tests for the scanner that resolves normalized text.
"""

from datetime import datetime, timezone

import pytest

from timeresolver.conf import Settings
from timeresolver.parser import Parser


@pytest.fixture
def anchor():
    return datetime(2013, 5, 13, 1, 30)


class TestParse:

    def test_classmethod(self, anchor):
        assert Parser.parse("next week tuesday", anchor) == datetime(2013, 5, 21, 1, 30)

    def test_tokens_are_recorded(self, anchor):
        parser = Parser("tomorrow at 5pm", anchor)
        assert parser._parse() == datetime(2013, 5, 14, 17, 0)
        assert "tomorrow" in parser.tokens
        assert "meridiem" in parser.tokens
        assert parser.tokens[-1] == "eos"

    def test_normal_form_keeps_reference_zone(self):
        reference = datetime(2013, 5, 13, 1, 30, tzinfo=timezone.utc)
        result = Parser.parse("May 13, 2011 01:30:00", reference)
        assert result == datetime(2011, 5, 13, 1, 30, tzinfo=timezone.utc)

    def test_no_match_returns_reference(self, anchor):
        assert Parser.parse("nothing here", anchor) is anchor

    def test_default_settings(self, anchor):
        assert Parser("noon", anchor).settings.ROLLOVER_THRESHOLD == 60


class TestRules:
    """Tests for individual scanner rules."""

    def test_time_ago(self, anchor):
        assert Parser.parse("3 hours ago", anchor) == datetime(2013, 5, 12, 22, 30)

    def test_ago_without_number(self, anchor):
        """Test that a unit with no quantity counts one."""
        assert Parser.parse("week ago", anchor) == datetime(2013, 5, 6, 1, 30)

    def test_fortnight(self, anchor):
        assert Parser.parse("fortnight", anchor) == datetime(2013, 5, 27, 1, 30)

    def test_clock_with_meridiem(self, anchor):
        assert Parser.parse("today 5:30pm", anchor) == datetime(2013, 5, 13, 17, 30)

    def test_twelve_am_is_midnight(self, anchor):
        assert Parser.parse("tomorrow 12am", anchor) == datetime(2013, 5, 14, 0, 0)

    def test_month_by_name(self, anchor):
        assert Parser.parse("3rd day of june", anchor) == datetime(2013, 6, 3, 1, 30)

    def test_words_inside_words_are_not_units(self, anchor):
        assert Parser.parse("meeting", anchor) is anchor

    def test_evening_day_part(self, anchor):
        assert Parser.parse("tomorrow evening", anchor) == datetime(2013, 5, 14, 17, 0)

    def test_next_day_part(self, anchor):
        """Test that "next" in front of a day part moves to the next day."""
        assert Parser.parse("next morning", anchor) == datetime(2013, 5, 14, 8, 0)


class TestRollover:

    def test_past_clock_rolls_to_tomorrow(self, anchor):
        assert Parser.parse("at 1am", anchor) == datetime(2013, 5, 14, 1, 0)

    def test_looking_back_does_not_roll(self, anchor):
        assert Parser.parse("today at 1am", anchor) == datetime(2013, 5, 13, 1, 0)

    def test_within_threshold_does_not_roll(self):
        reference = datetime(2013, 5, 13, 1, 0, 30)
        assert Parser.parse("at 1am", reference) == datetime(2013, 5, 13, 1, 0)

    def test_threshold_setting(self, anchor):
        settings = Settings().replace(ROLLOVER_THRESHOLD=7200)
        assert Parser.parse("at 1am", anchor, settings) == datetime(2013, 5, 13, 1, 0)
