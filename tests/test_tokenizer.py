"""
Tests for turning raw text into grammar symbols.
"""

import pytest

from timeresolver.conf import Settings
from timeresolver.symbols import Number, Origin, Time
from timeresolver.tokenizer import (
    clean_token,
    parse_normal,
    parse_normal_date,
    parse_subnormal,
    separate_digits,
    tokenize,
    ymd_parse,
)


class TestSeparateDigits:

    def test_digits_and_letters(self):
        assert separate_digits("at5 10m") == "at 5 10 m"

    def test_ordinal(self):
        assert separate_digits("31st of september") == "31 st of september"

    def test_collapses_whitespace(self):
        assert separate_digits("  in   5h ") == "in 5 h "


class TestNormalForms:
    """Tests for windows that parse as a complete calendar date."""

    def test_full_date(self):
        assert parse_normal("May 13, 2011 01:30:00", 7) == (
            ["2011-05-13 01:30:00.000"],
            ["May 13, 2011 01:30:00"],
        )

    def test_window_inside_text(self):
        tokens_in, tokens_out = parse_normal("remind me on May 13, 2011 please", 7)
        assert tokens_in == ["2011-05-13 00:00:00.000"]
        assert tokens_out == ["May 13, 2011"]

    def test_minimum_length(self):
        assert parse_normal("May 2011", 10) == ([], [])
        assert parse_normal("May 2011", 7) == (["2011-05-01 00:00:00.000"], ["May 2011"])

    @pytest.mark.parametrize("text", ["tomorrow", "2013", "May 13", "at 5"])
    def test_not_a_date(self, text):
        """Test that a year and a month are both required."""
        assert parse_normal_date(text) is None


class TestSubnormalForms:

    def test_ymd_parse(self):
        assert ymd_parse("12", "24") == "12M24d"
        assert ymd_parse("2012", "12") == "2012y12M"

    def test_slash_date(self):
        text, tokens_in, tokens_out = parse_subnormal("12/24", 64)
        assert text.strip() == "t:12M24d,dt:"
        assert tokens_out == ["12/24"]

    def test_slash_date_range(self):
        text, _, _ = parse_subnormal("12/20 - 12/21", 64)
        assert text.split() == ["t:12M20d,dt:", "-", "t:12M21d,dt:"]

    def test_slash_date_short_range(self):
        text, _, _ = parse_subnormal("12/22 - 23", 64)
        assert text.split() == ["t:12M22d,dt:", "-", "t:12M23d,dt:"]

    def test_compact_clock(self):
        text, _, _ = parse_subnormal("1730", 64)
        assert text.strip() == "t:17h30m,dt:"

    def test_clock_keeps_trailing_word(self):
        text, _, _ = parse_subnormal("at 5:30pm", 64)
        assert text.split() == ["at", "t:5h30m,dt:", "pm"]

    def test_passes_are_bounded(self):
        _, _, tokens_out = parse_subnormal("12/24 1/2", 1)
        assert tokens_out == ["12/24"]


class TestTokenize:
    """Tests for the full tokenizer."""

    def test_symbols_and_phrases(self):
        tokenized = tokenize("5 days from now")
        assert tokenized.tokens == ["5", "days", "from now"]
        assert tokenized.symbols[0] == Number(5)
        assert isinstance(tokenized.symbols[1], Time)
        assert tokenized.symbols[2] == Origin("plus")

    def test_plain_words_are_none(self):
        tokenized = tokenize("call mom tomorrow")
        assert tokenized.symbols[:2] == [None, None]
        assert tokenized.symbols[2].canon == "tomorrow"

    def test_normal_form_becomes_one_symbol(self):
        tokenized = tokenize("May 13, 2011 01:30:00")
        assert tokenized.tokens == ["t:2011y05M13d01h30m00.000s,dt:"]
        assert tokenized.tokens_in == ["2011-05-13 01:30:00.000"]
        assert tokenized.tokens_out == ["May 13, 2011 01:30:00"]

    def test_punctuation_is_stripped(self):
        assert tokenize("monday, please.").tokens == ["monday", "please"]

    def test_settings(self):
        assert tokenize("May 2011").tokens_out == ["May 2011"]
        tokenized = tokenize("May 2011", Settings().replace(MIN_NORMAL_LENGTH=10))
        assert "May 2011" not in tokenized.tokens_out

    def test_empty(self):
        assert tokenize("").tokens == []


class TestCleanToken:

    def test_strips_edges(self):
        assert clean_token("(monday),") == "monday"

    def test_keeps_encoding(self):
        assert clean_token("t:5h,dt:") == "t:5h,dt:"
