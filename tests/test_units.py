"""
Tests for carry arithmetic and the standard string helpers.
"""

from datetime import datetime

import pytest

from timeresolver.symbols import Time, UnitMap
from timeresolver.units import (
    carry,
    carry_down,
    carry_up,
    dump_week,
    highest_override,
    largest_unit,
    next_largest_unit,
    parse_std,
    split_t,
    std_string,
    std_to_t,
    t_to_std,
)


class TestCarry:
    """Tests for moving quantities between adjacent units."""

    def test_fraction_carries_down(self):
        assert carry_down({"h": 1.5}) == {"h": 1, "m": 30.0}

    def test_overflow_carries_up(self):
        assert carry_up({"m": 90}) == {"m": 30.0, "h": 1.0}

    def test_weeks_fold_into_days(self):
        assert dump_week({"w": "2", "d": "1"}) == {"d": 15.0}

    def test_weeks_alone_fold_into_days(self):
        assert dump_week({"w": "1"}) == {"d": 7.0}

    def test_no_weeks_no_days(self):
        """Test that days are not introduced when neither unit is present."""
        assert dump_week({"h": "1"}) == {"h": "1"}

    def test_carry_both_ways(self):
        result = carry({"h": "1.5", "m": "45"})
        assert result["h"] == 2.0
        assert result["m"] == 15.0

    @pytest.mark.parametrize(
        "fields",
        [
            {"s": 3725},
            {"h": 49, "m": 61},
            {"m": 59, "s": 60},
            {"d": 400, "h": 23},
            {"y": 1, "M": 2, "d": 3},
        ],
    )
    def test_carry_down_leaves_whole_overflow_to_carry_up(self, fields):
        """Test that carrying down first changes nothing for whole quantities."""
        assert carry_up(carry_down(dict(fields))) == carry_up(dict(fields))


class TestSplitT:

    def test_displacement(self):
        assert split_t("t:1.5h,dt:") == [None, None, None, 1.0, 30.0, None]

    def test_weeks(self):
        assert split_t("t:,dt:1w") == [None, None, 7.0, None, None, None]

    def test_complete_date_is_not_carried(self):
        """Test that the 31st survives even though months count 30 days."""
        assert split_t("t:2013y05M31d,dt:") == [2013.0, 5.0, 31.0, None, None, None]

    def test_t_shadows_dt(self):
        assert split_t("t:5h,dt:3h") == [None, None, None, 5.0, None, None]

    def test_time_symbol(self):
        assert split_t(Time.parse("t:12M24d,dt:")) == [None, 12.0, 24.0, None, None, None]

    @pytest.mark.parametrize("text", ["tomorrow", "", None])
    def test_not_an_encoding(self, text):
        assert split_t(text) is None


class TestStandardStrings:

    @pytest.fixture
    def anchor(self):
        return datetime(2013, 5, 13, 1, 30)

    def test_std_string_milliseconds(self):
        assert std_string(datetime(2013, 5, 13, 1, 30, 0, 123456)) == "2013-05-13 01:30:00.123"

    def test_std_to_t(self):
        assert std_to_t("2011-10-05 14:48:00.000") == "t:2011y10M05d14h48m00.000s,dt:"

    def test_missing_fields_from_reference(self, anchor):
        assert t_to_std("t:12M24d,dt:", anchor) == "2013-12-24 01:30:00.000"

    def test_full_encoding(self, anchor):
        assert t_to_std("t:2011y10M05d14h48m00.000s,dt:", anchor) == "2011-10-05 14:48:00.000"

    def test_parse_std(self):
        assert parse_std("2011-10-05 14:48:00.000") == datetime(2011, 10, 5, 14, 48)


class TestUnitQueries:

    def test_highest_override(self):
        assert highest_override(UnitMap({"h": "=9", "m": "=30"})) == "h"
        assert highest_override(UnitMap({"h": "9"})) is None
        assert highest_override(None) is None

    def test_largest_unit_prefers_t(self):
        assert largest_unit(Time.parse("t:5h,dt:2d")) == "h"

    def test_largest_unit_of_displacement(self):
        assert largest_unit(Time.parse("t:,dt:2d")) == "d"

    def test_next_largest_unit(self):
        assert next_largest_unit(Time.parse("t:5h,dt:")) == "d"

    def test_nothing_above_years(self):
        assert next_largest_unit(Time.parse("t:2013y,dt:")) is None
