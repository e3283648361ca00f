"""
Tests for settings and their validation.
"""

import pytest

from timeresolver.conf import (
    DEFAULT_DAYPART_HOURS,
    SettingValidationError,
    Settings,
    apply_settings,
    check_settings,
)


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.MIN_NORMAL_LENGTH == 7
        assert settings.MAX_REWRITE_PASSES == 64
        assert settings.ROLLOVER_THRESHOLD == 60
        assert settings.RETURN_AS_TIMEZONE_AWARE is False
        assert settings.DEFAULT_DAYPART_HOURS == DEFAULT_DAYPART_HOURS

    def test_defaults_are_copies(self):
        Settings().DEFAULT_DAYPART_HOURS["morning"] = 3
        assert Settings().DEFAULT_DAYPART_HOURS["morning"] == 8

    def test_replace(self):
        settings = Settings().replace(ROLLOVER_THRESHOLD=10)
        assert settings.ROLLOVER_THRESHOLD == 10
        assert settings.MIN_NORMAL_LENGTH == 7
        assert settings._default is False

    def test_replace_with_none(self):
        with pytest.raises(TypeError):
            Settings().replace(ROLLOVER_THRESHOLD=None)


class TestApplySettings:
    """Tests for the decorator that turns a dict into Settings."""

    @pytest.fixture
    def echo(self):
        @apply_settings
        def echo(settings=None):
            return settings

        return echo

    def test_missing_settings(self, echo):
        assert isinstance(echo(), Settings)

    def test_dict(self, echo):
        assert echo(settings={"MIN_NORMAL_LENGTH": 3}).MIN_NORMAL_LENGTH == 3

    def test_instance_is_passed_through(self, echo):
        settings = Settings()
        assert echo(settings=settings) is settings

    def test_wrong_type(self, echo):
        with pytest.raises(TypeError):
            echo(settings=["MIN_NORMAL_LENGTH"])


class TestCheckSettings:

    @pytest.mark.parametrize(
        "settings",
        [
            {"UNKNOWN": 1},
            {"MIN_NORMAL_LENGTH": "7"},
            {"MAX_REWRITE_PASSES": 0},
            {"RETURN_AS_TIMEZONE_AWARE": 1},
            {"DEFAULT_DAYPART_HOURS": {"brunch": 11}},
            {"DEFAULT_DAYPART_HOURS": {"morning": 25}},
            {"DEFAULT_DAYPART_HOURS": {"morning": "8"}},
        ],
    )
    def test_invalid(self, settings):
        with pytest.raises(SettingValidationError):
            check_settings(settings)

    def test_valid(self):
        check_settings({"ROLLOVER_THRESHOLD": 0, "DEFAULT_DAYPART_HOURS": {"evening": 18}})

    def test_is_a_value_error(self):
        assert issubclass(SettingValidationError, ValueError)
