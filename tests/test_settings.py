"""
Tests for Settings.ceiling_config and validation.
"""

import pytest

from coach.errors import ConfigurationError
from coach.settings import Settings


class TestCeilingConfig:
    def test_defaults(self):
        config = Settings.ceiling_config()

        assert (config.coaching, config.refinement, config.help, config.total) == (3, 2, 2, 8)

    def test_values_are_parsed(self, monkeypatch):
        monkeypatch.setattr(Settings, "COACHING_CEILING", " 5 ")
        monkeypatch.setattr(Settings, "TOTAL_CEILING", "12")

        config = Settings.ceiling_config()

        assert config.coaching == 5
        assert config.total == 12

    def test_non_integer_raises(self, monkeypatch):
        monkeypatch.setattr(Settings, "HELP_CEILING", "two")

        with pytest.raises(ConfigurationError, match="HELP_CEILING"):
            Settings.ceiling_config()

    def test_negative_raises(self, monkeypatch):
        monkeypatch.setattr(Settings, "REFINEMENT_CEILING", "-1")

        with pytest.raises(ConfigurationError):
            Settings.ceiling_config()

    def test_total_below_one_raises(self, monkeypatch):
        monkeypatch.setattr(Settings, "TOTAL_CEILING", "0")

        with pytest.raises(ConfigurationError):
            Settings.ceiling_config()

    def test_configuration_error_is_value_error(self, monkeypatch):
        monkeypatch.setattr(Settings, "TOTAL_CEILING", "x")

        with pytest.raises(ValueError):
            Settings.ceiling_config()


class TestValidate:
    def test_missing_gemini_key(self, monkeypatch):
        monkeypatch.setattr(Settings, "GEMINI_API_KEY", "")

        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            Settings.validate()

    def test_valid(self, monkeypatch):
        monkeypatch.setattr(Settings, "GEMINI_API_KEY", "test-key")
        Settings.validate()
