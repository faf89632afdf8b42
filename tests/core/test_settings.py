"""Tests for core.settings module.

Covers:
- TimespineSettings defaults
- TIMESPINE_* environment overrides
- Field validation
- get_settings caching and override_settings scoping
"""

import pytest
from pydantic import ValidationError

from timespine.core.settings import (
    TimespineSettings,
    clear_settings_cache,
    get_settings,
    override_settings,
)


class TestTimespineSettingsDefaults:
    def test_validation_off(self):
        assert TimespineSettings().validate_inputs is False

    def test_join_defaults(self):
        s = TimespineSettings()
        assert s.default_join_strategy == "auto"
        assert s.hash_join_ratio == 8.0
        assert s.hash_precompare is False

    def test_logging_defaults(self):
        s = TimespineSettings()
        assert s.log_level == "WARNING"
        assert s.log_format == "console"


class TestTimespineSettingsEnvOverride:
    def test_validate_inputs_from_env(self, monkeypatch):
        monkeypatch.setenv("TIMESPINE_VALIDATE_INPUTS", "true")
        assert TimespineSettings().validate_inputs is True

    def test_strategy_from_env(self, monkeypatch):
        monkeypatch.setenv("TIMESPINE_DEFAULT_JOIN_STRATEGY", "hash")
        assert TimespineSettings().default_join_strategy == "hash"

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("TIMESPINE_LOG_LEVEL", "debug")
        assert TimespineSettings().log_level == "DEBUG"

    def test_unprefixed_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("VALIDATE_INPUTS", "true")
        assert TimespineSettings().validate_inputs is False


class TestTimespineSettingsValidation:
    def test_ratio_must_exceed_one(self):
        with pytest.raises(ValidationError):
            TimespineSettings(hash_join_ratio=1.0)

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError):
            TimespineSettings(default_join_strategy="nested-loop")

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            TimespineSettings(log_level="LOUD")


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self):
        first = get_settings()
        assert get_settings(_force_reload=True) is not first

    def test_clear_cache_picks_up_env(self, monkeypatch):
        assert get_settings().validate_inputs is False
        monkeypatch.setenv("TIMESPINE_VALIDATE_INPUTS", "1")
        assert get_settings().validate_inputs is False
        clear_settings_cache()
        assert get_settings().validate_inputs is True


class TestOverrideSettings:
    def test_override_applies_inside_block(self):
        with override_settings(validate_inputs=True, hash_join_ratio=2.0) as s:
            assert s.validate_inputs is True
            assert get_settings() is s
            assert get_settings().hash_join_ratio == 2.0

    def test_override_restored(self):
        before = get_settings()
        with override_settings(hash_precompare=True):
            pass
        assert get_settings() is before

    def test_override_restored_on_error(self):
        before = get_settings()
        with pytest.raises(RuntimeError):
            with override_settings(validate_inputs=True):
                raise RuntimeError("boom")
        assert get_settings() is before

    def test_override_validated(self):
        with pytest.raises(ValidationError):
            with override_settings(hash_join_ratio=0.5):
                pass
