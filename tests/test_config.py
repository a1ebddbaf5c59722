"""Tests for configuration loading and validation."""

import pytest

from studio_engine.config import (
    AppConfig,
    CalendarConfig,
    LifecycleConfig,
    PaymentConfig,
    StudioConfig,
    _safe_bool,
    _safe_int,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_unknown_timezone(self):
        config = AppConfig(studio=StudioConfig(timezone="Mars/Olympus_Mons"))
        with pytest.raises(ValueError, match="STUDIO_TIMEZONE"):
            _validate_config(config)

    def test_grid_start_after_end(self):
        config = AppConfig(calendar=CalendarConfig(day_start_hour=20, day_end_hour=8))
        with pytest.raises(ValueError, match="must be before"):
            _validate_config(config)

    def test_grid_end_out_of_range(self):
        config = AppConfig(calendar=CalendarConfig(day_start_hour=8, day_end_hour=25))
        with pytest.raises(ValueError, match="CALENDAR_DAY_END_HOUR"):
            _validate_config(config)

    def test_zero_attempts(self):
        config = AppConfig(lifecycle=LifecycleConfig(max_side_effect_attempts=0))
        with pytest.raises(ValueError, match="MAX_SIDE_EFFECT_ATTEMPTS"):
            _validate_config(config)

    def test_unknown_square_environment(self):
        config = AppConfig(payment=PaymentConfig(environment="staging"))
        with pytest.raises(ValueError, match="SQUARE_ENVIRONMENT"):
            _validate_config(config)

    def test_bad_currency(self):
        config = AppConfig(payment=PaymentConfig(currency="DOLLARS"))
        with pytest.raises(ValueError, match="PAYMENT_CURRENCY"):
            _validate_config(config)

    def test_tz_property(self):
        config = AppConfig(studio=StudioConfig(timezone="Europe/London"))
        assert config.tz.key == "Europe/London"


class TestPaymentConfig:
    def test_configured_needs_token_and_location(self):
        assert PaymentConfig(access_token="tok", location_id="loc").is_configured
        assert not PaymentConfig(access_token="tok", location_id="").is_configured
        assert not PaymentConfig(access_token="", location_id="loc").is_configured


class TestEnvParsing:
    def test_safe_int_parsing(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("STUDIO_TEST_INT", "eight")
        with pytest.raises(ValueError, match="STUDIO_TEST_INT"):
            _safe_int("STUDIO_TEST_INT", "8")

    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("1", True), ("YES", True), ("false", False), ("0", False), ("off", False),
    ])
    def test_safe_bool_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("STUDIO_TEST_BOOL", raw)
        assert _safe_bool("STUDIO_TEST_BOOL", "true") is expected

    def test_safe_bool_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("STUDIO_TEST_BOOL", "maybe")
        with pytest.raises(ValueError, match="STUDIO_TEST_BOOL"):
            _safe_bool("STUDIO_TEST_BOOL", "true")
