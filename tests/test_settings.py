"""Tests for configuration parsing."""

from datetime import timedelta

import pytest

from core.fancontrol.exceptions import ConfigurationError
from core.fancontrol.settings import (
    AdaptivePollingRate,
    FanControlSettings,
    FixedPollingRate,
    NightModeConfig,
    NightModeDisabled,
    NightModeEnabled,
    load_runtime_config,
)


def test_defaults() -> None:
    settings = FanControlSettings()

    assert settings.zip_code == "10117"
    assert settings.hysteresis_offset == 2.0
    assert settings.polling_rate_sensor_inside == timedelta(seconds=5)
    assert isinstance(settings.outdoor_polling, AdaptivePollingRate)
    assert settings.night_mode == NightModeEnabled(max_duty_cycle=70, start_hour=22, end_hour=6)
    assert settings.night_mode.wraps_midnight


def test_from_dict_camel_case() -> None:
    settings = FanControlSettings.from_dict({
        "zipCode": 80331,
        "ignoreWindow": True,
        "hysteresisOffset": "1.5",
        "pollingRateSensorInside": 30,
        "pollingRateSensorOutside": 600,
        "nightModeConfig": {"maxDutyCycle": 40, "startHour": 1, "endHour": 5},
    })

    assert settings.zip_code == "80331"
    assert settings.ignore_window is True
    assert settings.hysteresis_offset == 1.5
    assert settings.polling_rate_sensor_inside == timedelta(seconds=30)
    assert settings.outdoor_polling == FixedPollingRate(timedelta(minutes=10))
    assert settings.night_mode == NightModeEnabled(40, 1, 5)


def test_partial_night_mode_is_disabled() -> None:
    settings = FanControlSettings.from_dict({"nightModeConfig": {"maxDutyCycle": 40, "startHour": 22}})

    assert settings.night_mode_config == NightModeConfig(max_duty_cycle=40, start_hour=22)
    assert isinstance(settings.night_mode, NightModeDisabled)


def test_null_night_mode() -> None:
    settings = FanControlSettings.from_dict({"nightModeConfig": None})

    assert settings.night_mode_config is None
    assert isinstance(settings.night_mode, NightModeDisabled)


def test_to_dict_round_trip() -> None:
    settings = FanControlSettings(polling_rate_sensor_outside=timedelta(minutes=5), dark_mode=True)

    assert FanControlSettings.from_dict(settings.to_dict()) == settings


@pytest.mark.parametrize(
    "data",
    [
        {"hysteresisOffset": -0.1},
        {"hysteresisOffset": "lots"},
        {"hysteresisOffset": float("nan")},
        {"hysteresisOffset": "inf"},
        {"pollingRateSensorOutside": float("inf")},
        {"pollingRateSensorOutside": 0},
        {"pollingRateWeb": -5},
        {"nightModeConfig": {"maxDutyCycle": 120, "startHour": 22, "endHour": 6}},
        {"nightModeConfig": {"maxDutyCycle": 50, "startHour": 24, "endHour": 6}},
        {"nightModeConfig": "always"},
    ],
)
def test_invalid_values(data) -> None:
    with pytest.raises(ConfigurationError):
        FanControlSettings.from_dict(data)


class TestRuntimeConfig:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in (
            "FANCONTROL_DB", "WEATHER_KEY", "weather_key", "WEATHER_COUNTRY",
            "WEATHER_CACHE_MINUTES", "FANCONTROL_TIMEZONE", "PORT", "LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_defaults_without_file(self, tmp_path) -> None:
        config = load_runtime_config(str(tmp_path / "missing.yaml"))

        assert config.db_path == "db.sqlite"
        assert config.weather_key is None
        assert config.weather_cache_ttl == timedelta(minutes=10)
        assert config.tzinfo() is None

    def test_yaml_options(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "options:\n"
            "  db_path: /data/fan.sqlite\n"
            "  weather_key: abc\n"
            "  weatherCacheMinutes: 15\n"
            "  timezone: Europe/Berlin\n"
        )

        config = load_runtime_config(str(path))

        assert config.db_path == "/data/fan.sqlite"
        assert config.weather_key == "abc"
        assert config.weather_cache_ttl == timedelta(minutes=15)
        assert config.tzinfo().key == "Europe/Berlin"

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("options:\n  port: 9000\n  weather_key: from-file\n")
        monkeypatch.setenv("PORT", "8181")
        monkeypatch.setenv("weather_key", "legacy")

        config = load_runtime_config(str(path))

        assert config.port == 8181
        assert config.weather_key == "legacy"

    def test_invalid_port(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "eighty")

        with pytest.raises(ConfigurationError):
            load_runtime_config(str(tmp_path / "missing.yaml"))

    def test_unknown_timezone(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("FANCONTROL_TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ConfigurationError):
            load_runtime_config(str(tmp_path / "missing.yaml"))
