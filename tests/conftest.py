"""Shared pytest fixtures for the fan control tests."""

from datetime import datetime, timedelta, timezone

import pytest

from core.fancontrol.control import ControlState
from core.fancontrol.models import IndoorMeasurement, OutdoorMeasurement
from core.fancontrol.settings import FanControlSettings, NightModeConfig
from core.fancontrol.weather import WeatherConditions, WeatherFetched, WeatherSnapshot

NOW = datetime(2024, 6, 1, 23, 15, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class CountingFetch:
    """Weather fetch stub that records how often it was called."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state() -> ControlState:
    return ControlState()


@pytest.fixture
def settings() -> FanControlSettings:
    """Offset 2.0, window respected, night mode 70 % from 22 to 6."""
    return FanControlSettings(
        hysteresis_offset=2.0,
        ignore_window=False,
        night_mode_config=NightModeConfig(max_duty_cycle=70, start_hour=22, end_hour=6),
    )


@pytest.fixture
def no_night_settings() -> FanControlSettings:
    return FanControlSettings(hysteresis_offset=2.0, night_mode_config=None)


@pytest.fixture
def outdoor() -> OutdoorMeasurement:
    """20 °C / 50 % -> about 8.65 g/m³."""
    return OutdoorMeasurement(time=NOW, temperature=20.0, relative_humidity=50.0, battery=3.7)


@pytest.fixture
def humid_indoor() -> IndoorMeasurement:
    """25 °C / 70 % -> about 16.1 g/m³."""
    return IndoorMeasurement(time=NOW, temperature=25.0, relative_humidity=70.0, window_open=False)


@pytest.fixture
def stable_weather() -> WeatherSnapshot:
    """Current weather matching the outdoor fixture, flat forecast."""
    return WeatherSnapshot(
        current=WeatherConditions(temperature=20.0, relative_humidity=50.0),
        forecast=[WeatherConditions(temperature=20.0, relative_humidity=55.0)],
    )


@pytest.fixture
def stable_fetch(stable_weather) -> CountingFetch:
    return CountingFetch(WeatherFetched(stable_weather))


@pytest.fixture
def make_fetch():
    """Factory for CountingFetch stubs."""
    return CountingFetch
