"""
Fan Control Service

Entry points for the HTTP layer: answers sensor reports with a fan command
and/or a sleep interval, and exposes the last command for status queries.

Collaborators are injected so the service never touches the database or the
network itself:
- load_config: current FanControlSettings (errors propagate)
- load_latest_outdoor: most recent outdoor measurement, or None
- fetch_weather: weather fetch returning WeatherFetched / WeatherFetchFailed
"""

import logging
from datetime import datetime, tzinfo
from typing import Callable, Optional

from . import control, polling
from .control import ControlState
from .models import ControlStatus, IndoorDecision, IndoorMeasurement, OutdoorDecision, OutdoorMeasurement
from .settings import FanControlSettings
from .weather import WeatherCache, WeatherFetchResult, WeatherSnapshot

logger = logging.getLogger(__name__)


class FanControlService:
    """Decision engine for the ventilation fan."""

    def __init__(
        self,
        load_config: Callable[[], FanControlSettings],
        load_latest_outdoor: Callable[[], Optional[OutdoorMeasurement]],
        fetch_weather: Callable[[], WeatherFetchResult],
        state: Optional[ControlState] = None,
        weather_cache: Optional[WeatherCache] = None,
        clock: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
    ):
        """Initialize the service.

        Args:
            load_config: Loads the current configuration
            load_latest_outdoor: Loads the most recent outdoor measurement
            fetch_weather: Fetches a weather snapshot
            state: Shared control state (a new one if not given)
            weather_cache: Shared weather cache (a new one if not given)
            clock: Returns the current time (defaults to datetime.now)
            tz: Timezone for night mode hours (None = system local time)
        """
        self.load_config = load_config
        self.load_latest_outdoor = load_latest_outdoor
        self.fetch_weather = fetch_weather
        self.state = state or ControlState()
        self.weather_cache = weather_cache or WeatherCache()
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(self.tz).astimezone(self.tz))

    def now(self) -> datetime:
        return self.clock()

    def handle_indoor_report(self, reading: IndoorMeasurement) -> IndoorDecision:
        """Decide the fan duty cycle for a fresh indoor reading."""
        config = self.load_config()
        outdoor = self.load_latest_outdoor()
        current_hour = self.now().hour

        duty_cycle = control.resolve(reading, outdoor, config, self.state, current_hour)
        return IndoorDecision(
            sleep_duration=config.polling_rate_sensor_inside,
            fan_duty_cycle=duty_cycle,
        )

    def handle_outdoor_report(self, reading: OutdoorMeasurement) -> OutdoorDecision:
        """Decide how long the outdoor sensor should sleep."""
        config = self.load_config()
        sleep = polling.next_sleep(config, reading, self.weather_cache, self.fetch_weather, self.now())
        logger.info(f"Outdoor sensor sleeps {int(sleep.total_seconds())}s")
        return OutdoorDecision(sleep_duration=sleep)

    def current_weather(self) -> Optional[WeatherSnapshot]:
        """Weather snapshot through the shared cache."""
        return self.weather_cache.read(self.fetch_weather, self.now())

    def get_state(self) -> ControlStatus:
        """Last fan command plus the configured night mode."""
        config = self.load_config()
        return self.state.snapshot(config.night_mode_config)
