"""
Outdoor sensor polling rate.

The outdoor node runs on battery, so it should sleep as long as nothing
relevant is expected to change. Without a fixed interval configured, the
interval follows the weather trend:
- outdoor reading and current weather agree, and the next forecast step
  agrees with the current weather -> slow down (30 min)
- anything else (including unknown weather) -> default (10 min)
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from .models import OutdoorMeasurement
from .settings import FanControlSettings, FixedPollingRate
from .weather import WeatherCache, WeatherFetchResult

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = timedelta(minutes=10)
SLOW_INTERVAL = timedelta(minutes=30)


def next_sleep(
    config: FanControlSettings,
    sensor_reading: OutdoorMeasurement,
    weather: WeatherCache,
    fetch: Callable[[], WeatherFetchResult],
    now: datetime,
) -> timedelta:
    """How long the outdoor sensor should sleep before its next report.

    Args:
        config: Current fan configuration
        sensor_reading: The reading that just arrived
        weather: Shared weather cache
        fetch: Weather fetch used on a cache miss
        now: Current time

    Returns:
        Sleep duration
    """
    if isinstance(config.outdoor_polling, FixedPollingRate):
        return config.outdoor_polling.interval

    snapshot = weather.read(fetch, now)
    if snapshot is None:
        return DEFAULT_INTERVAL

    offset = config.hysteresis_offset
    current_ah = snapshot.current.absolute_humidity
    if abs(current_ah - sensor_reading.absolute_humidity) < offset and snapshot.forecast:
        forecast_ah = snapshot.forecast[0].absolute_humidity
        if abs(forecast_ah - current_ah) < offset:
            logger.debug(f"Outdoor humidity stable around {current_ah:.2f} g/m³, slowing down polling")
            return SLOW_INTERVAL

    return DEFAULT_INTERVAL
