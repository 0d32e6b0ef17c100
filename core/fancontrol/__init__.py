"""Humidity-driven ventilation fan control package."""

# Define public API
__all__ = [
    "FanControlSettings",
    "NightModeConfig",
    "RuntimeConfig",
    "IndoorMeasurement",
    "OutdoorMeasurement",
    "ControlState",
    "FanControlService",
    "MeasurementStore",
    "WeatherCache",
    "WeatherClient",
    "absolute_humidity",
]

# Import settings
from .settings import FanControlSettings, NightModeConfig, RuntimeConfig

# Import models
from .models import IndoorMeasurement, OutdoorMeasurement

# Import engine
from .control import ControlState
from .humidity import absolute_humidity
from .service import FanControlService
from .weather import WeatherCache

# Import collaborators
from .storage import MeasurementStore
from .weather_client import WeatherClient
