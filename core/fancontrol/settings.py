"""
Fan Control Configuration Settings

Two kinds of settings live here:
- FanControlSettings: the persisted, user-editable fan configuration
  (stored as a camelCase JSON document, edited from the frontend).
- RuntimeConfig: process settings (database path, weather API key, ...)
  loaded from config.yaml and the environment.
"""

import math
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError


def _camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _seconds(value: Any, name: str) -> Optional[timedelta]:
    """Parse a duration given in seconds (or already a timedelta)."""
    if value is None:
        return None
    if isinstance(value, timedelta):
        duration = value
    else:
        try:
            duration = timedelta(seconds=float(value))
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigurationError(f"{name} must be a number of seconds: {value!r}") from e
    if duration <= timedelta(0):
        raise ConfigurationError(f"{name} must be positive, got {duration.total_seconds()}s")
    return duration


@dataclass(frozen=True)
class NightModeDisabled:
    """Night mode is off: no duty cycle cap at any hour."""


@dataclass(frozen=True)
class NightModeEnabled:
    """Night mode is on: cap the duty cycle between start_hour and end_hour (inclusive)."""

    max_duty_cycle: int
    start_hour: int
    end_hour: int

    @property
    def wraps_midnight(self) -> bool:
        return self.start_hour > self.end_hour


NightMode = Union[NightModeDisabled, NightModeEnabled]


@dataclass(frozen=True)
class NightModeConfig:
    """Night mode fields as stored. Each field is independently optional."""

    max_duty_cycle: Optional[int] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None

    def __post_init__(self):
        if self.max_duty_cycle is not None and not 0 <= self.max_duty_cycle <= 100:
            raise ConfigurationError(f"maxDutyCycle must be within 0..100, got {self.max_duty_cycle}")
        for name in ("start_hour", "end_hour"):
            hour = getattr(self, name)
            if hour is not None and not 0 <= hour <= 23:
                raise ConfigurationError(f"{_snake_to_camel(name)} must be within 0..23, got {hour}")

    def resolve(self) -> NightMode:
        """Night mode is only active when all three fields are set."""
        if self.max_duty_cycle is None or self.start_hour is None or self.end_hour is None:
            return NightModeDisabled()
        return NightModeEnabled(self.max_duty_cycle, self.start_hour, self.end_hour)

    @classmethod
    def from_dict(cls, data: dict) -> "NightModeConfig":
        """Create from dictionary."""
        converted = {_camel_to_snake(k): v for k, v in data.items()}
        return cls(
            max_duty_cycle=_optional_int(converted.get("max_duty_cycle"), "maxDutyCycle"),
            start_hour=_optional_int(converted.get("start_hour"), "startHour"),
            end_hour=_optional_int(converted.get("end_hour"), "endHour"),
        )

    def to_dict(self) -> dict:
        return {
            "maxDutyCycle": self.max_duty_cycle,
            "startHour": self.start_hour,
            "endHour": self.end_hour,
        }


def _optional_int(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer: {value!r}") from e


@dataclass(frozen=True)
class AdaptivePollingRate:
    """Outdoor sensor interval is derived from the weather trend."""


@dataclass(frozen=True)
class FixedPollingRate:
    """Outdoor sensor interval is fixed by the user."""

    interval: timedelta


OutdoorPollingRate = Union[AdaptivePollingRate, FixedPollingRate]


@dataclass(frozen=True)
class FanControlSettings:
    """Persisted fan control configuration."""

    zip_code: str = "10117"
    dark_mode: bool = False
    polling_rate_web: timedelta = timedelta(seconds=5)
    polling_rate_sensor_inside: timedelta = timedelta(seconds=5)
    polling_rate_sensor_outside: Optional[timedelta] = None  # None = adaptive
    ignore_window: bool = False
    hysteresis_offset: float = 2.0  # g/m³ dead band
    night_mode_config: Optional[NightModeConfig] = field(
        default_factory=lambda: NightModeConfig(max_duty_cycle=70, start_hour=22, end_hour=6)
    )

    # Feature variants, built from the fields above at construction time
    night_mode: NightMode = field(init=False, repr=False, compare=False)
    outdoor_polling: OutdoorPollingRate = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not math.isfinite(self.hysteresis_offset) or self.hysteresis_offset < 0:
            raise ConfigurationError(f"hysteresisOffset must be a finite number >= 0, got {self.hysteresis_offset}")

        night_mode = self.night_mode_config.resolve() if self.night_mode_config else NightModeDisabled()
        if self.polling_rate_sensor_outside is None:
            outdoor_polling = AdaptivePollingRate()
        else:
            outdoor_polling = FixedPollingRate(self.polling_rate_sensor_outside)

        # Frozen dataclass: bypass __setattr__ for derived fields
        object.__setattr__(self, "night_mode", night_mode)
        object.__setattr__(self, "outdoor_polling", outdoor_polling)

    @classmethod
    def from_dict(cls, data: dict) -> "FanControlSettings":
        """Create from dictionary (camelCase or snake_case keys, durations in seconds).

        Missing keys fall back to the defaults.
        """
        converted = {_camel_to_snake(k): v for k, v in data.items()}
        defaults = cls()
        kwargs: dict[str, Any] = {}

        if "zip_code" in converted:
            kwargs["zip_code"] = str(converted["zip_code"])
        if "dark_mode" in converted:
            kwargs["dark_mode"] = bool(converted["dark_mode"])
        if "ignore_window" in converted:
            kwargs["ignore_window"] = bool(converted["ignore_window"])
        if "hysteresis_offset" in converted:
            try:
                kwargs["hysteresis_offset"] = float(converted["hysteresis_offset"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"hysteresisOffset must be a number: {converted['hysteresis_offset']!r}"
                ) from e

        for name in ("polling_rate_web", "polling_rate_sensor_inside"):
            if name in converted:
                kwargs[name] = _seconds(converted[name], _snake_to_camel(name)) or getattr(defaults, name)
        if "polling_rate_sensor_outside" in converted:
            kwargs["polling_rate_sensor_outside"] = _seconds(
                converted["polling_rate_sensor_outside"], "pollingRateSensorOutside"
            )

        if "night_mode_config" in converted:
            night = converted["night_mode_config"]
            if night is None:
                kwargs["night_mode_config"] = None
            elif isinstance(night, NightModeConfig):
                kwargs["night_mode_config"] = night
            elif isinstance(night, dict):
                kwargs["night_mode_config"] = NightModeConfig.from_dict(night)
            else:
                raise ConfigurationError(f"nightModeConfig must be an object: {night!r}")

        return cls(**kwargs)

    def to_dict(self) -> dict:
        """Serialize with camelCase keys and durations in seconds."""
        outside = self.polling_rate_sensor_outside
        return {
            "zipCode": self.zip_code,
            "darkMode": self.dark_mode,
            "pollingRateWeb": self.polling_rate_web.total_seconds(),
            "pollingRateSensorInside": self.polling_rate_sensor_inside.total_seconds(),
            "pollingRateSensorOutside": outside.total_seconds() if outside is not None else None,
            "ignoreWindow": self.ignore_window,
            "hysteresisOffset": self.hysteresis_offset,
            "nightModeConfig": self.night_mode_config.to_dict() if self.night_mode_config else None,
        }


@dataclass
class RuntimeConfig:
    """Process-level settings for the backend."""

    db_path: str = "db.sqlite"
    weather_key: Optional[str] = None
    weather_country: str = "DE"
    weather_cache_ttl: timedelta = timedelta(minutes=10)
    timezone: Optional[str] = None  # None = system local time
    port: int = 8080
    log_level: str = "INFO"

    def tzinfo(self) -> Optional[ZoneInfo]:
        return ZoneInfo(self.timezone) if self.timezone else None


def load_runtime_config(config_path: Optional[str] = None) -> RuntimeConfig:
    """Load runtime settings from config.yaml, then the environment.

    Environment variables (and a .env file) override values from config.yaml.
    """
    options: dict = {}

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "..", "..", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            loaded = yaml.safe_load(f) or {}
        options = {_camel_to_snake(k): v for k, v in (loaded.get("options") or {}).items()}

    load_dotenv()

    config = RuntimeConfig()
    config.db_path = os.getenv("FANCONTROL_DB", options.get("db_path", config.db_path))
    config.weather_key = (
        os.getenv("WEATHER_KEY") or os.getenv("weather_key") or options.get("weather_key") or None
    )
    config.weather_country = os.getenv("WEATHER_COUNTRY", options.get("weather_country", config.weather_country))
    config.timezone = os.getenv("FANCONTROL_TIMEZONE", options.get("timezone")) or None
    config.log_level = os.getenv("LOG_LEVEL", options.get("log_level", config.log_level)).upper()

    cache_minutes = os.getenv("WEATHER_CACHE_MINUTES", options.get("weather_cache_minutes"))
    port = os.getenv("PORT", options.get("port"))
    try:
        if cache_minutes is not None:
            config.weather_cache_ttl = timedelta(minutes=float(cache_minutes))
        if port is not None:
            config.port = int(port)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid runtime configuration: {e}") from e

    if config.timezone:
        try:
            ZoneInfo(config.timezone)
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone: {config.timezone}") from e

    return config
