"""
Fan Control Data Models

Sensor measurements and the decisions returned to the sensor nodes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .humidity import absolute_humidity
from .settings import NightModeConfig


@dataclass(frozen=True)
class IndoorMeasurement:
    """A reading from the indoor sensor node."""

    time: datetime
    temperature: float  # °C
    relative_humidity: float  # %
    window_open: bool

    @property
    def absolute_humidity(self) -> float:
        return absolute_humidity(self.temperature, self.relative_humidity)


@dataclass(frozen=True)
class OutdoorMeasurement:
    """A reading from the outdoor sensor node."""

    time: datetime
    temperature: float  # °C
    relative_humidity: float  # %
    battery: float = 0.0  # V

    @property
    def absolute_humidity(self) -> float:
        return absolute_humidity(self.temperature, self.relative_humidity)


@dataclass(frozen=True)
class IndoorDecision:
    """Response to an indoor report."""

    sleep_duration: timedelta
    fan_duty_cycle: int  # 0-100


@dataclass(frozen=True)
class OutdoorDecision:
    """Response to an outdoor report."""

    sleep_duration: timedelta


@dataclass(frozen=True)
class ControlStatus:
    """Snapshot of the last fan command, as shown by the status query."""

    fan_duty_cycle: int
    window_open: bool
    night_mode_config: Optional[NightModeConfig] = None

    @property
    def fan_on(self) -> bool:
        return self.fan_duty_cycle > 0
