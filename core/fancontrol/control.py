"""
Fan duty cycle resolution.

Combines the window override, the missing-outdoor fail-safe, the hysteresis
switch and the night mode cap into the duty cycle sent to the fan, and keeps
the last command in a process-wide ControlState.
"""

import logging
import threading
from typing import Callable, Optional

from . import hysteresis, night_mode
from .models import ControlStatus, IndoorMeasurement, OutdoorMeasurement
from .settings import FanControlSettings

logger = logging.getLogger(__name__)

FAN_OFF = 0
FAN_FULL = 100


class ControlState:
    """Last fan command. Volatile: starts at 0 %/window closed on every process start."""

    def __init__(self):
        self.lock = threading.Lock()
        self._fan_duty_cycle = FAN_OFF
        self._window_open = False

    @property
    def fan_duty_cycle(self) -> int:
        with self.lock:
            return self._fan_duty_cycle

    @property
    def window_open(self) -> bool:
        with self.lock:
            return self._window_open

    def snapshot(self, night_mode_config=None) -> ControlStatus:
        """Read duty cycle and window flag together."""
        with self.lock:
            return ControlStatus(self._fan_duty_cycle, self._window_open, night_mode_config)

    def update(self, compute: Callable[[ControlStatus], tuple[int, bool]]) -> ControlStatus:
        """Atomically replace the state with compute(current).

        Args:
            compute: Maps the current status to (fan_duty_cycle, window_open)

        Returns:
            The new status
        """
        with self.lock:
            current = ControlStatus(self._fan_duty_cycle, self._window_open)
            self._fan_duty_cycle, self._window_open = compute(current)
            return ControlStatus(self._fan_duty_cycle, self._window_open)


def resolve(
    indoor: IndoorMeasurement,
    outdoor: Optional[OutdoorMeasurement],
    config: FanControlSettings,
    state: ControlState,
    current_hour: int,
) -> int:
    """Compute the fan duty cycle for an indoor report and record it in state.

    Decision order (first match wins):
    1. Window open (and not ignored) -> 0
    2. No outdoor measurement yet -> 0
    3. Hysteresis switch on indoor vs. outdoor absolute humidity -> 100 / 0
    The night mode cap is applied afterwards.

    Note: the hysteresis memory is taken from the capped value, so a fan
    capped to 0 % at night is remembered as off.

    Returns:
        Final duty cycle (0-100)
    """
    max_duty_cycle = night_mode.cap(config.night_mode, current_hour)
    candidate = FAN_OFF
    reason = ""

    def compute(current: ControlStatus) -> tuple[int, bool]:
        nonlocal candidate, reason

        if indoor.window_open and not config.ignore_window:
            candidate = FAN_OFF
            reason = "window open"
        elif outdoor is None:
            candidate = FAN_OFF
            reason = "no outdoor measurement"
        else:
            inside_ah = indoor.absolute_humidity
            outside_ah = outdoor.absolute_humidity
            fan_on = hysteresis.decide(current.fan_on, inside_ah, outside_ah, config.hysteresis_offset)
            candidate = FAN_FULL if fan_on else FAN_OFF
            reason = f"inside {inside_ah:.2f} g/m³ vs outside {outside_ah:.2f} g/m³"

        final = min(candidate, max_duty_cycle) if max_duty_cycle is not None else candidate
        return final, indoor.window_open

    final = state.update(compute).fan_duty_cycle

    if max_duty_cycle is not None and final < candidate:
        logger.info(f"Fan duty cycle {final}% (night mode cap {max_duty_cycle}%, {reason})")
    else:
        logger.info(f"Fan duty cycle {final}% ({reason})")
    return final
