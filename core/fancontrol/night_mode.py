"""
Night mode duty cycle cap.

During the configured night window the fan is limited to a maximum duty
cycle to keep the noise down. A window with start_hour > end_hour wraps past
midnight (e.g. 22 -> 6).
"""

from typing import Optional, Union

from .settings import NightMode, NightModeConfig, NightModeDisabled, NightModeEnabled


def in_window(night_mode: NightModeEnabled, hour: int) -> bool:
    """Whether hour falls inside the night window (both ends inclusive)."""
    if night_mode.wraps_midnight:
        return hour >= night_mode.start_hour or hour <= night_mode.end_hour
    return night_mode.start_hour <= hour <= night_mode.end_hour


def cap(config: Union[NightMode, NightModeConfig, None], current_hour: int) -> Optional[int]:
    """Return the duty cycle ceiling for current_hour, or None when uncapped.

    Accepts either the stored NightModeConfig (possibly partial) or an
    already resolved night mode variant.
    """
    if config is None:
        return None
    night_mode = config.resolve() if isinstance(config, NightModeConfig) else config
    if isinstance(night_mode, NightModeDisabled):
        return None
    if in_window(night_mode, current_hour):
        return night_mode.max_duty_cycle
    return None
