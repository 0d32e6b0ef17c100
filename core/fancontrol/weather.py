"""
Weather snapshot model and cache.

The weather provider is slow and unreliable, so snapshots are kept for a
fixed refresh window. A failed fetch is cached as well: the next attempt
happens only once the window has elapsed again.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from .humidity import absolute_humidity

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=10)


@dataclass(frozen=True)
class WeatherConditions:
    """Temperature and humidity at one point in time."""

    temperature: float  # °C
    relative_humidity: float  # %
    time: Optional[datetime] = None

    @property
    def absolute_humidity(self) -> float:
        return absolute_humidity(self.temperature, self.relative_humidity)


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current weather plus a short forecast."""

    current: WeatherConditions
    forecast: list[WeatherConditions] = field(default_factory=list)


@dataclass(frozen=True)
class WeatherFetched:
    snapshot: WeatherSnapshot


@dataclass(frozen=True)
class WeatherFetchFailed:
    reason: str


WeatherFetchResult = Union[WeatherFetched, WeatherFetchFailed]


class WeatherCache:
    """Single-slot, time-bound cache around a weather fetch."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL):
        self.ttl = ttl
        self.lock = threading.Lock()
        self.snapshot: Optional[WeatherSnapshot] = None
        self.fetched_at: Optional[datetime] = None
        self.last_result: Optional[WeatherFetchResult] = None

    def read(
        self,
        fetch: Callable[[], WeatherFetchResult],
        now: datetime,
        ttl: Optional[timedelta] = None,
    ) -> Optional[WeatherSnapshot]:
        """Return the cached snapshot, fetching a new one when the window has elapsed.

        Args:
            fetch: Weather fetch returning an explicit success/failure result
            now: Current time
            ttl: Refresh window (defaults to the cache's ttl)

        Returns:
            Weather snapshot, or None if the weather is currently unknown
        """
        ttl = self.ttl if ttl is None else ttl

        with self.lock:
            if self.fetched_at is not None and now - self.fetched_at < ttl:
                if self.snapshot is None:
                    logger.debug("Weather fetch failed recently, not retrying yet")
                else:
                    logger.debug(f"Weather cache hit (fetched {self.fetched_at.isoformat()})")
                return self.snapshot

            try:
                result = fetch()
            except Exception as e:
                logger.warning(f"Weather fetch raised {type(e).__name__}: {e}", exc_info=True)
                result = WeatherFetchFailed(f"{type(e).__name__}: {e}")
            # Stamp on failure too, so an outage is retried once per window
            self.fetched_at = now
            self.last_result = result

            if isinstance(result, WeatherFetched):
                self.snapshot = result.snapshot
                logger.debug("Weather cache refreshed")
            else:
                self.snapshot = None
                logger.warning(f"Weather unavailable: {result.reason}")

            return self.snapshot

    def clear(self):
        with self.lock:
            self.snapshot = None
            self.fetched_at = None
            self.last_result = None
