"""
Simple OpenWeatherMap Client

Minimal client for reading current weather and a short forecast by zip code.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from .exceptions import WeatherFetchError
from .weather import WeatherConditions, WeatherFetched, WeatherFetchFailed, WeatherFetchResult, WeatherSnapshot

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"


class WeatherClient:
    """Simple OpenWeatherMap REST API client."""

    def __init__(
        self,
        api_key: Optional[str],
        country: str = "DE",
        base_url: str = DEFAULT_BASE_URL,
        forecast_count: int = 3,
    ):
        """Initialize weather client.

        Args:
            api_key: OpenWeatherMap API key (None disables fetching)
            country: Country code appended to the zip code
            base_url: API base URL
            forecast_count: Number of 3-hour forecast steps to request
        """
        self.api_key = api_key
        self.country = country
        self.base_url = base_url.rstrip("/")
        self.forecast_count = forecast_count
        # Create a session for connection pooling
        self.session = requests.Session()
        # Set default timeout
        self.timeout = 5

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get(self, path: str, zip_code: str, **params: Any) -> dict[str, Any]:
        """GET a JSON document from the API.

        Raises:
            WeatherFetchError: If the request fails or the body is not JSON
        """
        url = f"{self.base_url}/{path}"
        query = {"zip": f"{zip_code},{self.country}", "appid": self.api_key, "units": "metric", **params}
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            raise WeatherFetchError(f"Weather API returned {e.response.status_code} for {path}") from e
        except requests.exceptions.RequestException as e:
            raise WeatherFetchError(f"Weather API request failed: {e}") from e
        except ValueError as e:
            raise WeatherFetchError(f"Weather API returned invalid JSON for {path}: {e}") from e

    def fetch(self, zip_code: str) -> WeatherSnapshot:
        """Fetch current weather and forecast.

        Args:
            zip_code: Postal code of the location

        Returns:
            Weather snapshot

        Raises:
            WeatherFetchError: If no API key is set, the request fails or the payload is malformed
        """
        if not self.api_key:
            raise WeatherFetchError("No weather API key configured")

        current = self._get("weather", zip_code)
        forecast = self._get("forecast", zip_code, cnt=self.forecast_count)

        if not isinstance(current, dict) or not isinstance(forecast, dict):
            raise WeatherFetchError("Malformed weather payload: expected JSON objects")

        try:
            return WeatherSnapshot(
                current=_parse_conditions(current),
                forecast=[_parse_conditions(item) for item in forecast.get("list") or []],
            )
        except (AttributeError, KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            raise WeatherFetchError(f"Malformed weather payload: {e}") from e

    def fetch_result(self, zip_code: str) -> WeatherFetchResult:
        """Like fetch(), but reports failure as a value instead of raising."""
        try:
            return WeatherFetched(self.fetch(zip_code))
        except WeatherFetchError as e:
            return WeatherFetchFailed(str(e))


def _parse_conditions(item: dict[str, Any]) -> WeatherConditions:
    main = item["main"]
    dt = item.get("dt")
    return WeatherConditions(
        temperature=float(main["temp"]),
        relative_humidity=float(main["humidity"]),
        time=datetime.fromtimestamp(dt, tz=timezone.utc) if dt is not None else None,
    )
