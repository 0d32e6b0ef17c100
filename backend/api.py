"""
Fan Control API Endpoints
"""

import os
import sys
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from loguru import logger
from pydantic import BaseModel

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.fancontrol.control import ControlState
from core.fancontrol.exceptions import ConfigurationError
from core.fancontrol.humidity import absolute_humidity
from core.fancontrol.models import IndoorMeasurement, OutdoorMeasurement
from core.fancontrol.service import FanControlService
from core.fancontrol.settings import FanControlSettings, RuntimeConfig, load_runtime_config
from core.fancontrol.storage import MeasurementStore
from core.fancontrol.weather import WeatherCache
from core.fancontrol.weather_client import WeatherClient

router = APIRouter()

DEFAULT_LIMIT = 1000

# Shared components (set by init_components)
runtime_config: RuntimeConfig = RuntimeConfig()
store: MeasurementStore = None
weather_client: WeatherClient = None
weather_cache: WeatherCache = None
control_state: ControlState = None
service: FanControlService = None


def init_components(config: RuntimeConfig):
    """Create the store, weather client and decision engine for this process.

    Does not touch the database; app startup creates the schema.
    """
    global runtime_config, store, weather_client, weather_cache, control_state, service

    runtime_config = config
    store = MeasurementStore(config.db_path)
    weather_client = WeatherClient(config.weather_key, country=config.weather_country)
    weather_cache = WeatherCache(ttl=config.weather_cache_ttl)
    control_state = ControlState()

    def fetch_weather():
        return weather_client.fetch_result(store.load_config().zip_code)

    service = FanControlService(
        load_config=store.load_config,
        load_latest_outdoor=store.load_latest_outdoor,
        fetch_weather=fetch_weather,
        state=control_state,
        weather_cache=weather_cache,
        tz=config.tzinfo(),
    )

    if not weather_client.configured:
        logger.warning("No weather API key set, adaptive outdoor polling will use the default interval")
    logger.info(f"Components initialized (database: {config.db_path})")


# Initialize on module import
init_components(load_runtime_config())


class OutdoorSensorRequest(BaseModel):
    """Report from the outdoor sensor node."""
    temperature: float
    relativeHumidity: float
    battery: float = 0.0


class IndoorSensorRequest(BaseModel):
    """Report from the indoor sensor node."""
    temperature: float
    relativeHumidity: float
    windowOpen: bool


class NightModeConfigBody(BaseModel):
    maxDutyCycle: Optional[int] = None
    startHour: Optional[int] = None
    endHour: Optional[int] = None


class ConfigRequest(BaseModel):
    """Fan configuration as edited in the frontend. Durations in seconds."""
    zipCode: str = "10117"
    darkMode: bool = False
    pollingRateWeb: float = 5
    pollingRateSensorInside: float = 5
    pollingRateSensorOutside: Optional[float] = None
    ignoreWindow: bool = False
    hysteresisOffset: float = 2.0
    nightModeConfig: Optional[NightModeConfigBody] = None


def _millis(duration) -> int:
    return int(duration.total_seconds() * 1000)


def _parse_time_range(start: Optional[str], end: Optional[str]):
    """Parse an ISO-8601 start/end pair. Only applied when both are given."""
    if not start or not end:
        return None
    try:
        parsed = []
        for value in (start, end):
            if value.endswith("Z"):
                value = value[:-1] + "+00:00"
            ts = datetime.fromisoformat(value)
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=timezone.utc)
            parsed.append(ts)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid time range: {e}") from e
    return parsed[0], parsed[1]


@router.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": "fancontrol",
        "version": "0.1.0",
        "weather_configured": weather_client.configured,
    }


@router.get("/frontend/config")
def get_config():
    """Get the current fan configuration."""
    return store.load_config().to_dict()


@router.post("/frontend/config")
def save_config(request: ConfigRequest):
    """Validate, store and echo the fan configuration."""
    try:
        settings = FanControlSettings.from_dict(request.model_dump())
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    store.save_config(settings)
    logger.info(f"Configuration updated: {settings.to_dict()}")
    return store.load_config().to_dict()


@router.post("/outdoor")
def report_outdoor(request: OutdoorSensorRequest):
    """Store an outdoor reading and tell the node how long to sleep."""
    measurement = OutdoorMeasurement(
        time=datetime.now(timezone.utc),
        temperature=request.temperature,
        relative_humidity=request.relativeHumidity,
        battery=request.battery,
    )
    store.save_outdoor(measurement)

    decision = service.handle_outdoor_report(measurement)
    return {"sleepDurationMilliseconds": _millis(decision.sleep_duration)}


@router.get("/outdoor")
def get_outdoor(
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    start: Optional[str] = None,
    end: Optional[str] = None,
):
    """Get stored outdoor measurements, newest first."""
    data = store.load_outdoor(_parse_time_range(start, end), limit)
    return {
        "data": [
            {
                "date": m.time.isoformat(),
                "temperature": m.temperature,
                "relativeHumidity": m.relative_humidity,
                "absoluteHumidity": absolute_humidity(m.temperature, m.relative_humidity),
                "battery": m.battery,
            }
            for m in data
        ]
    }


@router.post("/indoor")
def report_indoor(request: IndoorSensorRequest):
    """Store an indoor reading and answer with the fan duty cycle."""
    measurement = IndoorMeasurement(
        time=datetime.now(timezone.utc),
        temperature=request.temperature,
        relative_humidity=request.relativeHumidity,
        window_open=request.windowOpen,
    )
    store.save_indoor(measurement)

    decision = service.handle_indoor_report(measurement)
    return {
        "sleepDurationMilliseconds": _millis(decision.sleep_duration),
        "fanDutyCycle": decision.fan_duty_cycle,
    }


@router.get("/indoor")
def get_indoor(
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    start: Optional[str] = None,
    end: Optional[str] = None,
):
    """Get stored indoor measurements, newest first."""
    data = store.load_indoor(_parse_time_range(start, end), limit)
    return {
        "data": [
            {
                "date": m.time.isoformat(),
                "temperature": m.temperature,
                "relativeHumidity": m.relative_humidity,
                "absoluteHumidity": absolute_humidity(m.temperature, m.relative_humidity),
                "windowOpen": m.window_open,
            }
            for m in data
        ]
    }


@router.get("/weather")
def get_weather():
    """Get current weather and forecast (cached)."""
    if not weather_client.configured:
        raise HTTPException(status_code=503, detail="Weather API key not configured")

    snapshot = service.current_weather()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Weather currently unavailable")

    def conditions(c):
        return {
            "date": c.time.isoformat() if c.time else None,
            "temperature": c.temperature,
            "relativeHumidity": c.relative_humidity,
            "absoluteHumidity": c.absolute_humidity,
        }

    return {
        "current": conditions(snapshot.current),
        "forecast": [conditions(c) for c in snapshot.forecast],
    }


@router.get("/switchState")
def get_switch_state():
    """Whether the fan is currently commanded on."""
    return {"state": control_state.snapshot().fan_on}


@router.get("/state")
def get_state():
    """Last fan command, window state and night mode configuration."""
    status = service.get_state()
    return {
        "fanDutyCycle": status.fan_duty_cycle,
        "windowOpen": status.window_open,
        "nightModeConfig": status.night_mode_config.to_dict() if status.night_mode_config else None,
    }
