"""
Fan Control Custom Exceptions

Simple exception hierarchy for error handling.
"""


class FanControlError(Exception):
    """Base exception for the fan control backend."""

    pass


class ConfigurationError(FanControlError):
    """Configuration is invalid."""

    pass


class StorageError(FanControlError):
    """Measurement or configuration storage failed."""

    pass


class WeatherFetchError(FanControlError):
    """Weather data could not be fetched from the provider."""

    pass
