"""
Absolute humidity from temperature and relative humidity.

Uses the Magnus approximation for saturation vapor pressure:
- Psat = 6.112 * exp(17.67 * T / (T + 243.5))   (hPa)
- Pactual = RH * Psat / 100
- AH = 217 * Pactual / (T + 273.15)              (g/m³)
"""

import math


def absolute_humidity(temperature: float, relative_humidity: float) -> float:
    """Convert a temperature/relative humidity pair to absolute humidity.

    Args:
        temperature: Air temperature (°C)
        relative_humidity: Relative humidity (%)

    Returns:
        Absolute humidity (g/m³)
    """
    saturation_vapor_pressure = 6.112 * math.exp((17.67 * temperature) / (temperature + 243.5))
    actual_vapor_pressure = relative_humidity * saturation_vapor_pressure / 100.0
    return 217 * actual_vapor_pressure / (temperature + 273.15)
