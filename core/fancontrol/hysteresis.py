"""Dead-band switch for the fan: only change state once the humidity gap leaves the band."""


def decide(previous_on: bool, inside_ah: float, outside_ah: float, deadband: float) -> bool:
    """Decide whether the fan should run.

    Args:
        previous_on: Switch output of the previous decision
        inside_ah: Indoor absolute humidity (g/m³)
        outside_ah: Outdoor absolute humidity (g/m³)
        deadband: Hysteresis offset (g/m³), >= 0

    Returns:
        True to vent. Inside the dead band the previous output is kept.
    """
    diff = inside_ah - outside_ah
    if abs(diff) < deadband:
        return previous_on
    # Venting only helps when it is drier outside
    return diff > 0
