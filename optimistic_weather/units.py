# ABOUTME: Pure distance and wind-speed conversions between metric and imperial display units.
# ABOUTME: Converters never round; the shared rounding and clamping helpers live here too.

import math

from optimistic_weather.models import Units

METERS_PER_MILE = 1609.34
METERS_PER_KILOMETER = 1000
MPS_TO_KPH = 3.6


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def meters_to_kilometers(meters: float) -> float:
    return meters / METERS_PER_KILOMETER


def mps_to_kph(mps: float) -> float:
    return mps * MPS_TO_KPH


def distance_for_units(meters: float, units: Units) -> float:
    """Visibility in km (metric) or miles (imperial)."""
    return meters_to_kilometers(meters) if units == "metric" else meters_to_miles(meters)


def wind_speed_for_units(speed: float, units: Units) -> float:
    """Wind in km/h (metric) or mph (imperial).

    The provider reports m/s for units=metric and already reports mph for
    units=imperial, so imperial speeds pass through unchanged.
    """
    return mps_to_kph(speed) if units == "metric" else speed


def distance_unit_label(units: Units) -> str:
    return "km" if units == "metric" else "mi"


def wind_unit_label(units: Units) -> str:
    return "km/h" if units == "metric" else "mph"


def temperature_unit_label(units: Units) -> str:
    return "°C" if units == "metric" else "°F"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def fraction_to_percent(fraction: float | None) -> int | None:
    """Provider pop fraction to a whole percent in [0, 100]; missing or NaN gives None."""
    if fraction is None or math.isnan(fraction):
        return None
    return round_half_up(clamp(fraction) * 100)
