# ABOUTME: Derives the six optimistic highlight slots from the short-range forecast horizon.
# ABOUTME: Each slot yields exactly one variant, chosen by a fixed threshold on the input series.

import math
from collections.abc import Sequence
from datetime import datetime, timezone

from optimistic_weather.models import ForecastEntry, OptimisticHighlight, Units
from optimistic_weather.units import (
    clamp,
    distance_for_units,
    distance_unit_label,
    round_half_up,
    wind_speed_for_units,
    wind_unit_label,
)

WET_CONDITIONS = frozenset({"Rain", "Drizzle", "Thunderstorm", "Snow"})
WET_POP_THRESHOLD = 0.4
DRYNESS_CELEBRATION_PERCENT = 55
NEUTRAL_FEELS_GAP = 1.5
LOW_FRIZZ_HUMIDITY = 60
LONG_RANGE_VISIBILITY_METERS = 8000
BREEZE_THRESHOLD = {"metric": 25.0, "imperial": 15.5}


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _pop_fraction(entry: ForecastEntry) -> float:
    if entry.pop is None or math.isnan(entry.pop):
        return 0.0
    return clamp(entry.pop)


def _condition(entry: ForecastEntry) -> str | None:
    return entry.weather[0].main if entry.weather else None


def is_wet(entry: ForecastEntry) -> bool:
    """Any precipitation volume, a wet condition, or a pop of at least 40%."""
    volumes = [*(entry.rain or {}).values(), *(entry.snow or {}).values()]
    if any(volume > 0 for volume in volumes):
        return True
    if _condition(entry) in WET_CONDITIONS:
        return True
    return _pop_fraction(entry) >= WET_POP_THRESHOLD


def dryness_percent(horizon: Sequence[ForecastEntry]) -> int:
    """Mean dry share discounted by the fraction of wet samples, as a whole percent."""
    if not horizon:
        return 0
    dry_share = 1 - _mean([_pop_fraction(entry) for entry in horizon])
    wet_penalty = 1 - sum(1 for entry in horizon if is_wet(entry)) / len(horizon)
    return round_half_up(clamp(dry_share * max(wet_penalty, 0)) * 100)


def cloud_openings_percent(horizon: Sequence[ForecastEntry]) -> int:
    return round_half_up(_mean([100 - clamp(entry.clouds.all, 0, 100) for entry in horizon]))


def format_local_time(epoch_seconds: int, timezone_offset: int) -> str:
    """Wall-clock time such as "6:05 PM" for a UTC epoch shifted by an offset."""
    local = datetime.fromtimestamp(epoch_seconds + timezone_offset, tz=timezone.utc)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {meridiem}"


def dryness_highlight(horizon: Sequence[ForecastEntry]) -> OptimisticHighlight:
    percent = dryness_percent(horizon)
    if percent >= DRYNESS_CELEBRATION_PERCENT:
        return OptimisticHighlight(
            id="dryness",
            title="Dry Skies Bias",
            takeaway=f"{percent}% odds you stay splash-free.",
            detail="Still, a pocket umbrella doubles as a sunshade—win-win.",
            metric_label="Dry odds",
            metric_value=f"{percent}%",
        )
    return OptimisticHighlight(
        id="refresh",
        title="Sky Refills Incoming",
        takeaway="Showers lined up to refresh the plants and clear the air.",
        detail=f"{percent}% dry odds means gardens are celebrating—perfect for indoor creativity.",
        metric_label="Dry odds",
        metric_value=f"{percent}%",
    )


def clouds_highlight(horizon: Sequence[ForecastEntry]) -> OptimisticHighlight:
    percent = cloud_openings_percent(horizon)
    return OptimisticHighlight(
        id="clouds",
        title="Blue-Sky Windows",
        takeaway=f"{percent}% of the next stretch features blue-sky cameos.",
        detail="Great lighting for photos and quick outdoor breaks.",
        metric_label="Blue sky",
        metric_value=f"{percent}%",
    )


def comfort_highlight(first: ForecastEntry) -> OptimisticHighlight:
    gap = first.main.feels_like - first.main.temp
    if abs(gap) <= NEUTRAL_FEELS_GAP:
        return OptimisticHighlight(
            id="feels-like",
            title="Comfort Index",
            takeaway="Feels-like temps match the actual read—no wardrobe curveballs.",
            metric_label="Feels-like gap",
            metric_value=f"{round_half_up(gap)}°",
        )
    offset = round_half_up(gap)
    if gap < 0:
        return OptimisticHighlight(
            id="cooler",
            title="Built-In Breeze",
            takeaway=f"Feels about {abs(offset)}° cooler than the thermometer—prime for active plans.",
            metric_label="Feels-like gap",
            metric_value=f"{offset:+d}°",
        )
    return OptimisticHighlight(
        id="warmer",
        title="Cozy Warmth",
        takeaway=f"Feels around {offset}° warmer—nature's heated blanket.",
        metric_label="Feels-like gap",
        metric_value=f"{offset:+d}°",
    )


def humidity_highlight(first: ForecastEntry) -> OptimisticHighlight:
    humidity = round_half_up(clamp(first.main.humidity, 0, 100))
    if humidity <= LOW_FRIZZ_HUMIDITY:
        return OptimisticHighlight(
            id="humidity",
            title="Ideal Hair Day",
            takeaway=f"{humidity}% humidity keeps frizz in check and comfort high.",
            metric_label="Humidity",
            metric_value=f"{humidity}%",
        )
    return OptimisticHighlight(
        id="hydration",
        title="Humidity Bonus",
        takeaway=f"{humidity}% humidity means houseplants and skin stay happily hydrated.",
        metric_label="Humidity",
        metric_value=f"{humidity}%",
    )


def visibility_highlight(first: ForecastEntry, units: Units, timezone_offset: int) -> OptimisticHighlight:
    if first.visibility >= LONG_RANGE_VISIBILITY_METERS:
        reach = f"{distance_for_units(first.visibility, units):.1f} {distance_unit_label(units)}"
        return OptimisticHighlight(
            id="visibility",
            title="Long-Range Views",
            takeaway=f"Visibility stretches roughly {reach}—panorama time!",
            metric_label="Visibility",
            metric_value=reach,
        )
    local_time = format_local_time(first.dt, timezone_offset)
    return OptimisticHighlight(
        id="cozy-views",
        title="Cozy Vibes",
        takeaway="Soft-focus air invites slow moments and window-watching.",
        detail=f"Queue up a playlist and enjoy the diffused light toward {local_time}.",
        hero_stat_value=local_time,
        hero_stat_label="Diffused light",
    )


def wind_highlight(first: ForecastEntry, units: Units) -> OptimisticHighlight:
    speed = wind_speed_for_units(first.wind.speed, units)
    label = wind_unit_label(units)
    if speed <= BREEZE_THRESHOLD[units]:
        return OptimisticHighlight(
            id="breeze",
            title="Friendly Breeze",
            takeaway=f"{speed:.1f} {label} winds keep the air feeling fresh.",
            detail="Perfect kite or sail training weather.",
            metric_label="Wind",
            metric_value=f"{speed:.1f} {label}",
        )
    if first.wind.gust:
        gust = wind_speed_for_units(first.wind.gust, units)
        detail = f"Gusts near {gust:.1f} {label}. Secure loose items then enjoy the drama."
    else:
        detail = "Secure patio furniture, then lean into the dynamic skies."
    return OptimisticHighlight(
        id="wind-energy",
        title="Wind Energy Mode",
        takeaway=f"{speed:.1f} {label} winds—renewable energy fans, rejoice!",
        detail=detail,
        metric_label="Wind",
        metric_value=f"{speed:.1f} {label}",
    )


def craft_highlights(
    horizon: Sequence[ForecastEntry],
    units: Units,
    timezone_offset: int,
) -> list[OptimisticHighlight]:
    """Highlights in slot order: dryness, clouds, comfort, humidity, visibility, wind.

    An empty horizon yields no highlights.
    """
    if not horizon:
        return []
    first = horizon[0]
    return [
        dryness_highlight(horizon),
        clouds_highlight(horizon),
        comfort_highlight(first),
        humidity_highlight(first),
        visibility_highlight(first, units, timezone_offset),
        wind_highlight(first, units),
    ]
