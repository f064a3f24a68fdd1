# ABOUTME: Composes location resolution, short-range highlights and the extended outlook.
# ABOUTME: Entry point for consumers; location and short-range failures propagate, outlook failures degrade.

import logging
from datetime import datetime, timezone

from optimistic_weather import weather_service
from optimistic_weather.daily_outlook import DailyOutlookMerger
from optimistic_weather.deps import ForecastDeps
from optimistic_weather.errors import MalformedDataError
from optimistic_weather.highlights import craft_highlights
from optimistic_weather.location_resolver import LocationResolver
from optimistic_weather.models import (
    Coordinates,
    ForecastEntry,
    GeoLocation,
    OptimisticForecast,
    TemperatureBlock,
    Units,
)

logger = logging.getLogger(__name__)

# Roughly the next 24 hours at a 3-hour cadence.
HORIZON_SAMPLES = 8
OVERCAST_CLOUD_PERCENT = 70

SKY_SUMMARIES = {
    "Clear": "Sun-forward skies and bright horizons on deck.",
    "Rain": "Nature is topping off the reservoirs—perfect excuse for a cozy plan.",
    "Drizzle": "Nature is topping off the reservoirs—perfect excuse for a cozy plan.",
    "Thunderstorm": "Electric skies bring drama—front-row seats from indoors highly encouraged.",
    "Snow": "Fresh flakes incoming—ideal backdrop for quiet walks and winter photos.",
    "Mist": "Dreamy mist sets the scene—time to embrace the cinematic atmosphere.",
    "Fog": "Dreamy mist sets the scene—time to embrace the cinematic atmosphere.",
    "Haze": "Dreamy mist sets the scene—time to embrace the cinematic atmosphere.",
}
OVERCAST_SUMMARY = "Soft, filtered daylight keeps the vibe relaxed."
BROKEN_CLOUDS_SUMMARY = "Blue sky breaks trade places with playful clouds."
DEFAULT_SKY_SUMMARY = "Atmosphere is mixing things up—a great day to follow your curiosity."

NO_FORECAST_MESSAGE = "No forecast data available right now. Try again soon!"


def build_sky_summary(entry: ForecastEntry) -> str:
    condition = entry.weather[0].main if entry.weather else "Clear"
    if condition == "Clouds":
        return OVERCAST_SUMMARY if entry.clouds.all > OVERCAST_CLOUD_PERCENT else BROKEN_CLOUDS_SUMMARY
    return SKY_SUMMARIES.get(condition, DEFAULT_SKY_SUMMARY)


def build_temperature(horizon: list[ForecastEntry], units: Units) -> TemperatureBlock:
    """Current and feels-like from the first sample; high and low from actual temps across the horizon."""
    first = horizon[0]
    temps = [entry.main.temp for entry in horizon]
    return TemperatureBlock(
        current=first.main.temp,
        feels_like=first.main.feels_like,
        high=max(temps),
        low=min(temps),
        units=units,
    )


async def build_forecast(deps: ForecastDeps, location: GeoLocation, units: Units = "metric") -> OptimisticForecast:
    """Build the forecast for an already resolved location."""
    forecast = await weather_service.get_forecast(deps, location.lat, location.lon, units)
    horizon = forecast.entries[:HORIZON_SAMPLES]
    if not horizon:
        raise MalformedDataError(NO_FORECAST_MESSAGE)

    first = horizon[0]
    offset = forecast.city.timezone
    outlook = await DailyOutlookMerger(deps).build(location, units)

    logger.info(
        "Built forecast for %s (%d samples, %d outlook days)",
        location.label(),
        len(horizon),
        len(outlook.extended_outlook.days),
    )
    return OptimisticForecast(
        location_label=location.label(),
        next_update=datetime.fromtimestamp(first.dt + offset, tz=timezone.utc),
        temperature=build_temperature(horizon, units),
        sky_summary=build_sky_summary(first),
        highlights=craft_highlights(horizon, units, offset),
        extended_outlook=outlook.extended_outlook,
        hourly_outlook=outlook.hourly_outlook,
        coordinates=Coordinates(lat=location.lat, lon=location.lon),
    )


async def fetch_optimistic_forecast(
    deps: ForecastDeps,
    query: str,
    units: Units = "metric",
    resolver: LocationResolver | None = None,
) -> OptimisticForecast:
    """Resolve a free-text or postal query and build its optimistic forecast."""
    resolver = resolver or LocationResolver(deps)
    location = await resolver.resolve(query)
    return await build_forecast(deps, location, units)


async def fetch_optimistic_forecast_for_coordinates(
    deps: ForecastDeps,
    lat: float,
    lon: float,
    units: Units = "metric",
) -> OptimisticForecast:
    """Reverse-geocode coordinates, then build the forecast for that place."""
    location = await LocationResolver(deps).resolve_coordinates(lat, lon)
    return await build_forecast(deps, location, units)
