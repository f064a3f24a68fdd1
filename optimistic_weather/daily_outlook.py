# ABOUTME: Builds the 10-day outlook from the primary (One Call) and legacy daily forecasts.
# ABOUTME: Source failures degrade to an advisory message instead of failing the forecast.

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone

from optimistic_weather import weather_service
from optimistic_weather.daily_story import build_optimistic_daily_story
from optimistic_weather.deps import ForecastDeps
from optimistic_weather.errors import MalformedDataError, ProviderError
from optimistic_weather.models import (
    DailyForecastEntry,
    GeoLocation,
    HourlyForecastEntry,
    LegacyDailyForecastEntry,
    OptimisticDailyOutlook,
    OptimisticExtendedOutlook,
    OptimisticHourlyOutlook,
    OutlookSource,
    Units,
)
from optimistic_weather.units import fraction_to_percent

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 10

LIMITED_OUTLOOK_MESSAGE = "Limited data: showing the days we could confirm for this location."
UNAVAILABLE_OUTLOOK_MESSAGE = "We could not collect the extended outlook for this location right now."

# Out-of-range timestamps surface from datetime as ValueError, OverflowError or OSError.
SOURCE_FAILURES = (ProviderError, MalformedDataError, ValueError, OverflowError, OSError)


def _is_finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _utc(epoch_seconds: int) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


def _shifted(epoch_seconds: int | None, timezone_offset: int) -> datetime | None:
    if epoch_seconds is None:
        return None
    return _utc(epoch_seconds + timezone_offset)


def has_temperature_bounds(entry: DailyForecastEntry) -> bool:
    return _is_finite(entry.temp.max) and _is_finite(entry.temp.min)


def normalize_legacy_entry(entry: LegacyDailyForecastEntry) -> DailyForecastEntry:
    """Rename the legacy wind fields into the primary shape; values are unchanged."""
    data = entry.model_dump(exclude={"speed", "gust", "deg"})
    return DailyForecastEntry(**data, wind_speed=entry.speed, wind_gust=entry.gust, wind_deg=entry.deg)


def to_daily_outlook(entry: DailyForecastEntry, timezone_offset: int, source: OutlookSource) -> OptimisticDailyOutlook:
    """Normalize one day. `entry` must already have temperature bounds.

    The date stays on the raw instant; sunrise and sunset are shifted by the
    source's UTC offset so they read as local wall-clock times.
    """
    high = entry.temp.max
    low = entry.temp.min
    day_average = entry.temp.day if _is_finite(entry.temp.day) else (high + low) / 2
    primary = entry.weather[0] if entry.weather else None
    return OptimisticDailyOutlook(
        date=_utc(entry.dt),
        high=high,
        low=low,
        day_average=day_average,
        precipitation_chance_percent=fraction_to_percent(entry.pop),
        condition=primary.main if primary else "",
        description=primary.description if primary else "",
        sunrise=_shifted(entry.sunrise, timezone_offset),
        sunset=_shifted(entry.sunset, timezone_offset),
        wind_speed=entry.wind_speed,
        wind_gust=entry.wind_gust,
        wind_deg=entry.wind_deg,
        source=source,
    )


def build_extended_outlook(
    entries: Iterable[DailyForecastEntry],
    timezone_offset: int,
    source: OutlookSource = "onecall",
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[OptimisticDailyOutlook]:
    """Drop days without temperature bounds, then sort by time and cap to the horizon."""
    valid = sorted((entry for entry in entries if has_temperature_bounds(entry)), key=lambda entry: entry.dt)
    return [to_daily_outlook(entry, timezone_offset, source) for entry in valid[:horizon_days]]


def merge_daily_outlooks(
    groups: Iterable[Sequence[OptimisticDailyOutlook]],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[OptimisticDailyOutlook]:
    """Merge sources in priority order, one day per UTC calendar date.

    Earlier groups win when two sources report the same date.
    """
    by_date: dict[date, OptimisticDailyOutlook] = {}
    for group in groups:
        for day in group:
            by_date.setdefault(day.date.date(), day)
    return sorted(by_date.values(), key=lambda day: day.date)[:horizon_days]


def attach_stories(days: Iterable[OptimisticDailyOutlook], units: Units) -> list[OptimisticDailyOutlook]:
    return [day.model_copy(update={"story": build_optimistic_daily_story(day, units)}) for day in days]


def summarize_outlook(days: list[OptimisticDailyOutlook], horizon_days: int = DEFAULT_HORIZON_DAYS) -> OptimisticExtendedOutlook:
    if len(days) == horizon_days:
        return OptimisticExtendedOutlook(days=days, is_complete=True)
    message = LIMITED_OUTLOOK_MESSAGE if days else UNAVAILABLE_OUTLOOK_MESSAGE
    return OptimisticExtendedOutlook(days=days, is_complete=False, message=message)


def build_hourly_outlook(entries: Iterable[HourlyForecastEntry], timezone_offset: int) -> list[OptimisticHourlyOutlook]:
    hours = []
    for entry in entries:
        primary = entry.weather[0] if entry.weather else None
        hours.append(
            OptimisticHourlyOutlook(
                id=str(entry.dt),
                time=_utc(entry.dt + timezone_offset),
                temperature=entry.temp,
                feels_like=entry.feels_like,
                precipitation_chance_percent=fraction_to_percent(entry.pop),
                condition=primary.main if primary else "",
                description=primary.description if primary else "",
                icon=primary.icon if primary and primary.icon else None,
            )
        )
    return hours


@dataclass
class OutlookBundle:
    """Extended outlook plus the hourly outlook when the primary source supplied one."""

    extended_outlook: OptimisticExtendedOutlook
    hourly_outlook: list[OptimisticHourlyOutlook] | None = None


class DailyOutlookMerger:
    """Fetches and merges the two daily sources for one location."""

    def __init__(self, deps: ForecastDeps):
        self.deps = deps

    async def _primary(
        self, location: GeoLocation, units: Units
    ) -> tuple[list[OptimisticDailyOutlook], list[OptimisticHourlyOutlook] | None]:
        try:
            response = await weather_service.get_extended_forecast(self.deps, location.lat, location.lon, units)
            days = build_extended_outlook(
                response.daily, response.timezone_offset, "onecall", horizon_days=len(response.daily)
            )
            hourly = build_hourly_outlook(response.hourly, response.timezone_offset) if response.hourly else None
        except SOURCE_FAILURES as e:
            logger.warning("Primary daily forecast unavailable for %s: %s", location.label(), e)
            return [], None
        return days, hourly

    async def _legacy(self, location: GeoLocation, units: Units) -> list[OptimisticDailyOutlook]:
        try:
            response = await weather_service.get_legacy_daily_forecast(self.deps, location.lat, location.lon, units)
            entries = [normalize_legacy_entry(entry) for entry in response.entries]
            # Capped later, after merging with the primary days.
            return build_extended_outlook(entries, response.city.timezone, "legacy", horizon_days=len(entries))
        except SOURCE_FAILURES as e:
            logger.warning("Legacy daily forecast unavailable for %s: %s", location.label(), e)
            return []

    async def build(self, location: GeoLocation, units: Units, horizon_days: int | None = None) -> OutlookBundle:
        """Assemble the outlook. Never raises for source failures; emptiness signals degradation."""
        horizon_days = horizon_days or self.deps.settings.horizon_days

        primary_days, hourly = await self._primary(location, units)
        if len(primary_days) >= horizon_days:
            days = primary_days[:horizon_days]
        else:
            legacy_days = await self._legacy(location, units)
            days = merge_daily_outlooks([primary_days, legacy_days], horizon_days)
            if len(days) < horizon_days:
                logger.info("Extended outlook for %s has %d of %d days", location.label(), len(days), horizon_days)
        return OutlookBundle(summarize_outlook(attach_stories(days, units), horizon_days), hourly)
