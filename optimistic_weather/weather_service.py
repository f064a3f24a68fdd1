# ABOUTME: Service layer for OpenWeather API calls and response parsing.
# ABOUTME: Handles geocoding (direct, reverse, postal), short-range, onecall and legacy daily forecasts.

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from optimistic_weather.deps import ForecastDeps
from optimistic_weather.errors import MalformedDataError, ProviderError
from optimistic_weather.models import (
    ExtendedForecastResponse,
    ForecastResponse,
    GeoLocation,
    LegacyDailyForecastResponse,
    Units,
)

logger = logging.getLogger(__name__)

DIRECT_GEOCODING_PATH = "/geo/1.0/direct"
REVERSE_GEOCODING_PATH = "/geo/1.0/reverse"
ZIP_GEOCODING_PATH = "/geo/1.0/zip"
FORECAST_PATH = "/data/2.5/forecast"
ONECALL_PATH = "/data/3.0/onecall"
LEGACY_DAILY_PATH = "/data/2.5/forecast/daily"

ONECALL_EXCLUDE = "current,minutely,alerts"
LEGACY_DAILY_COUNT = 16

_M = TypeVar("_M", bound=BaseModel)

_locations = TypeAdapter(list[GeoLocation])


async def fetch_json(deps: ForecastDeps, path: str, params: dict[str, Any]) -> Any:
    """GET an OpenWeather endpoint and return the decoded JSON body.

    Transport failures and non-2xx statuses both become ProviderError; an
    undecodable body becomes MalformedDataError.
    """
    url = f"{deps.settings.api_base}{path}"
    logger.debug("GET %s", path)
    try:
        resp = await deps.http_client.get(url, params={**params, "appid": deps.settings.api_key})
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ProviderError(e.response.status_code, e.response.text) from e
    except httpx.HTTPError as e:
        raise ProviderError(None, str(e) or type(e).__name__) from e

    try:
        return resp.json()
    except ValueError as e:
        raise MalformedDataError(f"OpenWeather returned a non-JSON body for {path}") from e


def _parse(model: type[_M], data: Any, path: str) -> _M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedDataError(f"Unexpected response shape from {path}: {e.error_count()} invalid field(s)") from e


def _parse_locations(data: Any, path: str) -> list[GeoLocation]:
    try:
        return _locations.validate_python(data)
    except ValidationError as e:
        raise MalformedDataError(f"Unexpected response shape from {path}: {e.error_count()} invalid field(s)") from e


async def geocode_direct(deps: ForecastDeps, query: str, limit: int = 5) -> list[GeoLocation]:
    """Free-text geocoding; returns up to `limit` candidates in provider order."""
    data = await fetch_json(deps, DIRECT_GEOCODING_PATH, {"q": query.strip(), "limit": limit})
    return _parse_locations(data, DIRECT_GEOCODING_PATH)


async def reverse_geocode(deps: ForecastDeps, lat: float, lon: float, limit: int = 1) -> list[GeoLocation]:
    """Coordinates to place names, nearest first."""
    data = await fetch_json(deps, REVERSE_GEOCODING_PATH, {"lat": lat, "lon": lon, "limit": limit})
    return _parse_locations(data, REVERSE_GEOCODING_PATH)


async def geocode_by_zip(deps: ForecastDeps, code: str, country: str) -> GeoLocation:
    """Postal-code lookup. The provider answers 404 when the code is unknown."""
    data = await fetch_json(deps, ZIP_GEOCODING_PATH, {"zip": f"{code},{country}"})
    return _parse(GeoLocation, data, ZIP_GEOCODING_PATH)


async def get_forecast(deps: ForecastDeps, lat: float, lon: float, units: Units) -> ForecastResponse:
    """Fetch the 5-day / 3-hour forecast."""
    data = await fetch_json(deps, FORECAST_PATH, {"lat": lat, "lon": lon, "units": units})
    return _parse(ForecastResponse, data, FORECAST_PATH)


async def get_extended_forecast(deps: ForecastDeps, lat: float, lon: float, units: Units) -> ExtendedForecastResponse:
    """Fetch the primary daily (and hourly) forecast from One Call."""
    data = await fetch_json(
        deps,
        ONECALL_PATH,
        {"lat": lat, "lon": lon, "units": units, "exclude": ONECALL_EXCLUDE},
    )
    return _parse(ExtendedForecastResponse, data, ONECALL_PATH)


async def get_legacy_daily_forecast(
    deps: ForecastDeps,
    lat: float,
    lon: float,
    units: Units,
    count: int = LEGACY_DAILY_COUNT,
) -> LegacyDailyForecastResponse:
    """Fetch the coarser legacy daily forecast."""
    data = await fetch_json(deps, LEGACY_DAILY_PATH, {"lat": lat, "lon": lon, "units": units, "cnt": count})
    return _parse(LegacyDailyForecastResponse, data, LEGACY_DAILY_PATH)
