# ABOUTME: Shared test fixtures for the optimistic weather test suite.
# ABOUTME: Provides settings, a path-routed mock HTTP client, and raw forecast payload builders.

from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from optimistic_weather.config import Settings
from optimistic_weather.deps import ForecastDeps
from optimistic_weather.models import ForecastEntry

TEST_API_BASE = "https://owm.test"


def make_response(payload, status_code: int = 200) -> httpx.Response:
    """Build a real httpx.Response carrying a JSON payload."""
    return httpx.Response(status_code=status_code, json=payload, request=httpx.Request("GET", TEST_API_BASE))


def route_client(routes: dict) -> httpx.AsyncClient:
    """Mock httpx.AsyncClient that answers by request path.

    A route value may be a JSON payload, an httpx.Response, an exception to raise,
    or a callable taking the query params and returning one of those. Unknown
    paths answer 404.
    """
    mock = AsyncMock(spec=httpx.AsyncClient)

    def _get(url: str, params: dict | None = None, **kwargs):
        path = url.removeprefix(TEST_API_BASE)
        if path not in routes:
            return make_response({"cod": "404", "message": "not found"}, 404)
        handler = routes[path]
        result = handler(params or {}) if callable(handler) else handler
        if isinstance(result, Exception):
            raise result
        if isinstance(result, httpx.Response):
            return result
        return make_response(result)

    mock.get.side_effect = _get
    return mock


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", api_base=TEST_API_BASE)


@pytest.fixture
def make_deps(settings) -> Callable[..., ForecastDeps]:
    """Factory: make_deps(routes, **settings_overrides) -> ForecastDeps."""

    def _make(routes: dict | None = None, **overrides) -> ForecastDeps:
        effective = settings.model_copy(update=overrides) if overrides else settings
        return ForecastDeps(http_client=route_client(routes or {}), settings=effective)

    return _make


def raw_forecast_entry(**overrides) -> dict:
    """One 3-hourly sample in provider JSON shape, dry and mild by default."""
    entry = {
        "dt": 1_700_000_000,
        "main": {"temp": 20.0, "feels_like": 20.0, "temp_min": 19.0, "temp_max": 21.0, "humidity": 50},
        "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
        "clouds": {"all": 0},
        "wind": {"speed": 3.0, "deg": 180},
        "visibility": 10000,
        "pop": 0.0,
    }
    # "main" and "wind" overrides merge into the defaults.
    for key in ("main", "wind"):
        if key in overrides:
            entry[key] = {**entry[key], **overrides.pop(key)}
    entry.update(overrides)
    return entry


@pytest.fixture
def forecast_entry() -> Callable[..., ForecastEntry]:
    """Factory building validated ForecastEntry models from raw overrides."""

    def _make(**overrides) -> ForecastEntry:
        return ForecastEntry.model_validate(raw_forecast_entry(**overrides))

    return _make


@pytest.fixture
def raw_entry() -> Callable[..., dict]:
    return raw_forecast_entry
