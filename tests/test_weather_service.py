# ABOUTME: Contract tests for the OpenWeather service layer.
# ABOUTME: Validates request parameters, error mapping and payload parsing with mocked HTTP.

import httpx
import pytest

from optimistic_weather.errors import MalformedDataError, ProviderError
from optimistic_weather.weather_service import (
    fetch_json,
    geocode_by_zip,
    geocode_direct,
    get_extended_forecast,
    get_forecast,
    get_legacy_daily_forecast,
    reverse_geocode,
)

TEST_API_BASE = "https://owm.test"

COPENHAGEN = {"name": "Copenhagen", "lat": 55.6761, "lon": 12.5683, "country": "DK"}


def _params(deps) -> dict:
    return deps.http_client.get.call_args.kwargs["params"]


class TestFetchJson:
    @pytest.mark.asyncio
    async def test_adds_api_key_and_base(self, make_deps):
        """Every request carries the API key and targets the configured base.

        Implementation: Routes one path and inspects the mocked GET call.
        Passing implies: Callers never pass credentials themselves.
        """
        deps = make_deps({"/ping": {"ok": True}})
        result = await fetch_json(deps, "/ping", {"q": "x"})

        assert result == {"ok": True}
        assert deps.http_client.get.call_args.args[0] == f"{TEST_API_BASE}/ping"
        assert _params(deps) == {"q": "x", "appid": "test-key"}

    @pytest.mark.asyncio
    async def test_non_success_status_is_provider_error(self, make_deps):
        """Non-2xx answers become ProviderError carrying status and body.

        Implementation: Requests an unrouted path, which answers 404.
        Passing implies: Callers can branch on status_code without touching httpx.
        """
        deps = make_deps({})
        with pytest.raises(ProviderError) as excinfo:
            await fetch_json(deps, "/missing", {})

        assert excinfo.value.status_code == 404
        assert "not found" in excinfo.value.body
        assert str(excinfo.value).startswith("OpenWeather error (404)")

    @pytest.mark.asyncio
    async def test_transport_failure_is_provider_error(self, make_deps):
        """Connection failures become ProviderError without a status.

        Implementation: The route raises httpx.ConnectError.
        Passing implies: Transport errors never leak as raw httpx exceptions.
        """
        deps = make_deps({"/ping": httpx.ConnectError("connection refused")})
        with pytest.raises(ProviderError) as excinfo:
            await fetch_json(deps, "/ping", {})

        assert excinfo.value.status_code is None
        assert "connection refused" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self, make_deps):
        """A successful response that is not JSON is malformed data.

        Implementation: The route answers 200 with an HTML body.
        Passing implies: Decoding failures are distinguished from provider errors.
        """
        html = httpx.Response(200, text="<html>oops</html>", request=httpx.Request("GET", TEST_API_BASE))
        deps = make_deps({"/ping": html})
        with pytest.raises(MalformedDataError):
            await fetch_json(deps, "/ping", {})


class TestGeocoding:
    @pytest.mark.asyncio
    async def test_direct_returns_candidates(self, make_deps):
        """Direct geocoding parses every candidate in provider order.

        Implementation: Routes two candidates and checks params.
        Passing implies: The query is trimmed and the limit forwarded.
        """
        paris_tx = {"name": "Paris", "lat": 33.66, "lon": -95.55, "state": "Texas", "country": "US"}
        deps = make_deps({"/geo/1.0/direct": [COPENHAGEN, paris_tx]})
        results = await geocode_direct(deps, "  Copenhagen ", limit=5)

        assert [r.name for r in results] == ["Copenhagen", "Paris"]
        assert results[0].state is None
        assert results[1].state == "Texas"
        assert _params(deps)["q"] == "Copenhagen"
        assert _params(deps)["limit"] == 5

    @pytest.mark.asyncio
    async def test_direct_rejects_unexpected_shape(self, make_deps):
        """A non-list payload from direct geocoding is malformed.

        Implementation: Routes an error-shaped object.
        Passing implies: Shape problems surface as MalformedDataError.
        """
        deps = make_deps({"/geo/1.0/direct": {"cod": 200, "message": "odd"}})
        with pytest.raises(MalformedDataError):
            await geocode_direct(deps, "Copenhagen")

    @pytest.mark.asyncio
    async def test_zip_joins_code_and_country(self, make_deps):
        """Postal lookup sends "code,country" and parses a single location.

        Implementation: Routes the zip endpoint with a Cincinnati payload.
        Passing implies: The provider's zip parameter format is respected.
        """
        payload = {"zip": "45202", "name": "Cincinnati", "lat": 39.1, "lon": -84.5, "country": "US"}
        deps = make_deps({"/geo/1.0/zip": payload})
        result = await geocode_by_zip(deps, "45202", "US")

        assert result.name == "Cincinnati"
        assert _params(deps)["zip"] == "45202,US"

    @pytest.mark.asyncio
    async def test_reverse_passes_coordinates(self, make_deps):
        """Reverse geocoding forwards coordinates and a limit of one.

        Implementation: Routes the reverse endpoint.
        Passing implies: Coordinates resolve to named places.
        """
        deps = make_deps({"/geo/1.0/reverse": [COPENHAGEN]})
        results = await reverse_geocode(deps, 55.67, 12.56)

        assert results[0].name == "Copenhagen"
        assert _params(deps) == {"lat": 55.67, "lon": 12.56, "limit": 1, "appid": "test-key"}


class TestForecasts:
    @pytest.mark.asyncio
    async def test_short_range_parses_list_alias(self, make_deps, raw_entry):
        """The 3-hour forecast's "list" key populates entries.

        Implementation: Routes two samples and a city with an offset.
        Passing implies: Samples and the city offset are available to the orchestrator.
        """
        payload = {"list": [raw_entry(), raw_entry(dt=1_700_010_800)], "city": {"name": "X", "timezone": 3600}}
        deps = make_deps({"/data/2.5/forecast": payload})
        forecast = await get_forecast(deps, 1.0, 2.0, "imperial")

        assert len(forecast.entries) == 2
        assert forecast.entries[1].dt == 1_700_010_800
        assert forecast.city.timezone == 3600
        assert _params(deps)["units"] == "imperial"

    @pytest.mark.asyncio
    async def test_short_range_missing_required_field(self, make_deps, raw_entry):
        """A sample without wind fails validation.

        Implementation: Routes a sample with the wind key removed.
        Passing implies: Partial samples never reach the highlight builders.
        """
        broken = raw_entry()
        del broken["wind"]
        deps = make_deps({"/data/2.5/forecast": {"list": [broken]}})
        with pytest.raises(MalformedDataError, match="/data/2.5/forecast"):
            await get_forecast(deps, 1.0, 2.0, "metric")

    @pytest.mark.asyncio
    async def test_onecall_excludes_unused_blocks(self, make_deps):
        """One Call excludes current, minutely and alerts.

        Implementation: Routes an empty One Call response.
        Passing implies: Only daily and hourly data is requested.
        """
        deps = make_deps({"/data/3.0/onecall": {"timezone_offset": 7200, "daily": []}})
        response = await get_extended_forecast(deps, 1.0, 2.0, "metric")

        assert response.timezone_offset == 7200
        assert response.hourly is None
        assert _params(deps)["exclude"] == "current,minutely,alerts"

    @pytest.mark.asyncio
    async def test_legacy_requests_sixteen_days(self, make_deps):
        """The legacy daily forecast asks for its full sixteen-day range.

        Implementation: Routes one legacy day with legacy wind names.
        Passing implies: cnt=16 is sent and legacy fields are parsed.
        """
        day = {"dt": 1_700_000_000, "temp": {"min": 1, "max": 5}, "speed": 4.2, "deg": 90}
        deps = make_deps({"/data/2.5/forecast/daily": {"city": {"timezone": -3600}, "list": [day]}})
        response = await get_legacy_daily_forecast(deps, 1.0, 2.0, "metric")

        assert response.entries[0].speed == 4.2
        assert response.city.timezone == -3600
        assert _params(deps)["cnt"] == 16
