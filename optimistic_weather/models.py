# ABOUTME: Pydantic BaseModels for OpenWeather payloads and the optimistic forecast output.
# ABOUTME: Raw provider shapes are read-only inputs; output models are frozen once built.

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Units = Literal["metric", "imperial"]

OutlookSource = Literal["onecall", "legacy"]

HighlightId = Literal[
    "dryness",
    "refresh",
    "clouds",
    "feels-like",
    "cooler",
    "warmer",
    "humidity",
    "hydration",
    "visibility",
    "cozy-views",
    "breeze",
    "wind-energy",
]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Coordinates(_Frozen):
    lat: float
    lon: float


class GeoLocation(_Frozen):
    """A resolved place as returned by the geocoding endpoints."""

    name: str
    lat: float
    lon: float
    state: str | None = None
    country: str

    def identity_key(self) -> tuple:
        """Case-folded, trimmed key used to deduplicate locations."""
        return (
            self.name.strip().casefold(),
            (self.state or "").strip().casefold(),
            self.country.strip().casefold(),
            self.lat,
            self.lon,
        )

    def label(self) -> str:
        parts = [self.name]
        if self.state:
            parts.append(self.state)
        parts.append(self.country)
        return ", ".join(parts)


class LocationSuggestion(_Frozen):
    """A candidate location plus the exact string that reproduces it when re-submitted."""

    location: GeoLocation
    search_value: str


# Raw provider payloads


class ForecastWeather(_Frozen):
    id: int
    main: str
    description: str = ""
    icon: str = ""


class ForecastMain(_Frozen):
    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: int
    pressure: float | None = None


class ForecastClouds(_Frozen):
    all: int = 0


class ForecastWind(_Frozen):
    speed: float
    deg: float = 0
    gust: float | None = None


class ForecastEntry(_Frozen):
    """One 3-hourly sample from the short-range forecast endpoint."""

    dt: int
    main: ForecastMain
    weather: list[ForecastWeather] = []
    clouds: ForecastClouds = ForecastClouds()
    wind: ForecastWind
    # Provider omits visibility beyond its 10 km ceiling.
    visibility: float = 10000
    pop: float | None = None
    rain: dict[str, float] | None = None
    snow: dict[str, float] | None = None


class ForecastCity(_Frozen):
    name: str = ""
    country: str = ""
    coord: Coordinates | None = None
    timezone: int = 0


class ForecastResponse(_Frozen):
    """Parsed response from /data/2.5/forecast."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    entries: list[ForecastEntry] = Field(default=[], alias="list")
    city: ForecastCity = ForecastCity()


class DailyTemperature(_Frozen):
    day: float | None = None
    min: float | None = None
    max: float | None = None
    night: float | None = None
    eve: float | None = None
    morn: float | None = None


class DailyForecastEntry(_Frozen):
    """One day from the primary (onecall) source; also the shape legacy days are normalized into."""

    dt: int
    sunrise: int | None = None
    sunset: int | None = None
    temp: DailyTemperature = DailyTemperature()
    humidity: int | None = None
    weather: list[ForecastWeather] = []
    clouds: int | None = None
    wind_speed: float | None = None
    wind_gust: float | None = None
    wind_deg: float | None = None
    pop: float | None = None
    rain: float | None = None
    snow: float | None = None


class HourlyForecastEntry(_Frozen):
    dt: int
    temp: float
    feels_like: float
    weather: list[ForecastWeather] = []
    pop: float | None = None


class ExtendedForecastResponse(_Frozen):
    """Parsed response from /data/3.0/onecall."""

    lat: float | None = None
    lon: float | None = None
    timezone: str = "UTC"
    timezone_offset: int = 0
    daily: list[DailyForecastEntry] = []
    hourly: list[HourlyForecastEntry] | None = None


class LegacyDailyForecastEntry(_Frozen):
    """One day from /data/2.5/forecast/daily, which names its wind fields differently."""

    dt: int
    sunrise: int | None = None
    sunset: int | None = None
    temp: DailyTemperature = DailyTemperature()
    humidity: int | None = None
    weather: list[ForecastWeather] = []
    clouds: int | None = None
    speed: float | None = None
    gust: float | None = None
    deg: float | None = None
    pop: float | None = None
    rain: float | None = None
    snow: float | None = None


class LegacyCity(_Frozen):
    timezone: int = 0


class LegacyDailyForecastResponse(_Frozen):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    city: LegacyCity = LegacyCity()
    entries: list[LegacyDailyForecastEntry] = Field(default=[], alias="list")


# Optimistic output


class OptimisticHighlight(_Frozen):
    """One user-facing derived fact; at most one per id in a forecast."""

    id: HighlightId
    title: str
    takeaway: str
    detail: str | None = None
    metric_label: str | None = None
    metric_value: str | None = None
    hero_stat_value: str | None = None
    hero_stat_label: str | None = None


class DailyStory(_Frozen):
    """Short optimistic copy for one outlook day."""

    headline: str
    detail: str
    mood: str
    temperature_summary: str


class OptimisticDailyOutlook(_Frozen):
    date: datetime
    high: float
    low: float
    day_average: float
    precipitation_chance_percent: int | None = Field(default=None, ge=0, le=100)
    condition: str
    description: str
    sunrise: datetime | None = None
    sunset: datetime | None = None
    wind_speed: float | None = None
    wind_gust: float | None = None
    wind_deg: float | None = None
    source: OutlookSource = "onecall"
    story: DailyStory | None = None


class OptimisticExtendedOutlook(_Frozen):
    days: list[OptimisticDailyOutlook] = []
    is_complete: bool = False
    message: str | None = None


class OptimisticHourlyOutlook(_Frozen):
    id: str
    time: datetime
    temperature: float
    feels_like: float
    precipitation_chance_percent: int | None = Field(default=None, ge=0, le=100)
    condition: str
    description: str
    icon: str | None = None


class TemperatureBlock(_Frozen):
    current: float
    feels_like: float
    high: float
    low: float
    units: Units


class OptimisticForecast(_Frozen):
    """The complete forecast handed to the presentation layer."""

    location_label: str
    next_update: datetime
    temperature: TemperatureBlock
    sky_summary: str
    highlights: list[OptimisticHighlight] = []
    extended_outlook: OptimisticExtendedOutlook | None = None
    hourly_outlook: list[OptimisticHourlyOutlook] | None = None
    coordinates: Coordinates
