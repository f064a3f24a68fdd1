# ABOUTME: Environment-driven settings for the OpenWeather forecast pipeline.
# ABOUTME: Loads .env via python-dotenv and validates values into a pydantic Settings model.

import os

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from optimistic_weather.errors import ConfigurationError

DEFAULT_API_BASE = "https://api.openweathermap.org"


class Settings(BaseModel):
    """Runtime configuration shared by every provider call."""

    api_key: str
    api_base: str = DEFAULT_API_BASE
    # None means every country is accepted; the US-only UI variant sets {"US"}.
    allowed_countries: frozenset[str] | None = None
    timeout_seconds: float = 10.0
    retry_attempts: int = 3
    horizon_days: int = 10

    @field_validator("api_base", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("allowed_countries", mode="after")
    @classmethod
    def normalize_countries(cls, v: frozenset[str] | None) -> frozenset[str] | None:
        if v is None:
            return None
        codes = frozenset(code.strip().upper() for code in v if code.strip())
        return codes or None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment, loading a .env file first.

        Raises ConfigurationError when the API key is missing.
        """
        load_dotenv()

        api_key = os.environ.get("OPENWEATHER_API_KEY", "").strip()
        if not api_key:
            raise ConfigurationError("Missing OpenWeather API key. Set OPENWEATHER_API_KEY in your environment.")

        countries = os.environ.get("OPENWEATHER_ALLOWED_COUNTRIES", "")
        try:
            return cls(
                api_key=api_key,
                api_base=os.environ.get("OPENWEATHER_API_BASE", DEFAULT_API_BASE),
                allowed_countries=frozenset(countries.split(",")) if countries.strip() else None,
                timeout_seconds=float(os.environ.get("OPENWEATHER_TIMEOUT", 10.0)),
                retry_attempts=int(os.environ.get("OPENWEATHER_RETRY_ATTEMPTS", 3)),
                horizon_days=int(os.environ.get("OPENWEATHER_HORIZON_DAYS", 10)),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid OpenWeather configuration: {e}") from e
