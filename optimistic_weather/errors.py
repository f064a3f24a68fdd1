# ABOUTME: Typed failures raised by the forecast pipeline.
# ABOUTME: Callers translate these into user-facing copy; messages are safe to show verbatim.


class ForecastError(Exception):
    """Base class for every failure surfaced by the forecast pipeline."""


class ConfigurationError(ForecastError):
    """Credentials or settings are missing. Fatal, never retried."""


class EmptyQueryError(ForecastError):
    """The location query was blank after trimming."""

    def __init__(self, message: str = "Enter a location to search for a forecast."):
        super().__init__(message)


class NotFoundError(ForecastError):
    """No location matched the query after every fallback."""

    def __init__(self, query: str, message: str | None = None):
        self.query = query
        super().__init__(
            message
            or f'Could not find a place that matches "{query}". Double-check the spelling or try nearby cities.'
        )


class ProviderError(ForecastError):
    """The weather provider answered with a non-success status or could not be reached."""

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"OpenWeather request failed: {body}")
        else:
            super().__init__(f"OpenWeather error ({status_code}): {body}")


class MalformedDataError(ForecastError):
    """A provider response did not have the shape the pipeline needs."""
