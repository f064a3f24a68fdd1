# ABOUTME: Dependency container for the forecast pipeline using Pydantic BaseModel.
# ABOUTME: Holds the httpx.AsyncClient and Settings used by every provider call.

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic_ai.retries import AsyncTenacityTransport, RetryConfig, wait_retry_after
from tenacity import retry_if_exception_type, stop_after_attempt

from optimistic_weather.config import Settings


class ForecastDeps(BaseModel):
    """Collaborators injected into resolvers, mergers and the orchestrator."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.AsyncClient
    settings: Settings


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create an httpx client that reconnects on transient transport failures.

    Only connection errors and read timeouts are retried. Non-2xx responses are
    returned untouched so the service layer can raise ProviderError for them.
    """
    transport = AsyncTenacityTransport(
        RetryConfig(
            retry=retry_if_exception_type((httpx.ConnectError, httpx.ReadTimeout)),
            wait=wait_retry_after(max_wait=30),
            stop=stop_after_attempt(max(1, settings.retry_attempts)),
            reraise=True,
        ),
    )
    return httpx.AsyncClient(transport=transport, timeout=settings.timeout_seconds)


def create_deps(settings: Settings | None = None) -> ForecastDeps:
    """Build ForecastDeps from explicit settings or from the environment."""
    settings = settings or Settings.from_env()
    return ForecastDeps(http_client=create_http_client(settings), settings=settings)
