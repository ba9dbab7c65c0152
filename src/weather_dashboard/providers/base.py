"""Base weather provider abstraction.

This module defines the interface for current-weather providers. Each
provider translates its API response into the canonical candidate record
shape (see `weather_dashboard.models.weather.WeatherRecordIn`); validation
happens afterwards, in `weather_dashboard.validation`.

## Canonical Units

- Temperature: Celsius (°C)
- Wind speed: meters per second (m/s)
- Pressure: hectopascals (hPa)
- Humidity: percentage (0-100)

## Failure Policy

A provider call is made exactly once. Transport errors and non-2xx
responses raise `ProviderError`; nothing is retried, so the failure is
reported on the request that triggered it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from weather_dashboard.errors import ProviderError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current UTC time."""
    return datetime.now(timezone.utc)


class WeatherProvider(ABC):
    """Abstract base class for current-weather providers.

    Attributes:
        name: Provider identifier used in logs and errors
        base_url: Base URL for the API

    Example:
        ```python
        async with MyProvider(api_key="...") as provider:
            candidate = await provider.fetch_current("Philadelphia")
        ```
    """

    name: str
    base_url: str

    def __init__(
        self,
        api_key: str,
        clock: Clock | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        """Initialize the provider.

        Args:
            api_key: Provider API key
            clock: Returns the capture time stamped on each record
            client: Pre-built HTTP client (tests pass one with a mock transport)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.clock = clock or utc_now
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> WeatherProvider:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _fetch(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        """Issue one GET request and return the decoded JSON body.

        Raises:
            ProviderError: On transport failure, non-2xx status or bad JSON
        """
        client = self._get_client()
        try:
            response = await client.get(url, params=params, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request failed: {e}")
            raise ProviderError(f"{self.name} request failed: {e}", provider=self.name) from e

        if response.status_code >= 400:
            logger.warning(f"{self.name} returned {response.status_code}: {response.text}")
            raise ProviderError(
                _error_message(response),
                provider=self.name,
                upstream_status=response.status_code,
                response_body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.name} returned invalid JSON",
                provider=self.name,
                upstream_status=response.status_code,
                response_body=response.text,
            ) from e

    @abstractmethod
    async def fetch_current(self, city: str) -> dict[str, Any]:
        """Fetch current weather for a city as a canonical candidate record.

        Raises:
            ProviderError: If the weather cannot be retrieved
        """

    @abstractmethod
    def _translate_response(self, response_data: dict[str, Any], city: str) -> dict[str, Any]:
        """Translate a provider-specific response to the canonical shape."""


def _error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"Weather provider error: {body['message']}"
    return f"Weather provider request failed: {response.status_code}"
