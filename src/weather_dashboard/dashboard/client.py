"""HTTP client for the weather API.

Talks to a running server on behalf of a signed-in user. The session is the
same JWT cookie the browser receives after OAuth login.

Example:
    ```python
    async with DashboardClient("http://localhost:8080", session_token=token) as api:
        record = await api.search("Philadelphia")
        history = await api.load_history()
    ```
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import pydantic

from weather_dashboard.models.weather import DeleteResponse, WeatherRecordResponse

logger = logging.getLogger(__name__)

DEFAULT_COOKIE_NAME = "weather_session"


class DashboardError(Exception):
    """Raised when the weather API answers with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.text or response.reason_phrase


class DashboardClient:
    """Async client for the /api/weather endpoints."""

    def __init__(
        self,
        base_url: str,
        session_token: str | None = None,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        cookies = {cookie_name: session_token} if session_token else None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            cookies=cookies,
            timeout=timeout,
        )

    async def __aenter__(self) -> DashboardClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise DashboardError(f"Request failed: {e}") from e

        # The login guard redirects instead of answering 401
        if response.is_redirect:
            raise DashboardError("Not signed in", status_code=response.status_code)
        if response.status_code >= 400:
            raise DashboardError(_error_message(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise DashboardError(
                f"Unexpected response from server: {e}", status_code=response.status_code
            ) from e

    @staticmethod
    def _parse(model: type[pydantic.BaseModel], data: Any) -> Any:
        """Validate a response body against the canonical response shape."""
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            raise DashboardError(
                f"Unexpected response from server: {e.error_count()} invalid field(s)"
            ) from e

    async def load_history(self, limit: int = 50, city: str | None = None) -> list[WeatherRecordResponse]:
        params: dict[str, Any] = {"limit": limit}
        if city:
            params["city"] = city
        data = await self._request("GET", "/api/weather", params=params)
        if not isinstance(data, list):
            raise DashboardError("Unexpected response from server: expected a list")
        return [self._parse(WeatherRecordResponse, item) for item in data]

    async def search(self, city: str) -> WeatherRecordResponse:
        """Fetch current weather for a city and save it."""
        data = await self._request("POST", "/api/weather/fetch", params={"city": city})
        return self._parse(WeatherRecordResponse, data)

    async def refresh(self, record_id: str) -> WeatherRecordResponse:
        """Re-fetch a saved record in place; its id does not change."""
        data = await self._request("POST", f"/api/weather/{record_id}/refresh")
        return self._parse(WeatherRecordResponse, data)

    async def delete(self, record_id: str) -> DeleteResponse:
        data = await self._request("DELETE", f"/api/weather/{record_id}")
        return self._parse(DeleteResponse, data)
