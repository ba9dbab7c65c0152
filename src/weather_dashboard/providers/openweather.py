"""OpenWeatherMap current-weather provider.

## Endpoint
- URL: https://api.openweathermap.org/data/2.5/weather
- Auth: `appid` query parameter
- Units: `units=metric` (°C, m/s, hPa)

## Response Format
```json
{
  "coord": {"lon": -75.16, "lat": 39.95},
  "weather": [{"main": "Clouds", "description": "broken clouds"}],
  "main": {"temp": 21.3, "feels_like": 20.9, "pressure": 1013, "humidity": 55},
  "wind": {"speed": 4.1},
  "sys": {"country": "US"},
  "name": "Philadelphia",
  "cod": 200
}
```

## Variable Translation

| OpenWeather Field | Canonical Field | Default |
|-------------------|-----------------|---------|
| name | city | queried city |
| sys.country | country | "NA" |
| coord.lon / coord.lat | coordinates.lon / .lat | 0 |
| main.temp | temp | 0 |
| main.feels_like | feelsLike | 0 |
| main.humidity | humidity | 0 |
| main.pressure | pressure | 0 |
| wind.speed | windSpeed | 0 |
| weather[0].main | condition | "Unknown" |
| weather[0].description | description | "Unknown" |
| (clock) | fetchedAt | capture time |

`fetchedAt` is always the local capture time, never the provider's `dt`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from weather_dashboard.providers.base import WeatherProvider

logger = logging.getLogger(__name__)

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


def _get(data: Any, *path: str | int, default: Any = None) -> Any:
    """Walk nested dicts/lists, returning `default` when any step is missing."""
    current = data
    for key in path:
        try:
            current = current[key]
        except (KeyError, IndexError, TypeError):
            return default
    return default if current is None else current


def normalize_current_weather(
    data: dict[str, Any],
    fetched_at: datetime,
    city: str | None = None,
) -> dict[str, Any]:
    """Map an OpenWeatherMap response onto the canonical record shape.

    Args:
        data: Decoded JSON body from the current-weather endpoint
        fetched_at: Capture time to stamp on the record
        city: The queried city, used when the response has no `name`

    Returns:
        Candidate record (camelCase keys), not yet validated
    """
    return {
        "city": _get(data, "name", default=city or ""),
        "country": _get(data, "sys", "country", default="NA"),
        "coordinates": {
            "lon": _get(data, "coord", "lon", default=0),
            "lat": _get(data, "coord", "lat", default=0),
        },
        "temp": _get(data, "main", "temp", default=0),
        "feelsLike": _get(data, "main", "feels_like", default=0),
        "humidity": _get(data, "main", "humidity", default=0),
        "pressure": _get(data, "main", "pressure", default=0),
        "windSpeed": _get(data, "wind", "speed", default=0),
        "condition": _get(data, "weather", 0, "main", default="Unknown"),
        "description": _get(data, "weather", 0, "description", default="Unknown"),
        "fetchedAt": fetched_at,
    }


class OpenWeatherProvider(WeatherProvider):
    """OpenWeatherMap current-weather provider.

    Example:
        ```python
        async with OpenWeatherProvider(api_key="your-key") as provider:
            candidate = await provider.fetch_current("Philadelphia")
        ```
    """

    name = "openweather"
    base_url = OPENWEATHER_URL

    async def fetch_current(self, city: str) -> dict[str, Any]:
        """Fetch and normalize current weather for a city."""
        logger.info(f"Fetching current weather for {city!r}")
        data = await self._fetch(
            self.base_url,
            params={"q": city, "appid": self.api_key, "units": "metric"},
        )
        return self._translate_response(data, city)

    def _translate_response(self, response_data: dict[str, Any], city: str) -> dict[str, Any]:
        return normalize_current_weather(response_data, fetched_at=self.clock(), city=city)
