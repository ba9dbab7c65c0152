"""Weather data providers."""

from weather_dashboard.errors import ProviderError
from weather_dashboard.providers.base import Clock, WeatherProvider, utc_now
from weather_dashboard.providers.openweather import (
    OpenWeatherProvider,
    normalize_current_weather,
)

__all__ = [
    "Clock",
    "WeatherProvider",
    "ProviderError",
    "OpenWeatherProvider",
    "normalize_current_weather",
    "utc_now",
]
