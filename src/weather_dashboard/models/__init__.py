"""Domain models for the weather dashboard."""

from weather_dashboard.models.weather import (
    Coordinates,
    DeleteResponse,
    WeatherRecordIn,
    WeatherRecordResponse,
)

__all__ = [
    "Coordinates",
    "DeleteResponse",
    "WeatherRecordIn",
    "WeatherRecordResponse",
]
