"""Weather record models.

`WeatherRecordIn` is the canonical shape every record must satisfy before it
is written. `WeatherRecordResponse` is the one shape the API returns; it adds
the store-managed id and timestamps.

Wire names are camelCase (`feelsLike`, `windSpeed`, `fetchedAt`); Python
attribute names are snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from weather_dashboard.database.models import WeatherRecord

# Upper bounds match the `weather_records` column sizes
CITY_MAX_LENGTH = 255
COUNTRY_MAX_LENGTH = 16
CONDITION_MAX_LENGTH = 64
DESCRIPTION_MAX_LENGTH = 255


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Coordinates(CamelModel):
    """Longitude/latitude pair in decimal degrees."""

    lon: float = Field(..., strict=True, description="Longitude")
    lat: float = Field(..., strict=True, description="Latitude")


class WeatherRecordIn(CamelModel):
    """A candidate weather record, either normalized or caller supplied.

    Numeric fields are strict: strings and booleans are rejected rather than
    coerced. `fetched_at` accepts a datetime or an ISO-8601 string.
    """

    city: str = Field(..., strict=True, min_length=1, max_length=CITY_MAX_LENGTH)
    country: str = Field(
        ..., strict=True, min_length=2, max_length=COUNTRY_MAX_LENGTH, description="Country code, e.g. 'US'"
    )
    coordinates: Coordinates
    temp: float = Field(..., strict=True, description="Temperature in °C")
    feels_like: float = Field(..., strict=True, description="Apparent temperature in °C")
    humidity: int = Field(..., strict=True, description="Relative humidity in %")
    pressure: int = Field(..., strict=True, description="Pressure in hPa")
    wind_speed: float = Field(..., strict=True, description="Wind speed in m/s")
    condition: str = Field(
        ..., strict=True, max_length=CONDITION_MAX_LENGTH, description="Category, e.g. 'Clouds'"
    )
    description: str = Field(
        ..., strict=True, max_length=DESCRIPTION_MAX_LENGTH, description="Free text, e.g. 'broken clouds'"
    )
    fetched_at: datetime = Field(..., description="When the source data was captured")


class WeatherRecordResponse(WeatherRecordIn):
    """A persisted weather record as returned by the API."""

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: WeatherRecord) -> WeatherRecordResponse:
        """Build the response shape from a database row."""
        return cls(
            id=str(record.id),
            city=record.city,
            country=record.country,
            coordinates=Coordinates(lon=record.lon, lat=record.lat),
            temp=record.temp,
            feels_like=record.feels_like,
            humidity=record.humidity,
            pressure=record.pressure,
            wind_speed=record.wind_speed,
            condition=record.condition,
            description=record.description,
            fetched_at=record.fetched_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class DeleteResponse(BaseModel):
    """Result of deleting a record."""

    deleted: bool
    id: str
