"""Weather record routes.

Every request runs the same pipeline:

    received -> (fetch from provider) -> validate -> (persist) -> respond

## Endpoints

- GET /api/weather?city=&limit= - List saved records, newest first
- POST /api/weather - Create from a manual payload or a provider fetch
- POST /api/weather/fetch?city= - Always fetch from the provider, then create
- GET /api/weather/{id} - Read one record
- PUT /api/weather/{id} - Replace a record with a full payload
- POST /api/weather/{id}/refresh - Re-fetch the record's city in place
- DELETE /api/weather/{id} - Delete one record

All routes are mounted behind the login guard. A missing OpenWeather API
key fails only the routes that need the provider, at request time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from weather_dashboard.config import get_settings
from weather_dashboard.database.connection import get_db_session
from weather_dashboard.database.repository import DEFAULT_LIST_LIMIT, WeatherRepository
from weather_dashboard.errors import ConfigurationError, ValidationError
from weather_dashboard.models.weather import DeleteResponse, WeatherRecordResponse
from weather_dashboard.providers.base import Clock, WeatherProvider, utc_now
from weather_dashboard.providers.openweather import OpenWeatherProvider
from weather_dashboard.validation import validate_weather

logger = logging.getLogger(__name__)

router = APIRouter()

ProviderFactory = Callable[[], WeatherProvider]


def get_clock() -> Clock:
    """Clock used to stamp `fetchedAt` on fetched records."""
    return utc_now


def get_provider_factory(clock: Clock = Depends(get_clock)) -> ProviderFactory:
    """Return a factory for the weather provider.

    The API key is checked when the factory is called, so routes that never
    reach the provider (manual create, list, read) work without one.
    """

    def factory() -> WeatherProvider:
        settings = get_settings()
        if not settings.openweather_api_key:
            raise ConfigurationError("Missing OPENWEATHER_API_KEY")
        return OpenWeatherProvider(
            api_key=settings.openweather_api_key,
            clock=clock,
            timeout=settings.openweather_timeout,
        )

    return factory


def get_repository(db: AsyncSession = Depends(get_db_session)) -> WeatherRepository:
    return WeatherRepository(db)


async def _fetch_candidate(provider_factory: ProviderFactory, city: str) -> dict[str, Any]:
    async with provider_factory() as provider:
        return await provider.fetch_current(city)


def _resolve_city(city: str | None) -> str:
    return city or get_settings().default_city


@router.get("", response_model=list[WeatherRecordResponse])
async def list_weather(
    city: str | None = None,
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=1000),
    repo: WeatherRepository = Depends(get_repository),
) -> list[WeatherRecordResponse]:
    """List saved weather records, optionally filtered by city."""
    rows = await repo.list_records(city=city, limit=limit)
    return [WeatherRecordResponse.from_record(row) for row in rows]


@router.post("", response_model=WeatherRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_weather(
    body: Any = Body(default=None),
    repo: WeatherRepository = Depends(get_repository),
    provider_factory: ProviderFactory = Depends(get_provider_factory),
) -> WeatherRecordResponse:
    """Create a weather record.

    With `manual: true` the rest of the body is the full record. Otherwise
    `city` (or the configured default city) is fetched from the provider.
    """
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise ValidationError(["body"])

    payload = dict(body)
    manual = payload.pop("manual", False)

    if manual:
        candidate: Any = payload
    else:
        candidate = await _fetch_candidate(provider_factory, _resolve_city(payload.get("city")))

    row = await repo.create(validate_weather(candidate))
    return WeatherRecordResponse.from_record(row)


@router.post("/fetch", response_model=WeatherRecordResponse, status_code=status.HTTP_201_CREATED)
async def fetch_weather(
    city: str | None = None,
    repo: WeatherRepository = Depends(get_repository),
    provider_factory: ProviderFactory = Depends(get_provider_factory),
) -> WeatherRecordResponse:
    """Fetch current weather for a city from the provider and save it."""
    candidate = await _fetch_candidate(provider_factory, _resolve_city(city))
    row = await repo.create(validate_weather(candidate))
    return WeatherRecordResponse.from_record(row)


@router.get("/{record_id}", response_model=WeatherRecordResponse)
async def get_weather(
    record_id: str,
    repo: WeatherRepository = Depends(get_repository),
) -> WeatherRecordResponse:
    """Get a single weather record by id."""
    return WeatherRecordResponse.from_record(await repo.get_by_id(record_id))


@router.put("/{record_id}", response_model=WeatherRecordResponse)
async def replace_weather(
    record_id: str,
    body: Any = Body(default=None),
    repo: WeatherRepository = Depends(get_repository),
) -> WeatherRecordResponse:
    """Replace a weather record with a full payload."""
    record = validate_weather(body)
    return WeatherRecordResponse.from_record(await repo.replace_by_id(record_id, record))


@router.post("/{record_id}/refresh", response_model=WeatherRecordResponse)
async def refresh_weather(
    record_id: str,
    repo: WeatherRepository = Depends(get_repository),
    provider_factory: ProviderFactory = Depends(get_provider_factory),
) -> WeatherRecordResponse:
    """Re-fetch a record's city and update the record in place.

    The record keeps its id; only the weather fields and `updatedAt` change.
    """
    existing = await repo.get_by_id(record_id)
    candidate = await _fetch_candidate(provider_factory, existing.city)
    row = await repo.replace_by_id(existing.id, validate_weather(candidate))
    return WeatherRecordResponse.from_record(row)


@router.delete("/{record_id}", response_model=DeleteResponse)
async def delete_weather(
    record_id: str,
    repo: WeatherRepository = Depends(get_repository),
) -> DeleteResponse:
    """Delete a weather record by id."""
    result = await repo.delete_by_id(record_id)
    return DeleteResponse(**result)
