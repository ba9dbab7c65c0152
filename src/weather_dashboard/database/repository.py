"""Weather record store.

`WeatherRepository` is the only code that reads or writes the
`weather_records` table. It accepts already-validated records
(`WeatherRecordIn`) and never validates payloads itself.

## Identifiers

Record ids are UUIDs. A string that does not parse as a UUID raises
`InvalidId` before the database is queried; a well-formed id with no
matching row raises `NotFound`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weather_dashboard.database.models import WeatherRecord
from weather_dashboard.errors import InvalidId, NotFound
from weather_dashboard.models.weather import WeatherRecordIn

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


def parse_record_id(record_id: str | uuid.UUID) -> uuid.UUID:
    """Parse a record id, raising InvalidId when it is malformed."""
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        raise InvalidId(str(record_id)) from None


def _apply(row: WeatherRecord, record: WeatherRecordIn) -> None:
    """Copy every canonical field onto a row (full replace)."""
    row.city = record.city
    row.country = record.country
    row.lon = record.coordinates.lon
    row.lat = record.coordinates.lat
    row.temp = record.temp
    row.feels_like = record.feels_like
    row.humidity = record.humidity
    row.pressure = record.pressure
    row.wind_speed = record.wind_speed
    row.condition = record.condition
    row.description = record.description
    row.fetched_at = record.fetched_at


class WeatherRepository:
    """CRUD operations over saved weather records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_records(
        self,
        city: str | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[WeatherRecord]:
        """List records, newest capture first, optionally for one city."""
        query = select(WeatherRecord)
        if city:
            query = query.where(WeatherRecord.city == city)
        query = query.order_by(WeatherRecord.fetched_at.desc()).limit(limit)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_by_id(self, record_id: str | uuid.UUID) -> WeatherRecord:
        row = await self.session.get(WeatherRecord, parse_record_id(record_id))
        if row is None:
            raise NotFound(str(record_id))
        return row

    async def create(self, record: WeatherRecordIn) -> WeatherRecord:
        """Insert a new record; the store assigns its id and timestamps."""
        row = WeatherRecord()
        _apply(row, record)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)

        logger.info(f"Created weather record {row.id} for {row.city}")
        return row

    async def replace_by_id(
        self,
        record_id: str | uuid.UUID,
        record: WeatherRecordIn,
    ) -> WeatherRecord:
        """Replace every canonical field of an existing record.

        The id and `created_at` are preserved; `updated_at` is refreshed.
        """
        row = await self.get_by_id(record_id)
        _apply(row, record)
        await self.session.commit()
        await self.session.refresh(row)

        logger.info(f"Replaced weather record {row.id}")
        return row

    async def delete_by_id(self, record_id: str | uuid.UUID) -> dict[str, Any]:
        row = await self.get_by_id(record_id)
        await self.session.delete(row)
        await self.session.commit()

        logger.info(f"Deleted weather record {row.id}")
        return {"deleted": True, "id": str(row.id)}
