"""Database models for the weather dashboard.

## Schema Overview

```
users            - accounts created on first OAuth login
weather_records  - saved current-weather snapshots
```

Users are keyed by `(provider, provider_user_id)`, so the same person
signing in with Google and with LinkedIn gets two accounts.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from weather_dashboard.models.weather import (
    CITY_MAX_LENGTH,
    CONDITION_MAX_LENGTH,
    COUNTRY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC on every backend.

    SQLite has no timezone support and keeps only the wall-clock part, so
    values are converted to UTC before they are written (naive values are
    taken to be UTC already) and come back with UTC attached.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class User(Base):
    """User account model.

    Created (or refreshed) on every successful OAuth callback.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    provider: Mapped[str] = mapped_column(String(32), nullable=False)  # google, linkedin
    provider_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    picture_url: Mapped[str | None] = mapped_column(String(512))

    # Account status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=_utcnow, onupdate=_utcnow
    )
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime)

    __table_args__ = (
        UniqueConstraint("provider", "provider_user_id", name="uq_user_provider_identity"),
    )

    def __repr__(self) -> str:
        return f"<User {self.provider}|{self.provider_user_id}>"


class WeatherRecord(Base):
    """A saved current-weather snapshot for one city."""

    __tablename__ = "weather_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    city: Mapped[str] = mapped_column(String(CITY_MAX_LENGTH), nullable=False)
    country: Mapped[str] = mapped_column(String(COUNTRY_MAX_LENGTH), nullable=False)

    # Coordinates
    lon: Mapped[float] = mapped_column(Float, nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)

    # Observations (metric units)
    temp: Mapped[float] = mapped_column(Float, default=0)
    feels_like: Mapped[float] = mapped_column(Float, default=0)
    humidity: Mapped[int] = mapped_column(Integer, default=0)  # %
    pressure: Mapped[int] = mapped_column(Integer, default=0)  # hPa
    wind_speed: Mapped[float] = mapped_column(Float, default=0)  # m/s
    condition: Mapped[str] = mapped_column(
        String(CONDITION_MAX_LENGTH), default="Unknown"
    )  # e.g. Clouds
    description: Mapped[str] = mapped_column(String(DESCRIPTION_MAX_LENGTH), default="Unknown")

    fetched_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=_utcnow
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_weather_records_city", "city"),
        Index("ix_weather_records_fetched_at", "fetched_at"),
    )

    def __repr__(self) -> str:
        return f"<WeatherRecord {self.city} {self.fetched_at}>"
