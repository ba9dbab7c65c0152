"""Dashboard state and rendering.

`Dashboard` drives the three user actions (search-and-save, refresh,
delete) against the API and keeps what a screen shows: the latest record,
the history rows and a one-line status message. Failures never propagate
out of an action; they become an `error` status line.

Rendering reads the single canonical record shape
(`WeatherRecordResponse`), so there is no guessing between field names.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from weather_dashboard.dashboard.client import DashboardClient, DashboardError
from weather_dashboard.models.weather import WeatherRecordResponse

logger = logging.getLogger(__name__)

EMPTY_HISTORY_MESSAGE = "No weather data saved yet."
HISTORY_COLUMNS = ("City", "Temp", "Conditions", "Fetched", "ID")

StatusType = Literal["ok", "error"]


def format_temperature(temp: float | None) -> str:
    """Round to a whole degree (halves round up), or N/A."""
    if temp is None:
        return "N/A"
    return f"{math.floor(temp + 0.5)}°"


def format_fetched(fetched_at: datetime | None) -> str:
    """Render a capture time in the local timezone."""
    if fetched_at is None:
        return ""
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=timezone.utc)
    return fetched_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class LatestCard:
    """The most recently fetched record."""

    city: str
    temperature: str
    conditions: str
    meta: str

    @classmethod
    def from_record(cls, record: WeatherRecordResponse) -> LatestCard:
        fetched = format_fetched(record.fetched_at)
        return cls(
            city=record.city,
            temperature=format_temperature(record.temp),
            conditions=record.description,
            meta=f"Fetched at: {fetched}" if fetched else "",
        )


@dataclass
class HistoryRow:
    """One row of the history table."""

    id: str
    city: str
    temperature: str
    conditions: str
    fetched: str

    @classmethod
    def from_record(cls, record: WeatherRecordResponse) -> HistoryRow:
        return cls(
            id=record.id,
            city=record.city,
            temperature=format_temperature(record.temp),
            conditions=record.description,
            fetched=format_fetched(record.fetched_at),
        )


def render_history(records: list[WeatherRecordResponse]) -> list[HistoryRow]:
    return [HistoryRow.from_record(record) for record in records]


def render_table(rows: list[HistoryRow]) -> str:
    """Plain-text history table; an empty history renders a placeholder."""
    if not rows:
        return EMPTY_HISTORY_MESSAGE

    cells = [list(HISTORY_COLUMNS)] + [
        [row.city, row.temperature, row.conditions, row.fetched, row.id] for row in rows
    ]
    widths = [max(len(line[i]) for line in cells) for i in range(len(HISTORY_COLUMNS))]
    lines = ["  ".join(value.ljust(width) for value, width in zip(line, widths)).rstrip() for line in cells]
    lines.insert(1, "  ".join("-" * width for width in widths))
    return "\n".join(lines)


@dataclass
class Dashboard:
    """What the dashboard shows, plus the actions that change it."""

    api: DashboardClient
    history_limit: int = 50
    latest: LatestCard | None = None
    rows: list[HistoryRow] = field(default_factory=list)
    status: str = ""
    status_type: StatusType = "ok"

    def set_status(self, message: str, status_type: StatusType = "ok") -> None:
        self.status = message
        self.status_type = status_type

    async def load_history(self) -> bool:
        try:
            self.set_status("Loading history...")
            records = await self.api.load_history(limit=self.history_limit)
        except DashboardError as e:
            logger.error(f"Failed to load history: {e}")
            self.set_status(f"Failed to load history: {e}", "error")
            return False

        self.rows = render_history(records)
        self.set_status("History loaded.")
        return True

    async def search(self, city: str) -> bool:
        """Fetch and save weather for a city, then reload history."""
        city = city.strip()
        if not city:
            return False

        try:
            self.set_status(f"Fetching weather for {city}...")
            record = await self.api.search(city)
        except DashboardError as e:
            logger.error(f"Failed to fetch weather: {e}")
            self.set_status(f"Failed to fetch weather: {e}", "error")
            return False

        self.latest = LatestCard.from_record(record)
        if await self.load_history():
            self.set_status(f"Weather fetched and saved for {record.city}")
        return True

    async def refresh(self, record_id: str) -> bool:
        """Refresh a saved record in place, then reload history."""
        try:
            self.set_status("Refreshing weather...")
            record = await self.api.refresh(record_id)
        except DashboardError as e:
            logger.error(f"Failed to refresh: {e}")
            self.set_status(f"Failed to refresh: {e}", "error")
            return False

        self.latest = LatestCard.from_record(record)
        if await self.load_history():
            self.set_status(f"Weather refreshed for {record.city}")
        return True

    async def delete(self, record_id: str) -> bool:
        try:
            await self.api.delete(record_id)
        except DashboardError as e:
            logger.error(f"Failed to delete: {e}")
            self.set_status(f"Failed to delete: {e}", "error")
            return False

        if await self.load_history():
            self.set_status("Record deleted.")
        return True
