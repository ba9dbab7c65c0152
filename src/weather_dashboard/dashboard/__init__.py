"""Dashboard client for the weather API."""

from weather_dashboard.dashboard.client import DashboardClient, DashboardError
from weather_dashboard.dashboard.view import (
    EMPTY_HISTORY_MESSAGE,
    Dashboard,
    HistoryRow,
    LatestCard,
    format_fetched,
    format_temperature,
    render_history,
    render_table,
)

__all__ = [
    "DashboardClient",
    "DashboardError",
    "Dashboard",
    "HistoryRow",
    "LatestCard",
    "EMPTY_HISTORY_MESSAGE",
    "format_fetched",
    "format_temperature",
    "render_history",
    "render_table",
]
