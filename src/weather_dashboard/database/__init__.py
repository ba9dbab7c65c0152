"""Database module for the weather dashboard.

This module provides:
- SQLAlchemy async database connection
- User and weather record models
- The weather record repository
"""

from weather_dashboard.database.connection import (
    close_db,
    create_tables,
    get_db,
    get_db_session,
    init_db,
)
from weather_dashboard.database.models import Base, User, WeatherRecord
from weather_dashboard.database.repository import WeatherRepository

__all__ = [
    # Connection
    "get_db",
    "get_db_session",
    "init_db",
    "close_db",
    "create_tables",
    # Models
    "Base",
    "User",
    "WeatherRecord",
    # Repository
    "WeatherRepository",
]
