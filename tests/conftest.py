"""Pytest fixtures for weather dashboard tests.

This module provides test fixtures that ensure:
1. No external API calls are made (OpenWeather, Google, LinkedIn)
2. Each API test gets its own in-memory SQLite database
3. Isolated test environment with controlled configuration
"""

import os

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-at-least-32-characters-long")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-google-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-google-client-secret")
os.environ.setdefault("LINKEDIN_CLIENT_ID", "test-linkedin-client-id")
os.environ.setdefault("LINKEDIN_CLIENT_SECRET", "test-linkedin-client-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.pop("OPENWEATHER_API_KEY", None)

import httpx
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from support import OpenWeatherStub, fixed_clock, login, oauth_handler
from weather_dashboard.api import create_app
from weather_dashboard.api.routes.weather import get_clock, get_provider_factory
from weather_dashboard.auth.oauth import (
    GoogleOAuth,
    LinkedInOAuth,
    get_google_oauth,
    get_linkedin_oauth,
)
from weather_dashboard.database.models import Base
from weather_dashboard.providers.openweather import OpenWeatherProvider


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from weather_dashboard.auth.state import get_state_store
    from weather_dashboard.config import get_settings

    get_settings.cache_clear()
    get_state_store.cache_clear()
    yield
    get_settings.cache_clear()
    get_state_store.cache_clear()


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def make_weather():
    """Factory for valid manual weather payloads (camelCase wire shape)."""

    def _make(**overrides) -> dict:
        payload = {
            "city": "Testville",
            "country": "US",
            "coordinates": {"lon": -75.1, "lat": 39.9},
            "temp": 21,
            "feelsLike": 20,
            "humidity": 55,
            "pressure": 1013,
            "windSpeed": 4,
            "condition": "Clouds",
            "description": "overcast clouds",
            "fetchedAt": "2025-01-01T00:00:00Z",
        }
        payload.update(overrides)
        return payload

    return _make


# =============================================================================
# External Service Mocks
# =============================================================================


@pytest.fixture
def openweather_stub() -> OpenWeatherStub:
    return OpenWeatherStub()


@pytest.fixture
def openweather_provider(openweather_stub):
    """OpenWeather provider wired to the stub, with a fixed clock."""
    return OpenWeatherProvider(
        api_key="test-api-key",
        clock=fixed_clock,
        client=httpx.AsyncClient(transport=httpx.MockTransport(openweather_stub)),
    )


@pytest.fixture
def google_oauth() -> GoogleOAuth:
    return GoogleOAuth(
        client_id="test-google-client-id",
        client_secret="test-google-client-secret",
        redirect_uri="http://testserver/auth/google/callback",
        transport=httpx.MockTransport(oauth_handler),
    )


@pytest.fixture
def linkedin_oauth() -> LinkedInOAuth:
    return LinkedInOAuth(
        client_id="test-linkedin-client-id",
        client_secret="test-linkedin-client-secret",
        redirect_uri="http://testserver/auth/linkedin/callback",
        transport=httpx.MockTransport(oauth_handler),
    )


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(openweather_stub, google_oauth, linkedin_oauth):
    """Application with every external collaborator replaced."""

    def provider_factory():
        return OpenWeatherProvider(
            api_key="test-api-key",
            clock=fixed_clock,
            client=httpx.AsyncClient(transport=httpx.MockTransport(openweather_stub)),
        )

    application = create_app()
    application.dependency_overrides[get_clock] = lambda: fixed_clock
    application.dependency_overrides[get_provider_factory] = lambda: provider_factory
    application.dependency_overrides[get_google_oauth] = lambda: google_oauth
    application.dependency_overrides[get_linkedin_oauth] = lambda: linkedin_oauth
    return application


@pytest.fixture
def client(app):
    """Unauthenticated test client. Entering it runs startup (fresh database)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def authed_client(client):
    """Test client carrying a session cookie from a Google login."""
    response = login(client, "google")
    assert response.status_code == 302
    return client


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def db_session():
    """Async session bound to a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
