"""FastAPI application and routes.

This module provides the REST API for the weather dashboard.

## API Structure

- /auth - Authentication endpoints (Google and LinkedIn OAuth)
- /api/weather - Saved weather records
- /health - Health check

## Authentication

Every /api/weather endpoint requires a session cookie. Sessions are created
during OAuth login; requests without one are redirected to "/".
"""

from weather_dashboard.api.app import create_app

__all__ = ["create_app"]
