"""FastAPI application factory.

Creates and configures the FastAPI application with all routes and middleware.

## Usage

```python
from weather_dashboard.api import create_app

app = create_app()

# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
```

## Configuration

The app is configured via environment variables. See `weather_dashboard.config`
for available settings.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from weather_dashboard.api.routes.auth import AuthStatusResponse, UserResponse, user_response
from weather_dashboard.auth.dependencies import get_current_user_optional, require_login
from weather_dashboard.config import get_settings
from weather_dashboard.database.connection import close_db, create_tables, init_db
from weather_dashboard.database.models import User
from weather_dashboard.errors import LoginRequired, ValidationError, WeatherAppError

logger = logging.getLogger(__name__)

LOGIN_PAGE_URL = "/"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes the database on startup and disposes of it on shutdown.
    """
    settings = get_settings()

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    await init_db()
    await create_tables()

    yield

    logger.info("Shutting down")
    await close_db()


async def weather_app_error_handler(request: Request, exc: WeatherAppError) -> JSONResponse:
    """Render application errors as `{"detail": ...}` JSON."""
    content: dict = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        content["fields"] = exc.fields
        content["errors"] = exc.errors

    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=content)


async def login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    """Send unauthenticated requests to the landing page."""
    return RedirectResponse(url=LOGIN_PAGE_URL, status_code=status.HTTP_302_FOUND)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="CRUD API over saved weather records with OpenWeather integration",
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(WeatherAppError, weather_app_error_handler)
    app.add_exception_handler(LoginRequired, login_required_handler)

    # Include routers
    from weather_dashboard.api.routes import auth, weather

    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(
        weather.router,
        prefix="/api/weather",
        tags=["Weather"],
        dependencies=[Depends(require_login)],
    )

    @app.get("/", response_model=AuthStatusResponse, tags=["Pages"])
    async def index(user: User | None = Depends(get_current_user_optional)):
        """Landing page: current auth status."""
        if user:
            return AuthStatusResponse(authenticated=True, user=user_response(user))
        return AuthStatusResponse(authenticated=False)

    @app.get("/profile", response_model=UserResponse, tags=["Pages"])
    async def profile(user: User = Depends(require_login)):
        """The signed-in user's profile."""
        return user_response(user)

    @app.get("/error", tags=["Pages"])
    async def login_failed():
        """Landing target for failed logins."""
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Login failed."},
        )

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app
