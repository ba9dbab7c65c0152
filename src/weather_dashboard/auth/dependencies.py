"""FastAPI dependencies for authentication.

These dependencies guard routes and resolve the current user.

## Usage

```python
from fastapi import Depends
from weather_dashboard.auth import require_login
from weather_dashboard.database import User

# Guard a whole router; unauthenticated requests are redirected to "/"
app.include_router(router, dependencies=[Depends(require_login)])

@app.get("/profile")
async def profile(user: User = Depends(require_login)):
    return {"name": user.display_name}
```
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weather_dashboard.auth.session import SessionData, verify_session_token
from weather_dashboard.config import get_settings
from weather_dashboard.database.connection import get_db_session
from weather_dashboard.database.models import User
from weather_dashboard.errors import LoginRequired

logger = logging.getLogger(__name__)


def get_session_data(request: Request) -> SessionData | None:
    """Extract and verify session data from the session cookie.

    Returns None if no session or invalid session.
    """
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        return None

    return verify_session_token(token)


def is_authenticated(request: Request) -> bool:
    """Check whether a request carries a valid, unexpired session."""
    return get_session_data(request) is not None


async def get_current_user_optional(
    session: SessionData | None = Depends(get_session_data),
    db: AsyncSession = Depends(get_db_session),
) -> User | None:
    """Get the current user if logged in, or None."""
    if session is None:
        return None

    result = await db.execute(
        select(User).where(User.id == session.user_id, User.is_active == True)
    )
    user = result.scalar_one_or_none()

    if user is None:
        logger.warning(f"Session for non-existent/inactive user: {session.user_id}")
        return None

    return user


async def require_login(
    request: Request,
    user: User | None = Depends(get_current_user_optional),
) -> User:
    """Guard a route behind a valid session.

    On success the user is attached to `request.state.user`. Otherwise
    `LoginRequired` is raised, which the app turns into a redirect to the
    landing page before any route handler runs.
    """
    if user is None:
        raise LoginRequired()

    request.state.user = user
    return user
