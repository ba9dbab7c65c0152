"""Authentication routes.

Handles the Google and LinkedIn OAuth login flows and session management.

## OAuth Flow

1. GET /auth/{google,linkedin} - Redirect to the provider's consent screen
2. GET /auth/{google,linkedin}/callback - Handle OAuth callback, set session
3. GET|POST /auth/logout - Clear session
4. GET /auth/me - Get current user info

A failed provider exchange redirects to /error; a missing or reused
`state` token answers 400.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weather_dashboard.auth.dependencies import get_current_user_optional
from weather_dashboard.auth.oauth import (
    OAuthError,
    OAuthProfile,
    OAuthProvider,
    get_google_oauth,
    get_linkedin_oauth,
)
from weather_dashboard.auth.session import create_session_token
from weather_dashboard.auth.state import OAuthStateStore, get_state_store
from weather_dashboard.config import get_settings
from weather_dashboard.database.connection import get_db_session
from weather_dashboard.database.models import User

logger = logging.getLogger(__name__)

router = APIRouter()

LOGIN_SUCCESS_URL = "/profile"
LOGIN_FAILURE_URL = "/error"


class UserResponse(BaseModel):
    """User information response."""

    id: str
    provider: str
    display_name: str | None
    email: str | None
    picture_url: str | None


class AuthStatusResponse(BaseModel):
    """Authentication status response."""

    authenticated: bool
    user: UserResponse | None = None


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        provider=user.provider,
        display_name=user.display_name,
        email=user.email,
        picture_url=user.picture_url,
    )


async def upsert_user(db: AsyncSession, profile: OAuthProfile) -> User:
    """Find the user for a provider identity, creating it on first login."""
    result = await db.execute(
        select(User).where(
            User.provider == profile.provider,
            User.provider_user_id == profile.id,
        )
    )
    user = result.scalar_one_or_none()
    now = datetime.now(timezone.utc)

    if user:
        user.display_name = profile.display_name
        user.email = profile.email
        user.picture_url = profile.picture
        user.last_login_at = now
    else:
        user = User(
            provider=profile.provider,
            provider_user_id=profile.id,
            display_name=profile.display_name,
            email=profile.email,
            picture_url=profile.picture,
            last_login_at=now,
        )
        db.add(user)

    await db.commit()
    await db.refresh(user)
    return user


def _start_login(oauth: OAuthProvider, states: OAuthStateStore) -> RedirectResponse:
    if not oauth.is_configured:
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail=f"{oauth.name} OAuth not configured",
        )

    state = states.issue(oauth.name)
    return RedirectResponse(url=oauth.get_authorization_url(state=state))


async def _finish_login(
    oauth: OAuthProvider,
    states: OAuthStateStore,
    db: AsyncSession,
    code: str | None,
    state: str | None,
    error: str | None,
) -> RedirectResponse:
    """Complete a provider callback: verify state, resolve the user, set the cookie."""
    settings = get_settings()

    if error or not code:
        logger.warning(f"{oauth.name} login cancelled or failed: {error}")
        return RedirectResponse(url=LOGIN_FAILURE_URL, status_code=status.HTTP_302_FOUND)

    if not state or not states.consume(state, oauth.name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired state token",
        )

    try:
        access_token = await oauth.exchange_code(code)
        profile = await oauth.get_profile(access_token)
    except OAuthError as e:
        logger.error(f"{oauth.name} login failed: {e}")
        return RedirectResponse(url=LOGIN_FAILURE_URL, status_code=status.HTTP_302_FOUND)

    user = await upsert_user(db, profile)
    session_token = create_session_token(user.id, provider=user.provider)

    redirect = RedirectResponse(url=LOGIN_SUCCESS_URL, status_code=status.HTTP_302_FOUND)
    redirect.set_cookie(
        key=settings.session_cookie_name,
        value=session_token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    logger.info(f"User {profile.key} logged in")
    return redirect


@router.get("/google")
async def google_login(
    oauth: OAuthProvider = Depends(get_google_oauth),
    states: OAuthStateStore = Depends(get_state_store),
) -> RedirectResponse:
    """Initiate Google OAuth login."""
    return _start_login(oauth, states)


@router.get("/google/callback")
async def google_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    oauth: OAuthProvider = Depends(get_google_oauth),
    states: OAuthStateStore = Depends(get_state_store),
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    """Handle Google OAuth callback."""
    return await _finish_login(oauth, states, db, code, state, error)


@router.get("/linkedin")
async def linkedin_login(
    oauth: OAuthProvider = Depends(get_linkedin_oauth),
    states: OAuthStateStore = Depends(get_state_store),
) -> RedirectResponse:
    """Initiate LinkedIn OAuth login."""
    return _start_login(oauth, states)


@router.get("/linkedin/callback")
async def linkedin_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    oauth: OAuthProvider = Depends(get_linkedin_oauth),
    states: OAuthStateStore = Depends(get_state_store),
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    """Handle LinkedIn OAuth callback."""
    return await _finish_login(oauth, states, db, code, state, error)


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    response: Response,
    user: User | None = Depends(get_current_user_optional),
) -> dict:
    """Log out the current user by clearing the session cookie."""
    settings = get_settings()

    if user:
        logger.info(f"User {user.provider}|{user.provider_user_id} logged out")

    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return {"status": "logged_out"}


@router.get("/me", response_model=AuthStatusResponse)
async def get_auth_status(
    user: User | None = Depends(get_current_user_optional),
) -> AuthStatusResponse:
    """Get the current authentication status and user info."""
    if user:
        return AuthStatusResponse(authenticated=True, user=user_response(user))

    return AuthStatusResponse(authenticated=False)
