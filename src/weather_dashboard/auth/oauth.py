"""OAuth 2.0 sign-in providers.

Implements the authorization code flow for Google and LinkedIn sign-in.
Only identity is requested; the access token is used once to read the
user's profile and is not stored.

## Google

- Authorization: https://accounts.google.com/o/oauth2/v2/auth
- Token: https://oauth2.googleapis.com/token
- User Info: https://www.googleapis.com/oauth2/v2/userinfo
- Scopes: openid, email, profile

## LinkedIn (OpenID Connect)

- Authorization: https://www.linkedin.com/oauth/v2/authorization
- Token: https://www.linkedin.com/oauth/v2/accessToken
- User Info: https://api.linkedin.com/v2/userinfo
- Scopes: openid, profile, email

## Required Setup

Set `<PROVIDER>_CLIENT_ID`, `<PROVIDER>_CLIENT_SECRET` and
`<PROVIDER>_REDIRECT_URI` for each provider you want to enable. A provider
without credentials reports `is_configured = False` and its login route
answers 501.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import httpx

from weather_dashboard.config import get_settings

logger = logging.getLogger(__name__)


class OAuthError(ValueError):
    """Raised when a step of the OAuth flow fails."""


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a provider response body, which must be a JSON object."""
    try:
        data = response.json()
    except ValueError as e:
        raise OAuthError(f"Invalid JSON from {response.url.host}") from e
    if not isinstance(data, dict):
        raise OAuthError(f"Unexpected response from {response.url.host}")
    return data


@dataclass
class OAuthProfile:
    """Identity resolved from a provider's userinfo endpoint."""

    provider: str
    id: str
    display_name: str
    emails: list[str] = field(default_factory=list)
    photos: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Stable directory key, e.g. `google|1234`."""
        return f"{self.provider}|{self.id}"

    @property
    def email(self) -> str | None:
        return self.emails[0] if self.emails else None

    @property
    def picture(self) -> str | None:
        return self.photos[0] if self.photos else None


class OAuthProvider(ABC):
    """OAuth 2.0 authorization code client.

    Example:
        ```python
        oauth = get_google_oauth()

        # Redirect the user to the consent screen
        auth_url = oauth.get_authorization_url(state="random-state")

        # Handle callback
        access_token = await oauth.exchange_code(code)
        profile = await oauth.get_profile(access_token)
        ```
    """

    name: str
    authorize_url: str
    token_url: str
    userinfo_url: str
    scopes: list[str]

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        """Initialize the OAuth client.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            redirect_uri: OAuth callback URL registered with the provider
            transport: Optional httpx transport (tests pass a mock transport)
            timeout: Request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._transport = transport
        self.timeout = timeout

        if not self.is_configured:
            logger.warning(f"{self.name} OAuth not configured")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    def get_authorization_url(self, state: str) -> str:
        """Build the consent screen URL to redirect the user to."""
        if not self.is_configured:
            raise RuntimeError(f"{self.name} OAuth not configured")

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return str(httpx.URL(self.authorize_url, params=params))

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token.

        Raises:
            OAuthError: If token exchange fails
        """
        if not self.is_configured:
            raise RuntimeError(f"{self.name} OAuth not configured")

        try:
            async with self._client() as client:
                response = await client.post(
                    self.token_url,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": self.redirect_uri,
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error(f"{self.name} token request failed: {e}")
            raise OAuthError(f"Token request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"{self.name} token exchange failed: {response.text}")
            raise OAuthError(f"Token exchange failed: {response.status_code}")

        access_token = _json_object(response).get("access_token")
        if not access_token:
            raise OAuthError("Token response missing access_token")
        return access_token

    async def get_profile(self, access_token: str) -> OAuthProfile:
        """Fetch and map the signed-in user's profile.

        Raises:
            OAuthError: If the request fails or the profile has no id
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    self.userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"{self.name} userinfo request failed: {e}")
            raise OAuthError(f"{self.name} userinfo request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"{self.name} userinfo failed: {response.status_code} {response.text}")
            raise OAuthError(f"{self.name} userinfo failed: {response.status_code}")

        return self._parse_profile(_json_object(response))

    @abstractmethod
    def _parse_profile(self, data: dict[str, Any]) -> OAuthProfile:
        """Map the provider's userinfo payload to an OAuthProfile."""


class GoogleOAuth(OAuthProvider):
    """Google sign-in."""

    name = "google"
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    userinfo_url = "https://www.googleapis.com/oauth2/v2/userinfo"
    scopes = ["openid", "email", "profile"]

    def _parse_profile(self, data: dict[str, Any]) -> OAuthProfile:
        user_id = data.get("id") or data.get("sub")
        if not user_id:
            raise OAuthError("Google userinfo missing 'id'")

        return OAuthProfile(
            provider=self.name,
            id=str(user_id),
            display_name=data.get("name") or "Google User",
            emails=[data["email"]] if data.get("email") else [],
            photos=[data["picture"]] if data.get("picture") else [],
        )


class LinkedInOAuth(OAuthProvider):
    """LinkedIn sign-in via the OpenID Connect userinfo endpoint."""

    name = "linkedin"
    authorize_url = "https://www.linkedin.com/oauth/v2/authorization"
    token_url = "https://www.linkedin.com/oauth/v2/accessToken"
    userinfo_url = "https://api.linkedin.com/v2/userinfo"
    scopes = ["openid", "profile", "email"]

    def _parse_profile(self, data: dict[str, Any]) -> OAuthProfile:
        user_id = data.get("sub") or data.get("id")
        if not user_id:
            raise OAuthError("LinkedIn userinfo missing 'sub'")

        full_name = f"{data.get('given_name') or ''} {data.get('family_name') or ''}".strip()
        display_name = data.get("name") or full_name or "LinkedIn User"

        return OAuthProfile(
            provider=self.name,
            id=str(user_id),
            display_name=display_name,
            emails=[data["email"]] if data.get("email") else [],
            photos=[data["picture"]] if data.get("picture") else [],
        )


@lru_cache
def get_google_oauth() -> GoogleOAuth:
    """Get cached Google OAuth client instance."""
    settings = get_settings()
    return GoogleOAuth(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri,
    )


@lru_cache
def get_linkedin_oauth() -> LinkedInOAuth:
    """Get cached LinkedIn OAuth client instance."""
    settings = get_settings()
    return LinkedInOAuth(
        client_id=settings.linkedin_client_id,
        client_secret=settings.linkedin_client_secret,
        redirect_uri=settings.linkedin_redirect_uri,
    )
