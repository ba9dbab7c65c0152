"""Authentication module for the weather dashboard.

Provides Google and LinkedIn OAuth sign-in and session management.

## OAuth Flow

1. User visits /auth/<provider>
2. Redirect to the provider's consent screen
3. Provider redirects back with an authorization code
4. Exchange the code for an access token and read the user's profile
5. Create/update the user in the database
6. Create session and set cookie

## Security

- Sessions use signed JWT cookies (HTTP-only, SameSite=Lax)
- OAuth `state` tokens are single-use and expire after 10 minutes
- HTTPS required in production
"""

from weather_dashboard.auth.dependencies import (
    get_current_user_optional,
    is_authenticated,
    require_login,
)
from weather_dashboard.auth.oauth import (
    GoogleOAuth,
    LinkedInOAuth,
    OAuthError,
    OAuthProfile,
    OAuthProvider,
    get_google_oauth,
    get_linkedin_oauth,
)
from weather_dashboard.auth.session import (
    SessionData,
    create_session_token,
    verify_session_token,
)
from weather_dashboard.auth.state import OAuthStateStore, get_state_store

__all__ = [
    "GoogleOAuth",
    "LinkedInOAuth",
    "OAuthError",
    "OAuthProfile",
    "OAuthProvider",
    "get_google_oauth",
    "get_linkedin_oauth",
    "SessionData",
    "create_session_token",
    "verify_session_token",
    "OAuthStateStore",
    "get_state_store",
    "get_current_user_optional",
    "is_authenticated",
    "require_login",
]
