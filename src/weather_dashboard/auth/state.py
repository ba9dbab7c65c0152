"""OAuth `state` token store.

State tokens protect the OAuth callback against CSRF. They live only in
process memory: the store is bounded, entries expire, and everything is
lost on restart (a login in flight during a restart must be retried).
"""

from __future__ import annotations

import secrets
import threading
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from weather_dashboard.config import get_settings


class OAuthStateStore:
    """Bounded, expiring store of one-time OAuth state tokens."""

    def __init__(self, ttl_seconds: int = 600, max_entries: int = 1024):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_entries = max_entries
        self._states: OrderedDict[str, tuple[str, datetime]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._states)

    def issue(self, provider: str) -> str:
        """Generate and remember a state token for a provider's login."""
        state = secrets.token_urlsafe(32)
        with self._lock:
            self._states[state] = (provider, datetime.now(timezone.utc))
            # Oldest entries are evicted first
            while len(self._states) > self.max_entries:
                self._states.popitem(last=False)
        return state

    def consume(self, state: str, provider: str) -> bool:
        """Verify and remove a state token. Each token is valid once."""
        with self._lock:
            entry = self._states.pop(state, None)
        if entry is None:
            return False

        issued_for, created = entry
        if issued_for != provider:
            return False
        return datetime.now(timezone.utc) - created < self.ttl

    def clear(self) -> None:
        with self._lock:
            self._states.clear()


@lru_cache
def get_state_store() -> OAuthStateStore:
    """Get the process-wide state store."""
    settings = get_settings()
    return OAuthStateStore(
        ttl_seconds=settings.oauth_state_ttl_seconds,
        max_entries=settings.oauth_state_max_entries,
    )
