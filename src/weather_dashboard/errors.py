"""Application error taxonomy.

Every error raised below the HTTP layer derives from `WeatherAppError` and
carries the status code it maps to. The API layer installs a single handler
that turns these into JSON error responses.

| Error | Status | Meaning |
|-------|--------|---------|
| ValidationError | 400 | Candidate record has bad or missing fields |
| InvalidId | 400 | Record id is not a well-formed UUID |
| NotFound | 404 | Well-formed id, no matching record |
| ProviderError | 502 (404 for unknown city) | Weather provider call failed |
| ConfigurationError | 500 | Required credential is missing |
"""

from __future__ import annotations


class WeatherAppError(Exception):
    """Base exception for application errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(WeatherAppError):
    """Raised when a candidate weather record fails schema validation."""

    status_code = 400

    def __init__(self, fields: list[str], errors: list[dict] | None = None):
        super().__init__(f"Invalid weather record: {', '.join(fields)}")
        self.fields = fields
        self.errors = errors or []


class NotFound(WeatherAppError):
    """Raised when no record matches a well-formed id."""

    status_code = 404

    def __init__(self, record_id: str):
        super().__init__("Weather record not found")
        self.record_id = record_id


class InvalidId(WeatherAppError):
    """Raised when a record id is not a valid UUID."""

    status_code = 400

    def __init__(self, record_id: str):
        super().__init__(f"Invalid record id: {record_id!r}")
        self.record_id = record_id


class ProviderError(WeatherAppError):
    """Raised when the external weather provider call fails."""

    status_code = 502

    def __init__(
        self,
        message: str,
        provider: str,
        upstream_status: int | None = None,
        response_body: str | None = None,
    ):
        # An unknown city is the caller's fault, not the provider's
        super().__init__(message, status_code=404 if upstream_status == 404 else None)
        self.provider = provider
        self.upstream_status = upstream_status
        self.response_body = response_body


class ConfigurationError(WeatherAppError):
    """Raised at request time when a required credential is missing."""

    status_code = 500


class LoginRequired(Exception):
    """Raised by the auth guard when a request carries no valid session.

    Handled by redirecting to the login page rather than returning JSON.
    """
