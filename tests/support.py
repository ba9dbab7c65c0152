"""Shared test data and mock HTTP endpoints."""

from datetime import datetime, timezone

import httpx

from weather_dashboard.auth.oauth import GoogleOAuth, LinkedInOAuth

FIXED_NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
UNKNOWN_CITY = "Atlantis"


def fixed_clock() -> datetime:
    return FIXED_NOW


def openweather_payload(city: str = "Philadelphia") -> dict:
    """A realistic OpenWeatherMap current-weather response."""
    return {
        "coord": {"lon": -75.1638, "lat": 39.9523},
        "weather": [{"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}],
        "main": {
            "temp": 21.4,
            "feels_like": 20.9,
            "temp_min": 19.8,
            "temp_max": 22.7,
            "pressure": 1013,
            "humidity": 55,
        },
        "wind": {"speed": 4.12, "deg": 250},
        "dt": 1700000000,
        "sys": {"country": "US"},
        "name": city,
        "cod": 200,
    }


class OpenWeatherStub:
    """Mock OpenWeather endpoint that records the requests it receives."""

    def __init__(self):
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        city = request.url.params.get("q", "")
        if city == UNKNOWN_CITY:
            return httpx.Response(404, json={"cod": "404", "message": "city not found"})
        return httpx.Response(200, json=openweather_payload(city))


def oauth_handler(request: httpx.Request) -> httpx.Response:
    """Mock token and userinfo endpoints for both identity providers."""
    url = str(request.url)
    if request.method == "POST":
        form = dict(httpx.QueryParams(request.content.decode()))
        if form.get("code") == "bad-code":
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(200, json={"access_token": "test-access-token", "token_type": "Bearer"})
    if url.startswith(GoogleOAuth.userinfo_url):
        return httpx.Response(
            200,
            json={
                "id": "google-123",
                "email": "test@example.com",
                "name": "Test User",
                "picture": "https://example.com/photo.jpg",
            },
        )
    if url.startswith(LinkedInOAuth.userinfo_url):
        return httpx.Response(
            200,
            json={
                "sub": "linkedin-456",
                "given_name": "Link",
                "family_name": "User",
                "email": "link@example.com",
            },
        )
    return httpx.Response(404)


def login(test_client, provider: str = "google", code: str = "test-code") -> httpx.Response:
    """Run the OAuth login flow against the mocked provider."""
    start = test_client.get(f"/auth/{provider}", follow_redirects=False)
    state = httpx.URL(start.headers["location"]).params["state"]
    return test_client.get(
        f"/auth/{provider}/callback",
        params={"code": code, "state": state},
        follow_redirects=False,
    )
