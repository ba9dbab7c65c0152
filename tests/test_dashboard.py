"""Tests for the dashboard client, view state and CLI."""

import uuid
from datetime import datetime, timezone

import httpx
import pytest

from weather_dashboard.cli import build_parser, main
from weather_dashboard.dashboard import (
    EMPTY_HISTORY_MESSAGE,
    Dashboard,
    DashboardClient,
    DashboardError,
    HistoryRow,
    LatestCard,
    format_fetched,
    format_temperature,
    render_history,
    render_table,
)
from weather_dashboard.models.weather import WeatherRecordResponse


def record_json(city: str = "Philadelphia", temp: float = 21.4, record_id: str | None = None) -> dict:
    return {
        "id": record_id or str(uuid.uuid4()),
        "city": city,
        "country": "US",
        "coordinates": {"lon": -75.16, "lat": 39.95},
        "temp": temp,
        "feelsLike": temp - 0.5,
        "humidity": 55,
        "pressure": 1013,
        "windSpeed": 4.1,
        "condition": "Clouds",
        "description": "broken clouds",
        "fetchedAt": "2025-01-01T12:00:00Z",
        "createdAt": "2025-01-01T12:00:01Z",
        "updatedAt": "2025-01-01T12:00:01Z",
    }


class FakeWeatherApi:
    """In-memory stand-in for the /api/weather endpoints."""

    def __init__(self, signed_in: bool = True):
        self.records: dict[str, dict] = {}
        self.signed_in = signed_in
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.signed_in:
            return httpx.Response(302, headers={"location": "/"})

        path = request.url.path
        if request.method == "GET" and path == "/api/weather":
            return httpx.Response(200, json=list(self.records.values()))
        if request.method == "POST" and path == "/api/weather/fetch":
            city = request.url.params["city"]
            if city == "Atlantis":
                return httpx.Response(404, json={"detail": "OpenWeather error: city not found"})
            record = record_json(city)
            self.records[record["id"]] = record
            return httpx.Response(201, json=record)

        record_id = path.split("/")[3]
        if record_id not in self.records:
            return httpx.Response(404, json={"detail": "Weather record not found"})
        if request.method == "POST" and path.endswith("/refresh"):
            record = record_json(self.records[record_id]["city"], temp=25.0, record_id=record_id)
            self.records[record_id] = record
            return httpx.Response(200, json=record)
        if request.method == "DELETE":
            del self.records[record_id]
            return httpx.Response(200, json={"deleted": True, "id": record_id})
        return httpx.Response(405)


def _client_for(handler) -> DashboardClient:
    return DashboardClient(
        "http://testserver",
        client=httpx.AsyncClient(base_url="http://testserver", transport=httpx.MockTransport(handler)),
    )


@pytest.fixture
def fake_api() -> FakeWeatherApi:
    return FakeWeatherApi()


@pytest.fixture
def api_client(fake_api) -> DashboardClient:
    return _client_for(fake_api)


@pytest.fixture
def dashboard(api_client) -> Dashboard:
    return Dashboard(api_client)


class TestFormatting:
    """Tests for value formatting."""

    @pytest.mark.parametrize(
        "temp,expected",
        [(21.4, "21°"), (21.5, "22°"), (2.5, "3°"), (-0.5, "0°"), (-1.6, "-2°"), (0, "0°")],
    )
    def test_format_temperature(self, temp, expected):
        """Test halves round up, as a browser would display them."""
        assert format_temperature(temp) == expected

    def test_format_temperature_missing(self):
        assert format_temperature(None) == "N/A"

    def test_format_fetched_naive_is_utc(self):
        naive = datetime(2025, 1, 1, 12, 0)
        aware = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert format_fetched(naive) == format_fetched(aware)

    def test_format_fetched_missing(self):
        assert format_fetched(None) == ""


class TestRendering:
    """Tests for the latest card and history table."""

    def test_latest_card(self):
        record = WeatherRecordResponse.model_validate(record_json("Boston", temp=9.6))
        card = LatestCard.from_record(record)

        assert card.city == "Boston"
        assert card.temperature == "10°"
        assert card.conditions == "broken clouds"
        assert card.meta.startswith("Fetched at: ")

    def test_history_rows(self):
        records = [WeatherRecordResponse.model_validate(record_json(city)) for city in ["A", "B"]]
        rows = render_history(records)

        assert [row.city for row in rows] == ["A", "B"]
        assert rows[0].id == records[0].id

    def test_empty_table(self):
        assert render_table([]) == EMPTY_HISTORY_MESSAGE

    def test_table(self):
        rows = [HistoryRow(id="abc", city="Boston", temperature="10°", conditions="rain", fetched="now")]
        lines = render_table(rows).splitlines()

        assert lines[0].split() == ["City", "Temp", "Conditions", "Fetched", "ID"]
        assert set(lines[1].replace(" ", "")) == {"-"}
        assert lines[2].split() == ["Boston", "10°", "rain", "now", "abc"]


class TestDashboardClient:
    """Tests for the HTTP client."""

    async def test_search(self, api_client, fake_api):
        record = await api_client.search("Denver")

        assert record.city == "Denver"
        request = fake_api.requests[0]
        assert request.method == "POST"
        assert request.url.params["city"] == "Denver"

    async def test_load_history_params(self, api_client, fake_api):
        await api_client.load_history(limit=5, city="Denver")

        params = fake_api.requests[0].url.params
        assert params["limit"] == "5"
        assert params["city"] == "Denver"

    async def test_error_detail(self, api_client):
        with pytest.raises(DashboardError) as exc_info:
            await api_client.search("Atlantis")

        assert exc_info.value.status_code == 404
        assert "city not found" in str(exc_info.value)

    async def test_redirect_means_signed_out(self):
        api = _client_for(FakeWeatherApi(signed_in=False))
        with pytest.raises(DashboardError, match="Not signed in"):
            await api.load_history()

    async def test_non_json_body(self):
        api = _client_for(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(DashboardError, match="Unexpected response"):
            await api.search("Boston")

    async def test_malformed_record(self):
        """Test a body that is not a weather record is reported, not raised raw."""
        api = _client_for(lambda request: httpx.Response(201, json={"id": "abc", "city": "Boston"}))
        with pytest.raises(DashboardError, match="Unexpected response"):
            await api.search("Boston")

    async def test_history_not_a_list(self):
        api = _client_for(lambda request: httpx.Response(200, json={"records": []}))
        with pytest.raises(DashboardError):
            await api.load_history()

    async def test_session_cookie(self):
        async with DashboardClient("http://testserver", session_token="tok") as api:
            assert api._client.cookies.get("weather_session") == "tok"


class TestDashboard:
    """Tests for dashboard actions and status messages."""

    async def test_load_history(self, dashboard, fake_api):
        fake_api.records = {r["id"]: r for r in [record_json("A"), record_json("B")]}

        assert await dashboard.load_history() is True
        assert len(dashboard.rows) == 2
        assert dashboard.status == "History loaded."
        assert dashboard.status_type == "ok"

    async def test_search(self, dashboard):
        assert await dashboard.search("  Denver ") is True

        assert dashboard.latest.city == "Denver"
        assert [row.city for row in dashboard.rows] == ["Denver"]
        assert dashboard.status == "Weather fetched and saved for Denver"

    async def test_search_blank_city(self, dashboard, fake_api):
        assert await dashboard.search("   ") is False
        assert fake_api.requests == []

    async def test_search_failure(self, dashboard):
        assert await dashboard.search("Atlantis") is False

        assert dashboard.status_type == "error"
        assert dashboard.status.startswith("Failed to fetch weather: ")
        assert dashboard.latest is None

    async def test_refresh_keeps_id(self, dashboard, fake_api):
        await dashboard.search("Denver")
        record_id = dashboard.rows[0].id

        assert await dashboard.refresh(record_id) is True

        assert [row.id for row in dashboard.rows] == [record_id]
        assert dashboard.latest.temperature == "25°"
        assert dashboard.status == "Weather refreshed for Denver"

    async def test_refresh_missing(self, dashboard):
        assert await dashboard.refresh(str(uuid.uuid4())) is False
        assert dashboard.status == "Failed to refresh: Weather record not found"

    async def test_delete(self, dashboard):
        await dashboard.search("Denver")
        await dashboard.search("Boston")
        target = next(row.id for row in dashboard.rows if row.city == "Denver")

        assert await dashboard.delete(target) is True

        assert [row.city for row in dashboard.rows] == ["Boston"]
        assert dashboard.status == "Record deleted."

    async def test_delete_missing(self, dashboard):
        assert await dashboard.delete(str(uuid.uuid4())) is False
        assert dashboard.status_type == "error"

    async def test_unreadable_response_sets_error_status(self):
        """Test a garbled server reply becomes an error status line."""
        dashboard = Dashboard(_client_for(lambda request: httpx.Response(200, text="<html></html>")))

        assert await dashboard.search("Boston") is False
        assert dashboard.status_type == "error"
        assert dashboard.status.startswith("Failed to fetch weather: ")
        assert await dashboard.load_history() is False
        assert await dashboard.delete(str(uuid.uuid4())) is False


class TestCli:
    """Tests for the command-line interface."""

    def test_parse_search(self):
        args = build_parser().parse_args(["--url", "http://api", "search", "Boston"])
        assert args.command == "search"
        assert args.city == "Boston"
        assert args.url == "http://api"

    def test_parse_serve(self):
        args = build_parser().parse_args(["serve", "--port", "9000"])
        assert args.command == "serve"
        assert args.port == 9000
        assert args.host is None

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_unreachable_server(self, capsys):
        """Test a failed request exits non-zero with the error on stderr."""
        assert main(["--url", "http://127.0.0.1:9", "history"]) == 1
        assert "Failed to load history" in capsys.readouterr().err
