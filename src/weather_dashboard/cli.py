"""Command-line interface for the weather dashboard.

`serve` runs the API server. The other commands act as a dashboard against a
running server; pass the session cookie value from a browser login with
`--session` or the WEATHER_SESSION environment variable.
"""

import argparse
import asyncio
import logging
import os
import sys

from weather_dashboard.dashboard.client import DashboardClient
from weather_dashboard.dashboard.view import Dashboard, render_table


def _print_dashboard(dashboard: Dashboard, show_history: bool = True) -> None:
    if dashboard.latest:
        card = dashboard.latest
        print(f"{card.city}  {card.temperature}  {card.conditions}")
        if card.meta:
            print(card.meta)
        print()
    if show_history and dashboard.status_type == "ok":
        print(render_table(dashboard.rows))
        print()
    print(dashboard.status, file=sys.stderr if dashboard.status_type == "error" else sys.stdout)


async def _run_dashboard(args: argparse.Namespace) -> int:
    async with DashboardClient(args.url, session_token=args.session) as api:
        dashboard = Dashboard(api, history_limit=args.limit)

        if args.command == "history":
            await dashboard.load_history()
        elif args.command == "search":
            await dashboard.search(args.city)
        elif args.command == "refresh":
            await dashboard.refresh(args.record_id)
        elif args.command == "delete":
            await dashboard.delete(args.record_id)

    _print_dashboard(dashboard)
    return 0 if dashboard.status_type == "ok" else 1


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from weather_dashboard.config import get_settings

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "weather_dashboard.api:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Weather Dashboard - fetch, save and manage current weather records"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument(
        "--url",
        default=os.environ.get("WEATHER_DASHBOARD_URL", "http://localhost:8080"),
        help="Base URL of a running server",
    )
    parser.add_argument(
        "--session",
        default=os.environ.get("WEATHER_SESSION"),
        help="Session cookie value from a browser login",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Number of history rows to show",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Listen port")

    subparsers.add_parser("history", help="Show saved weather records")

    search_parser = subparsers.add_parser(
        "search", help="Fetch current weather for a city and save it"
    )
    search_parser.add_argument("city", help="City name, e.g. 'Philadelphia'")

    refresh_parser = subparsers.add_parser(
        "refresh", help="Re-fetch a saved record in place"
    )
    refresh_parser.add_argument("record_id", help="Record id")

    delete_parser = subparsers.add_parser("delete", help="Delete a saved record")
    delete_parser.add_argument("record_id", help="Record id")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "serve":
        return _serve(args)

    return asyncio.run(_run_dashboard(args))


if __name__ == "__main__":
    sys.exit(main())
