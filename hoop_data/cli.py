"""Command line entry point.

Usage:
    hoop-data sync                      # Full sync (index a-z, then every player)
    hoop-data sync --letters ab --limit 10
    hoop-data player jamesle01          # Probe one player page
    hoop-data team LAL 2025             # Probe one team page
    hoop-data serve                     # Run the REST API
"""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from hoop_data.config import Settings, build_client, get_settings
from hoop_data.data.bref.client import UpstreamFetchError
from hoop_data.data.bref.index import parse_players_index
from hoop_data.data.bref.players import fetch_player, parse_player_page
from hoop_data.data.bref.teams import default_season, fetch_team
from hoop_data.data.store import PlayerStore
from hoop_data.sync.jobs import (
    LETTERS,
    SyncProgress,
    get_all_player_ids_from_index,
    sync_players_in_batches,
)

console = Console()
logger = logging.getLogger(__name__)

ROSTER_COLUMNS = ("player", "pos", "age", "games", "pts_per_g", "trb_per_g", "ast_per_g")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hoop-data",
        description="Scrape Basketball-Reference players and teams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    commands = parser.add_subparsers(dest="command", required=True)

    sync = commands.add_parser("sync", help="Sync every indexed player into the database")
    sync.add_argument("--letters", default=LETTERS, help="Index letters to fetch (default: a-z)")
    sync.add_argument("--limit", type=int, default=None, help="Only sync the first N players")
    sync.add_argument("--batch-size", type=int, default=None, help="Players per progress batch")
    sync.add_argument("--delay", type=float, default=None, help="Seconds between player fetches")

    player = commands.add_parser("player", help="Fetch one player page and show the extracted bio")
    player.add_argument("player_id")

    team = commands.add_parser("team", help="Fetch one team page and show its roster")
    team.add_argument("team_id")
    team.add_argument("season", nargs="?", default=None)

    commands.add_parser("serve", help="Run the REST API server")

    return parser.parse_args(argv)


def _value(value) -> str:
    return "(null)" if value is None else str(value)


def run_sync(args: argparse.Namespace, settings: Settings) -> int:
    letters = args.letters.lower()
    batch_size = args.batch_size or settings.batch_size
    delay = settings.player_delay if args.delay is None else args.delay

    with build_client(settings) as client, PlayerStore(settings.database_path) as store:
        with console.status(f"[cyan]Fetching player index ({letters})..."):
            entries = get_all_player_ids_from_index(
                client.fetch_html,
                parse_players_index,
                letters=letters,
                delay=settings.index_delay,
                base_url=settings.base_url,
            )
        if args.limit is not None:
            entries = entries[: max(0, args.limit)]
        console.print(f"[green]✓[/] Found {len(entries):,} players")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("[red]{task.fields[errors]} errors"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Syncing players", total=len(entries), errors=0)

            def on_progress(update: SyncProgress) -> None:
                progress.update(task, completed=update.processed, errors=update.errors)

            result = sync_players_in_batches(
                entries,
                client.fetch_html,
                lambda html, player_id: parse_player_page(html, player_id, base_url=settings.base_url),
                store.upsert_player,
                batch_size=batch_size,
                delay=delay,
                on_progress=on_progress,
                base_url=settings.base_url,
            )
        stored = store.count_players()

    table = Table(title="Sync Summary", box=box.ROUNDED, show_header=False, border_style="dim cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Processed", f"{result.processed:,}")
    table.add_row("Persisted", f"{result.persisted:,}")
    table.add_row("Errors", f"{result.errors:,}", style="yellow" if result.errors else None)
    table.add_row("Players in database", f"{stored:,}")
    console.print(table)
    return 1 if result.errors and not result.persisted else 0


def show_player(args: argparse.Namespace, settings: Settings) -> int:
    with build_client(settings) as client:
        record = fetch_player(client, args.player_id)

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field in ("birth_date", "hometown", "age", "jersey_number", "name", "team", "position", "height", "weight"):
        table.add_row(field, _value(getattr(record, field)))
    table.add_row("seasons", str(len(record.season_stats())))
    console.print(Panel(table, title=f"[bold]{record.url}[/]", border_style="cyan"))
    return 0


def show_team(args: argparse.Namespace, settings: Settings) -> int:
    season = args.season or default_season()
    with build_client(settings) as client:
        record = fetch_team(client, args.team_id.upper(), season)

    header = f"{record.name} ({record.season})"
    if record.record is not None:
        header += f"  {record.record.wins}-{record.record.losses}"
    console.print(Panel(header, border_style="cyan"))

    ratings = Table(box=box.SIMPLE, show_header=False)
    ratings.add_column("Rating", style="cyan")
    ratings.add_column("Value", justify="right")
    for field in ("pts_per_game", "opp_pts_per_game", "srs", "pace", "off_rtg", "def_rtg"):
        ratings.add_row(field, _value(getattr(record, field)))
    console.print(ratings)

    roster = Table(title="Roster", box=box.ROUNDED)
    for column in ROSTER_COLUMNS:
        roster.add_column(column)
    for entry in record.roster:
        roster.add_row(*(_value(getattr(entry, column)) for column in ROSTER_COLUMNS))
    console.print(roster)
    return 0


def serve(settings: Settings) -> int:
    import uvicorn

    from hoop_data.api.app import create_app

    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port, log_config=None)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    try:
        if args.command == "sync":
            return run_sync(args, settings)
        if args.command == "player":
            return show_player(args, settings)
        if args.command == "team":
            return show_team(args, settings)
        return serve(settings)
    except UpstreamFetchError as exc:
        console.print(f"[red]✗ Fetch failed:[/] {exc}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
