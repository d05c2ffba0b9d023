"""
CLI commands for setting up and inspecting leagues.

Key CLI Patterns Demonstrated:
- Command grouping with typer.Typer()
- Option handling with typer.Option()
- Error handling and exit codes
- Rich tables for tabular output

Typical Setup:
1. pickem league init-db
2. pickem league create "Office Pool" --season 2025 --owner u-1 --name Alice
3. pickem league standings <league_id>
"""

import logging
import sys

import typer
from rich.console import Console
from rich.table import Table

from ..config.settings import settings
from ..database.connection import get_session_context
from ..database.init_db import create_database, reset_database
from ..exceptions import PickemError
from ..lifecycle.league import create_league, standings

app = typer.Typer(help="League setup and standings commands")
console = Console()


def setup_logging():
    """
    Configure logging for CLI operations.

    Sets up dual logging output:
    - File logging for permanent records
    - Console logging for real-time feedback

    Uses configuration from settings to control log level and file location.
    """
    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(settings.log_file),
            logging.StreamHandler(sys.stdout),
        ],
    )


@app.command()
def init_db(
    reset: bool = typer.Option(False, "--reset", help="Drop all tables first (destructive)"),
):
    """
    Initialize the database with required tables.

    Example usage:
        pickem league init-db
    """
    setup_logging()
    try:
        if reset:
            reset_database()
        else:
            create_database()
        console.print("✅ Database initialized successfully!", style="green")
    except Exception as e:
        console.print(f"❌ Database initialization failed: {e}", style="red")
        raise typer.Exit(1) from e


@app.command("create")
def create(
    name: str = typer.Argument(..., help="League name"),
    season: int = typer.Option(..., "--season", "-s", help="Season year, e.g. 2025"),
    owner: str | None = typer.Option(None, "--owner", help="User id of the first member"),
    display_name: str | None = typer.Option(None, "--name", help="Owner's display name"),
):
    """Create a league starting at week 1 and print its id and invite code."""
    setup_logging()
    try:
        with get_session_context() as db:
            league = create_league(
                db,
                name=name,
                season_year=season,
                owner_user_id=owner,
                owner_display_name=display_name,
            )
            console.print(f"✅ Created league [bold]{league.name}[/bold]")
            console.print(f"   id: {league.id}")
            console.print(f"   invite code: {league.invite_code}")
    except PickemError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e


@app.command("standings")
def show_standings(league_id: str = typer.Argument(..., help="League id")):
    """Print the season standings table."""
    try:
        with get_session_context() as db:
            rows = standings(db, league_id)
    except PickemError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e

    if not rows:
        console.print("No members yet.", style="yellow")
        return

    table = Table(title="Standings")
    table.add_column("Rank", justify="right")
    table.add_column("Member", style="cyan")
    table.add_column("W", justify="right", style="green")
    table.add_column("L", justify="right", style="red")
    table.add_column("Pending", justify="right")

    for rank, row in enumerate(rows, 1):
        table.add_row(
            str(rank),
            row.display_name or row.user_id,
            str(row.wins),
            str(row.losses),
            str(row.pending),
        )

    console.print(table)
