"""
CLI commands for running the week lifecycle by hand.

The same operations the scheduler triggers over HTTP, for operators and local
development. Each command uses the ESPN scoreboard where a provider is needed.

Examples:
    pickem lifecycle sync-games --league <id> --week 5
    pickem lifecycle sync-week --league <id> --week 5
    pickem lifecycle grade --league <id>
    pickem lifecycle advance --league <id>
"""

import typer
from rich.console import Console

from ..data.collection.espn_collector import EspnScoreboardCollector
from ..database.connection import get_session_context
from ..exceptions import PickemError
from ..lifecycle.advance import advance_week
from ..lifecycle.game_sync import sync_games
from ..lifecycle.grading import grade_week
from ..lifecycle.week_sync import sync_week
from .league import setup_logging

app = typer.Typer(help="Game sync, week sync, grading and week advancement")
console = Console()


@app.command("sync-games")
def sync_games_command(
    league_id: str | None = typer.Option(None, "--league", "-l", help="League id"),
    season: int | None = typer.Option(None, "--season", "-s", help="Season year"),
    week: int | None = typer.Option(None, "--week", "-w", help="Week number (1-18)"),
    season_type: int = typer.Option(2, "--season-type", help="2 = regular, 3 = postseason"),
):
    """Pull one week of games from ESPN and upsert them."""
    setup_logging()
    collector = EspnScoreboardCollector()
    try:
        with get_session_context() as db:
            result = sync_games(
                db,
                collector,
                season_year=season,
                week_number=week,
                season_type=season_type,
                league_id=league_id,
            )
    except PickemError as e:
        console.print(f"❌ Game sync failed: {e}", style="red")
        raise typer.Exit(1) from e
    finally:
        collector.close()

    console.print(
        f"✅ {result.upserted} games upserted for {result.season_year} week {result.week_number}"
    )
    if result.note:
        console.print(f"   {result.note}", style="yellow")


@app.command("sync-week")
def sync_week_command(
    league_id: str = typer.Option(..., "--league", "-l", help="League id"),
    week: int | None = typer.Option(None, "--week", "-w", help="Week number (1-18)"),
    allow_fallback_lock: bool = typer.Option(
        False, "--allow-fallback-lock", help="Configure the week even without games"
    ),
):
    """Set picks_required and lock/reveal times from the earliest synced kickoff."""
    setup_logging()
    try:
        with get_session_context() as db:
            result = sync_week(
                db, league_id, week_number=week, allow_fallback_lock=allow_fallback_lock
            )
    except PickemError as e:
        console.print(f"❌ Week sync failed: {e}", style="red")
        raise typer.Exit(1) from e

    console.print(
        f"✅ Week {result.week_number}: {result.picks_required} pick(s), "
        f"locks at {result.lock_time.isoformat()} ({result.note})"
    )


@app.command("grade")
def grade_command(
    league_id: str = typer.Option(..., "--league", "-l", help="League id"),
    week: int | None = typer.Option(None, "--week", "-w", help="Week number (1-18)"),
):
    """Rebuild a week's pick results from its games."""
    setup_logging()
    try:
        with get_session_context() as db:
            result = grade_week(db, league_id, week)
    except PickemError as e:
        console.print(f"❌ Grading failed: {e}", style="red")
        raise typer.Exit(1) from e

    status = "all final" if result.all_final else "games pending"
    console.print(
        f"✅ Week {result.week_number}: {result.results_written} results "
        f"from {result.games_found} games ({status})"
    )


@app.command("advance")
def advance_command(
    league_id: str = typer.Option(..., "--league", "-l", help="League id"),
    season_type: int = typer.Option(2, "--season-type", help="2 = regular, 3 = postseason"),
):
    """Grade the current week and advance the league when the next week is ready."""
    setup_logging()
    collector = EspnScoreboardCollector()
    try:
        with get_session_context() as db:
            outcome = advance_week(db, collector, league_id, season_type)
    except PickemError as e:
        console.print(f"❌ Advance failed: {e}", style="red")
        raise typer.Exit(1) from e
    finally:
        collector.close()

    if outcome.advanced:
        console.print(f"✅ League advanced to week {outcome.current_week}", style="green")
    else:
        console.print(
            f"⏸  League stays on week {outcome.current_week}: {outcome.message}", style="yellow"
        )
