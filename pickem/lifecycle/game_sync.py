"""Game sync: pull one week of NFL games from the scoreboard provider.

Game sync is the first step of the week lifecycle. Week sync derives lock
times from the rows it writes, grading reads winners from them, and week
advancement refuses to move a league into a week game sync has not filled.

Upsert Pattern: "Update or Insert" - each provider game is matched on its
upsert key and updated in place, or inserted when new. Re-running a sync
refreshes statuses and scores without duplicating games.

Upsert Keys:
- League-scoped mode: (league_id, season_year, game_id)
- Global mode: (season_year, game_id) with league_id NULL

Failure Semantics:
- Provider failure (non-2xx, network error, timeout): ProviderUnavailableError
- Provider returns no events: successful sync with upserted = 0
- Database failure: the week's writes are rolled back and the error re-raised
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ..config.settings import settings
from ..data.collection.scoreboard import ProviderGame, ScoreboardProvider
from ..database.connection import atomic
from ..database.models import Game
from ..exceptions import ValidationError
from .common import get_league, resolve_scope, validate_week_number

logger = logging.getLogger(__name__)


@dataclass
class GameSyncResult:
    """Outcome of one game sync run."""

    league_id: str | None
    season_year: int
    week_number: int
    season_type: int
    provider: str
    upserted: int
    note: str | None = None


def _apply(game: Game, provider_game: ProviderGame, provider: str):
    game.provider = provider
    game.home_abbr = provider_game.home_abbr
    game.away_abbr = provider_game.away_abbr
    game.kickoff_time = provider_game.kickoff_time
    game.status = provider_game.status
    game.home_score = provider_game.home_score
    game.away_score = provider_game.away_score
    game.winner_abbr = provider_game.winner_abbr


def sync_games(
    db: Session,
    provider: ScoreboardProvider,
    season_year: int | None = None,
    week_number: int | None = None,
    season_type: int | None = None,
    league_id: str | None = None,
    provider_name: str | None = None,
    league_scoped: bool | None = None,
) -> GameSyncResult:
    """Fetch one week from the provider and upsert every matchup.

    When league_id is given, season_year and week_number default to the
    league's current season and week.

    Args:
        db: Database session
        provider: Scoreboard provider to read from
        season_year: Season to sync (defaults to the league's season)
        week_number: Week to sync, 1-18 (defaults to the league's current week)
        season_type: Provider season type, 2 = regular, 3 = postseason
        league_id: League to key rows by (required in league-scoped mode)
        provider_name: Value stored in Game.provider (defaults to provider.name)
        league_scoped: Override the deployment's games scope (tests only)

    Returns:
        GameSyncResult with the number of rows upserted

    Raises:
        ValidationError: Missing league_id in league-scoped mode, bad week number
        LeagueNotFoundError: league_id does not exist
        ProviderUnavailableError: Provider could not be read
    """
    scoped = resolve_scope(league_scoped)
    season_type = season_type or settings.default_season_type
    provider_name = provider_name or provider.name or settings.default_provider

    if league_id:
        league = get_league(db, league_id)
        league_id = league.id
        season_year = season_year or league.season_year
        if week_number is None:
            week_number = league.current_week
    elif scoped:
        raise ValidationError("Missing league_id")

    if not season_year:
        raise ValidationError("season_year is required")
    week_number = validate_week_number(week_number)
    row_league_id = league_id if scoped else None

    logger.info(
        f"Syncing games: league={row_league_id or 'global'} season={season_year} "
        f"week={week_number} seasontype={season_type}"
    )

    provider_games = provider.fetch_games(season_year, week_number, season_type)

    if not provider_games:
        logger.info(f"No events returned for {season_year} week {week_number}")
        return GameSyncResult(
            league_id=row_league_id,
            season_year=season_year,
            week_number=week_number,
            season_type=season_type,
            provider=provider_name,
            upserted=0,
            note="No events returned",
        )

    if row_league_id is None:
        league_filter = Game.league_id.is_(None)
    else:
        league_filter = Game.league_id == row_league_id

    with atomic(db):
        for provider_game in provider_games:
            existing = (
                db.query(Game)
                .filter(
                    league_filter,
                    Game.season_year == season_year,
                    Game.game_id == provider_game.game_id,
                )
                .first()
            )
            if existing is None:
                existing = Game(
                    league_id=row_league_id,
                    season_year=season_year,
                    game_id=provider_game.game_id,
                )
                db.add(existing)
            # Week number follows the provider in case a game was rescheduled
            existing.week_number = week_number
            _apply(existing, provider_game, provider_name)

    logger.info(f"Games upserted for {season_year} week {week_number}: {len(provider_games)}")

    return GameSyncResult(
        league_id=row_league_id,
        season_year=season_year,
        week_number=week_number,
        season_type=season_type,
        provider=provider_name,
        upserted=len(provider_games),
    )
