"""Week advancement: the league-level state machine.

States per league:

    ACTIVE(w) -> GRADING(w) -> ADVANCING(w -> w+1) -> ACTIVE(w+1)
                     |                |
                     +----> STALLED <-+     (retried on the next scheduler tick)

Pipeline, in order:
1. ACTIVE(18) is terminal: nothing to do.
2. GRADING: grade week w. Without games, or with any game not final, stay put.
3. ADVANCING, each step must succeed before the next runs:
   a. the provider lists at least one event for week w+1
   b. game sync for w+1 writes at least one row
   c. week sync for w+1 stores a lock/reveal configuration
4. Only then move current_week from w to w+1, with a compare-and-swap update
   so two concurrent runs cannot both advance the same week.

Core Invariant:
The league pointer never references a week that lacks a schedule and a
lock/reveal configuration. Every failure before step 4 leaves current_week
untouched and is reported as a NotReady or UpstreamUnavailable outcome,
never as an exception.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config.settings import settings
from ..data.collection.scoreboard import ScoreboardProvider
from ..database.connection import atomic
from ..database.models import League
from ..exceptions import ProviderUnavailableError, WeekNotReadyError
from .common import get_league
from .game_sync import sync_games
from .grading import grade_week
from .outcomes import AdvanceOutcome, Advanced, NotReady, StallReason, UpstreamUnavailable
from .week_sync import sync_week

logger = logging.getLogger(__name__)


def advance_week(
    db: Session,
    provider: ScoreboardProvider,
    league_id: str,
    season_type: int | None = None,
    league_scoped: bool | None = None,
) -> AdvanceOutcome:
    """Grade the league's current week and advance it when the next week is ready.

    Args:
        db: Database session
        provider: Scoreboard provider used for the next-week checks
        league_id: League to advance
        season_type: Provider season type for next week (2 regular, 3 postseason)

    Returns:
        Advanced, NotReady or UpstreamUnavailable

    Raises:
        ValidationError: Missing league_id
        LeagueNotFoundError: Unknown league
        SQLAlchemyError: Database failure while grading or moving the pointer
    """
    season_type = season_type or settings.default_season_type
    league = get_league(db, league_id)
    league_id = league.id
    season_year = league.season_year
    from_week = league.current_week
    to_week = from_week + 1

    def stalled(reason: StallReason, **details) -> NotReady:
        logger.info(f"League {league_id} stays on week {from_week}: {reason.value}")
        return NotReady(
            league_id=league_id,
            season_year=season_year,
            current_week=from_week,
            stall_reason=reason,
            details=details,
        )

    def unavailable(reason: StallReason, error: Exception, status_code=None):
        db.rollback()
        logger.warning(
            f"League {league_id} advance to week {to_week} deferred ({reason.value}): {error}"
        )
        return UpstreamUnavailable(
            league_id=league_id,
            season_year=season_year,
            current_week=from_week,
            stall_reason=reason,
            detail=str(error),
            status_code=status_code,
            details={"from_week": from_week, "to_week": to_week, "season_type": season_type},
        )

    if from_week >= settings.final_week:
        return stalled(StallReason.FINAL_WEEK)

    # GRADING
    graded = grade_week(db, league_id, from_week, league_scoped=league_scoped)
    if graded.games_found == 0:
        return stalled(StallReason.NO_GAMES, games_found=0)
    if not graded.all_final:
        return stalled(StallReason.GAMES_NOT_FINAL, games_found=graded.games_found)

    # ADVANCING (a): provider must already list next week
    try:
        provider_has_games = provider.has_games(season_year, to_week, season_type)
    except ProviderUnavailableError as e:
        return unavailable(StallReason.PROVIDER_UNAVAILABLE, e, e.status_code)

    if not provider_has_games:
        return stalled(
            StallReason.PROVIDER_NO_GAMES,
            from_week=from_week,
            to_week=to_week,
            season_type=season_type,
        )

    # ADVANCING (b): games for next week must land in the store
    try:
        games = sync_games(
            db,
            provider,
            season_year=season_year,
            week_number=to_week,
            season_type=season_type,
            league_id=league_id,
            league_scoped=league_scoped,
        )
    except ProviderUnavailableError as e:
        return unavailable(StallReason.SYNC_GAMES_FAILED, e, e.status_code)
    except SQLAlchemyError as e:
        return unavailable(StallReason.SYNC_GAMES_FAILED, e)

    if games.upserted <= 0:
        return stalled(StallReason.SYNC_GAMES_EMPTY, from_week=from_week, to_week=to_week)

    # ADVANCING (c): next week needs its lock/reveal configuration
    try:
        week = sync_week(db, league_id, season_year, to_week, league_scoped=league_scoped)
    except WeekNotReadyError:
        return stalled(StallReason.WEEK_NOT_READY, from_week=from_week, to_week=to_week)
    except SQLAlchemyError as e:
        return unavailable(StallReason.SYNC_WEEK_FAILED, e)

    # Move the pointer only if nobody else already did
    with atomic(db):
        moved = (
            db.query(League)
            .filter(League.id == league_id, League.current_week == from_week)
            .update({League.current_week: to_week}, synchronize_session=False)
        )
    if moved != 1:
        return stalled(StallReason.CONCURRENT_ADVANCE, from_week=from_week, to_week=to_week)

    db.expire(league)
    logger.info(f"League {league_id} advanced from week {from_week} to week {to_week}")

    return Advanced(
        league_id=league_id,
        season_year=season_year,
        current_week=to_week,
        from_week=from_week,
        to_week=to_week,
        games_synced=games.upserted,
        lock_time=week.lock_time,
        details={"season_type": season_type, "picks_required": week.picks_required},
    )
