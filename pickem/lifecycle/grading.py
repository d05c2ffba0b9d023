"""Grading: turn a week's picks and games into win/loss/pending results.

Grading Rules:
- winners: winner_abbr of every final game of the week (ties contribute none)
- all_final: the week has at least one game and every game is final
- A pick is "win" when all_final and its team is a winner, "loss" when
  all_final and it is not, and "pending" otherwise

Idempotency:
Each pass deletes the week's PickResult rows and writes a fresh set inside a
single transaction. Running it twice on unchanged data yields the same rows,
and a failure halfway leaves the previous results in place.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from ..database.connection import atomic
from ..database.models import (
    GAME_FINAL,
    RESULT_LOSS,
    RESULT_PENDING,
    RESULT_WIN,
    Game,
    Pick,
    PickResult,
)
from .common import games_for_week, get_league, validate_week_number

logger = logging.getLogger(__name__)


@dataclass
class WeekSummary:
    games_found: int
    all_final: bool
    winners: set[str] = field(default_factory=set)


@dataclass
class GradeResult:
    league_id: str
    season_year: int
    week_number: int
    picks_found: int
    games_found: int
    results_written: int
    all_final: bool


def summarize_games(games: Iterable[Game]) -> WeekSummary:
    games = list(games)
    winners = {g.winner_abbr for g in games if g.status == GAME_FINAL and g.winner_abbr}
    all_final = bool(games) and all(g.status == GAME_FINAL for g in games)
    return WeekSummary(games_found=len(games), all_final=all_final, winners=winners)


def grade_pick(team_abbr: str, summary: WeekSummary) -> str:
    if not summary.all_final:
        return RESULT_PENDING
    return RESULT_WIN if team_abbr in summary.winners else RESULT_LOSS


def grade_week(
    db: Session,
    league_id: str,
    week_number: int | None = None,
    league_scoped: bool | None = None,
) -> GradeResult:
    """Grade every pick of a league-week and replace its results.

    Args:
        db: Database session
        league_id: League to grade
        week_number: Week to grade (defaults to the league's current week)

    Returns:
        GradeResult with pick, game and result counts
    """
    league = get_league(db, league_id)
    season_year = league.season_year
    week_number = validate_week_number(
        league.current_week if week_number is None else week_number
    )

    picks = (
        db.query(Pick)
        .filter(
            Pick.league_id == league.id,
            Pick.season_year == season_year,
            Pick.week_number == week_number,
        )
        .order_by(Pick.user_id, Pick.slot)
        .all()
    )
    summary = summarize_games(
        games_for_week(db, league.id, season_year, week_number, league_scoped).all()
    )

    results = [
        PickResult(
            league_id=league.id,
            season_year=season_year,
            week_number=week_number,
            user_id=pick.user_id,
            slot=pick.slot,
            team_abbr=pick.team_abbr,
            result=grade_pick(pick.team_abbr, summary),
        )
        for pick in picks
    ]

    with atomic(db):
        db.query(PickResult).filter(
            PickResult.league_id == league.id,
            PickResult.season_year == season_year,
            PickResult.week_number == week_number,
        ).delete(synchronize_session="fetch")
        db.add_all(results)

    logger.info(
        f"Graded league={league.id} season={season_year} week={week_number}: "
        f"{len(results)} results from {summary.games_found} games (all_final={summary.all_final})"
    )

    return GradeResult(
        league_id=league.id,
        season_year=season_year,
        week_number=week_number,
        picks_found=len(picks),
        games_found=summary.games_found,
        results_written=len(results),
        all_final=summary.all_final,
    )
