"""
Scheduler-triggered lifecycle endpoints.

These endpoints are called by an external cron scheduler, never by members.
Every request must carry either the platform's trusted cron header or the
shared secret in x-cron-secret; anything else is rejected with 401 before
any database or provider access.

Endpoints:
- POST /api/lifecycle/sync-games     pull a week of games from the provider
- POST /api/lifecycle/sync-week      derive picks_required and lock/reveal times
- POST /api/lifecycle/grade-week     rebuild a week's pick results
- POST /api/lifecycle/advance-week   grade, then move the league to the next week when ready

Status Codes:
- sync-games: 502 when the provider is unavailable
- sync-week: 409 when the week has no synced games
- advance-week: always 200 once authenticated; "not advanced" is a normal outcome
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...data.collection.scoreboard import ScoreboardProvider
from ...database.connection import get_db
from ...exceptions import PickemError
from ...lifecycle.advance import advance_week
from ...lifecycle.game_sync import sync_games
from ...lifecycle.grading import grade_week
from ...lifecycle.outcomes import AdvanceOutcome, Advanced, NotReady, UpstreamUnavailable
from ...lifecycle.week_sync import sync_week
from ..dependencies import get_provider, require_cron, to_http
from ..schemas import (
    AdvanceWeekRequest,
    AdvanceWeekResponse,
    GradeWeekRequest,
    GradeWeekResponse,
    SyncGamesRequest,
    SyncGamesResponse,
    SyncWeekRequest,
    SyncWeekResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_cron)])


def _advance_response(outcome: AdvanceOutcome) -> AdvanceWeekResponse:
    response = AdvanceWeekResponse(
        league_id=outcome.league_id,
        advanced=outcome.advanced,
        season_year=outcome.season_year,
        current_week=outcome.current_week,
        outcome="advanced",
        reason=outcome.reason.value if outcome.reason else None,
        message=outcome.message,
        details=outcome.details,
    )
    if isinstance(outcome, Advanced):
        response.from_week = outcome.from_week
        response.to_week = outcome.to_week
        response.games_synced = outcome.games_synced
        response.lock_time = outcome.lock_time
    elif isinstance(outcome, UpstreamUnavailable):
        response.outcome = "upstream_unavailable"
        response.provider_status = outcome.status_code
        response.provider_error = outcome.detail
    elif isinstance(outcome, NotReady):
        response.outcome = "not_ready"
    return response


@router.post("/sync-games", response_model=SyncGamesResponse)
def post_sync_games(
    body: SyncGamesRequest,
    db: Session = Depends(get_db),
    provider: ScoreboardProvider = Depends(get_provider),
):
    """Upsert one week of games. Without explicit season/week the league's current week is used."""
    try:
        result = sync_games(
            db,
            provider,
            season_year=body.season_year,
            week_number=body.week_number,
            season_type=body.season_type,
            league_id=body.league_id,
            provider_name=body.provider,
        )
    except PickemError as e:
        raise to_http(e) from e
    except SQLAlchemyError as e:
        logger.exception("Game sync failed while writing games")
        raise HTTPException(status_code=500, detail=f"Game sync failed: {e!s}") from e
    return result


@router.post("/sync-week", response_model=SyncWeekResponse)
def post_sync_week(body: SyncWeekRequest, db: Session = Depends(get_db)):
    """Configure a league-week from its earliest synced kickoff."""
    try:
        result = sync_week(
            db,
            body.league_id,
            season_year=body.season_year,
            week_number=body.week_number,
            allow_fallback_lock=body.allow_fallback_lock,
        )
    except PickemError as e:
        raise to_http(e) from e
    except SQLAlchemyError as e:
        logger.exception(f"Week sync failed for league {body.league_id}")
        raise HTTPException(status_code=500, detail=f"Week sync failed: {e!s}") from e
    return SyncWeekResponse(
        league_id=result.league_id,
        season_year=result.season_year,
        week_number=result.week_number,
        picks_required=result.picks_required,
        lock_time=result.lock_time,
        reveal_time=result.reveal_time,
        used_fallback=result.used_fallback,
        note=result.note,
    )


@router.post("/grade-week", response_model=GradeWeekResponse)
def post_grade_week(body: GradeWeekRequest, db: Session = Depends(get_db)):
    try:
        result = grade_week(db, body.league_id, body.week_number)
    except PickemError as e:
        raise to_http(e) from e
    except SQLAlchemyError as e:
        logger.exception(f"Grading failed for league {body.league_id}")
        raise HTTPException(status_code=500, detail=f"Grading failed: {e!s}") from e
    return result


@router.post("/advance-week", response_model=AdvanceWeekResponse)
def post_advance_week(
    body: AdvanceWeekRequest,
    db: Session = Depends(get_db),
    provider: ScoreboardProvider = Depends(get_provider),
):
    """
    Grade the league's current week and advance it when the next week is ready.

    Provider outages and missing schedules come back as advanced=false with a
    reason; only bad input or a database failure on grading or on the week
    pointer update produce an error status.
    """
    try:
        outcome = advance_week(db, provider, body.league_id, body.season_type)
    except PickemError as e:
        raise to_http(e) from e
    except SQLAlchemyError as e:
        logger.exception(f"Advance failed for league {body.league_id}")
        raise HTTPException(status_code=500, detail=f"Advance failed: {e!s}") from e
    return _advance_response(outcome)
