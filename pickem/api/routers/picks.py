"""
Pick API endpoints for league members.

Endpoints:
- GET  /api/picks/{league_id}?week_number=5   current pick state and team options
- POST /api/picks/{league_id}                 save picks (clears that week's bye)
- POST /api/picks/{league_id}/bye             declare the season bye (clears that week's picks)

Every response is the member's refreshed pick state, read back from the
database after the write, so the client never has to merge state itself.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database.connection import get_db
from ...exceptions import PickemError
from ...lifecycle.picks import PickState, declare_bye, get_pick_state, submit_picks
from ..dependencies import current_user_id, to_http
from ..schemas import ByeRequest, PickStateResponse, PickSubmission

logger = logging.getLogger(__name__)

router = APIRouter()


def _state_response(state: PickState) -> PickStateResponse:
    slots = range(1, (state.picks_required or 2) + 1)
    return PickStateResponse(
        league_id=state.league_id,
        season_year=state.season_year,
        week_number=state.week_number,
        picks_required=state.picks_required,
        lock_time=state.lock_time,
        reveal_time=state.reveal_time,
        locked=state.locked,
        picks=state.picks,
        bye_this_week=state.bye_this_week,
        bye_used_this_season=state.bye_used_this_season,
        can_declare_bye=state.can_declare_bye,
        used_teams=sorted(state.used_teams),
        options={slot: state.available_teams(slot) for slot in slots},
    )


@router.get("/{league_id}", response_model=PickStateResponse)
def get_picks(
    league_id: str,
    week_number: int | None = Query(None, ge=1, le=18, description="Defaults to current week"),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return _state_response(get_pick_state(db, league_id, user_id, week_number))
    except PickemError as e:
        raise to_http(e) from e


@router.post("/{league_id}", response_model=PickStateResponse)
def save_picks(
    league_id: str,
    body: PickSubmission,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """
    Save the caller's picks for a week.

    Rejected with 409 once the week is locked or when a team was already used
    in another week of the season, and with 400 for missing or duplicate picks.
    """
    try:
        state = submit_picks(db, league_id, user_id, body.teams, body.week_number)
    except PickemError as e:
        raise to_http(e) from e
    except SQLAlchemyError as e:
        logger.exception(f"Failed to save picks for {user_id} in league {league_id}")
        raise HTTPException(status_code=500, detail="Failed to save picks") from e
    return _state_response(state)


@router.post("/{league_id}/bye", response_model=PickStateResponse)
def save_bye(
    league_id: str,
    body: ByeRequest,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """Declare the caller's one bye of the season for a week (weeks 1-16 only)."""
    try:
        state = declare_bye(db, league_id, user_id, body.week_number)
    except PickemError as e:
        raise to_http(e) from e
    except SQLAlchemyError as e:
        logger.exception(f"Failed to save bye for {user_id} in league {league_id}")
        raise HTTPException(status_code=500, detail="Failed to save bye") from e
    return _state_response(state)
