"""
League API endpoints: creation, membership, standings and weekly views.

Endpoints:
- POST /api/leagues                                  create a league
- GET  /api/leagues/{league_id}                      league details
- POST /api/leagues/join                             join by invite code
- PUT  /api/leagues/{league_id}/members/me           change display name
- GET  /api/leagues/{league_id}/standings            season standings
- GET  /api/leagues/{league_id}/weeks/{week}         week view (reveal-filtered)
- GET  /api/leagues/{league_id}/weeks/{week}/games   matchups ordered by kickoff

All member endpoints identify the caller through the X-User-Id header.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database.connection import get_db
from ...exceptions import PickemError
from ...lifecycle.common import get_league
from ...lifecycle.league import (
    create_league,
    join_league,
    matchups,
    standings,
    update_display_name,
    week_view,
)
from ..dependencies import current_user_id, to_http
from ..schemas import (
    DisplayNameUpdate,
    GameResponse,
    JoinLeagueRequest,
    LeagueCreate,
    LeagueResponse,
    MemberResponse,
    StandingResponse,
    WeekViewResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=LeagueResponse, status_code=201)
def create(
    body: LeagueCreate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """Create a league for a season; the caller joins it as the first member."""
    try:
        return create_league(
            db,
            name=body.name,
            season_year=body.season_year,
            owner_user_id=user_id,
            owner_display_name=body.display_name,
            timezone=body.timezone,
        )
    except PickemError as e:
        raise to_http(e) from e


@router.post("/join", response_model=MemberResponse)
def join(
    body: JoinLeagueRequest,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """Join a league with its invite code. Joining again returns the existing membership."""
    try:
        return join_league(db, body.invite_code, user_id, body.display_name)
    except PickemError as e:
        raise to_http(e) from e


@router.get("/{league_id}", response_model=LeagueResponse)
def get(league_id: str, db: Session = Depends(get_db)):
    try:
        return get_league(db, league_id)
    except PickemError as e:
        raise to_http(e) from e


@router.put("/{league_id}/members/me", response_model=MemberResponse)
def rename(
    league_id: str,
    body: DisplayNameUpdate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return update_display_name(db, league_id, user_id, body.display_name)
    except PickemError as e:
        raise to_http(e) from e


@router.get("/{league_id}/standings", response_model=list[StandingResponse])
def get_standings(league_id: str, db: Session = Depends(get_db)):
    """
    Season standings: wins desc, then losses asc, then pending asc.

    Every member is listed, including members with no graded picks.
    """
    try:
        return standings(db, league_id)
    except PickemError as e:
        raise to_http(e) from e


@router.get("/{league_id}/weeks/{week_number}", response_model=WeekViewResponse)
def get_week(
    league_id: str,
    week_number: int,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """
    A week's lock/reveal configuration and the picks visible to the caller.

    Before reveal_time only the caller's own picks are returned. From
    reveal_time on, every member's picks for the week are returned.
    """
    try:
        view = week_view(db, league_id, user_id, week_number)
    except PickemError as e:
        raise to_http(e) from e

    return WeekViewResponse(
        league_id=view.league_id,
        season_year=view.season_year,
        week_number=view.week_number,
        picks_required=view.picks_required,
        lock_time=view.lock_time,
        reveal_time=view.reveal_time,
        revealed=view.revealed,
        picks=view.picks,
        byes=sorted(view.byes),
        members=view.members,
    )


@router.get("/{league_id}/weeks/{week_number}/games", response_model=list[GameResponse])
def get_matchups(league_id: str, week_number: int, db: Session = Depends(get_db)):
    try:
        games = matchups(db, league_id, week_number)
    except PickemError as e:
        raise to_http(e) from e

    if not games:
        logger.debug(f"No games synced yet for league {league_id} week {week_number}")
    return games

