"""League management and read views.

Covers everything around the weekly lifecycle that members interact with:
creating and joining leagues, display names, season standings, the weekly
picks view and the matchups list.

Reveal Rule:
Before a week's reveal_time a member sees only their own picks. From
reveal_time on, every member's picks for that week are visible. The filter is
applied here, in the query layer, so no route can leak picks early.

Standings Order:
wins desc, then losses asc, then pending asc. Every member is listed, even
with no graded picks yet.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database.connection import atomic
from ..database.models import (
    RESULT_LOSS,
    RESULT_PENDING,
    RESULT_WIN,
    Bye,
    Game,
    League,
    LeagueMember,
    Pick,
    PickResult,
    WeekConfig,
)
from ..exceptions import LeagueNotFoundError, ValidationError
from .common import (
    as_utc,
    games_for_week,
    get_league,
    require_member,
    utcnow,
    validate_week_number,
)

logger = logging.getLogger(__name__)

INVITE_CODE_BYTES = 6


@dataclass
class StandingRow:
    user_id: str
    display_name: str | None
    wins: int = 0
    losses: int = 0
    pending: int = 0


@dataclass
class WeekView:
    """One week as seen by one member."""

    league_id: str
    season_year: int
    week_number: int
    picks_required: int | None
    lock_time: datetime | None
    reveal_time: datetime | None
    revealed: bool
    # user_id -> {slot: team}
    picks: dict[str, dict[int, str]] = field(default_factory=dict)
    byes: set[str] = field(default_factory=set)
    # user_id -> display name, for every member including those without picks
    members: dict[str, str | None] = field(default_factory=dict)


def _clean_name(name: str | None, max_length: int = 100) -> str | None:
    name = (name or "").strip()
    if len(name) > max_length:
        raise ValidationError(f"Name is longer than {max_length} characters")
    return name or None


def create_league(
    db: Session,
    name: str,
    season_year: int,
    owner_user_id: str | None = None,
    owner_display_name: str | None = None,
    timezone: str = "America/New_York",
) -> League:
    """Create a league starting at week 1 with a fresh invite code.

    The creating user, when given, becomes the first member.
    """
    name = _clean_name(name)
    if not name:
        raise ValidationError("League name is required")
    if season_year < 2000:
        raise ValidationError(f"Invalid season year: {season_year}")

    with atomic(db):
        league = League(
            name=name,
            season_year=season_year,
            current_week=1,
            timezone=timezone,
            invite_code=secrets.token_hex(INVITE_CODE_BYTES),
        )
        db.add(league)
        db.flush()
        if owner_user_id:
            db.add(
                LeagueMember(
                    league_id=league.id,
                    user_id=owner_user_id,
                    display_name=_clean_name(owner_display_name),
                )
            )

    logger.info(f"Created league {league.id} ({name}) for season {season_year}")
    return league


def join_league(
    db: Session, invite_code: str, user_id: str, display_name: str | None = None
) -> LeagueMember:
    """Join a league by invite code. Joining twice returns the existing membership."""
    invite_code = (invite_code or "").strip().lower()
    if not invite_code:
        raise ValidationError("Missing invite code")
    if not user_id:
        raise ValidationError("Missing user id")

    league = db.query(League).filter(League.invite_code == invite_code).first()
    if league is None:
        raise LeagueNotFoundError("Invalid invite code")

    def existing() -> LeagueMember | None:
        return (
            db.query(LeagueMember)
            .filter(LeagueMember.league_id == league.id, LeagueMember.user_id == user_id)
            .first()
        )

    member = existing()
    if member is not None:
        return member

    try:
        with atomic(db):
            member = LeagueMember(
                league_id=league.id, user_id=user_id, display_name=_clean_name(display_name)
            )
            db.add(member)
    except IntegrityError:
        # Two joins raced; the other one created the membership
        member = existing()
        if member is None:
            raise
        return member

    logger.info(f"User {user_id} joined league {league.id}")
    return member


def update_display_name(
    db: Session, league_id: str, user_id: str, display_name: str | None
) -> LeagueMember:
    league = get_league(db, league_id)
    member = require_member(db, league.id, user_id)
    with atomic(db):
        member.display_name = _clean_name(display_name)
    return member


def standings(db: Session, league_id: str) -> list[StandingRow]:
    """Season totals of graded picks per member, best record first."""
    league = get_league(db, league_id)

    totals = (
        db.query(
            PickResult.user_id,
            func.sum(case((PickResult.result == RESULT_WIN, 1), else_=0)),
            func.sum(case((PickResult.result == RESULT_LOSS, 1), else_=0)),
            func.sum(case((PickResult.result == RESULT_PENDING, 1), else_=0)),
        )
        .filter(PickResult.league_id == league.id, PickResult.season_year == league.season_year)
        .group_by(PickResult.user_id)
        .all()
    )
    by_user = {user_id: (wins, losses, pending) for user_id, wins, losses, pending in totals}

    members = (
        db.query(LeagueMember)
        .filter(LeagueMember.league_id == league.id)
        .order_by(LeagueMember.created_at, LeagueMember.id)
        .all()
    )

    rows = []
    for member in members:
        wins, losses, pending = by_user.get(member.user_id, (0, 0, 0))
        rows.append(
            StandingRow(
                user_id=member.user_id,
                display_name=member.display_name,
                wins=int(wins or 0),
                losses=int(losses or 0),
                pending=int(pending or 0),
            )
        )

    rows.sort(key=lambda r: (-r.wins, r.losses, r.pending))
    return rows


def week_view(
    db: Session,
    league_id: str,
    viewer_id: str,
    week_number: int | None = None,
    now: datetime | None = None,
) -> WeekView:
    """A week's configuration plus the picks the viewer is allowed to see."""
    league = get_league(db, league_id)
    require_member(db, league.id, viewer_id)
    week_number = validate_week_number(
        league.current_week if week_number is None else week_number
    )

    config = (
        db.query(WeekConfig)
        .filter(
            WeekConfig.league_id == league.id,
            WeekConfig.season_year == league.season_year,
            WeekConfig.week_number == week_number,
        )
        .first()
    )
    reveal_time = as_utc(config.reveal_time) if config else None
    revealed = reveal_time is not None and as_utc(now or utcnow()) >= reveal_time

    picks_query = db.query(Pick).filter(
        Pick.league_id == league.id,
        Pick.season_year == league.season_year,
        Pick.week_number == week_number,
    )
    byes_query = db.query(Bye.user_id).filter(
        Bye.league_id == league.id,
        Bye.season_year == league.season_year,
        Bye.week_number == week_number,
    )
    if not revealed:
        picks_query = picks_query.filter(Pick.user_id == viewer_id)
        byes_query = byes_query.filter(Bye.user_id == viewer_id)

    picks: dict[str, dict[int, str]] = {}
    for pick in picks_query.order_by(Pick.user_id, Pick.slot):
        picks.setdefault(pick.user_id, {})[pick.slot] = pick.team_abbr

    members = {
        m.user_id: m.display_name
        for m in db.query(LeagueMember).filter(LeagueMember.league_id == league.id)
    }

    return WeekView(
        league_id=league.id,
        season_year=league.season_year,
        week_number=week_number,
        picks_required=config.picks_required if config else None,
        lock_time=as_utc(config.lock_time) if config else None,
        reveal_time=reveal_time,
        revealed=revealed,
        picks=picks,
        byes={user_id for (user_id,) in byes_query},
        members=members,
    )


def matchups(
    db: Session,
    league_id: str,
    week_number: int | None = None,
    league_scoped: bool | None = None,
) -> list[Game]:
    """Games of a league week ordered by kickoff."""
    league = get_league(db, league_id)
    week_number = validate_week_number(
        league.current_week if week_number is None else week_number
    )
    return (
        games_for_week(db, league.id, league.season_year, week_number, league_scoped)
        .order_by(Game.kickoff_time.asc(), Game.game_id)
        .all()
    )
