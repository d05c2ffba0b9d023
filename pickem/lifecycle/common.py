"""Shared helpers for the week lifecycle operations.

Small pieces every lifecycle step needs: the NFL team list, week-number rules,
UTC time handling, league lookup and the scope-aware games query.

Time Handling:
All timestamps are compared in UTC. Some databases (SQLite) hand back naive
datetimes even for timezone-aware columns, so every value read from the store
goes through as_utc() before it is compared with "now".
"""

from datetime import datetime, timezone

from sqlalchemy.orm import Query, Session

from ..config.settings import settings
from ..database.models import Game, League, LeagueMember
from ..exceptions import LeagueNotFoundError, NotLeagueMemberError, ValidationError

NFL_TEAMS = (
    "ARI", "ATL", "BAL", "BUF", "CAR", "CHI", "CIN", "CLE", "DAL", "DEN", "DET", "GB",
    "HOU", "IND", "JAX", "KC", "LV", "LAC", "LAR", "MIA", "MIN", "NE", "NO", "NYG", "NYJ",
    "PHI", "PIT", "SEA", "SF", "TB", "TEN", "WAS",
)  # fmt: skip


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def picks_required_for(week_number: int) -> int:
    """Two picks per week through week 16, one pick in weeks 17 and 18."""
    return 1 if week_number >= settings.single_pick_from_week else 2


def validate_week_number(week_number) -> int:
    if isinstance(week_number, bool) or not isinstance(week_number, int):
        raise ValidationError(f"Invalid week number: {week_number!r}")
    if week_number < 1 or week_number > settings.final_week:
        raise ValidationError(
            f"Invalid week number: {week_number} (expected 1-{settings.final_week})"
        )
    return week_number


def resolve_scope(league_scoped: bool | None) -> bool:
    return settings.league_scoped_games if league_scoped is None else league_scoped


def get_league(db: Session, league_id: str) -> League:
    league_id = (league_id or "").strip()
    if not league_id:
        raise ValidationError("Missing league_id")
    league = db.query(League).filter(League.id == league_id).first()
    if league is None:
        raise LeagueNotFoundError(f"League not found: {league_id}")
    return league


def require_member(db: Session, league_id: str, user_id: str) -> LeagueMember:
    member = (
        db.query(LeagueMember)
        .filter(LeagueMember.league_id == league_id, LeagueMember.user_id == user_id)
        .first()
    )
    if member is None:
        raise NotLeagueMemberError(f"User {user_id} is not a member of league {league_id}")
    return member


def games_for_week(
    db: Session,
    league_id: str | None,
    season_year: int,
    week_number: int,
    league_scoped: bool | None = None,
) -> Query:
    """Query the games of one week in the deployment's games scope.

    League-scoped deployments key games by league; global deployments share
    a single schedule stored with a NULL league_id.
    """
    query = db.query(Game).filter(Game.season_year == season_year, Game.week_number == week_number)
    if resolve_scope(league_scoped):
        return query.filter(Game.league_id == league_id)
    return query.filter(Game.league_id.is_(None))
