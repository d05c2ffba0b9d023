"""Pick submission: weekly team picks and byes.

Each member either picks teams for a week or declares a bye. The two are
mutually exclusive: saving picks removes that week's bye, declaring a bye
removes that week's picks.

Submission Rules:
1. The week must be configured (week sync has run) and not yet locked.
   Picks become read-only at the week's lock time (first kickoff).
2. Picks path:
   - Slot 1 is always required
   - Slot 2 is required in two-pick weeks (1-16) and must differ from slot 1
   - In one-pick weeks (17-18) a submitted slot 2 is dropped
   - A team may be used once per season per user; reuse is rejected here on
     the server, not just filtered out of the client's options
3. Bye path:
   - Only in weeks 1-16
   - One bye per season; declaring it again for the same week is a no-op

Transactions:
All validation happens before the first write. The writes of one submission
(bye removal + pick upserts, or bye insert + pick deletion) commit together
or not at all.

After every successful save the user's full pick state, including the
season's used teams, is re-read from the database and returned.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config.settings import settings
from ..database.connection import atomic
from ..database.models import Bye, League, Pick, WeekConfig
from ..exceptions import (
    ByeAlreadyUsedError,
    ByeNotAllowedError,
    PicksLockedError,
    TeamAlreadyUsedError,
    ValidationError,
    WeekNotConfiguredError,
)
from .common import NFL_TEAMS, as_utc, get_league, require_member, utcnow, validate_week_number

logger = logging.getLogger(__name__)


@dataclass
class PickState:
    """A member's view of one week: picks, bye flags and used teams."""

    league_id: str
    season_year: int
    week_number: int
    user_id: str
    picks_required: int | None
    lock_time: datetime | None
    reveal_time: datetime | None
    locked: bool
    picks: dict[int, str] = field(default_factory=dict)
    bye_this_week: bool = False
    bye_used_this_season: bool = False
    used_teams: set[str] = field(default_factory=set)

    @property
    def can_declare_bye(self) -> bool:
        """A bye can be toggled on only before lock, in weeks 1-16, if unspent or spent here."""
        if self.locked or self.week_number > settings.last_bye_week:
            return False
        return self.bye_this_week or not self.bye_used_this_season

    def available_teams(self, slot: int) -> list[str]:
        """Teams selectable for a slot.

        Teams already used this season are hidden, except the team currently
        in this slot. The team in the other slot is hidden as well.
        """
        current = self.picks.get(slot)
        other = self.picks.get(2 if slot == 1 else 1)
        return [
            team
            for team in NFL_TEAMS
            if (team == current or team not in self.used_teams) and team != other
        ]


def _week_config(db: Session, league: League, week_number: int) -> WeekConfig | None:
    return (
        db.query(WeekConfig)
        .filter(
            WeekConfig.league_id == league.id,
            WeekConfig.season_year == league.season_year,
            WeekConfig.week_number == week_number,
        )
        .first()
    )


def _season_bye(db: Session, league: League, user_id: str) -> Bye | None:
    return (
        db.query(Bye)
        .filter(
            Bye.league_id == league.id,
            Bye.season_year == league.season_year,
            Bye.user_id == user_id,
        )
        .first()
    )


def _week_picks_query(db: Session, league: League, week_number: int, user_id: str):
    return db.query(Pick).filter(
        Pick.league_id == league.id,
        Pick.season_year == league.season_year,
        Pick.week_number == week_number,
        Pick.user_id == user_id,
    )


def _teams_used_elsewhere(db: Session, league: League, week_number: int, user_id: str) -> dict:
    """Map team -> week for the user's picks in other weeks of the season."""
    rows = (
        db.query(Pick.team_abbr, Pick.week_number)
        .filter(
            Pick.league_id == league.id,
            Pick.season_year == league.season_year,
            Pick.user_id == user_id,
            Pick.week_number != week_number,
        )
        .all()
    )
    return {team: week for team, week in rows}


def _open_week(db: Session, league_id: str, user_id: str, week_number, now):
    """Load and check everything a submission needs before any write."""
    league = get_league(db, league_id)
    require_member(db, league.id, user_id)
    week_number = validate_week_number(
        league.current_week if week_number is None else week_number
    )

    config = _week_config(db, league, week_number)
    if config is None:
        raise WeekNotConfiguredError(
            f"Week {week_number} of {league.season_year} is not configured yet"
        )

    lock_time = as_utc(config.lock_time)
    if as_utc(now or utcnow()) >= lock_time:
        raise PicksLockedError(f"Picks for week {week_number} locked at {lock_time.isoformat()}")

    return league, config, week_number


def _normalize_team(raw) -> str:
    team = (raw or "").strip().upper()
    if team and team not in NFL_TEAMS:
        raise ValidationError(f"Unknown team: {raw}")
    return team


def get_pick_state(
    db: Session,
    league_id: str,
    user_id: str,
    week_number: int | None = None,
    now: datetime | None = None,
) -> PickState:
    """Read a member's picks, bye flags and season used teams for one week."""
    league = get_league(db, league_id)
    require_member(db, league.id, user_id)
    week_number = validate_week_number(
        league.current_week if week_number is None else week_number
    )

    config = _week_config(db, league, week_number)
    lock_time = as_utc(config.lock_time) if config else None
    reveal_time = as_utc(config.reveal_time) if config else None

    picks = {
        pick.slot: pick.team_abbr
        for pick in _week_picks_query(db, league, week_number, user_id).order_by(Pick.slot)
    }

    used_teams = {
        team
        for (team,) in db.query(Pick.team_abbr).filter(
            Pick.league_id == league.id,
            Pick.season_year == league.season_year,
            Pick.user_id == user_id,
        )
    }

    season_bye = _season_bye(db, league, user_id)

    return PickState(
        league_id=league.id,
        season_year=league.season_year,
        week_number=week_number,
        user_id=user_id,
        picks_required=config.picks_required if config else None,
        lock_time=lock_time,
        reveal_time=reveal_time,
        locked=lock_time is not None and as_utc(now or utcnow()) >= lock_time,
        picks=picks,
        bye_this_week=season_bye is not None and season_bye.week_number == week_number,
        bye_used_this_season=season_bye is not None,
        used_teams=used_teams,
    )


def submit_picks(
    db: Session,
    league_id: str,
    user_id: str,
    teams: Sequence[str],
    week_number: int | None = None,
    now: datetime | None = None,
) -> PickState:
    """Save a member's team picks for a week.

    Args:
        db: Database session
        league_id: League the picks belong to
        user_id: Authenticated member
        teams: Team abbreviations in slot order; the second is ignored in one-pick weeks
        week_number: Defaults to the league's current week
        now: Clock override for the lock check

    Returns:
        The refreshed PickState

    Raises:
        PicksLockedError: The week is locked
        ValidationError: Missing pick, duplicate team or unknown team
        TeamAlreadyUsedError: A team was picked in another week this season
    """
    league, config, week_number = _open_week(db, league_id, user_id, week_number, now)

    submitted = [_normalize_team(team) for team in list(teams)[:2]]
    slot1 = submitted[0] if submitted else ""
    slot2 = submitted[1] if len(submitted) > 1 else ""

    if not slot1:
        raise ValidationError("Pick 1 is required.")

    if config.picks_required == 2:
        if not slot2:
            raise ValidationError("Pick 2 is required.")
        if slot1 == slot2:
            raise ValidationError("Pick 1 and Pick 2 must be different teams.")
        chosen = {1: slot1, 2: slot2}
    else:
        chosen = {1: slot1}

    used_elsewhere = _teams_used_elsewhere(db, league, week_number, user_id)
    for team in chosen.values():
        if team in used_elsewhere:
            raise TeamAlreadyUsedError(f"{team} was already picked in week {used_elsewhere[team]}")

    with atomic(db):
        # Switching from a bye to picks
        db.query(Bye).filter(
            Bye.league_id == league.id,
            Bye.season_year == league.season_year,
            Bye.week_number == week_number,
            Bye.user_id == user_id,
        ).delete(synchronize_session="fetch")

        existing = {pick.slot: pick for pick in _week_picks_query(db, league, week_number, user_id)}
        for slot, team in chosen.items():
            pick = existing.get(slot)
            if pick is None:
                db.add(
                    Pick(
                        league_id=league.id,
                        season_year=league.season_year,
                        week_number=week_number,
                        user_id=user_id,
                        slot=slot,
                        team_abbr=team,
                    )
                )
            else:
                pick.team_abbr = team

        if config.picks_required == 1:
            _week_picks_query(db, league, week_number, user_id).filter(Pick.slot == 2).delete(
                synchronize_session="fetch"
            )

    logger.info(
        f"Picks saved: league={league.id} week={week_number} user={user_id} "
        f"teams={list(chosen.values())}"
    )
    return get_pick_state(db, league.id, user_id, week_number, now)


def declare_bye(
    db: Session,
    league_id: str,
    user_id: str,
    week_number: int | None = None,
    now: datetime | None = None,
) -> PickState:
    """Declare the member's season bye for a week and clear that week's picks.

    Raises:
        PicksLockedError: The week is locked
        ByeNotAllowedError: Week is after the last bye week
        ByeAlreadyUsedError: The season bye was already used in another week
    """
    league, _config, week_number = _open_week(db, league_id, user_id, week_number, now)

    if week_number > settings.last_bye_week:
        raise ByeNotAllowedError(f"Bye is only allowed in weeks 1-{settings.last_bye_week}.")

    season_bye = _season_bye(db, league, user_id)
    if season_bye is not None and season_bye.week_number != week_number:
        raise ByeAlreadyUsedError(f"Bye already used in week {season_bye.week_number}.")

    try:
        with atomic(db):
            if season_bye is None:
                db.add(
                    Bye(
                        league_id=league.id,
                        season_year=league.season_year,
                        week_number=week_number,
                        user_id=user_id,
                    )
                )
                db.flush()
            _week_picks_query(db, league, week_number, user_id).delete(synchronize_session="fetch")
    except IntegrityError:
        # A concurrent request created the season bye first
        season_bye = _season_bye(db, league, user_id)
        if season_bye is None or season_bye.week_number != week_number:
            raise ByeAlreadyUsedError("Bye already used this season.") from None
        with atomic(db):
            _week_picks_query(db, league, week_number, user_id).delete(synchronize_session="fetch")

    logger.info(f"Bye saved: league={league.id} week={week_number} user={user_id}")
    return get_pick_state(db, league.id, user_id, week_number, now)
