"""Week sync: derive a league-week's rules from its synced games.

Rules Derived:
- picks_required: 2 in weeks 1-16, 1 in weeks 17-18
- lock_time: kickoff of the earliest synced game of the week
- reveal_time: equal to lock_time (picks become visible at first kickoff)

Safety Property:
A week with no synced games is NOT configured. Locking against a missing
schedule would either lock too early or never, so week sync raises
WeekNotReadyError instead. An operator can still force a configuration with
allow_fallback_lock, which locks the week 24 hours from now.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..config.settings import settings
from ..database.connection import atomic
from ..database.models import Game, WeekConfig
from ..exceptions import WeekNotReadyError
from .common import (
    as_utc,
    games_for_week,
    get_league,
    picks_required_for,
    utcnow,
    validate_week_number,
)

logger = logging.getLogger(__name__)


@dataclass
class WeekSyncResult:
    league_id: str
    season_year: int
    week_number: int
    picks_required: int
    lock_time: datetime
    reveal_time: datetime
    used_fallback: bool = False

    @property
    def note(self) -> str:
        if self.used_fallback:
            return "no games found; used fallback lock time"
        return "lock set from games table"


def sync_week(
    db: Session,
    league_id: str,
    season_year: int | None = None,
    week_number: int | None = None,
    allow_fallback_lock: bool = False,
    now: datetime | None = None,
    league_scoped: bool | None = None,
) -> WeekSyncResult:
    """Create or update the WeekConfig row for one league-week.

    Args:
        db: Database session
        league_id: League whose week is configured
        season_year: Defaults to the league's season
        week_number: Defaults to the league's current week
        allow_fallback_lock: Configure the week even without games (lock = now + 24h)
        now: Clock override for the fallback lock time

    Returns:
        WeekSyncResult describing the stored configuration

    Raises:
        WeekNotReadyError: No games are synced for the week and no fallback was allowed
    """
    league = get_league(db, league_id)
    season_year = season_year or league.season_year
    week_number = validate_week_number(
        league.current_week if week_number is None else week_number
    )

    picks_required = picks_required_for(week_number)

    earliest = (
        games_for_week(db, league.id, season_year, week_number, league_scoped)
        .order_by(Game.kickoff_time.asc())
        .first()
    )

    if earliest is not None:
        lock_time = as_utc(earliest.kickoff_time)
        used_fallback = False
    elif allow_fallback_lock:
        lock_time = as_utc(now or utcnow()) + timedelta(hours=settings.fallback_lock_hours)
        used_fallback = True
        logger.warning(
            f"No games for league {league.id} {season_year} week {week_number}; "
            f"using fallback lock {lock_time.isoformat()}"
        )
    else:
        raise WeekNotReadyError(
            f"No games synced for {season_year} week {week_number}; refusing to set lock time"
        )

    reveal_time = lock_time

    with atomic(db):
        config = (
            db.query(WeekConfig)
            .filter(
                WeekConfig.league_id == league.id,
                WeekConfig.season_year == season_year,
                WeekConfig.week_number == week_number,
            )
            .first()
        )
        if config is None:
            config = WeekConfig(
                league_id=league.id, season_year=season_year, week_number=week_number
            )
            db.add(config)
        config.picks_required = picks_required
        config.lock_time = lock_time
        config.reveal_time = reveal_time

    logger.info(
        f"Week synced: league={league.id} season={season_year} week={week_number} "
        f"picks_required={picks_required} lock={lock_time.isoformat()}"
    )

    return WeekSyncResult(
        league_id=league.id,
        season_year=season_year,
        week_number=week_number,
        picks_required=picks_required,
        lock_time=lock_time,
        reveal_time=reveal_time,
        used_fallback=used_fallback,
    )
