"""Tagged outcomes of the week-advance pipeline.

Advancing a league has exactly three kinds of result:

- Advanced: the league moved from week w to week w+1
- NotReady: a precondition is not met yet (games still being played, the
  provider has no schedule for next week, ...). Expected steady state.
- UpstreamUnavailable: the provider or the database failed during one of the
  pre-advance sync steps. Transient; the scheduler retries on its next tick.

Neither NotReady nor UpstreamUnavailable is an error: both are reported as
"ok, not advanced" with a machine-readable reason. Callers branch on the
outcome type instead of parsing strings.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class StallReason(Enum):
    """Why a league stayed on its current week."""

    FINAL_WEEK = "final_week"  # League already at week 18
    NO_GAMES = "no_games"  # Current week has no synced games
    GAMES_NOT_FINAL = "games_not_final"  # At least one current-week game is not final
    PROVIDER_UNAVAILABLE = "provider_unavailable"  # Provider check failed
    PROVIDER_NO_GAMES = "provider_no_games"  # Provider lists no events for next week
    SYNC_GAMES_FAILED = "sync_games_failed"
    SYNC_GAMES_EMPTY = "sync_games_empty"  # Game sync for next week wrote no rows
    SYNC_WEEK_FAILED = "sync_week_failed"
    WEEK_NOT_READY = "week_not_ready"  # Week sync found no games for next week
    CONCURRENT_ADVANCE = "concurrent_advance"  # Another run moved the week first


REASON_MESSAGES = {
    StallReason.FINAL_WEEK: "Already week 18",
    StallReason.NO_GAMES: "No games found for current week",
    StallReason.GAMES_NOT_FINAL: "Not all games final",
    StallReason.PROVIDER_UNAVAILABLE: "Provider check failed; will retry later",
    StallReason.PROVIDER_NO_GAMES: "Next week has no games at provider; not advancing",
    StallReason.SYNC_GAMES_FAILED: "sync-games failed; will retry later",
    StallReason.SYNC_GAMES_EMPTY: "sync-games returned 0 games; will retry later",
    StallReason.SYNC_WEEK_FAILED: "sync-week failed; will retry later",
    StallReason.WEEK_NOT_READY: "sync-week found no games for next week; will retry later",
    StallReason.CONCURRENT_ADVANCE: "League week was advanced by another run",
}


@dataclass
class AdvanceOutcome:
    """Fields shared by every advance outcome."""

    league_id: str
    season_year: int
    current_week: int
    details: dict = field(default_factory=dict, kw_only=True)

    advanced = False

    @property
    def reason(self) -> StallReason | None:
        return None

    @property
    def message(self) -> str | None:
        return REASON_MESSAGES.get(self.reason) if self.reason else None


@dataclass
class Advanced(AdvanceOutcome):
    from_week: int
    to_week: int
    games_synced: int
    lock_time: datetime | None = None

    advanced = True


@dataclass
class NotReady(AdvanceOutcome):
    stall_reason: StallReason

    @property
    def reason(self) -> StallReason:
        return self.stall_reason


@dataclass
class UpstreamUnavailable(AdvanceOutcome):
    stall_reason: StallReason
    detail: str
    status_code: int | None = None

    @property
    def reason(self) -> StallReason:
        return self.stall_reason
