"""Week lifecycle operations: game sync, week sync, picks, grading and advancement."""

from .advance import advance_week
from .game_sync import GameSyncResult, sync_games
from .grading import GradeResult, grade_week
from .league import (
    StandingRow,
    WeekView,
    create_league,
    join_league,
    matchups,
    standings,
    update_display_name,
    week_view,
)
from .outcomes import AdvanceOutcome, Advanced, NotReady, StallReason, UpstreamUnavailable
from .picks import PickState, declare_bye, get_pick_state, submit_picks
from .week_sync import WeekSyncResult, sync_week

__all__ = [
    "AdvanceOutcome",
    "Advanced",
    "GameSyncResult",
    "GradeResult",
    "NotReady",
    "PickState",
    "StallReason",
    "StandingRow",
    "UpstreamUnavailable",
    "WeekSyncResult",
    "WeekView",
    "advance_week",
    "create_league",
    "declare_bye",
    "get_pick_state",
    "grade_week",
    "join_league",
    "matchups",
    "standings",
    "submit_picks",
    "sync_games",
    "sync_week",
    "update_display_name",
    "week_view",
]
