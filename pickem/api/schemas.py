"""
Pydantic schemas for API request/response models.

This module defines the data structures used for API communication using
Pydantic. Pydantic provides:

- Automatic data validation and type conversion
- JSON serialization/deserialization
- OpenAPI/Swagger documentation generation

Key Pydantic Concepts:
- BaseModel: Base class for all data models
- ConfigDict: Configuration options for model behavior
- Field: Per-field validation (ranges, lengths) and documentation
- from_attributes: Allows creation from SQLAlchemy ORM objects and dataclasses

Schema Organization:
- League schemas: leagues, members, standings, week view, matchups
- Pick schemas: pick submission and pick state
- Lifecycle schemas: scheduler-triggered sync, grading and advancement

Lifecycle responses always carry ok=True when the request was handled. Whether
a league actually advanced is a separate flag with a machine-readable reason.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ========== LEAGUE SCHEMAS ==========


class LeagueCreate(BaseModel):
    """Request body for creating a league. The caller becomes its first member."""

    name: str = Field(..., min_length=1, max_length=100)
    season_year: int = Field(..., ge=2000, le=2100)
    timezone: str = "America/New_York"
    display_name: str | None = Field(None, max_length=100)


class LeagueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    invite_code: str
    season_year: int
    current_week: int  # 1..18
    timezone: str


class JoinLeagueRequest(BaseModel):
    invite_code: str = Field(..., min_length=1)
    display_name: str | None = Field(None, max_length=100)


class DisplayNameUpdate(BaseModel):
    display_name: str | None = Field(None, max_length=100)


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    league_id: str
    user_id: str
    display_name: str | None = None


class StandingResponse(BaseModel):
    """One row of the season standings table."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    display_name: str | None = None
    wins: int
    losses: int
    pending: int


class GameResponse(BaseModel):
    """One synced NFL matchup."""

    model_config = ConfigDict(from_attributes=True)

    game_id: str
    season_year: int
    week_number: int
    home_abbr: str
    away_abbr: str
    kickoff_time: datetime
    status: str  # scheduled | inprogress | final
    home_score: int | None = None
    away_score: int | None = None
    winner_abbr: str | None = None  # None until final, and for ties


class WeekViewResponse(BaseModel):
    """
    One week as seen by the requesting member.

    Before reveal_time, picks and byes only contain the viewer's own entries.
    members lists every member so the client can show who has not picked.
    """

    model_config = ConfigDict(from_attributes=True)

    league_id: str
    season_year: int
    week_number: int
    picks_required: int | None = None
    lock_time: datetime | None = None
    reveal_time: datetime | None = None
    revealed: bool
    picks: dict[str, dict[int, str]]
    byes: list[str]
    members: dict[str, str | None]


# ========== PICK SCHEMAS ==========


class PickSubmission(BaseModel):
    """
    Request body for saving picks.

    teams holds the team abbreviations in slot order. In one-pick weeks
    (17-18) only the first entry is used.
    """

    teams: list[str] = Field(..., min_length=1, max_length=2)
    week_number: int | None = Field(None, ge=1, le=18)


class ByeRequest(BaseModel):
    week_number: int | None = Field(None, ge=1, le=18)


class PickStateResponse(BaseModel):
    league_id: str
    season_year: int
    week_number: int
    picks_required: int | None = None
    lock_time: datetime | None = None
    reveal_time: datetime | None = None
    locked: bool
    picks: dict[int, str]
    bye_this_week: bool
    bye_used_this_season: bool
    can_declare_bye: bool
    used_teams: list[str]
    # slot -> teams still selectable in that slot
    options: dict[int, list[str]]


# ========== LIFECYCLE SCHEMAS ==========


class SyncGamesRequest(BaseModel):
    league_id: str | None = None  # Required when games are league-scoped
    season_year: int | None = None
    week_number: int | None = Field(None, ge=1, le=18)
    season_type: int | None = Field(None, ge=1, le=3)
    provider: str | None = None


class SyncGamesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ok: bool = True
    league_id: str | None = None
    season_year: int
    week_number: int
    season_type: int
    provider: str
    upserted: int
    note: str | None = None


class SyncWeekRequest(BaseModel):
    league_id: str
    season_year: int | None = None
    week_number: int | None = Field(None, ge=1, le=18)
    allow_fallback_lock: bool = False


class SyncWeekResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ok: bool = True
    league_id: str
    season_year: int
    week_number: int
    picks_required: int
    lock_time: datetime
    reveal_time: datetime
    used_fallback: bool
    note: str


class GradeWeekRequest(BaseModel):
    league_id: str
    week_number: int | None = Field(None, ge=1, le=18)


class GradeWeekResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ok: bool = True
    league_id: str
    season_year: int
    week_number: int
    picks_found: int
    games_found: int
    results_written: int
    all_final: bool


class AdvanceWeekRequest(BaseModel):
    league_id: str
    season_type: int | None = Field(None, ge=1, le=3)


class AdvanceWeekResponse(BaseModel):
    """
    Result of one advance attempt.

    advanced=False is a normal answer, not an error: reason says which
    precondition is missing, and the scheduler simply tries again later.
    """

    ok: bool = True
    league_id: str
    advanced: bool
    season_year: int
    current_week: int
    outcome: str  # advanced | not_ready | upstream_unavailable
    reason: str | None = None
    message: str | None = None
    from_week: int | None = None
    to_week: int | None = None
    games_synced: int | None = None
    lock_time: datetime | None = None
    provider_status: int | None = None
    provider_error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
