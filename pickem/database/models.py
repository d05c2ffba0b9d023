"""SQLAlchemy database models for the pick'em league service.

This file defines the complete database schema using SQLAlchemy ORM (Object-Relational Mapping).
It covers the whole week lifecycle: leagues and their members, per-week rules,
the synced NFL schedule, user picks and byes, and graded pick results.

For beginners:

SQLAlchemy ORM: A Python toolkit that lets you work with databases using Python classes
instead of raw SQL. Each class represents a database table, and instances represent rows.

Database Design Principles Applied:
1. Scoping: Every weekly entity is keyed by (league_id, season_year, week_number)
2. Unique Constraints: Upsert keys are enforced by the database, not just the code
3. Indexes: Speed up the per-user and per-week lookups the lifecycle performs
4. Timestamps: Track when records are created and updated

Model Categories:
1. League structure: League, LeagueMember, WeekConfig
2. Schedule: Game (synced from the scoreboard provider)
3. User activity: Pick, Bye
4. Derived data: PickResult (rebuilt by every grading pass)

Ownership Rules:
- A League owns its WeekConfig rows and scopes all weekly entities
- Picks and Byes are mutually exclusive for a given user and week
- Games are the only source of truth for winners; PickResult is a projection
"""

import uuid

from sqlalchemy import Column
from sqlalchemy import DateTime
from sqlalchemy import ForeignKey
from sqlalchemy import Index
from sqlalchemy import Integer
from sqlalchemy import String
from sqlalchemy import UniqueConstraint
from sqlalchemy import text
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

# Base class for all database models
Base = declarative_base()

# Game status values. The provider's "pre"/"in"/"post" states are mapped onto these.
GAME_SCHEDULED = "scheduled"
GAME_IN_PROGRESS = "inprogress"
GAME_FINAL = "final"

# Pick result values written by the grading pass
RESULT_WIN = "win"
RESULT_LOSS = "loss"
RESULT_PENDING = "pending"


def _new_id() -> str:
    return str(uuid.uuid4())


class League(Base):
    """A pick'em competition instance.

    The league row holds the single shared pointer of the whole lifecycle:
    current_week. It only ever moves forward, one week at a time, and only
    after the next week's schedule and lock configuration exist.

    For beginners:

    String primary keys: League ids are UUID strings so they can be shared in
    URLs and invite flows without exposing a row count.

    invite_code: Members join with this code instead of the league id.
    """

    __tablename__ = "leagues"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    invite_code = Column(String(32), unique=True, nullable=False, index=True)

    season_year = Column(Integer, nullable=False)  # 2025 for the 2025-26 season
    current_week = Column(Integer, nullable=False, default=1)  # 1..18
    timezone = Column(String(50), nullable=False, default="America/New_York")

    members = relationship("LeagueMember", back_populates="league")
    weeks = relationship("WeekConfig", back_populates="league")

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class LeagueMember(Base):
    """A user's membership in a league.

    user_id comes from the identity provider and is trusted once authenticated.
    display_name is what other members see after picks are revealed.
    """

    __tablename__ = "league_members"

    id = Column(Integer, primary_key=True, index=True)
    league_id = Column(String(36), ForeignKey("leagues.id"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    display_name = Column(String(100))

    league = relationship("League", back_populates="members")

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("league_id", "user_id", name="uq_member_league_user"),)


class WeekConfig(Base):
    """Rules for one league-week.

    Derived by week sync from the synced schedule:
    - picks_required: 2 for weeks 1-16, 1 for weeks 17-18
    - lock_time: earliest kickoff of the week; picks are read-only afterwards
    - reveal_time: when other members' picks become visible (equal to lock_time)
    """

    __tablename__ = "weeks"

    id = Column(Integer, primary_key=True, index=True)
    league_id = Column(String(36), ForeignKey("leagues.id"), nullable=False)
    season_year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)

    picks_required = Column(Integer, nullable=False)  # 1 or 2
    lock_time = Column(DateTime(timezone=True), nullable=False)
    reveal_time = Column(DateTime(timezone=True), nullable=False)

    league = relationship("League", back_populates="weeks")

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("league_id", "season_year", "week_number", name="uq_week_league_season"),
    )


class Game(Base):
    """One scheduled NFL matchup synced from the scoreboard provider.

    league_id is populated in league-scoped mode and left NULL in global mode,
    where one schedule is shared by every league. A deployment picks one mode.

    winner_abbr is only set when the game is final and the scores differ.
    A tie leaves it NULL, so no pick can win against a tied game.
    """

    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    league_id = Column(String(36), ForeignKey("leagues.id"), nullable=True, index=True)
    season_year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)

    provider = Column(String(20), nullable=False, default="espn")
    game_id = Column(String(32), nullable=False)  # Provider event id

    home_abbr = Column(String(5), nullable=False)  # "KC", "SF"
    away_abbr = Column(String(5), nullable=False)
    kickoff_time = Column(DateTime(timezone=True), nullable=False)

    status = Column(String(12), nullable=False, default=GAME_SCHEDULED)
    home_score = Column(Integer)  # None until the provider reports a score
    away_score = Column(Integer)
    winner_abbr = Column(String(5))

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("league_id", "season_year", "game_id", name="uq_game_league_season"),
        # NULL league_id never collides in the constraint above, so global rows need their own key
        Index(
            "uq_game_global_season",
            "season_year",
            "game_id",
            unique=True,
            sqlite_where=text("league_id IS NULL"),
            postgresql_where=text("league_id IS NULL"),
        ),
        # Grading, week sync and the advance gate all read one week at a time
        Index("idx_game_week", "league_id", "season_year", "week_number"),
    )


class Pick(Base):
    """A user's team selection for one slot of one week."""

    __tablename__ = "picks"

    id = Column(Integer, primary_key=True, index=True)
    league_id = Column(String(36), ForeignKey("leagues.id"), nullable=False)
    season_year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)
    user_id = Column(String(64), nullable=False)
    slot = Column(Integer, nullable=False)  # 1 or 2
    team_abbr = Column(String(5), nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint(
            "league_id", "season_year", "week_number", "user_id", "slot", name="uq_pick_slot"
        ),
        # Season used-teams lookups
        Index("idx_pick_user_season", "league_id", "season_year", "user_id"),
    )


class Bye(Base):
    """A user's declared skip for one week.

    At most one bye per user per league season, which the unique constraint
    enforces at the database level as well.
    """

    __tablename__ = "byes"

    id = Column(Integer, primary_key=True, index=True)
    league_id = Column(String(36), ForeignKey("leagues.id"), nullable=False)
    season_year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)
    user_id = Column(String(64), nullable=False)

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint("league_id", "season_year", "user_id", name="uq_bye_per_season"),
    )


class PickResult(Base):
    """Graded outcome of a pick: "win", "loss" or "pending".

    This table is a projection of Picks x Games. Each grading pass deletes the
    week's rows and writes a fresh set, so it can be rebuilt at any time.
    """

    __tablename__ = "pick_results"

    id = Column(Integer, primary_key=True, index=True)
    league_id = Column(String(36), ForeignKey("leagues.id"), nullable=False)
    season_year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)
    user_id = Column(String(64), nullable=False)
    slot = Column(Integer, nullable=False)
    team_abbr = Column(String(5), nullable=False)
    result = Column(String(10), nullable=False, default=RESULT_PENDING)

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "league_id", "season_year", "week_number", "user_id", "slot", name="uq_result_slot"
        ),
        Index("idx_result_league_season", "league_id", "season_year"),
    )
