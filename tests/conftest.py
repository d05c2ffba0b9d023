"""Shared pytest fixtures for the pick'em league tests.

Every test gets a fresh in-memory SQLite database. StaticPool keeps a single
connection alive so the schema created here is the one every session (and the
FastAPI TestClient's worker thread) sees.

The scoreboard provider is replaced by FakeScoreboard, which serves canned
ESPN-shaped payloads per week or raises a configured error, so no test ever
touches the network.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pickem.api.dependencies import get_provider
from pickem.api.main import app
from pickem.config.settings import settings
from pickem.data.collection.espn_collector import parse_espn_scoreboard
from pickem.data.collection.scoreboard import ScoreboardProvider
from pickem.database.connection import get_db
from pickem.database.init_db import create_database
from pickem.database.models import GAME_FINAL, GAME_SCHEDULED, Game, WeekConfig
from pickem.lifecycle.league import create_league, join_league

SEASON = 2025
CRON_SECRET = "test-cron-secret"
NOW = datetime(2025, 9, 7, 12, 0, tzinfo=timezone.utc)


def espn_event(
    game_id,
    home,
    away,
    kickoff,
    state="pre",
    home_score=None,
    away_score=None,
):
    """Build one event in the ESPN scoreboard payload shape."""
    return {
        "id": str(game_id),
        "competitions": [
            {
                "date": kickoff.strftime("%Y-%m-%dT%H:%MZ"),
                "status": {"type": {"state": state, "completed": state == "post"}},
                "competitors": [
                    {
                        "homeAway": "home",
                        "score": "" if home_score is None else str(home_score),
                        "team": {"abbreviation": home},
                    },
                    {
                        "homeAway": "away",
                        "score": "" if away_score is None else str(away_score),
                        "team": {"abbreviation": away},
                    },
                ],
            }
        ],
    }


class FakeScoreboard(ScoreboardProvider):
    """Scoreboard provider serving canned events per week."""

    name = "espn"

    def __init__(self, weeks=None, error=None):
        self.weeks = weeks or {}
        self.error = error
        self.calls = []
        self.on_fetch = None  # Called with the call count before answering

    def fetch_scoreboard(self, season_year, week_number, season_type):
        self.calls.append((season_year, week_number, season_type))
        if self.on_fetch is not None:
            self.on_fetch(len(self.calls))
        if self.error is not None:
            raise self.error
        return {"events": list(self.weeks.get(week_number, []))}

    def parse(self, payload):
        return parse_espn_scoreboard(payload)


def add_game(
    db,
    league,
    week_number,
    game_id,
    home,
    away,
    kickoff,
    status=GAME_SCHEDULED,
    home_score=None,
    away_score=None,
    winner=None,
):
    game = Game(
        league_id=league.id,
        season_year=league.season_year,
        week_number=week_number,
        provider="espn",
        game_id=str(game_id),
        home_abbr=home,
        away_abbr=away,
        kickoff_time=kickoff,
        status=status,
        home_score=home_score,
        away_score=away_score,
        winner_abbr=winner,
    )
    db.add(game)
    db.commit()
    return game


def add_final_game(db, league, week_number, game_id, winner, loser, kickoff=NOW):
    return add_game(
        db,
        league,
        week_number,
        game_id,
        home=winner,
        away=loser,
        kickoff=kickoff,
        status=GAME_FINAL,
        home_score=24,
        away_score=17,
        winner=winner,
    )


def configure_week(db, league, week_number, lock_time, picks_required=None):
    if picks_required is None:
        picks_required = 1 if week_number >= 17 else 2
    config = WeekConfig(
        league_id=league.id,
        season_year=league.season_year,
        week_number=week_number,
        picks_required=picks_required,
        lock_time=lock_time,
        reveal_time=lock_time,
    )
    db.add(config)
    db.commit()
    return config


def set_week(db, league, week_number):
    league.current_week = week_number
    db.commit()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def league(db):
    """A 2025 league at week 1 with members alice (owner) and bob."""
    league = create_league(
        db, "Test League", SEASON, owner_user_id="alice", owner_display_name="Alice"
    )
    join_league(db, league.invite_code, "bob", "Bob")
    return league


@pytest.fixture
def provider():
    return FakeScoreboard()


@pytest.fixture
def future_lock():
    return datetime.now(timezone.utc) + timedelta(days=2)


@pytest.fixture
def client(session_factory, provider, monkeypatch):
    """TestClient bound to the test database and the fake provider."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_provider] = lambda: provider
    monkeypatch.setattr(settings, "cron_secret", CRON_SECRET)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def cron_headers():
    return {"x-cron-secret": CRON_SECRET}
