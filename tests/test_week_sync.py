"""Tests for week sync: picks_required and lock/reveal derivation."""

from datetime import datetime, timedelta, timezone

import pytest
from conftest import NOW, add_game

from pickem.database.models import WeekConfig
from pickem.exceptions import ValidationError, WeekNotReadyError
from pickem.lifecycle.common import as_utc
from pickem.lifecycle.week_sync import sync_week

EARLY = datetime(2025, 9, 5, 0, 20, tzinfo=timezone.utc)
LATE = datetime(2025, 9, 7, 17, 0, tzinfo=timezone.utc)


def stored_config(db, league, week_number):
    return (
        db.query(WeekConfig)
        .filter(WeekConfig.league_id == league.id, WeekConfig.week_number == week_number)
        .one()
    )


def test_lock_and_reveal_at_earliest_kickoff(db, league):
    add_game(db, league, 1, "2", "BUF", "BAL", LATE)
    add_game(db, league, 1, "1", "PHI", "DAL", EARLY)

    result = sync_week(db, league.id)

    assert result.lock_time == EARLY
    assert result.reveal_time == EARLY
    assert result.picks_required == 2
    assert result.used_fallback is False

    config = stored_config(db, league, 1)
    assert as_utc(config.lock_time) == EARLY
    assert as_utc(config.reveal_time) == EARLY


@pytest.mark.parametrize("week_number,expected", [(1, 2), (16, 2), (17, 1), (18, 1)])
def test_picks_required_by_week(db, league, week_number, expected):
    add_game(db, league, week_number, f"g{week_number}", "KC", "DEN", LATE)

    assert sync_week(db, league.id, week_number=week_number).picks_required == expected


def test_no_games_refuses_to_configure(db, league):
    with pytest.raises(WeekNotReadyError):
        sync_week(db, league.id, week_number=2)

    assert db.query(WeekConfig).count() == 0


def test_week_zero_is_rejected_not_defaulted(db, league):
    add_game(db, league, 1, "1", "PHI", "DAL", EARLY)

    with pytest.raises(ValidationError):
        sync_week(db, league.id, week_number=0)

    assert db.query(WeekConfig).count() == 0


def test_fallback_lock_is_24_hours_out(db, league):
    result = sync_week(db, league.id, week_number=2, allow_fallback_lock=True, now=NOW)

    assert result.used_fallback is True
    assert result.lock_time == NOW + timedelta(hours=24)
    assert as_utc(stored_config(db, league, 2).lock_time) == NOW + timedelta(hours=24)


def test_resync_updates_existing_row(db, league):
    add_game(db, league, 1, "1", "PHI", "DAL", LATE)
    sync_week(db, league.id)

    add_game(db, league, 1, "0", "KC", "LAC", EARLY)
    sync_week(db, league.id)

    assert db.query(WeekConfig).count() == 1
    assert as_utc(stored_config(db, league, 1).lock_time) == EARLY


def test_ignores_other_weeks_games(db, league):
    add_game(db, league, 2, "20", "KC", "LAC", EARLY)
    add_game(db, league, 1, "10", "PHI", "DAL", LATE)

    assert sync_week(db, league.id, week_number=1).lock_time == LATE
