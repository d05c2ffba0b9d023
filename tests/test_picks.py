"""Tests for pick submission, byes and pick state.

Rules under test:
- picks are rejected at or after the week's lock time, with no writes
- one-pick weeks silently drop a submitted second team
- a team can be used once per season per user
- picks and a bye are mutually exclusive for a week
- one bye per season, only in weeks 1-16
"""

from datetime import timedelta

import pytest
from conftest import NOW, configure_week, set_week

from pickem.database.models import Bye, Pick
from pickem.exceptions import (
    ByeAlreadyUsedError,
    ByeNotAllowedError,
    NotLeagueMemberError,
    PicksLockedError,
    TeamAlreadyUsedError,
    ValidationError,
    WeekNotConfiguredError,
)
from pickem.lifecycle.picks import declare_bye, get_pick_state, submit_picks

LOCK = NOW + timedelta(days=1)


def stored_picks(db, league, week_number, user_id="alice"):
    rows = db.query(Pick).filter(
        Pick.league_id == league.id,
        Pick.week_number == week_number,
        Pick.user_id == user_id,
    )
    return {row.slot: row.team_abbr for row in rows}


def stored_bye_weeks(db, league, user_id="alice"):
    return [
        bye.week_number
        for bye in db.query(Bye).filter(Bye.league_id == league.id, Bye.user_id == user_id)
    ]


@pytest.fixture
def week1(db, league):
    return configure_week(db, league, 1, LOCK)


class TestSubmitPicks:
    def test_saves_two_picks(self, db, league, week1):
        state = submit_picks(db, league.id, "alice", ["KC", "sf"], now=NOW)

        assert state.picks == {1: "KC", 2: "SF"}
        assert state.used_teams == {"KC", "SF"}
        assert stored_picks(db, league, 1) == {1: "KC", 2: "SF"}

    def test_resubmit_replaces_picks(self, db, league, week1):
        submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        state = submit_picks(db, league.id, "alice", ["BUF", "KC"], now=NOW)

        assert state.picks == {1: "BUF", 2: "KC"}
        assert db.query(Pick).count() == 2

    def test_slot_two_required_in_two_pick_week(self, db, league, week1):
        with pytest.raises(ValidationError, match="Pick 2 is required"):
            submit_picks(db, league.id, "alice", ["KC"], now=NOW)

    def test_slot_one_required(self, db, league, week1):
        with pytest.raises(ValidationError, match="Pick 1 is required"):
            submit_picks(db, league.id, "alice", ["", "KC"], now=NOW)

    def test_slots_must_differ(self, db, league, week1):
        with pytest.raises(ValidationError, match="different teams"):
            submit_picks(db, league.id, "alice", ["KC", "KC"], now=NOW)

        assert stored_picks(db, league, 1) == {}

    def test_unknown_team(self, db, league, week1):
        with pytest.raises(ValidationError, match="Unknown team"):
            submit_picks(db, league.id, "alice", ["KC", "XYZ"], now=NOW)

    def test_locked_week_rejects_without_writes(self, db, league, week1):
        submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        with pytest.raises(PicksLockedError):
            submit_picks(db, league.id, "alice", ["BUF", "MIA"], now=LOCK + timedelta(hours=1))

        assert stored_picks(db, league, 1) == {1: "KC", 2: "SF"}

    def test_lock_is_inclusive(self, db, league, week1):
        with pytest.raises(PicksLockedError):
            submit_picks(db, league.id, "alice", ["KC", "SF"], now=LOCK)

        assert db.query(Pick).count() == 0

    def test_unconfigured_week(self, db, league):
        with pytest.raises(WeekNotConfiguredError):
            submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

    def test_non_member_rejected(self, db, league, week1):
        with pytest.raises(NotLeagueMemberError):
            submit_picks(db, league.id, "mallory", ["KC", "SF"], now=NOW)

    def test_week_zero_is_not_the_current_week(self, db, league, week1):
        with pytest.raises(ValidationError, match="Invalid week number"):
            submit_picks(db, league.id, "alice", ["KC", "SF"], week_number=0, now=NOW)

        assert stored_picks(db, league, 1) == {}


class TestSinglePickWeeks:
    def test_second_team_dropped(self, db, league):
        set_week(db, league, 17)
        configure_week(db, league, 17, LOCK)

        state = submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        assert state.picks == {1: "KC"}
        assert stored_picks(db, league, 17) == {1: "KC"}

    def test_stray_slot_two_removed(self, db, league):
        set_week(db, league, 17)
        configure_week(db, league, 17, LOCK)
        db.add(
            Pick(
                league_id=league.id,
                season_year=league.season_year,
                week_number=17,
                user_id="alice",
                slot=2,
                team_abbr="SF",
            )
        )
        db.commit()

        submit_picks(db, league.id, "alice", ["KC"], now=NOW)

        assert stored_picks(db, league, 17) == {1: "KC"}


class TestTeamReuse:
    def test_team_used_in_earlier_week_rejected(self, db, league, week1):
        configure_week(db, league, 2, LOCK + timedelta(days=7))
        submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        with pytest.raises(TeamAlreadyUsedError, match="week 1"):
            submit_picks(db, league.id, "alice", ["BUF", "KC"], week_number=2, now=NOW)

        assert stored_picks(db, league, 2) == {}

    def test_same_week_resubmit_allowed(self, db, league, week1):
        submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        state = submit_picks(db, league.id, "alice", ["SF", "KC"], now=NOW)

        assert state.picks == {1: "SF", 2: "KC"}

    def test_other_users_teams_do_not_count(self, db, league, week1):
        submit_picks(db, league.id, "bob", ["KC", "SF"], now=NOW)

        state = submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        assert state.picks == {1: "KC", 2: "SF"}


class TestByes:
    def test_bye_clears_week_picks(self, db, league, week1):
        submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        state = declare_bye(db, league.id, "alice", now=NOW)

        assert state.bye_this_week is True
        assert state.bye_used_this_season is True
        assert state.picks == {}
        assert stored_picks(db, league, 1) == {}
        assert stored_bye_weeks(db, league) == [1]

    def test_picks_clear_week_bye(self, db, league, week1):
        declare_bye(db, league.id, "alice", now=NOW)

        state = submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        assert state.bye_this_week is False
        assert state.bye_used_this_season is False
        assert stored_bye_weeks(db, league) == []

    def test_second_bye_in_another_week_rejected(self, db, league):
        configure_week(db, league, 3, LOCK)
        configure_week(db, league, 10, LOCK + timedelta(days=49))
        declare_bye(db, league.id, "alice", week_number=3, now=NOW)

        with pytest.raises(ByeAlreadyUsedError, match="week 3"):
            declare_bye(db, league.id, "alice", week_number=10, now=NOW)

        assert stored_bye_weeks(db, league) == [3]

    def test_repeat_bye_same_week_is_noop(self, db, league, week1):
        declare_bye(db, league.id, "alice", now=NOW)

        state = declare_bye(db, league.id, "alice", now=NOW)

        assert state.bye_this_week is True
        assert stored_bye_weeks(db, league) == [1]

    def test_no_bye_after_week_16(self, db, league):
        configure_week(db, league, 17, LOCK)

        with pytest.raises(ByeNotAllowedError):
            declare_bye(db, league.id, "alice", week_number=17, now=NOW)

    def test_bye_rejected_after_lock(self, db, league, week1):
        submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)

        with pytest.raises(PicksLockedError):
            declare_bye(db, league.id, "alice", now=LOCK)

        assert stored_bye_weeks(db, league) == []
        assert stored_picks(db, league, 1) == {1: "KC", 2: "SF"}


class TestPickState:
    def test_bye_toggle_blocked_once_used_elsewhere(self, db, league):
        configure_week(db, league, 3, LOCK)
        configure_week(db, league, 10, LOCK + timedelta(days=49))
        declare_bye(db, league.id, "alice", week_number=3, now=NOW)

        week10 = get_pick_state(db, league.id, "alice", week_number=10, now=NOW)
        week3 = get_pick_state(db, league.id, "alice", week_number=3, now=NOW)

        assert week10.bye_used_this_season is True
        assert week10.bye_this_week is False
        assert week10.can_declare_bye is False
        assert week3.can_declare_bye is True

    def test_locked_flag(self, db, league, week1):
        assert get_pick_state(db, league.id, "alice", now=NOW).locked is False
        assert get_pick_state(db, league.id, "alice", now=LOCK).locked is True

    def test_unconfigured_week_has_no_rules(self, db, league):
        state = get_pick_state(db, league.id, "alice", week_number=4, now=NOW)

        assert state.picks_required is None
        assert state.lock_time is None
        assert state.locked is False

    def test_available_teams_hide_used_and_other_slot(self, db, league, week1):
        configure_week(db, league, 2, LOCK + timedelta(days=7))
        submit_picks(db, league.id, "alice", ["KC", "SF"], now=NOW)
        submit_picks(db, league.id, "alice", ["BUF", "MIA"], week_number=2, now=NOW)

        state = get_pick_state(db, league.id, "alice", week_number=2, now=NOW)
        slot1 = state.available_teams(1)

        assert "BUF" in slot1
        assert "MIA" not in slot1
        assert "KC" not in slot1
        assert "SF" not in slot1
        assert len(slot1) == 32 - 3
