"""Tests for the Typer CLI, run against the test database."""

from contextlib import contextmanager

import pytest
from conftest import add_final_game
from typer.testing import CliRunner

from pickem.cli import league as league_cli
from pickem.cli import lifecycle as lifecycle_cli
from pickem.cli import main
from pickem.database.models import League

runner = CliRunner()


@pytest.fixture
def cli_db(db, monkeypatch):
    """Point the CLI's session context at the test session."""

    @contextmanager
    def test_session_context():
        yield db
        db.commit()

    monkeypatch.setattr(league_cli, "get_session_context", test_session_context)
    monkeypatch.setattr(lifecycle_cli, "get_session_context", test_session_context)
    monkeypatch.setattr(league_cli, "setup_logging", lambda: None)
    monkeypatch.setattr(lifecycle_cli, "setup_logging", lambda: None)
    return db


def test_create_league(cli_db):
    result = runner.invoke(main, ["league", "create", "Office Pool", "--season", "2025"])

    assert result.exit_code == 0
    assert "invite code" in result.output
    assert cli_db.query(League).one().name == "Office Pool"


def test_standings_table(cli_db, league):
    result = runner.invoke(main, ["league", "standings", league.id])

    assert result.exit_code == 0
    assert "Alice" in result.output
    assert "Bob" in result.output


def test_unknown_league_exits_with_error(cli_db):
    result = runner.invoke(main, ["league", "standings", "missing"])

    assert result.exit_code == 1
    assert "League not found" in result.output


def test_grade(cli_db, league):
    add_final_game(cli_db, league, 1, "101", winner="KC", loser="DAL")

    result = runner.invoke(main, ["lifecycle", "grade", "--league", league.id])

    assert result.exit_code == 0
    assert "all final" in result.output
