"""Scoreboard provider interface and normalized game records.

Every schedule and score in the system comes from an external scoreboard
provider. This module is the narrow seam between the provider's payload shape
and the rest of the application: a provider turns a raw payload into a list of
ProviderGame records, and nothing outside the provider ever looks at the raw
payload.

Adding another provider means writing one subclass of ScoreboardProvider.
Game sync, week sync and advancement are unaffected.

Normalization Rules:
- Status: provider state "in" -> inprogress, "post" -> final, anything else -> scheduled
- Winner: only when the provider marks the game completed, both scores are
  present and the scores differ. A tie has no winner.
- Teams: a matchup without both team abbreviations is skipped
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...database.models import GAME_FINAL, GAME_IN_PROGRESS, GAME_SCHEDULED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderGame:
    """One matchup as reported by the scoreboard provider, already normalized."""

    game_id: str
    home_abbr: str
    away_abbr: str
    kickoff_time: datetime
    status: str  # scheduled | inprogress | final
    home_score: int | None = None
    away_score: int | None = None
    winner_abbr: str | None = None


def map_status(state: str | None) -> str:
    """Map a provider competition state onto the three game statuses."""
    if state == "in":
        return GAME_IN_PROGRESS
    if state == "post":
        return GAME_FINAL
    return GAME_SCHEDULED


def compute_winner(
    home_abbr: str,
    away_abbr: str,
    home_score: int | None,
    away_score: int | None,
    completed: bool,
) -> str | None:
    """Return the winning team abbreviation, or None for unfinished games and ties."""
    if not completed or home_score is None or away_score is None:
        return None
    if home_score > away_score:
        return home_abbr
    if away_score > home_score:
        return away_abbr
    return None


class ScoreboardProvider(ABC):
    """Read-only source of NFL schedules and scores.

    Subclasses implement fetch_scoreboard() (network access) and parse()
    (payload -> ProviderGame list). Both the week-advance gate and game sync
    go through this interface.
    """

    name: str = "provider"

    @abstractmethod
    def fetch_scoreboard(self, season_year: int, week_number: int, season_type: int) -> dict:
        """Fetch the raw scoreboard payload for one week.

        Raises:
            ProviderUnavailableError: Non-2xx response, transport error or timeout
        """

    @abstractmethod
    def parse(self, payload: dict) -> list[ProviderGame]:
        """Turn a raw payload into normalized games, skipping unusable entries."""

    @staticmethod
    def count_events(payload: dict) -> int:
        return len(payload.get("events") or [])

    def fetch_games(
        self, season_year: int, week_number: int, season_type: int
    ) -> list[ProviderGame]:
        payload = self.fetch_scoreboard(season_year, week_number, season_type)
        games = self.parse(payload)
        logger.debug(
            f"{self.name}: {len(games)} games parsed for {season_year} week {week_number}"
        )
        return games

    def has_games(self, season_year: int, week_number: int, season_type: int) -> bool:
        """True when the provider lists at least one event for the week."""
        payload = self.fetch_scoreboard(season_year, week_number, season_type)
        return self.count_events(payload) > 0
