"""Data collection package."""

from .espn_collector import EspnScoreboardCollector, parse_espn_scoreboard
from .scoreboard import ProviderGame, ScoreboardProvider

__all__ = ["EspnScoreboardCollector", "ProviderGame", "ScoreboardProvider", "parse_espn_scoreboard"]
