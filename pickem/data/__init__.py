"""Data package initialization."""

from .collection.espn_collector import EspnScoreboardCollector

__all__ = ["EspnScoreboardCollector"]
