"""Database package initialization."""

from .connection import SessionLocal, atomic, engine, get_db, get_session
from .models import Base, Bye, Game, League, LeagueMember, Pick, PickResult, WeekConfig

__all__ = [
    "Base",
    "Bye",
    "Game",
    "League",
    "LeagueMember",
    "Pick",
    "PickResult",
    "SessionLocal",
    "WeekConfig",
    "atomic",
    "engine",
    "get_db",
    "get_session",
]
