"""Database initialization script for the pick'em schema.

This module provides utilities for setting up and managing the database schema.
It's typically used during:
1. Initial application setup
2. Development environment creation
3. Testing database preparation

Database Lifecycle Operations:
- create_database(): Initialize schema from SQLAlchemy models
- drop_database(): Remove all tables (destructive operation)
- reset_database(): Complete refresh (drop + create)

Idempotent Operations: create_all() safely handles existing tables,
while drop_all() safely handles non-existing tables.
"""

import logging
from pathlib import Path

from sqlalchemy.engine import Engine

from .connection import engine as default_engine
from .models import Base

logger = logging.getLogger(__name__)


def create_database(engine: Engine | None = None):
    """Create database schema and all tables from SQLAlchemy models.

    For SQLite the database directory is created first so the file can be
    opened. Safe to run multiple times.
    """
    bind = engine or default_engine
    try:
        database = bind.url.database
        if bind.url.get_backend_name() == "sqlite" and database not in (None, "", ":memory:"):
            Path(database).parent.mkdir(parents=True, exist_ok=True)

        Base.metadata.create_all(bind=bind)

        logger.info("Database tables created successfully")

    except Exception:
        logger.exception("Failed to create database")
        raise


def drop_database(engine: Engine | None = None):
    """Drop all database tables - DESTRUCTIVE OPERATION.

    WARNING: This operation cannot be undone. All leagues, picks and results
    will be lost.
    """
    try:
        Base.metadata.drop_all(bind=engine or default_engine)

        logger.info("Database tables dropped successfully")

    except Exception:
        logger.exception("Failed to drop database")
        raise


def reset_database(engine: Engine | None = None):
    """Reset database by dropping and recreating all tables."""
    logger.info("Resetting database...")

    drop_database(engine)
    create_database(engine)

    logger.info("Database reset complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    create_database()
