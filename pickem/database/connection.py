"""Database connection and session management using SQLAlchemy.

This module implements the core database connectivity patterns for the application.
It handles:
1. Database engine creation with connection pooling
2. Session factory configuration for ORM operations
3. Multiple session management patterns for different use cases
4. Unit-of-work transactions for the multi-step lifecycle operations

Key Concepts for Beginners:

Database Engine: The core interface to the database. Think of it as the
"connection factory" that manages the actual database connections.

Session: A workspace for ORM operations. All database operations (queries,
inserts, updates) happen within a session context.

Transactions: A group of writes that either all succeed or all fail. Declaring
a bye and deleting that week's picks is one transaction, so a failure halfway
never leaves a user with both a bye and picks.

Session Patterns Provided:
1. get_session(): Manual session with automatic commit/rollback
2. get_session_context(): Context manager for with statements
3. get_db(): FastAPI dependency injection pattern
4. atomic(session): Commit-or-rollback block on an existing session
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..config.settings import settings


def _engine_options(database_url: str) -> dict:
    options = {"echo": settings.database_echo, "pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # SQLite connections are shared with FastAPI's worker threads
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.database_pool_size
    return options


# Create the database engine - created once at module load time and reused
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Create session factory - a class that produces database sessions
SessionLocal = sessionmaker(
    autocommit=False,  # Require explicit session.commit() for transactions
    autoflush=False,  # Don't automatically flush changes before queries
    bind=engine,
)


def get_session() -> Generator[Session, None, None]:
    """Get database session with automatic commit/rollback and cleanup.

    Usage:
        for session in get_session():
            league = session.query(League).first()
            # Automatically committed and closed

    Error Handling:
    If any exception occurs, the transaction is rolled back and the
    exception is re-raised. This ensures database consistency.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
    """Context manager wrapper for database sessions.

    Usage:
        with get_session_context() as session:
            session.add(new_league)
            # Automatically committed and closed when exiting 'with' block
    """
    yield from get_session()


@contextmanager
def atomic(session: Session) -> Generator[Session, None, None]:
    """Run a block of writes as one transaction on an existing session.

    Everything written inside the block is committed together when the block
    exits normally. Any exception rolls the whole block back and is re-raised,
    so callers see the original error and the database sees no partial write.

    Usage:
        with atomic(db):
            db.add(bye)
            db.query(Pick).filter(...).delete()
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions.

    Unlike get_session(), it does NOT commit automatically: the lifecycle
    operations control their own transactions with atomic(). It only ensures
    the session is closed after the request completes.

    Usage in FastAPI routes:
        @router.get("/leagues/{league_id}")
        def get_league(league_id: str, db: Session = Depends(get_db)):
            ...
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
