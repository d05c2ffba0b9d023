"""
Main FastAPI application for the pick'em league service.

This module creates the FastAPI application that serves members (leagues,
picks, standings) and the external scheduler (game sync, week sync, grading
and week advancement).

Key FastAPI Features Used:
- Automatic API documentation (OpenAPI/Swagger)
- Data validation with Pydantic models
- Dependency injection for database sessions, the caller's identity and the
  scoreboard provider

The API provides endpoints for:
- Leagues: create, join, standings, week views, matchups
- Picks: pick state, pick submission, byes
- Lifecycle: scheduler-triggered sync, grading and advancement
- System health and configuration
"""

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config.settings import settings
from ..database.connection import get_db
from ..database.models import League
from .routers import leagues, lifecycle, picks

logger = logging.getLogger(__name__)

# Create the main FastAPI application instance
app = FastAPI(
    title="Pick'em League API",
    description="NFL pick'em league: weekly picks, grading and week lifecycle",
    version="0.1.0",
)

# Configure CORS (Cross-Origin Resource Sharing) middleware
# The web client is served from a different origin than the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure restrictively for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """
    Root endpoint - basic API information.

    Returns:
        dict: Basic API information including version and documentation links
    """
    return {
        "message": "Pick'em League API",
        "version": "0.1.0",
        "docs": f"http://{settings.api_host}:{settings.api_port}/docs",
    }


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for system monitoring.

    Confirms the database answers a trivial query and reports one league as a
    sanity check. A database failure returns HTTP 500 with ok=false so load
    balancers and uptime monitors see the outage.

    Returns:
        dict: ok flag and a sample league (or None on an empty database)
    """
    try:
        db.execute(text("SELECT 1"))
        league = db.query(League.id, League.name).first()
    except SQLAlchemyError as e:
        logger.exception("Health check failed")
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})

    return {
        "ok": True,
        "league": {"id": league.id, "name": league.name} if league else None,
    }


@app.get("/api/config")
async def get_config():
    """
    Get current league rules and provider configuration (non-sensitive values only).

    SECURITY NOTE: The cron secret and database URL are never included.

    Returns:
        dict: Public configuration settings
    """
    return {
        "final_week": settings.final_week,
        "single_pick_from_week": settings.single_pick_from_week,
        "last_bye_week": settings.last_bye_week,
        "games_scope": settings.games_scope,
        "default_provider": settings.default_provider,
        "default_season_type": settings.default_season_type,
    }


# Register API routers - each router groups related endpoints under a prefix
app.include_router(leagues.router, prefix="/api/leagues", tags=["leagues"])
app.include_router(picks.router, prefix="/api/picks", tags=["picks"])
app.include_router(lifecycle.router, prefix="/api/lifecycle", tags=["lifecycle"])
