"""Application settings and configuration management.

This file implements a centralized configuration system using Pydantic Settings.
It handles environment variables, default values, and configuration validation
for the entire pick'em league service.

Key Benefits:
- Type safety: All settings have defined types with validation
- Environment integration: Automatically loads from .env files
- Documentation: Clear descriptions of what each setting controls
- Flexibility: Easy to override for different environments

For beginners:

Pydantic Settings: A Python library that automatically validates configuration
and loads values from environment variables, .env files, and defaults.

Environment Variables: System variables that configure applications without
changing code. Example: CRON_SECRET=change-me

Secrets: The cron secret authenticates the external scheduler that triggers
game syncs, grading and week advancement. It is never exposed by the API.
"""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Configuration Sources (in priority order):
    1. Environment variables (highest priority)
    2. .env file values
    3. Default values defined here (lowest priority)

    Example Usage:
    - In code: `settings.database_url`
    - Environment variable: `DATABASE_URL=postgresql://user:pass@db/pickem`
    - .env file: `cron_secret=local-dev-secret`
    """

    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env file in project root
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow CRON_SECRET or cron_secret
        extra="ignore",
    )

    # API Configuration - FastAPI web server settings
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_reload: bool = False

    # Database Configuration - SQLAlchemy connection settings
    database_url: str = "sqlite:///data/database/pickem.db"
    database_pool_size: int = 5
    database_echo: bool = False  # Log all SQL queries (True for debugging)

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Path = Path("data/logs/pickem.log")

    # Scheduler trigger authentication
    cron_secret: str | None = None  # Shared secret sent as x-cron-secret
    trusted_cron_header: str = "x-vercel-cron"  # Platform cron header, value must be "1"

    # Scoreboard provider (ESPN public scoreboard)
    scoreboard_url: str = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"
    provider_timeout: float = 15.0  # Seconds before a fetch counts as unavailable
    default_provider: str = "espn"
    default_season_type: int = 2  # 2 = regular season, 3 = postseason

    # Games table scoping: "league" keys games per league, "global" shares one schedule.
    # Pick one per deployment; the two modes must never be mixed in one database.
    games_scope: Literal["league", "global"] = "league"

    # League calendar rules
    final_week: int = 18  # Last regular-season week; current_week never passes it
    single_pick_from_week: int = 17  # Weeks from here on require one pick instead of two
    last_bye_week: int = 16  # Byes are allowed in weeks 1..last_bye_week
    fallback_lock_hours: int = 24  # Lock offset when a week is synced with no games

    @property
    def league_scoped_games(self) -> bool:
        return self.games_scope == "league"


# Global settings instance - singleton pattern for application-wide configuration
# Example: from pickem.config import settings; print(settings.database_url)
settings = Settings()
