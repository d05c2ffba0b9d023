"""CLI interface for the pick'em league service."""

import typer
import uvicorn

from ..config.settings import settings
from .league import app as league_app
from .lifecycle import app as lifecycle_app

main = typer.Typer(help="Pick'em League CLI")

# Add sub-applications
main.add_typer(league_app, name="league", help="League setup and standings commands")
main.add_typer(lifecycle_app, name="lifecycle", help="Week lifecycle commands")


@main.command()
def serve(
    host: str = typer.Option(settings.api_host, help="Bind address"),
    port: int = typer.Option(settings.api_port, help="Bind port"),
    reload: bool = typer.Option(settings.api_reload, help="Reload on code changes"),
):
    """Run the API server with uvicorn."""
    uvicorn.run("pickem.api.main:app", host=host, port=port, reload=reload)
