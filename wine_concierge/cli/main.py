"""Wine Concierge CLI using Typer."""

import logging
import os
from pathlib import Path

import typer
from dotenv import load_dotenv

from wine_concierge.cli.enrich import enrich_app

# Load .env file from current directory or project root
_env_paths = [
    Path.cwd() / ".env",
    Path(__file__).parent.parent.parent / ".env",
]
for _env_path in _env_paths:
    if _env_path.exists():
        load_dotenv(_env_path)
        break

app = typer.Typer(
    name="wine-concierge",
    help="Wine Concierge - enrich wine lists with guide ratings and missing metadata",
    add_completion=False,
)
app.add_typer(enrich_app, name="enrich")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_ai_config() -> None:
    """Check and display AI configuration status."""
    anthropic_key = os.environ.get("ANTHROPIC_API_KEY", "")
    openai_key = os.environ.get("OPENAI_API_KEY", "")
    provider = os.environ.get("AI_PROVIDER", "anthropic").lower()

    if provider == "openai" and openai_key:
        typer.echo("  AI Provider: OpenAI (configured)")
    elif provider == "anthropic" and anthropic_key:
        typer.echo("  AI Provider: Anthropic (configured)")
    else:
        typer.echo(f"  AI Provider: {provider} (API key missing, enrichment jobs will fail)")
        typer.echo("  Tip: Set ANTHROPIC_API_KEY or OPENAI_API_KEY in .env file")


@app.command()
def run(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(
        False, "--reload", "-r", help="Enable auto-reload for development"
    ),
) -> None:
    """Start the Wine Concierge API server."""
    import uvicorn

    typer.echo(f"Starting Wine Concierge on http://{host}:{port}")
    _check_ai_config()
    typer.echo("Press Ctrl+C to stop the server")
    typer.echo("")

    uvicorn.run(
        "wine_concierge.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def init_db() -> None:
    """Initialize the database (create tables)."""
    from wine_concierge.db.engine import init_db as db_init

    typer.echo("Initializing database...")
    db_init()
    typer.echo("Database initialized successfully!")


@app.command()
def migrate() -> None:
    """Apply Alembic migrations up to the latest revision."""
    from wine_concierge.db.engine import run_migrations

    typer.echo("Running migrations...")
    try:
        run_migrations()
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("Database is up to date.")


@app.command()
def version() -> None:
    """Show the Wine Concierge version."""
    typer.echo("Wine Concierge v0.1.0")


@app.command()
def check_config() -> None:
    """Check the current configuration status."""
    typer.echo("Wine Concierge Configuration")
    typer.echo("=" * 40)

    # Check .env file
    env_found = False
    for _env_path in _env_paths:
        if _env_path.exists():
            typer.echo(f"  .env file: {_env_path}")
            env_found = True
            break
    if not env_found:
        typer.echo("  .env file: Not found")

    # Check AI config
    _check_ai_config()

    # Check database
    from wine_concierge.db.engine import get_database_url

    typer.echo(f"  Database: {get_database_url()}")

    # Check enrichment settings
    from wine_concierge.enrichment.config import EnrichmentConfig, get_default_guides

    try:
        config = EnrichmentConfig.from_env()
    except ValueError as e:
        typer.echo(f"  Enrichment: invalid configuration ({e})", err=True)
        raise typer.Exit(1)

    guides = get_default_guides()
    typer.echo(f"  Min rating confidence: {config.min_rating_confidence}")
    typer.echo(f"  Max attempts: {config.max_attempts}")
    typer.echo(f"  Retry base delay: {config.retry_base_delay_ms} ms")
    typer.echo(f"  Tasting notes language: {config.notes_language}")
    typer.echo(f"  Rating guides: {len(guides)} ({guides.config_path or 'built-in list'})")


if __name__ == "__main__":
    app()
