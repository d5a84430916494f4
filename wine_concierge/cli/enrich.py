"""
Enrichment CLI Commands
=======================

CLI commands for running, queueing and inspecting wine enrichment.
"""

from __future__ import annotations

import asyncio
from typing import Any

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from wine_concierge.core.enums import EnrichmentOutcome
from wine_concierge.db.engine import get_session
from wine_concierge.enrichment.config import get_default_guides
from wine_concierge.enrichment.jobs import trigger_many
from wine_concierge.enrichment.service import get_enrichment_service

console = Console()
enrich_app = typer.Typer(help="Wine enrichment commands")

_STATUS_STYLES = {
    "completed": "green",
    "partial": "yellow",
    "failed": "red",
    "in_progress": "yellow",
    "processing": "blue",
}


@enrich_app.command("run")
def run_enrichment(
    wine_id: str = typer.Argument(..., help="ID of the wine to enrich"),
    refresh: bool = typer.Option(
        False, "--refresh", help="Delete existing ratings before enriching"
    ),
) -> None:
    """
    Enrich a wine synchronously and show the outcome.

    Examples:
        wine-concierge enrich run 3f2c...
        wine-concierge enrich run 3f2c... --refresh
    """
    with get_session() as session:
        service = get_enrichment_service(session)
        wine = service.get_wine(wine_id)
        if wine is None:
            rprint(f"[red]Error:[/red] Wine '{wine_id}' not found")
            raise typer.Exit(1)

        rprint(f"\n[bold]Enriching:[/bold] {wine.name}" + (f" {wine.year}" if wine.year else ""))

        with console.status("[bold blue]Asking the sommelier...[/bold blue]"):
            result = service.refresh(wine) if refresh else service.enrich(wine)

        current = service.get_wine_with_ratings(wine.id)
        ratings = current.ratings if current else []

    _display_result(result.to_dict())

    if ratings:
        table = Table(title="Ratings")
        table.add_column("Guide")
        table.add_column("Score")
        table.add_column("Confidence", justify="right")
        table.add_column("Year", justify="right")
        for r in ratings:
            table.add_row(r.guide_name, r.score, f"{r.confidence:.2f}", str(r.year or "-"))
        console.print(table)

    if result.status in (EnrichmentOutcome.FAILED, EnrichmentOutcome.IN_PROGRESS):
        raise typer.Exit(1)


@enrich_app.command("status")
def enrichment_status(
    wine_id: str = typer.Argument(..., help="ID of the wine"),
) -> None:
    """Show the most recent enrichment job for a wine."""
    with get_session() as session:
        service = get_enrichment_service(session)
        job = service.get_status(wine_id)

    if job is None:
        rprint(f"[yellow]No enrichment jobs found for wine '{wine_id}'[/yellow]")
        raise typer.Exit(1)

    style = _STATUS_STYLES.get(job.status.value, "white")
    rprint(f"\n[bold]Job:[/bold] {job.id}")
    rprint(f"  Status: [{style}]{job.status.value}[/{style}]")
    rprint(f"  Created: {job.created_at.isoformat()}")
    if job.completed_at:
        rprint(f"  Completed: {job.completed_at.isoformat()}")
    if job.error_message:
        rprint(f"  Error: [red]{job.error_message}[/red]")


@enrich_app.command("trigger")
def trigger_enrichment(
    wine_ids: list[str] = typer.Argument(..., help="IDs of the wines to enrich"),
    refresh: bool = typer.Option(
        False, "--refresh", help="Delete existing ratings before enriching"
    ),
) -> None:
    """
    Queue background enrichment for one or more wines.

    Requires Redis and a running worker (wine-concierge enrich worker).
    """
    enqueued = asyncio.run(trigger_many(wine_ids, refresh=refresh))
    rprint(f"Enqueued [bold]{enqueued}[/bold] of {len(wine_ids)} wine(s)")
    if enqueued < len(wine_ids):
        rprint("[dim]Wines already queued are skipped; check logs for connection errors.[/dim]")


@enrich_app.command("worker")
def start_worker(
    burst: bool = typer.Option(False, "--burst", help="Run in burst mode (exit when queue empty)"),
) -> None:
    """
    Start the enrichment worker.

    The worker processes queued enrichment jobs from Redis.
    """
    rprint("[bold]Starting enrichment worker...[/bold]")
    rprint("Press Ctrl+C to stop\n")

    try:
        from arq import run_worker

        from wine_concierge.enrichment.jobs import WorkerSettings

        run_worker(WorkerSettings, burst=burst)
    except Exception as e:
        rprint(f"[red]Error:[/red] Worker failed: {e}")
        rprint("\nMake sure Redis is reachable at REDIS_HOST:REDIS_PORT (default localhost:6379)")
        raise typer.Exit(1)


@enrich_app.command("guides")
def list_guides() -> None:
    """List the rating guides whose scores may be attached to wines."""
    guides = get_default_guides()

    table = Table(title=f"Rating Guides ({guides.config_path or 'built-in'})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Rating System")
    for guide in guides.list_guides():
        table.add_row(guide.id, guide.name, guide.rating_system)
    console.print(table)


def _display_result(result: dict[str, Any]) -> None:
    """Display an enrichment result."""
    status = result["status"]
    style = _STATUS_STYLES.get(status, "white")

    rprint(f"\n[bold]Status:[/bold] [{style}]{status}[/{style}]")
    if result.get("job_id"):
        rprint(f"  Job ID: {result['job_id']}")
    rprint(f"  Ratings saved: {result['ratings_count']}")
    if result.get("error_message"):
        rprint(f"  Error: [red]{result['error_message']}[/red]")
    for err in result.get("write_errors", []):
        rprint(f"  [yellow]Dropped write:[/yellow] {err}")
