"""CLI interface for GitHub Metrics Sync."""

import json
import sys
from typing import Optional

import click
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from shared.cli import create_table, handle_errors, info, print_table, success, warning
from shared.logger import setup_logger

from .config import Settings
from .job import SyncResult
from .server import SYNC_PATH, build_job, create_app
from .store import MetricsRecord, MetricsStore

console = Console()


def display_result(result: SyncResult) -> None:
    """Display the outcome of a sync run."""
    console.print(Panel(f"[bold cyan]{result.username}[/bold cyan]", title="GitHub Metrics Sync"))
    console.print(f"  📝 Commits:      [bold]{result.total_commits:,}[/bold]")
    console.print(f"  📦 Repositories: {result.total_repos:,}")

    if result.failures:
        warning(f"\n{len(result.failures)} repositories were skipped:")

        table = create_table(title=None)
        table.add_column("Repository", style="bold")
        table.add_column("Error", style="dim", no_wrap=False)
        for outcome in result.failures:
            table.add_row(outcome.repository.full_name, outcome.error or "")
        print_table(table)

    console.print()


def display_record(record: Optional[MetricsRecord]) -> None:
    """Display the stored metrics row."""
    if record is None:
        warning("No GitHub metrics available.")
        return

    table = create_table(title="Stored GitHub Metrics")
    table.add_column("Metric", style="bold yellow")
    table.add_column("Value", justify="right", style="cyan")
    table.add_row("Commits", f"{record.commits:,}")
    table.add_row("Repositories", f"{record.repos:,}")
    print_table(table)


def load_settings(verbose: bool, **overrides) -> Settings:
    """Settings from the environment, CLI flags applied on top; sets up logging."""
    settings = Settings.from_env().with_overrides(**overrides)
    setup_logger("metrics_sync", level="DEBUG" if verbose else settings.log_level)
    return settings


@click.group()
def main():
    """
    GitHub Metrics Sync - cache your commit and repository counts.

    Examples:

        \b
        # Create the table and seed row
        gh-metrics init-db

        \b
        # Run the sync once
        gh-metrics sync

        \b
        # Serve the trigger endpoint and public page
        gh-metrics serve --port 8000
    """


@main.command()
@click.option("--token", help="GitHub personal access token (or set GITHUB_TOKEN env var)")
@click.option("--database-url", help="Database URL (or set DATABASE_URL env var)")
@click.option("--delay", type=float, help="Seconds to wait before each API request")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["rich", "json"], case_sensitive=False),
    default="rich",
    help="Output format",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def sync(
    token: Optional[str],
    database_url: Optional[str],
    delay: Optional[float],
    output: str,
    verbose: bool,
):
    """Run the sync job once and store the totals."""
    settings = load_settings(
        verbose, github_token=token, database_url=database_url, request_delay=delay
    )
    store = MetricsStore(settings.require_database_url())
    job = build_job(settings, store)

    try:
        if output == "json":
            result = job.run()
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
            ) as progress:
                task = progress.add_task("Syncing GitHub metrics...", total=None)
                result = job.run()
                progress.update(task, completed=True)
    finally:
        job.client.close()

    if output == "json":
        payload = result.to_payload()
        payload["failedRepos"] = [o.repository.full_name for o in result.failures]
        print(json.dumps(payload, indent=2))
        sys.exit(0)

    display_result(result)
    success("Sync completed!")


@main.command()
@click.option("--database-url", help="Database URL (or set DATABASE_URL env var)")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["rich", "json"], case_sensitive=False),
    default="rich",
    help="Output format",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def show(database_url: Optional[str], output: str, verbose: bool):
    """Show the stored metrics."""
    settings = load_settings(verbose, database_url=database_url)
    record = MetricsStore(settings.require_database_url()).read_metrics()

    if output == "json":
        print(json.dumps(record.to_dict() if record else None, indent=2))
        return

    display_record(record)


@main.command("init-db")
@click.option("--database-url", help="Database URL (or set DATABASE_URL env var)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def init_db(database_url: Optional[str], verbose: bool):
    """Create the metrics table and seed its single row."""
    settings = load_settings(verbose, database_url=database_url)
    record = MetricsStore(settings.require_database_url()).init_schema()
    success(f"Metrics table ready (commits={record.commits}, repos={record.repos})")


@main.command()
@click.option("--port", "-p", type=int, default=8000, show_default=True, help="Port to run server on")
@click.option("--host", default="0.0.0.0", show_default=True, help="Host to bind to")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def serve(port: int, host: str, verbose: bool):
    """Serve the sync trigger endpoint and the public metrics page."""
    settings = load_settings(verbose)

    if not settings.cron_secret:
        warning("CRON_SECRET is not set: every sync trigger will be rejected")

    app = create_app(settings)

    info(f"Starting GitHub Metrics Sync on http://{host}:{port}")
    info("\nEndpoints:")
    info(f"  GET http://localhost:{port}/                    - Metrics page")
    info(f"  GET http://localhost:{port}/api/github-metrics  - Metrics as JSON")
    info(f"  GET http://localhost:{port}{SYNC_PATH} - Run sync (Bearer CRON_SECRET)")

    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info" if verbose else "warning",
        )
    except KeyboardInterrupt:
        info("\nShutting down...")

    success("GitHub Metrics Sync stopped")


if __name__ == "__main__":
    main()
