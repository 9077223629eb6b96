"""Run command implementation."""

from pathlib import Path
from typing import Optional

import typer

from ..db import StoreError
from ..log import configure_logging
from ..pipeline import PipelineOrchestrator
from .common import ConfigOption, console, load_config_or_exit, open_store, print_posts


def run_command(
    config_path: Path = ConfigOption,
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-d",
        help="Maximum post age in days. Default: from config",
        min=1,
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Maximum posts to select. Default: from config",
        min=1,
    ),
    syslog: bool = typer.Option(False, "--syslog", "-l", help="Log to syslog instead of the console"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Keep posts in memory, do not touch the database"),
) -> None:
    """Fetch all feeds and store their posts."""
    config = load_config_or_exit(config_path)
    settings = config.config

    log_config = settings.logging
    if syslog:
        log_config = log_config.model_copy(update={"destination": "syslog"})
    configure_logging(log_config)

    try:
        feeds = config.get_feeds()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not feeds:
        console.print("[yellow]No feeds configured. Add one with 'feedplanet feeds add'.[/yellow]")
        raise typer.Exit(1)

    try:
        with open_store(config, memory=dry_run) as store:
            orchestrator = PipelineOrchestrator(settings, feeds, store)
            report = orchestrator.run(days=days, limit=limit)
    except StoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Ingestion interrupted by user[/yellow]")
        raise typer.Exit(1)

    print_posts(report.posts, settings.date_format, title="Recent posts")

    if not report.success:
        raise typer.Exit(1)
