"""Posts command implementation."""

from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer

from ..db import StoreError
from ..log import configure_logging
from ..parsing import parse_feed
from .common import ConfigOption, console, load_config_or_exit, open_store, print_posts


def posts_command(
    config_path: Path = ConfigOption,
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Maximum post age in days", min=1),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum posts to show", min=1),
) -> None:
    """Show stored posts, newest first."""
    config = load_config_or_exit(config_path)
    settings = config.config
    configure_logging(settings.logging)

    try:
        with open_store(config) as store:
            posts = store.query(
                timedelta(days=days or settings.days),
                limit or settings.limit,
            )
    except StoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    print_posts(posts, settings.date_format)


def parse_command(
    path: Path = typer.Argument(..., help="Feed document to parse", exists=True, dir_okay=False),
    name: str = typer.Option("local", "--name", help="Feed name to attribute posts to"),
    date_format: str = typer.Option("%Y-%m-%d %H:%M:%S", "--date-format", help="strftime format for dates"),
) -> None:
    """Parse a local RSS or Atom file and print its posts."""
    result = parse_feed(path.read_bytes(), name)

    console.print(
        f"Format: [magenta]{result.dialect.value}[/magenta]  "
        f"Encoding: {result.encoding or '-'}  "
        f"Title: {result.feed_title or '-'}"
    )
    print_posts(result.posts, date_format, title=result.feed_title)

    if result.dropped:
        console.print(f"[yellow]{result.dropped} entries dropped (missing id or date)[/yellow]")
    if not result.success:
        console.print(f"[red]{result.error or 'Unrecognized feed format'}[/red]")
        raise typer.Exit(1)
