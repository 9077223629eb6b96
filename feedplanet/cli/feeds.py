"""Feeds management commands."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..config import FeedConfig, load_feeds, save_feeds
from ..ingestion import FeedFetcher, print_fetch_summary
from ..log import configure_logging
from ..parsing import parse_feed
from .common import ConfigOption, console, load_config_or_exit

feeds_app = typer.Typer(help="Manage feeds")


def _feeds_path(config_path: Path) -> Path:
    return config_path.parent / "feeds.yaml"


@feeds_app.command("list")
def feeds_list(config_path: Path = ConfigOption) -> None:
    """List all configured feeds."""
    try:
        feeds = load_feeds(_feeds_path(config_path))
    except FileNotFoundError:
        console.print("[red]Feeds file not found. Run 'feedplanet init' first.[/red]")
        raise typer.Exit(1)

    if not feeds:
        console.print("[yellow]No feeds configured.[/yellow]")
        return

    table = Table(title="Configured Feeds")
    table.add_column("Name", style="cyan")
    table.add_column("Enabled", style="yellow")
    table.add_column("URL", style="blue")
    table.add_column("Home", style="magenta")

    for feed in feeds:
        table.add_row(
            feed.name,
            "yes" if feed.enabled else "no",
            feed.url,
            feed.home,
        )

    console.print(table)


@feeds_app.command("add")
def feeds_add(
    name: str = typer.Option(..., "--name", "-n", help="Feed name"),
    url: str = typer.Option(..., "--url", "-u", help="RSS or Atom feed URL"),
    home: str = typer.Option("", "--home", help="Link to the feed's site"),
    config_path: Path = ConfigOption,
) -> None:
    """Add a new feed."""
    feeds_path = _feeds_path(config_path)

    try:
        feeds = load_feeds(feeds_path)
    except FileNotFoundError:
        feeds = []

    if any(f.name == name or f.url == url for f in feeds):
        console.print(f"[red]Feed '{name}' or URL already exists.[/red]")
        raise typer.Exit(1)

    feeds.append(FeedConfig(name=name, url=url, home=home, enabled=True))
    save_feeds(feeds, feeds_path)

    console.print(f"[green]Added feed: {name}[/green]")


@feeds_app.command("remove")
def feeds_remove(
    name: str = typer.Argument(..., help="Feed name to remove"),
    config_path: Path = ConfigOption,
) -> None:
    """Remove a feed."""
    feeds_path = _feeds_path(config_path)

    try:
        feeds = load_feeds(feeds_path)
    except FileNotFoundError:
        console.print("[red]Feeds file not found.[/red]")
        raise typer.Exit(1)

    original_count = len(feeds)
    feeds = [f for f in feeds if f.name != name]

    if len(feeds) == original_count:
        console.print(f"[red]Feed '{name}' not found.[/red]")
        raise typer.Exit(1)

    save_feeds(feeds, feeds_path)
    console.print(f"[green]Removed feed: {name}[/green]")


@feeds_app.command("test")
def feeds_test(
    name: Optional[str] = typer.Argument(None, help="Feed name to test (or test all)"),
    config_path: Path = ConfigOption,
) -> None:
    """Fetch and parse feeds without storing anything."""
    config = load_config_or_exit(config_path)
    configure_logging(config.config.logging)

    try:
        feeds = config.get_feeds()
    except FileNotFoundError:
        console.print("[red]Feeds file not found.[/red]")
        raise typer.Exit(1)

    if name:
        feeds = [f for f in feeds if f.name == name]
        if not feeds:
            console.print(f"[red]Feed '{name}' not found.[/red]")
            raise typer.Exit(1)

    for feed in feeds:
        if not feed.enabled:
            console.print(f"[yellow]{feed.name}: Disabled[/yellow]")

    fetcher = FeedFetcher.from_config(config.config.fetch)
    results = fetcher.fetch_feeds_sync(feeds)

    for fetched in results:
        if not fetched.success:
            continue
        parsed = parse_feed(fetched.content, fetched.feed_name)
        if parsed.success:
            console.print(
                f"[green]{fetched.feed_name}: {parsed.dialect.value}, "
                f"{len(parsed.posts)} posts, {parsed.dropped} dropped[/green]"
            )
        else:
            console.print(f"[red]{fetched.feed_name}: {parsed.error or 'Unrecognized feed format'}[/red]")

    print_fetch_summary(results)
