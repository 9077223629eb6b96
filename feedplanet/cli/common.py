"""Helpers shared by CLI commands."""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..config.loader import DEFAULT_CONFIG_DIR
from ..db import (
    InMemoryPostStore,
    PostgresPostStore,
    PostStore,
    StoreError,
    close_connection_pool,
    get_connection,
    validate_connection,
)
from ..models import Post
from ..parsing import format_local

console = Console()

DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"

ConfigOption = typer.Option(
    DEFAULT_CONFIG_PATH,
    "--config",
    "-c",
    envvar="FEEDPLANET_CONFIG",
    help="Path to config.yaml (feeds.yaml is read from the same directory)",
)


def load_config_or_exit(config_path: Path) -> Config:
    """Load configuration, turning config errors into exit code 1."""
    config = Config(config_path)
    try:
        config.config
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config_path}. Run 'feedplanet init' first.[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return config


@contextmanager
def open_store(config: Config, memory: bool = False) -> Generator[PostStore, None, None]:
    """Yield the configured post store."""
    if memory or config.config.store.backend == "memory":
        yield InMemoryPostStore()
        return

    db_config = config.get_db_config()
    if not validate_connection(db_config):
        raise StoreError("Database connection failed")
    try:
        with get_connection(db_config) as conn:
            yield PostgresPostStore(conn)
    finally:
        close_connection_pool()


def print_posts(posts: List[Post], date_format: str, title: Optional[str] = None) -> None:
    """Print posts as a table."""
    if not posts:
        console.print("[yellow]No posts.[/yellow]")
        return

    table = Table(title=title or "Posts")
    table.add_column("Date", style="yellow")
    table.add_column("Feed", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Author", style="magenta")
    table.add_column("Tags", style="green")
    table.add_column("Link", style="blue")

    for post in posts:
        table.add_row(
            format_local(post.published_at, date_format),
            post.feed_name,
            post.title or "",
            post.author or "",
            ", ".join(post.tags),
            post.link or "",
        )

    console.print(table)
