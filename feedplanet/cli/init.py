"""Init command implementation."""

from pathlib import Path
from typing import List

import typer
from rich.panel import Panel

from ..config import ConfigModel, FeedConfig, save_config, save_feeds
from ..config.loader import DEFAULT_CONFIG_DIR
from ..db import close_connection_pool, init_database, validate_connection
from .common import console


def create_default_feeds() -> List[FeedConfig]:
    """Create default feeds."""
    return [
        FeedConfig(
            name="Python Insider",
            url="https://pythoninsider.blogspot.com/feeds/posts/default",
            home="https://pythoninsider.blogspot.com/",
        ),
        FeedConfig(
            name="Planet Python",
            url="https://planetpython.org/rss20.xml",
            home="https://planetpython.org/",
        ),
        FeedConfig(
            name="LWN.net",
            url="https://lwn.net/headlines/rss",
            home="https://lwn.net/",
        ),
    ]


def init_command(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR,
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("feedplanet", "--db-name", help="Database name"),
    db_user: str = typer.Option("feedplanet", "--db-user", help="Database user"),
    seed_feeds: bool = typer.Option(
        True,
        "--seed-feeds/--no-seed-feeds",
        help="Seed a few default feeds",
    ),
    memory: bool = typer.Option(
        False,
        "--memory",
        help="Use the in-memory store and skip database setup",
    ),
) -> None:
    """Initialize feedplanet configuration and database."""
    console.print(Panel.fit("feedplanet - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    feeds_path = config_dir / "feeds.yaml"

    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "FEEDPLANET_DB_PASSWORD",
        },
        store={"backend": "memory" if memory else "postgres"},
    )

    save_config(config, config_path)
    console.print(f"Created config: {config_path}")

    if seed_feeds:
        feeds = create_default_feeds()
        save_feeds(feeds, feeds_path)
        console.print(f"Created feeds: {feeds_path} (seeded with {len(feeds)} feeds)")
    else:
        save_feeds([], feeds_path)
        console.print(f"Created feeds: {feeds_path} (empty)")

    if memory:
        console.print("[yellow]In-memory store selected, skipping database setup[/yellow]")
        return

    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    try:
        if not validate_connection(db_config):
            console.print(
                "[red]Database connection failed![/red]\n"
                "Please ensure Postgres is running and credentials are correct.\n"
                "Set the password via environment variable: "
                "[bold]export FEEDPLANET_DB_PASSWORD=your_password[/bold]"
            )
            raise typer.Exit(1)

        console.print("Database connection successful")

        console.print("\n[bold]Initializing database schema...[/bold]")
        try:
            init_database(db_config)
        except Exception as e:
            console.print(f"[red]Failed to initialize database: {e}[/red]")
            raise typer.Exit(1)
    finally:
        close_connection_pool()

    console.print(
        Panel(
            f"[green]feedplanet initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Feeds: {feeds_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export FEEDPLANET_DB_PASSWORD=your_password[/bold]\n"
            f"2. Run: [bold]feedplanet run[/bold]",
            style="green",
        )
    )
