"""Postgres connection pool shared by the CLI commands."""

import os
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

APPLICATION_NAME = "feedplanet"

_connection_pool: Optional[ConnectionPool] = None


def build_conninfo(config: Dict[str, Any]) -> str:
    """
    Connection string for a ``postgres`` config section.

    When ``password_env`` names a variable that is set, its value is used
    instead of ``password``.
    """
    password = config.get("password") or ""
    password_env = config.get("password_env")
    if password_env and os.environ.get(password_env):
        password = os.environ[password_env]

    return make_conninfo(
        host=config.get("host", "localhost"),
        port=config.get("port", 5432),
        dbname=config.get("database", "feedplanet"),
        user=config.get("user", "feedplanet"),
        password=password,
        application_name=APPLICATION_NAME,
    )


def get_connection_pool(config: Dict[str, Any]) -> ConnectionPool:
    """Open the pool on first use; later calls return the same pool."""
    global _connection_pool
    if _connection_pool is None:
        _connection_pool = ConnectionPool(
            build_conninfo(config),
            min_size=1,
            max_size=4,
            kwargs={"row_factory": dict_row},
            open=True,
        )
    return _connection_pool


def close_connection_pool() -> None:
    global _connection_pool
    if _connection_pool is not None:
        _connection_pool.close()
        _connection_pool = None


@contextmanager
def get_connection(config: Dict[str, Any]) -> Generator[psycopg.Connection, None, None]:
    """Borrow a ``dict_row`` connection from the pool."""
    with get_connection_pool(config).connection() as conn:
        yield conn
