"""Post storage for feedplanet."""

from .connection import close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection
from .memory import InMemoryPostStore
from .posts import PostgresPostStore
from .store import PostStore, StoreError

__all__ = [
    "InMemoryPostStore",
    "PostStore",
    "PostgresPostStore",
    "StoreError",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
