"""Postgres schema for posts and their tags."""

import logging
from typing import Any, Dict, List

from psycopg.errors import DatabaseError

from .connection import get_connection

logger = logging.getLogger(__name__)

TABLES = ("posts", "post_tags")

# post_tags has no foreign key; rows of removed posts stay until
# PostStore.reconcile_tags() runs.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY,
    feed_name TEXT NOT NULL,
    feed_title TEXT,
    title TEXT,
    author TEXT,
    link TEXT,
    content TEXT,
    description TEXT,
    published_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ,
    ingested_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS post_tags (
    post_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    tag TEXT NOT NULL,
    PRIMARY KEY (post_id, position)
);

CREATE INDEX IF NOT EXISTS idx_posts_published_at ON posts(published_at);
CREATE INDEX IF NOT EXISTS idx_posts_feed_name ON posts(feed_name);
"""

EXISTING_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = current_schema() AND table_name = ANY(%s)
    ORDER BY table_name
"""


def validate_connection(config: Dict[str, Any]) -> bool:
    """True when the server answers a trivial query."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 AS ok")
                row = cur.fetchone()
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False
    return row is not None and row["ok"] == 1


def init_database(config: Dict[str, Any]) -> List[str]:
    """Create any missing tables and indexes; returns the tables present afterwards."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
                cur.execute(EXISTING_TABLES_SQL, (list(TABLES),))
                present = [row["table_name"] for row in cur.fetchall()]
            conn.commit()
    except DatabaseError as e:
        logger.error("Schema setup failed: %s", e)
        raise

    missing = sorted(set(TABLES) - set(present))
    if missing:
        raise DatabaseError(f"Tables missing after schema setup: {', '.join(missing)}")
    logger.info("Schema ready: %s", ", ".join(present))
    return present
