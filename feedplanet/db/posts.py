"""Post storage and deduplication in Postgres."""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import psycopg
from psycopg import Connection

from ..models import Post
from .store import PostStore, StoreError, TagRow

logger = logging.getLogger(__name__)

POST_COLUMNS = (
    "id",
    "feed_name",
    "feed_title",
    "title",
    "author",
    "link",
    "content",
    "description",
    "published_at",
    "updated_at",
)

UPSERT_POST_SQL = """
    INSERT INTO posts (
        id, feed_name, feed_title, title, author, link,
        content, description, published_at, updated_at
    ) VALUES (
        %s, %s, %s, %s, %s, %s, %s, %s, %s, %s
    )
    ON CONFLICT (id) DO UPDATE SET
        feed_name = EXCLUDED.feed_name,
        feed_title = EXCLUDED.feed_title,
        title = EXCLUDED.title,
        author = EXCLUDED.author,
        link = EXCLUDED.link,
        content = EXCLUDED.content,
        description = EXCLUDED.description,
        published_at = EXCLUDED.published_at,
        updated_at = EXCLUDED.updated_at,
        ingested_at = CURRENT_TIMESTAMP
"""

DELETE_TAGS_SQL = "DELETE FROM post_tags WHERE post_id = %s"

INSERT_TAG_SQL = "INSERT INTO post_tags (post_id, position, tag) VALUES (%s, %s, %s)"

RECONCILE_TAGS_SQL = """
    DELETE FROM post_tags t
    WHERE NOT EXISTS (
        SELECT 1 FROM posts p WHERE p.id = t.post_id
    )
"""

QUERY_POSTS_SQL = """
    SELECT id, feed_name, feed_title, title, author, link,
           content, description, published_at, updated_at
    FROM posts
    WHERE published_at > %s
    ORDER BY published_at DESC, id ASC
    LIMIT %s
"""

SELECT_TAGS_SQL = """
    SELECT post_id, position, tag
    FROM post_tags
    WHERE post_id = ANY(%s)
    ORDER BY post_id, position
"""


class PostgresPostStore(PostStore):
    """Posts in a ``posts`` table, tags in ``post_tags`` keyed by post id."""

    def __init__(self, conn: Connection) -> None:
        """Initialize with a connection using the ``dict_row`` row factory."""
        super().__init__()
        self.conn = conn

    def _row_to_post(self, row: Dict, tags: List[str]) -> Post:
        return Post(**{column: row[column] for column in POST_COLUMNS}, tags=tags)

    def _load_tags(self, post_ids: List[str]) -> Dict[str, List[str]]:
        tags: Dict[str, List[str]] = defaultdict(list)
        if not post_ids:
            return tags
        with self.conn.cursor() as cur:
            cur.execute(SELECT_TAGS_SQL, (post_ids,))
            for row in cur.fetchall():
                tags[row["post_id"]].append(row["tag"])
        return tags

    def _write(self, description: str, work) -> int:
        """Run ``work(cursor)`` in one transaction; returns its result."""
        with self._lock:
            try:
                with self.conn.cursor() as cur:
                    result = work(cur)
                self.conn.commit()
                return result
            except psycopg.Error as e:
                self.conn.rollback()
                raise StoreError(f"Failed to {description}: {e}") from e

    def upsert(self, post: Post) -> None:
        def work(cur) -> int:
            cur.execute(
                UPSERT_POST_SQL,
                (
                    post.id,
                    post.feed_name,
                    post.feed_title,
                    post.title,
                    post.author,
                    post.link,
                    post.content,
                    post.description,
                    post.published_at,
                    post.updated_at,
                ),
            )
            cur.execute(DELETE_TAGS_SQL, (post.id,))
            if post.tags:
                cur.executemany(
                    INSERT_TAG_SQL,
                    [(post.id, position, tag) for position, tag in enumerate(post.tags)],
                )
            return 1

        self._write(f"store post {post.id}", work)

    def get(self, post_id: str) -> Optional[Post]:
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "SELECT * FROM posts WHERE id = %s",
                    (post_id,),
                )
                row = cur.fetchone()
            if row is None:
                return None
            return self._row_to_post(row, self._load_tags([post_id]).get(post_id, []))
        except psycopg.Error as e:
            raise StoreError(f"Failed to read post {post_id}: {e}") from e

    def delete(self, post_id: str) -> bool:
        def work(cur) -> int:
            cur.execute("DELETE FROM posts WHERE id = %s", (post_id,))
            return cur.rowcount

        return self._write(f"delete post {post_id}", work) > 0

    def prune(self, older_than: datetime) -> int:
        def work(cur) -> int:
            cur.execute("DELETE FROM posts WHERE published_at < %s", (older_than,))
            return cur.rowcount

        removed = self._write("prune posts", work)
        logger.info("Pruned %d posts published before %s", removed, older_than)
        return removed

    def reconcile_tags(self) -> int:
        def work(cur) -> int:
            cur.execute(RECONCILE_TAGS_SQL)
            return cur.rowcount

        return self._write("reconcile tags", work)

    def query(
        self,
        max_age: timedelta,
        limit: int,
        now: Optional[datetime] = None,
    ) -> List[Post]:
        cutoff = self.cutoff(max_age, now)
        try:
            with self.conn.cursor() as cur:
                cur.execute(QUERY_POSTS_SQL, (cutoff, limit))
                rows = cur.fetchall()
            tags = self._load_tags([row["id"] for row in rows])
        except psycopg.Error as e:
            raise StoreError(f"Failed to query posts: {e}") from e
        return [self._row_to_post(row, tags.get(row["id"], [])) for row in rows]

    def count(self) -> int:
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) AS total FROM posts")
                return cur.fetchone()["total"]
        except psycopg.Error as e:
            raise StoreError(f"Failed to count posts: {e}") from e

    def tag_rows(self) -> List[TagRow]:
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT post_id, position, tag FROM post_tags ORDER BY post_id, position")
                rows = cur.fetchall()
        except psycopg.Error as e:
            raise StoreError(f"Failed to read tags: {e}") from e
        return [(row["post_id"], row["position"], row["tag"]) for row in rows]
