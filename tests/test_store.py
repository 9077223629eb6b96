"""Tests for the post stores."""

from contextlib import nullcontext
from datetime import timedelta
from unittest.mock import MagicMock

import pendulum
import psycopg
import pytest

import feedplanet.db.init as db_init
from feedplanet.db import InMemoryPostStore, PostgresPostStore, StoreError
from feedplanet.db.connection import build_conninfo
from feedplanet.db.posts import (
    DELETE_TAGS_SQL,
    INSERT_TAG_SQL,
    QUERY_POSTS_SQL,
    RECONCILE_TAGS_SQL,
    UPSERT_POST_SQL,
)

from .conftest import make_post


@pytest.fixture
def store():
    return InMemoryPostStore()


class TestInMemoryUpsert:
    """Id-keyed replacement."""

    def test_insert_and_get(self, store):
        store.upsert(make_post("p1", tags=["a", "b"]))
        post = store.get("p1")
        assert post.title == "Post p1"
        assert post.tags == ["a", "b"]

    def test_get_missing(self, store):
        assert store.get("nope") is None

    def test_same_post_twice_is_idempotent(self, store):
        post = make_post("p1", tags=["a", "b"])
        store.upsert(post)
        rows = store.tag_rows()
        store.upsert(post)
        assert store.count() == 1
        assert store.tag_rows() == rows

    def test_last_write_wins(self, store):
        store.upsert(make_post("p1", title="old", tags=["x", "y"]))
        store.upsert(make_post("p1", title="new", feed_name="other", tags=["z"]))
        post = store.get("p1")
        assert post.title == "new"
        assert post.feed_name == "other"
        assert store.tag_rows() == [("p1", 0, "z")]

    def test_tag_positions_follow_document_order(self, store):
        store.upsert(make_post("p1", tags=["b", "a", "b"]))
        assert store.tag_rows() == [("p1", 0, "b"), ("p1", 1, "a"), ("p1", 2, "b")]


class TestInMemoryRemoval:
    """Delete, prune and orphan tag reconciliation."""

    def test_delete_leaves_tags_until_reconciled(self, store):
        store.upsert(make_post("p1", tags=["a"]))
        store.upsert(make_post("p2", tags=["b", "c"]))

        assert store.delete("p2") is True
        assert len(store.tag_rows()) == 3

        assert store.reconcile_tags() == 2
        assert store.tag_rows() == [("p1", 0, "a")]

    def test_reconcile_without_orphans(self, store):
        store.upsert(make_post("p1", tags=["a"]))
        assert store.reconcile_tags() == 0
        assert store.tag_rows() == [("p1", 0, "a")]

    def test_delete_missing(self, store):
        assert store.delete("nope") is False

    def test_prune(self, store):
        store.upsert(make_post("old", published_at=pendulum.datetime(2024, 1, 1)))
        store.upsert(make_post("new", published_at=pendulum.datetime(2024, 3, 1)))
        assert store.prune(pendulum.datetime(2024, 2, 1)) == 1
        assert store.get("old") is None
        assert store.count() == 1


class TestInMemoryQuery:
    """Recent post selection."""

    def test_window_excludes_old_posts(self, store, now):
        store.upsert(make_post("recent", published_at=now.subtract(days=1)))
        store.upsert(make_post("stale", published_at=now.subtract(days=10)))
        posts = store.query(timedelta(days=7), 50, now=now)
        assert [p.id for p in posts] == ["recent"]

    def test_newest_first(self, store, now):
        for offset, post_id in enumerate(["a", "b", "c"]):
            store.upsert(make_post(post_id, published_at=now.subtract(hours=offset)))
        posts = store.query(timedelta(days=7), 50, now=now)
        assert [p.id for p in posts] == ["a", "b", "c"]

    def test_ties_are_ordered_by_id(self, store, now):
        instant = now.subtract(hours=1)
        for post_id in ["c", "a", "b"]:
            store.upsert(make_post(post_id, published_at=instant))
        posts = store.query(timedelta(days=7), 2, now=now)
        assert [p.id for p in posts] == ["a", "b"]

    def test_limit(self, store, now):
        for i in range(5):
            store.upsert(make_post(f"p{i}", published_at=now.subtract(hours=i)))
        assert len(store.query(timedelta(days=7), 3, now=now)) == 3

    def test_query_returns_tags(self, store, now):
        store.upsert(make_post("p1", published_at=now.subtract(hours=1), tags=["t"]))
        assert store.query(timedelta(days=7), 10, now=now)[0].tags == ["t"]


@pytest.fixture
def conn():
    return MagicMock()


@pytest.fixture
def cursor(conn):
    return conn.cursor.return_value.__enter__.return_value


class TestPostgresPostStore:
    """SQL issued by the Postgres store."""

    def test_upsert_replaces_tags(self, conn, cursor):
        post = make_post("p1", tags=["a", "b"])
        PostgresPostStore(conn).upsert(post)

        statements = [c.args[0] for c in cursor.execute.call_args_list]
        assert statements == [UPSERT_POST_SQL, DELETE_TAGS_SQL]
        assert cursor.execute.call_args_list[0].args[1][0] == "p1"
        cursor.executemany.assert_called_once_with(INSERT_TAG_SQL, [("p1", 0, "a"), ("p1", 1, "b")])
        conn.commit.assert_called_once()

    def test_upsert_without_tags(self, conn, cursor):
        PostgresPostStore(conn).upsert(make_post("p1"))
        cursor.executemany.assert_not_called()
        conn.commit.assert_called_once()

    def test_upsert_failure_rolls_back(self, conn, cursor):
        cursor.execute.side_effect = psycopg.OperationalError("connection lost")
        with pytest.raises(StoreError, match="store post p1"):
            PostgresPostStore(conn).upsert(make_post("p1"))
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_reconcile_returns_rowcount(self, conn, cursor):
        cursor.rowcount = 3
        assert PostgresPostStore(conn).reconcile_tags() == 3
        cursor.execute.assert_called_once_with(RECONCILE_TAGS_SQL)

    def test_delete(self, conn, cursor):
        cursor.rowcount = 0
        assert PostgresPostStore(conn).delete("p1") is False

    def test_query(self, conn, cursor, now):
        published = now.subtract(hours=1)
        row = {
            "id": "p1",
            "feed_name": "example",
            "feed_title": "Example",
            "title": "Hello",
            "author": None,
            "link": "http://x/1",
            "content": None,
            "description": "d",
            "published_at": published,
            "updated_at": None,
        }
        tag_rows = [
            {"post_id": "p1", "position": 0, "tag": "a"},
            {"post_id": "p1", "position": 1, "tag": "b"},
        ]
        cursor.fetchall.side_effect = [[row], tag_rows]

        posts = PostgresPostStore(conn).query(timedelta(days=7), 10, now=now)

        first = cursor.execute.call_args_list[0]
        assert first.args == (QUERY_POSTS_SQL, (now.subtract(days=7), 10))
        assert len(posts) == 1
        assert posts[0].title == "Hello"
        assert posts[0].tags == ["a", "b"]

    def test_count_and_tag_rows(self, conn, cursor):
        cursor.fetchone.return_value = {"total": 2}
        cursor.fetchall.return_value = [{"post_id": "p1", "position": 0, "tag": "a"}]
        store = PostgresPostStore(conn)

        assert store.count() == 2
        assert store.tag_rows() == [("p1", 0, "a")]

    @pytest.mark.parametrize("method", ["count", "tag_rows"])
    def test_read_failures_become_store_errors(self, conn, cursor, method):
        cursor.execute.side_effect = psycopg.OperationalError("gone")
        with pytest.raises(StoreError):
            getattr(PostgresPostStore(conn), method)()

    def test_query_failure(self, conn, cursor, now):
        cursor.execute.side_effect = psycopg.OperationalError("gone")
        with pytest.raises(StoreError):
            PostgresPostStore(conn).query(timedelta(days=7), 10, now=now)


class TestConnection:
    """Connection string and schema setup."""

    def test_conninfo_prefers_password_env(self, monkeypatch):
        monkeypatch.setenv("PLANET_DB_PW", "from-env")
        conninfo = build_conninfo({"host": "db", "password": "inline", "password_env": "PLANET_DB_PW"})
        assert "password=from-env" in conninfo
        assert "host=db" in conninfo

    def test_conninfo_without_env(self, monkeypatch):
        monkeypatch.delenv("PLANET_DB_PW", raising=False)
        conninfo = build_conninfo({"password": "inline", "password_env": "PLANET_DB_PW"})
        assert "password=inline" in conninfo

    def test_init_database(self, monkeypatch, conn, cursor):
        cursor.fetchall.return_value = [{"table_name": "post_tags"}, {"table_name": "posts"}]
        monkeypatch.setattr(db_init, "get_connection", lambda config: nullcontext(conn))

        assert db_init.init_database({}) == ["post_tags", "posts"]
        assert cursor.execute.call_args_list[0].args == (db_init.SCHEMA_SQL,)
        conn.commit.assert_called_once()

    def test_validate_connection_failure(self, monkeypatch):
        def refuse(config):
            raise psycopg.OperationalError("refused")

        monkeypatch.setattr(db_init, "get_connection", refuse)
        assert db_init.validate_connection({}) is False
