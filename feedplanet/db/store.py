"""Post store interface."""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import pendulum

from ..models import Post

TagRow = Tuple[str, int, str]


class StoreError(Exception):
    """A post store write or read failed."""


class PostStore(ABC):
    """
    Id-keyed post storage with a separate tag relation.

    ``upsert`` replaces a post and its tag rows wholesale. Removing posts
    (``delete``, ``prune``) leaves their tag rows behind until
    ``reconcile_tags`` runs. Writes are serialized with ``self._lock``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @abstractmethod
    def upsert(self, post: Post) -> None:
        """Insert a post, or replace the stored post with the same id."""

    @abstractmethod
    def get(self, post_id: str) -> Optional[Post]:
        """Fetch one post with its tags."""

    @abstractmethod
    def delete(self, post_id: str) -> bool:
        """Remove a post row; its tag rows stay until reconciled."""

    @abstractmethod
    def prune(self, older_than: datetime) -> int:
        """Remove posts published before ``older_than``; returns the count."""

    @abstractmethod
    def reconcile_tags(self) -> int:
        """Delete tag rows whose post no longer exists; returns rows removed."""

    @abstractmethod
    def query(
        self,
        max_age: timedelta,
        limit: int,
        now: Optional[datetime] = None,
    ) -> List[Post]:
        """
        Posts published within ``max_age`` of ``now``.

        Newest first; posts with the same publication instant are ordered
        by id so that the cut at ``limit`` is stable.
        """

    @abstractmethod
    def count(self) -> int:
        """Number of stored posts."""

    @abstractmethod
    def tag_rows(self) -> List[TagRow]:
        """All tag rows as (post_id, position, tag), including orphans."""

    @staticmethod
    def cutoff(max_age: timedelta, now: Optional[datetime] = None) -> datetime:
        if now is None:
            now = pendulum.now("UTC")
        return now - max_age
