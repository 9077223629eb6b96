"""In-process post store."""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..models import Post
from .store import PostStore, TagRow


class InMemoryPostStore(PostStore):
    """Post store kept in dictionaries, for dry runs and tests."""

    def __init__(self) -> None:
        super().__init__()
        self._posts: Dict[str, Post] = {}
        self._tags: List[TagRow] = []

    def _with_tags(self, post: Post) -> Post:
        tags = [tag for post_id, _, tag in self._tags if post_id == post.id]
        return post.model_copy(update={"tags": tags})

    def upsert(self, post: Post) -> None:
        with self._lock:
            self._posts[post.id] = post.model_copy(update={"tags": []})
            self._tags = [row for row in self._tags if row[0] != post.id]
            self._tags.extend((post.id, position, tag) for position, tag in enumerate(post.tags))

    def get(self, post_id: str) -> Optional[Post]:
        post = self._posts.get(post_id)
        return self._with_tags(post) if post is not None else None

    def delete(self, post_id: str) -> bool:
        with self._lock:
            return self._posts.pop(post_id, None) is not None

    def prune(self, older_than: datetime) -> int:
        with self._lock:
            stale = [post_id for post_id, post in self._posts.items() if post.published_at < older_than]
            for post_id in stale:
                del self._posts[post_id]
            return len(stale)

    def reconcile_tags(self) -> int:
        with self._lock:
            kept = [row for row in self._tags if row[0] in self._posts]
            removed = len(self._tags) - len(kept)
            self._tags = kept
            return removed

    def query(
        self,
        max_age: timedelta,
        limit: int,
        now: Optional[datetime] = None,
    ) -> List[Post]:
        cutoff = self.cutoff(max_age, now)
        recent = [post for post in self._posts.values() if post.published_at > cutoff]
        recent.sort(key=lambda post: post.id)
        recent.sort(key=lambda post: post.published_at, reverse=True)
        return [self._with_tags(post) for post in recent[:limit]]

    def count(self) -> int:
        return len(self._posts)

    def tag_rows(self) -> List[TagRow]:
        return sorted(self._tags)
