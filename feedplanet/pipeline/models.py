"""Pipeline result models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import Post
from ..parsing import Dialect


class FeedReport(BaseModel):
    """What happened to one feed during an ingestion pass."""

    feed_name: str = Field(..., description="Feed name")
    fetched: bool = Field(False, description="Whether the document was downloaded")
    dialect: Optional[Dialect] = Field(None, description="Detected dialect")
    encoding: Optional[str] = Field(None, description="Declared document encoding")
    feed_title: Optional[str] = Field(None, description="Title the feed gives itself")
    stored: int = Field(0, description="Posts upserted")
    dropped: int = Field(0, description="Entries dropped for missing id or date")
    store_errors: int = Field(0, description="Posts the store refused")
    error: Optional[str] = Field(None, description="Why the feed was skipped or cut short")

    @property
    def success(self) -> bool:
        return self.error is None


class IngestionReport(BaseModel):
    """Result of one ingestion pass over all feeds."""

    feeds: List[FeedReport] = Field(default_factory=list, description="Per-feed outcome")
    tags_reconciled: int = Field(0, description="Orphan tag rows removed")
    posts: List[Post] = Field(default_factory=list, description="Queried posts, newest first")
    contexts: List[Dict[str, Any]] = Field(default_factory=list, description="Render datasets per output")
    stages: Dict[str, bool] = Field(default_factory=dict, description="Stage success flags")

    @property
    def stored(self) -> int:
        return sum(feed.stored for feed in self.feeds)

    @property
    def success(self) -> bool:
        return all(self.stages.values())
