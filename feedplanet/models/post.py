"""Post model for normalized feed entries."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Post(BaseModel):
    """One syndicated entry, normalized from RSS or Atom."""

    id: str = Field(..., description="Stable identifier (Atom id or RSS guid)", min_length=1)
    feed_name: str = Field(..., description="Name of the configured feed")
    feed_title: Optional[str] = Field(None, description="Title the feed gives itself")
    title: Optional[str] = Field(None, description="Post title")
    author: Optional[str] = Field(None, description="Post author")
    link: Optional[str] = Field(None, description="Link to the post")
    content: Optional[str] = Field(None, description="Full content, preferred for rendering")
    description: Optional[str] = Field(None, description="Summary, used when content is missing")
    published_at: datetime = Field(..., description="Publication instant (UTC)")
    updated_at: Optional[datetime] = Field(None, description="Last update instant (UTC)")
    tags: List[str] = Field(default_factory=list, description="Categories in document order")

    @property
    def body(self) -> Optional[str]:
        """Content if present, else description."""
        return self.content if self.content is not None else self.description
