"""Data models for ingestion."""

from typing import Optional

from pydantic import BaseModel, Field


class FetchResult(BaseModel):
    """Result of fetching one feed document."""

    feed_name: str = Field(..., description="Feed name")
    feed_url: str = Field(..., description="Feed URL")
    success: bool = Field(..., description="Whether fetch was successful")
    content: bytes = Field(b"", description="Raw document bytes")
    status_code: Optional[int] = Field(None, description="HTTP status code")
    error: Optional[str] = Field(None, description="Error message if failed")
