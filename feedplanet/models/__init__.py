"""Data models for feedplanet."""

from .post import Post

__all__ = ["Post"]
