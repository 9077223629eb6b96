"""Feed dialect detection from the root element."""

from enum import Enum


class Dialect(str, Enum):
    """Syndication format of a document."""

    UNKNOWN = "unknown"
    RSS = "rss"
    ATOM = "atom"
    UNRECOGNIZED = "unrecognized"


def detect_dialect(root_element: str) -> Dialect:
    """Classify a document by the name of its root element."""
    if root_element == "feed":
        return Dialect.ATOM
    if root_element == "rss":
        return Dialect.RSS
    return Dialect.UNRECOGNIZED
