"""Feed fetching."""

from .fetcher import FeedFetcher, print_fetch_summary
from .models import FetchResult

__all__ = [
    "FeedFetcher",
    "FetchResult",
    "print_fetch_summary",
]
