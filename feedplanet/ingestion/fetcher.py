"""Feed fetcher with concurrent downloads."""

import asyncio
import logging
from typing import List, Optional

import httpx
from rich.console import Console

from ..config import FeedConfig, FetchConfig
from .models import FetchResult

logger = logging.getLogger(__name__)
console = Console(stderr=True)


class FeedFetcher:
    """Download raw feed documents."""

    def __init__(
        self,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        max_concurrent: int = 5,
        user_agent: str = "feedplanet/0.2",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize feed fetcher."""
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.max_concurrent = max_concurrent
        self.user_agent = user_agent
        self.transport = transport

    @classmethod
    def from_config(cls, config: FetchConfig) -> "FeedFetcher":
        return cls(
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
            max_concurrent=config.max_concurrent,
            user_agent=config.user_agent,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
            follow_redirects=True,
            headers={
                "User-Agent": self.user_agent,
                "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml;q=0.9, */*;q=0.8",
            },
            transport=self.transport,
        )

    def _failure(self, feed: FeedConfig, error: str, status_code: Optional[int] = None) -> FetchResult:
        logger.warning("An error occurred while fetching %s (%s): %s", feed.name, feed.url, error)
        return FetchResult(
            feed_name=feed.name,
            feed_url=feed.url,
            success=False,
            status_code=status_code,
            error=error,
        )

    async def fetch_feed(self, feed: FeedConfig, client: httpx.AsyncClient) -> FetchResult:
        """Fetch a single feed document."""
        try:
            response = await client.get(feed.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error_msg = f"HTTP {status}"
            if status == 404:
                error_msg = "Feed not found (404)"
            elif status == 403:
                error_msg = "Access forbidden (403)"
            elif status >= 500:
                error_msg = f"Server error ({status})"
            return self._failure(feed, error_msg, status)
        except httpx.TimeoutException:
            return self._failure(feed, "Request timed out")
        except httpx.HTTPError as e:
            return self._failure(feed, f"HTTP error: {e}")

        if not response.content:
            return self._failure(feed, "Empty response", response.status_code)

        return FetchResult(
            feed_name=feed.name,
            feed_url=feed.url,
            success=True,
            content=response.content,
            status_code=response.status_code,
        )

    async def fetch_all_feeds(self, feeds: List[FeedConfig]) -> List[FetchResult]:
        """Fetch all enabled feeds concurrently, keeping configuration order."""
        enabled_feeds = [f for f in feeds if f.enabled]

        if not enabled_feeds:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async with self._client() as client:

            async def fetch_with_semaphore(feed: FeedConfig) -> FetchResult:
                async with semaphore:
                    return await self.fetch_feed(feed, client)

            tasks = [fetch_with_semaphore(feed) for feed in enabled_feeds]
            return list(await asyncio.gather(*tasks))

    def fetch_feeds_sync(self, feeds: List[FeedConfig]) -> List[FetchResult]:
        """Synchronous wrapper for fetch_all_feeds."""
        return asyncio.run(self.fetch_all_feeds(feeds))


def print_fetch_summary(results: List[FetchResult]) -> None:
    """Print summary of feed fetch results."""
    successful = sum(1 for r in results if r.success)
    failed = len(results) - successful

    console.print("\n[bold]Feed Fetch Summary:[/bold]")
    console.print(f"  Feeds fetched: {len(results)}")
    console.print(f"  Successful: [green]{successful}[/green]")
    console.print(f"  Failed: [red]{failed}[/red]")

    if failed > 0:
        console.print("\n[bold red]Failed feeds:[/bold red]")
        for result in results:
            if not result.success:
                console.print(f"  - {result.feed_name}: {result.error}")
