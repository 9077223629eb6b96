"""Pipeline orchestrator that runs one ingestion pass over all feeds."""

import logging
import time
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pendulum
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from ..config import ConfigModel, FeedConfig
from ..db import PostStore, StoreError
from ..ingestion import FeedFetcher, FetchResult
from ..models import Post
from ..parsing import Dialect, FeedParser
from .context import build_render_context
from .models import FeedReport, IngestionReport

logger = logging.getLogger(__name__)


class PipelineStage:
    """Represents a pipeline stage."""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.success = False
        self.error: Optional[str] = None
        self.stats: Dict = {}

    def start(self):
        """Mark stage as started."""
        self.start_time = time.time()

    def complete(self, stats: Optional[Dict] = None):
        """Mark stage as completed successfully."""
        self.end_time = time.time()
        self.success = True
        if stats:
            self.stats.update(stats)

    def fail(self, error: str):
        """Mark stage as failed."""
        self.end_time = time.time()
        self.success = False
        self.error = error

    @property
    def duration(self) -> float:
        """Get stage duration in seconds."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


class PipelineOrchestrator:
    """
    Fetch every feed, normalize it into posts and upsert them.

    Feeds are downloaded concurrently but parsed and stored one at a time
    in configuration order, so when two feeds carry the same post id the
    later feed's values are the ones kept. A failing feed or entry is
    logged and skipped.
    """

    def __init__(
        self,
        settings: ConfigModel,
        feeds: List[FeedConfig],
        store: PostStore,
        fetcher: Optional[FeedFetcher] = None,
        console: Optional[Console] = None,
    ):
        """Initialize pipeline orchestrator."""
        self.settings = settings
        self.feeds = feeds
        self.store = store
        self.fetcher = fetcher or FeedFetcher.from_config(settings.fetch)
        self.console = console or Console(stderr=True)
        self.stages = [
            PipelineStage("feeds", "Loading feeds"),
            PipelineStage("fetch", "Fetching feeds"),
            PipelineStage("ingest", "Parsing and storing posts"),
            PipelineStage("reconcile", "Removing orphan tags"),
            PipelineStage("query", "Selecting recent posts"),
        ]
        self.total_start_time: Optional[float] = None

    def ingest_document(self, feed: FeedConfig, content: bytes) -> FeedReport:
        """Parse one downloaded document and upsert each post as it closes."""
        report = FeedReport(feed_name=feed.name, fetched=True)

        def store_post(post: Post) -> None:
            try:
                self.store.upsert(post)
                report.stored += 1
            except StoreError as e:
                report.store_errors += 1
                logger.warning("%s: could not store post %s: %s", feed.name, post.id, e)

        result = FeedParser(feed.name, on_post=store_post).parse(content)

        report.dialect = result.dialect
        report.encoding = result.encoding
        report.feed_title = result.feed_title
        report.dropped = result.dropped
        if result.error:
            report.error = result.error
        elif result.dialect is Dialect.UNRECOGNIZED:
            report.error = "Unrecognized feed format"
        return report

    def _ingest(self, fetch_results: List[FetchResult]) -> List[FeedReport]:
        feeds_by_name = {feed.name: feed for feed in self.feeds}
        reports = []
        for fetched in fetch_results:
            feed = feeds_by_name[fetched.feed_name]
            if not fetched.success:
                reports.append(FeedReport(feed_name=feed.name, error=fetched.error))
                continue
            try:
                reports.append(self.ingest_document(feed, fetched.content))
            except Exception as e:
                logger.warning("%s: ingestion failed: %s", feed.name, e)
                reports.append(FeedReport(feed_name=feed.name, fetched=True, error=str(e)))
        return reports

    def _print_summary(self, report: IngestionReport) -> None:
        """Print pipeline execution summary."""
        total_duration = time.time() - self.total_start_time if self.total_start_time else 0

        table = Table(title="Feeds")
        table.add_column("Feed", style="cyan")
        table.add_column("Format", style="magenta")
        table.add_column("Stored", style="green")
        table.add_column("Dropped", style="yellow")
        table.add_column("Status", style="dim")

        for feed in report.feeds:
            status = "[green]OK[/green]" if feed.success else f"[red]{feed.error}[/red]"
            table.add_row(
                feed.feed_name,
                feed.dialect.value if feed.dialect else "-",
                str(feed.stored),
                str(feed.dropped),
                status,
            )

        self.console.print(table)

        failed_stages = [s.name for s in self.stages if not s.success]
        if not failed_stages:
            self.console.print(Panel(
                f"[green]Ingestion completed[/green]\n\n"
                f"Feeds: {len(report.feeds)} ({sum(1 for f in report.feeds if f.success)} ok)\n"
                f"Posts stored: {report.stored}\n"
                f"Orphan tags removed: {report.tags_reconciled}\n"
                f"Recent posts: {len(report.posts)}\n"
                f"Duration: {total_duration:.1f} seconds",
                style="green",
            ))
        else:
            self.console.print(Panel(
                f"[red]Ingestion incomplete[/red]\n\n"
                f"Failed stages: {', '.join(failed_stages)}\n"
                f"Duration: {total_duration:.1f} seconds",
                style="red",
            ))

    def run(
        self,
        days: Optional[int] = None,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
        show_summary: bool = True,
    ) -> IngestionReport:
        """Run one ingestion pass and return its report."""
        self.total_start_time = time.time()
        days = days if days is not None else self.settings.days
        limit = limit if limit is not None else self.settings.limit
        if now is None:
            now = pendulum.now("UTC")

        report = IngestionReport()
        fetch_results: List[FetchResult] = []

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:

            # Stage 1: feeds
            stage = self.stages[0]
            task = progress.add_task(stage.description, total=1)
            stage.start()
            enabled_feeds = [f for f in self.feeds if f.enabled]
            stage.complete({"total_feeds": len(self.feeds), "enabled_feeds": len(enabled_feeds)})
            progress.advance(task, 1)

            # Stage 2: fetch
            stage = self.stages[1]
            progress.remove_task(task)
            task = progress.add_task(stage.description, total=1)
            stage.start()
            fetch_results = self.fetcher.fetch_feeds_sync(enabled_feeds)
            stage.complete({
                "fetched": sum(1 for r in fetch_results if r.success),
                "failed": sum(1 for r in fetch_results if not r.success),
            })
            progress.advance(task, 1)

            # Stage 3: parse and store
            stage = self.stages[2]
            progress.remove_task(task)
            task = progress.add_task(stage.description, total=1)
            stage.start()
            report.feeds = self._ingest(fetch_results)
            stage.complete({
                "stored": report.stored,
                "dropped": sum(f.dropped for f in report.feeds),
                "store_errors": sum(f.store_errors for f in report.feeds),
            })
            progress.advance(task, 1)

            # Stage 4: orphan tags
            stage = self.stages[3]
            progress.remove_task(task)
            task = progress.add_task(stage.description, total=1)
            stage.start()
            try:
                report.tags_reconciled = self.store.reconcile_tags()
                stage.complete({"removed": report.tags_reconciled})
            except StoreError as e:
                logger.warning("Tag reconciliation failed: %s", e)
                stage.fail(str(e))
            progress.advance(task, 1)

            # Stage 5: query
            stage = self.stages[4]
            progress.remove_task(task)
            task = progress.add_task(stage.description, total=1)
            stage.start()
            try:
                report.posts = self.store.query(timedelta(days=days), limit, now=now)
                report.contexts = [
                    build_render_context(report.posts, output, self.settings.date_format, now=now)
                    for output in self.settings.outputs
                ]
                stage.complete({"posts": len(report.posts)})
            except StoreError as e:
                logger.warning("Post query failed: %s", e)
                stage.fail(str(e))
            progress.advance(task, 1)

        report.stages = {s.name: s.success for s in self.stages}
        if show_summary:
            self._print_summary(report)
        return report
