"""Feed ingestion pipeline."""

from .context import build_render_context, format_for_output
from .models import FeedReport, IngestionReport
from .orchestrator import PipelineOrchestrator, PipelineStage

__all__ = [
    "FeedReport",
    "IngestionReport",
    "PipelineOrchestrator",
    "PipelineStage",
    "build_render_context",
    "format_for_output",
]
