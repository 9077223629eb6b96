"""Datasets handed to the template renderer."""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pendulum

from .. import __version__
from ..config import OutputConfig
from ..models import Post
from ..parsing import format_iso8601, format_local, format_rfc822


def format_for_output(
    instant: datetime,
    output_type: str,
    date_format: str,
    tz: Optional[str] = None,
) -> str:
    """Date as each output flavour expects it: RFC822, ISO8601 or local."""
    if output_type == "RSS":
        return format_rfc822(instant)
    if output_type == "ATOM":
        return format_iso8601(instant)
    return format_local(instant, date_format, tz)


def build_render_context(
    posts: List[Post],
    output: OutputConfig,
    date_format: str,
    now: Optional[datetime] = None,
    tz: Optional[str] = None,
) -> Dict[str, Any]:
    """Posts plus formatted dates for one output; nothing is rendered here."""
    if now is None:
        now = pendulum.now("UTC")

    rendered_posts = []
    for post in posts:
        item = post.model_dump()
        item["body"] = post.body
        item["date"] = int(post.published_at.timestamp())
        item["formatted_date"] = format_for_output(post.published_at, output.type, date_format, tz)
        rendered_posts.append(item)

    return {
        "version": __version__,
        "type": output.type,
        "path": output.path,
        "template_path": output.template_path,
        "generation_date": format_for_output(now, output.type, date_format, tz),
        "posts": rendered_posts,
    }
