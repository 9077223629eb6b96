"""Streaming feed parser built on SAX events."""

import logging
import re
from typing import Callable, List, Optional
from xml.sax import SAXParseException
from xml.sax.handler import ContentHandler

import defusedxml.sax
from defusedxml import DefusedXmlException
from pydantic import BaseModel, Field

from ..models import Post
from .dialect import Dialect, detect_dialect
from .extractor import RULES, FieldExtractor
from .path import PathTracker, TextAccumulator

logger = logging.getLogger(__name__)

_RE_XML_DECL_ENCODING = re.compile(
    rb'^\s*<\?xml[^>]*encoding=["\']([^"\']+)["\'][^>]*\?>', re.IGNORECASE
)


class ParseResult(BaseModel):
    """Outcome of parsing one feed document."""

    feed_name: str = Field(..., description="Configured feed name")
    dialect: Dialect = Field(Dialect.UNKNOWN, description="Detected dialect")
    encoding: Optional[str] = Field(None, description="Encoding declared by the document")
    feed_title: Optional[str] = Field(None, description="Feed-level title")
    feed_author: Optional[str] = Field(None, description="Feed-level author (Atom)")
    posts: List[Post] = Field(default_factory=list, description="Completed posts in document order")
    dropped: int = Field(0, description="Entries dropped for missing id or date")
    structure_warnings: int = Field(0, description="Unbalanced element events seen")
    error: Optional[str] = Field(None, description="Why parsing stopped early")

    @property
    def success(self) -> bool:
        return self.error is None and self.dialect in (Dialect.RSS, Dialect.ATOM)


class ParseContext(ContentHandler):
    """
    Per-document parse state.

    Tracks the element path and pending text, fixes the dialect on the
    root element and forwards events to the dialect's ``FieldExtractor``.
    An unrecognized root leaves the extractor unset, so the rest of the
    document is read without extracting anything.
    """

    def __init__(self, feed_name: str, on_post: Callable[[Post], None]) -> None:
        super().__init__()
        self.feed_name = feed_name
        self.on_post = on_post
        self.tracker = PathTracker()
        self.text = TextAccumulator()
        self.dialect = Dialect.UNKNOWN
        self.extractor: Optional[FieldExtractor] = None

    def startElement(self, name, attrs):
        self.tracker.push(name)
        self.text.open()

        if self.dialect is Dialect.UNKNOWN:
            self.dialect = detect_dialect(name)
            if self.dialect is Dialect.UNRECOGNIZED:
                logger.warning("%s: unrecognized feed root <%s>, nothing extracted", self.feed_name, name)
            else:
                self.extractor = FieldExtractor(RULES[self.dialect], self.feed_name, self.on_post)

        if self.extractor is not None:
            self.extractor.start(self.tracker.path, attrs)

    def endElement(self, name):
        if self.extractor is not None:
            self.extractor.end(self.tracker.path, self.text.text)
        self.tracker.pop(name)
        # text buffers follow the path stack, including after an unwind
        self.text.truncate(self.tracker.depth)

    def characters(self, content):
        self.text.append(content)


def sniff_encoding(data: bytes) -> Optional[str]:
    """Encoding named in the XML declaration, if any."""
    match = _RE_XML_DECL_ENCODING.match(data[:512])
    if match:
        return match.group(1).decode("ascii", errors="replace")
    return None


class FeedParser:
    """Parse one feed document into posts."""

    def __init__(
        self,
        feed_name: str,
        on_post: Optional[Callable[[Post], None]] = None,
    ) -> None:
        """
        Args:
            feed_name: Configured feed name, copied onto every post
            on_post: Called with each post as soon as its element closes
        """
        self.feed_name = feed_name
        self.on_post = on_post

    def parse(self, data: bytes) -> ParseResult:
        """Run a fresh parse context over ``data``."""
        posts: List[Post] = []

        def collect(post: Post) -> None:
            posts.append(post)
            if self.on_post is not None:
                self.on_post(post)

        context = ParseContext(self.feed_name, collect)
        error = None

        if not data or not data.strip():
            error = "Empty document"
        else:
            try:
                defusedxml.sax.parseString(data, context)
            except SAXParseException as e:
                error = f"XML parse error at line {e.getLineNumber()}: {e.getMessage()}"
            except DefusedXmlException as e:
                error = f"Unsafe XML rejected: {e}"

        if error:
            logger.warning("%s: %s (%d posts kept)", self.feed_name, error, len(posts))

        extractor = context.extractor
        return ParseResult(
            feed_name=self.feed_name,
            dialect=context.dialect,
            encoding=sniff_encoding(data) if data else None,
            feed_title=extractor.feed_title if extractor else None,
            feed_author=extractor.feed_author if extractor else None,
            posts=posts,
            dropped=extractor.dropped if extractor else 0,
            structure_warnings=context.tracker.mismatches,
            error=error,
        )


def parse_feed(
    data: bytes,
    feed_name: str,
    on_post: Optional[Callable[[Post], None]] = None,
) -> ParseResult:
    """Parse a feed document; see ``FeedParser``."""
    return FeedParser(feed_name, on_post=on_post).parse(data)
