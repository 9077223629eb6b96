"""Feed-to-post normalization: path tracking, dialect rules and dates."""

from .dates import (
    DateParseError,
    format_iso8601,
    format_local,
    format_rfc822,
    parse_iso8601,
    parse_rfc822,
)
from .dialect import Dialect, detect_dialect
from .extractor import ATOM_RULES, RSS_RULES, Action, ActionKind, DialectRules, FieldExtractor
from .parser import FeedParser, ParseContext, ParseResult, parse_feed
from .path import PathTracker, TextAccumulator

__all__ = [
    "ATOM_RULES",
    "RSS_RULES",
    "Action",
    "ActionKind",
    "DateParseError",
    "Dialect",
    "DialectRules",
    "FeedParser",
    "FieldExtractor",
    "ParseContext",
    "ParseResult",
    "PathTracker",
    "TextAccumulator",
    "detect_dialect",
    "format_iso8601",
    "format_local",
    "format_rfc822",
    "parse_feed",
    "parse_iso8601",
    "parse_rfc822",
]
