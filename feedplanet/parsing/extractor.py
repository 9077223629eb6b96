"""Per-dialect mapping of element paths to post field updates."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ..models import Post
from .dates import DateParseError, parse_iso8601, parse_rfc822
from .dialect import Dialect

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    """What an element means for the post being built."""

    BEGIN_POST = "begin_post"
    END_POST = "end_post"
    FEED_FIELD = "feed_field"
    POST_FIELD = "post_field"
    POST_DATE = "post_date"
    APPEND_TAG = "append_tag"
    LINK_ATTRS = "link_attrs"
    TAG_ATTR = "tag_attr"


@dataclass(frozen=True)
class Action:
    """A small tagged action looked up by element path."""

    kind: ActionKind
    fields: Tuple[str, ...] = ()
    date_parser: Optional[Callable[[str], datetime]] = None
    first_wins: bool = False


@dataclass(frozen=True)
class DialectRules:
    """Actions fired on start and end events for one dialect."""

    dialect: Dialect
    on_start: Mapping[str, Action]
    on_end: Mapping[str, Action]


def _set(*fields: str, first_wins: bool = False) -> Action:
    return Action(ActionKind.POST_FIELD, fields, first_wins=first_wins)


def _date(parser: Callable[[str], datetime], *fields: str) -> Action:
    return Action(ActionKind.POST_DATE, fields, date_parser=parser)


_RSS_ITEM = "/rss/channel/item"
_ATOM_ENTRY = "/feed/entry"

RSS_RULES = DialectRules(
    dialect=Dialect.RSS,
    on_start={
        _RSS_ITEM: Action(ActionKind.BEGIN_POST),
    },
    on_end={
        "/rss/channel/title": Action(ActionKind.FEED_FIELD, ("title",), first_wins=True),
        _RSS_ITEM: Action(ActionKind.END_POST),
        _RSS_ITEM + "/guid": _set("id"),
        _RSS_ITEM + "/title": _set("title"),
        _RSS_ITEM + "/dc:creator": _set("author", first_wins=True),
        _RSS_ITEM + "/link": _set("link"),
        _RSS_ITEM + "/pubDate": _date(parse_rfc822, "published_at", "updated_at"),
        _RSS_ITEM + "/category": Action(ActionKind.APPEND_TAG),
        _RSS_ITEM + "/description": _set("description"),
        _RSS_ITEM + "/content:encoded": _set("content"),
    },
)

ATOM_RULES = DialectRules(
    dialect=Dialect.ATOM,
    on_start={
        _ATOM_ENTRY: Action(ActionKind.BEGIN_POST),
        _ATOM_ENTRY + "/link": Action(ActionKind.LINK_ATTRS),
        _ATOM_ENTRY + "/category": Action(ActionKind.TAG_ATTR),
    },
    on_end={
        "/feed/title": Action(ActionKind.FEED_FIELD, ("title",), first_wins=True),
        "/feed/author/name": Action(ActionKind.FEED_FIELD, ("author",), first_wins=True),
        _ATOM_ENTRY: Action(ActionKind.END_POST),
        _ATOM_ENTRY + "/id": _set("id"),
        _ATOM_ENTRY + "/title": _set("title"),
        _ATOM_ENTRY + "/author/name": _set("author", first_wins=True),
        _ATOM_ENTRY + "/published": _date(parse_iso8601, "published_at"),
        _ATOM_ENTRY + "/updated": _date(parse_iso8601, "updated_at"),
        _ATOM_ENTRY + "/content": _set("content"),
        _ATOM_ENTRY + "/summary": _set("description"),
    },
)

RULES: Dict[Dialect, DialectRules] = {
    Dialect.RSS: RSS_RULES,
    Dialect.ATOM: ATOM_RULES,
}


@dataclass
class PostDraft:
    """Mutable state of the item or entry currently open."""

    id: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    link: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)
    date_errors: List[str] = field(default_factory=list)


class FieldExtractor:
    """
    Apply a dialect's rules to start/end events and emit finished posts.

    A post only leaves the extractor, through ``on_post``, once its
    item/entry element has closed and it carries both an id and a
    publication date; anything else is dropped with a warning.
    """

    def __init__(
        self,
        rules: DialectRules,
        feed_name: str,
        on_post: Callable[[Post], None],
    ) -> None:
        self.rules = rules
        self.feed_name = feed_name
        self.on_post = on_post
        self.feed: Dict[str, str] = {}
        self.draft: Optional[PostDraft] = None
        self.emitted = 0
        self.dropped = 0

    @property
    def feed_title(self) -> Optional[str]:
        return self.feed.get("title")

    @property
    def feed_author(self) -> Optional[str]:
        return self.feed.get("author")

    def start(self, path: str, attrs: Mapping[str, str]) -> None:
        """Handle a start-element event at ``path``."""
        action = self.rules.on_start.get(path)
        if action is None:
            return

        if action.kind is ActionKind.BEGIN_POST:
            if self.draft is not None:
                logger.warning("%s: entry opened before previous one closed", self.feed_name)
            self.draft = PostDraft()
        elif self.draft is None:
            return
        elif action.kind is ActionKind.LINK_ATTRS:
            self._bind_link(attrs)
        elif action.kind is ActionKind.TAG_ATTR:
            term = attrs.get("term")
            if term is not None:
                self.draft.tags.append(term)

    def end(self, path: str, text: str) -> None:
        """Handle an end-element event at ``path`` with its own text."""
        action = self.rules.on_end.get(path)
        if action is None:
            return

        if action.kind is ActionKind.FEED_FIELD:
            for name in action.fields:
                self.feed.setdefault(name, text)
            return
        if action.kind is ActionKind.END_POST:
            self._finish()
            return

        draft = self.draft
        if draft is None:
            return

        if action.kind is ActionKind.POST_FIELD:
            for name in action.fields:
                if action.first_wins and getattr(draft, name) is not None:
                    continue
                setattr(draft, name, text)
        elif action.kind is ActionKind.POST_DATE:
            try:
                instant = action.date_parser(text)
            except DateParseError as e:
                draft.date_errors.append(f"{path.rsplit('/', 1)[-1]}: {e}")
                return
            for name in action.fields:
                setattr(draft, name, instant)
        elif action.kind is ActionKind.APPEND_TAG:
            draft.tags.append(text)

    def _bind_link(self, attrs: Mapping[str, str]) -> None:
        # rel="alternate" always wins; a link with no rel at all is taken
        # only while nothing better has been seen
        href = attrs.get("href")
        if href is None:
            return
        rel = attrs.get("rel")
        if rel == "alternate":
            self.draft.link = href
        elif rel is None and self.draft.link is None:
            self.draft.link = href

    def _finish(self) -> None:
        draft, self.draft = self.draft, None
        if draft is None:
            return

        if draft.id is None or not draft.id.strip():
            self._drop(draft, "missing id")
            return
        if draft.published_at is None:
            reason = "; ".join(draft.date_errors) if draft.date_errors else "missing publication date"
            self._drop(draft, reason)
            return
        for error in draft.date_errors:
            logger.warning("%s: entry %s: ignoring %s", self.feed_name, draft.id, error)

        author = draft.author
        if author is None and self.rules.dialect is Dialect.ATOM:
            author = self.feed_author

        post = Post(
            id=draft.id,
            feed_name=self.feed_name,
            feed_title=self.feed_title,
            title=draft.title,
            author=author,
            link=draft.link,
            content=draft.content,
            description=draft.description,
            published_at=draft.published_at,
            updated_at=draft.updated_at,
            tags=list(draft.tags),
        )
        self.emitted += 1
        self.on_post(post)

    def _drop(self, draft: PostDraft, reason: str) -> None:
        self.dropped += 1
        logger.warning(
            "%s: dropping entry %s: %s",
            self.feed_name,
            draft.id or draft.title or "<untitled>",
            reason,
        )
