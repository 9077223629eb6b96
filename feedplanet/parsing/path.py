"""Element path and character data tracking for the streaming parser."""

import logging
from typing import List

logger = logging.getLogger(__name__)


class PathTracker:
    """
    Current element path, kept as an explicit stack of element names.

    Names are stored verbatim as the XML parser reports them, including
    any namespace prefix (``dc:creator``), and ``path`` renders them as
    ``/rss/channel/item/pubDate``.
    """

    def __init__(self) -> None:
        self._stack: List[str] = []
        self.mismatches = 0

    @property
    def path(self) -> str:
        if not self._stack:
            return ""
        return "/" + "/".join(self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def push(self, name: str) -> str:
        """Enter an element; returns the new path."""
        self._stack.append(name)
        return self.path

    def pop(self, name: str) -> bool:
        """
        Leave an element.

        Returns False when the path did not end with ``name``. In that case
        the stack is unwound to the innermost ``name`` if there is one and
        left alone otherwise.
        """
        if self._stack and self._stack[-1] == name:
            self._stack.pop()
            return True

        self.mismatches += 1
        logger.warning("Unbalanced XML: closing </%s> at %s", name, self.path or "/")
        if name in self._stack:
            index = len(self._stack) - 1 - self._stack[::-1].index(name)
            del self._stack[index:]
        return False


class TextAccumulator:
    """
    Character data of each open element, one buffer per nesting level.

    A child element gets its own buffer, so the parent keeps the text it
    holds directly on both sides of the child and never the child's text.
    """

    def __init__(self) -> None:
        self._buffers: List[List[str]] = []

    @property
    def depth(self) -> int:
        return len(self._buffers)

    def open(self) -> None:
        """Start a buffer for a newly opened element."""
        self._buffers.append([])

    def append(self, fragment: str) -> None:
        if self._buffers:
            self._buffers[-1].append(fragment)

    @property
    def text(self) -> str:
        """Direct text of the innermost open element so far."""
        if not self._buffers:
            return ""
        return "".join(self._buffers[-1])

    def truncate(self, depth: int) -> None:
        """Discard the buffers of elements nested deeper than ``depth``."""
        del self._buffers[depth:]
