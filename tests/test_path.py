"""Tests for path tracking, text accumulation and dialect detection."""

import logging

from feedplanet.parsing import Dialect, PathTracker, TextAccumulator, detect_dialect


class TestPathTracker:
    """Element path stack."""

    def test_empty_path(self):
        tracker = PathTracker()
        assert tracker.path == ""
        assert tracker.depth == 0

    def test_push_and_pop(self):
        tracker = PathTracker()
        tracker.push("rss")
        tracker.push("channel")
        assert tracker.push("item") == "/rss/channel/item"
        assert tracker.pop("item") is True
        assert tracker.path == "/rss/channel"

    def test_prefixed_names_are_kept(self):
        tracker = PathTracker()
        for name in ("rss", "channel", "item", "dc:creator"):
            tracker.push(name)
        assert tracker.path == "/rss/channel/item/dc:creator"

    def test_mismatched_pop_unwinds_to_innermost(self, caplog):
        tracker = PathTracker()
        for name in ("feed", "entry", "title", "b"):
            tracker.push(name)
        with caplog.at_level(logging.WARNING):
            assert tracker.pop("entry") is False
        assert tracker.path == "/feed"
        assert tracker.mismatches == 1
        assert "Unbalanced XML" in caplog.text

    def test_unknown_pop_leaves_stack(self):
        tracker = PathTracker()
        tracker.push("rss")
        assert tracker.pop("channel") is False
        assert tracker.path == "/rss"
        assert tracker.mismatches == 1

    def test_pop_on_empty_stack(self):
        tracker = PathTracker()
        assert tracker.pop("rss") is False
        assert tracker.path == ""


class TestTextAccumulator:
    """Per-element character data buffers."""

    def test_fragments_are_joined(self):
        text = TextAccumulator()
        text.open()
        for fragment in ("A ", "&", " B"):
            text.append(fragment)
        assert text.text == "A & B"

    def test_child_text_stays_out_of_parent(self):
        text = TextAccumulator()
        text.open()
        text.append("lead ")
        text.open()
        text.append("bold")
        assert text.text == "bold"
        text.truncate(1)
        text.append(" tail")
        assert text.text == "lead  tail"

    def test_truncate_to_depth(self):
        text = TextAccumulator()
        for _ in range(3):
            text.open()
        text.truncate(1)
        assert text.depth == 1
        text.truncate(0)
        assert text.text == ""

    def test_text_outside_elements_is_ignored(self):
        text = TextAccumulator()
        text.append("stray")
        assert text.depth == 0
        assert text.text == ""


class TestDetectDialect:
    """Root element classification."""

    def test_known_roots(self):
        assert detect_dialect("rss") is Dialect.RSS
        assert detect_dialect("feed") is Dialect.ATOM

    def test_other_roots(self):
        assert detect_dialect("rdf:RDF") is Dialect.UNRECOGNIZED
        assert detect_dialect("html") is Dialect.UNRECOGNIZED
        assert detect_dialect("RSS") is Dialect.UNRECOGNIZED
