"""feedplanet - RSS/Atom feed aggregator."""

__version__ = "0.2.0"
