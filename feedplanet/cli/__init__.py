"""Command line interface for feedplanet."""

from .app import app

__all__ = ["app"]
