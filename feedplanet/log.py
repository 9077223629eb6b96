"""Logging setup: rich console output or syslog."""

import logging
import logging.handlers
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

SYSLOG_IDENT = "feedplanet"


def configure_logging(config: LoggingConfig, console: Optional[Console] = None) -> logging.Handler:
    """
    Route the ``feedplanet`` logger to the configured destination.

    Replaces any handler installed by an earlier call and returns the new
    one.
    """
    if config.destination == "syslog":
        handler: logging.Handler = logging.handlers.SysLogHandler(
            address=config.syslog_address,
            facility=logging.handlers.SysLogHandler.LOG_USER,
        )
        handler.ident = f"{SYSLOG_IDENT}: "
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    else:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("feedplanet")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    logger.setLevel(config.level)
    logger.propagate = False
    return handler
