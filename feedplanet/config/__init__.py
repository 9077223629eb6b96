"""Configuration management for feedplanet."""

from .loader import Config, load_config, load_feeds, save_config, save_feeds
from .models import (
    ConfigModel,
    FeedConfig,
    FetchConfig,
    LoggingConfig,
    OutputConfig,
    PostgresConfig,
    StoreConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "FeedConfig",
    "FetchConfig",
    "LoggingConfig",
    "OutputConfig",
    "PostgresConfig",
    "StoreConfig",
    "load_config",
    "load_feeds",
    "save_config",
    "save_feeds",
]
