"""Configuration loader."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .models import ConfigModel, FeedConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "feedplanet"


class Config:
    """
    config.yaml plus the feeds.yaml next to it.

    Settings are read lazily on first access to ``config``.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self.config_path = config_path or DEFAULT_CONFIG_DIR / "config.yaml"
        self._config: Optional[ConfigModel] = None

    @property
    def config(self) -> ConfigModel:
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def feeds_path(self) -> Path:
        return self.config_path.parent / "feeds.yaml"

    def get_feeds(self) -> List[FeedConfig]:
        return load_feeds(self.feeds_path)

    def get_db_config(self) -> Dict[str, Any]:
        """``postgres`` section as the dict the db helpers take."""
        return self.config.postgres.model_dump()


def _read_yaml(path: Path, kind: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"{kind.capitalize()} file not found: {path}")
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {kind} file: {e}")


def _write_yaml(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_config(config_path: Path) -> ConfigModel:
    """Load settings; an empty file yields all defaults."""
    data = _read_yaml(config_path, "config") or {}
    try:
        return ConfigModel(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}")


def load_feeds(feeds_path: Path) -> List[FeedConfig]:
    """
    Load feeds in file order.

    Invalid entries and entries reusing an earlier feed name are skipped
    with a warning; the feed name is the key posts are attributed to.
    """
    data = _read_yaml(feeds_path, "feeds")
    if not data or not data.get("feeds"):
        return []

    feeds: List[FeedConfig] = []
    seen = set()
    for entry in data["feeds"]:
        try:
            feed = FeedConfig(**entry)
        except (TypeError, ValidationError) as e:
            name = entry.get("name", "unknown") if isinstance(entry, dict) else "unknown"
            logger.warning("Skipping invalid feed %s: %s", name, e)
            continue
        if feed.name in seen:
            logger.warning("Skipping duplicate feed name %s", feed.name)
            continue
        seen.add(feed.name)
        feeds.append(feed)

    return feeds


def save_config(config: ConfigModel, config_path: Path) -> None:
    _write_yaml(config_path, config.model_dump())


def save_feeds(feeds: List[FeedConfig], feeds_path: Path) -> None:
    _write_yaml(feeds_path, {"feeds": [feed.model_dump() for feed in feeds]})
