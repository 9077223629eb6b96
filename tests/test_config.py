"""Tests for configuration loading."""

import pytest
import yaml

from feedplanet.config import (
    Config,
    ConfigModel,
    FeedConfig,
    load_config,
    load_feeds,
    save_config,
    save_feeds,
)


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadConfig:
    """config.yaml parsing."""

    def test_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.days == 7
        assert config.limit == 50
        assert config.store.backend == "postgres"
        assert config.logging.destination == "console"

    def test_values(self, tmp_path):
        path = write_yaml(tmp_path / "config.yaml", {
            "days": 3,
            "limit": 10,
            "logging": {"level": "debug"},
            "outputs": [{"type": "rss", "path": "out/rss.xml", "template_path": "rss.tmpl"}],
        })
        config = load_config(path)
        assert config.days == 3
        assert config.logging.level == "DEBUG"
        assert config.outputs[0].type == "RSS"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("days: [unclosed")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = write_yaml(tmp_path / "config.yaml", {"days": 0})
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_unknown_log_level(self, tmp_path):
        path = write_yaml(tmp_path / "config.yaml", {"logging": {"level": "loud"}})
        with pytest.raises(ValueError):
            load_config(path)

    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        save_config(ConfigModel(days=14), path)
        assert load_config(path).days == 14


class TestLoadFeeds:
    """feeds.yaml parsing."""

    def test_feeds(self, tmp_path):
        path = write_yaml(tmp_path / "feeds.yaml", {"feeds": [
            {"name": "a", "url": "http://a/feed"},
            {"name": "b", "url": "http://b/feed", "enabled": False},
        ]})
        feeds = load_feeds(path)
        assert [f.name for f in feeds] == ["a", "b"]
        assert feeds[1].enabled is False

    def test_invalid_and_duplicate_entries_are_skipped(self, tmp_path, caplog):
        path = write_yaml(tmp_path / "feeds.yaml", {"feeds": [
            {"name": "a", "url": "http://a/feed"},
            {"url": "http://nameless/feed"},
            {"name": "a", "url": "http://other/feed"},
            "not a mapping",
        ]})
        feeds = load_feeds(path)
        assert [(f.name, f.url) for f in feeds] == [("a", "http://a/feed")]
        assert "duplicate feed name a" in caplog.text

    def test_empty(self, tmp_path):
        path = tmp_path / "feeds.yaml"
        path.write_text("feeds: []\n")
        assert load_feeds(path) == []

    def test_round_trip(self, tmp_path):
        path = tmp_path / "feeds.yaml"
        feeds = [FeedConfig(name="a", url="http://a/feed", home="http://a/")]
        save_feeds(feeds, path)
        assert load_feeds(path) == feeds


class TestConfigManager:
    """Config wrapper around both files."""

    def test_feeds_path_is_sibling(self, tmp_path):
        assert Config(tmp_path / "config.yaml").feeds_path == tmp_path / "feeds.yaml"

    def test_db_config(self, tmp_path):
        path = write_yaml(tmp_path / "config.yaml", {"postgres": {"host": "db", "password_env": "PLANET_DB_PW"}})
        db_config = Config(path).get_db_config()
        assert db_config["host"] == "db"
        assert db_config["password_env"] == "PLANET_DB_PW"
