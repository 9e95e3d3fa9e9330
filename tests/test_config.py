"""Tests for artslab.config TOML handling."""

import pytest

from artslab.config import (
    CONFIG_FILENAME,
    CONFIG_VERSION,
    RemoteConfig,
    StoreConfig,
    get_store_path,
    load_config,
    load_or_create_config,
    save_config,
)
from artslab.museum_client import DEFAULT_API_URL
from artslab.record_store import DEFAULT_NAMESPACE


class TestStorePath:
    def test_override_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ARTSLAB_STORE_PATH", str(tmp_path / "env"))
        assert get_store_path(tmp_path / "explicit") == tmp_path / "explicit"

    def test_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ARTSLAB_STORE_PATH", str(tmp_path / "env"))
        assert get_store_path() == tmp_path / "env"

    def test_home_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ARTSLAB_STORE_PATH", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_store_path() == tmp_path / ".artslab"


class TestLoadOrCreate:
    def test_creates_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ARTSLAB_API_URL", raising=False)
        config = load_or_create_config(tmp_path)
        assert (tmp_path / CONFIG_FILENAME).exists()
        assert config.namespace == DEFAULT_NAMESPACE
        assert config.medium == "sqlite"
        assert config.remote.api_url == DEFAULT_API_URL
        assert config.remote.seed_query == "oil"

    def test_round_trip(self, tmp_path):
        original = StoreConfig(
            path=tmp_path,
            namespace="test::gallery",
            medium="memory",
            remote=RemoteConfig(api_url="http://localhost:9000/", timeout=5.0,
                                max_concurrency=2, seed_query="monet"),
        )
        save_config(original)
        loaded = load_config(tmp_path)
        assert loaded.namespace == "test::gallery"
        assert loaded.medium == "memory"
        assert loaded.remote == original.remote
        assert loaded.created == original.created

    def test_env_overrides_api_url(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ARTSLAB_API_URL", "http://localhost:1234/")
        config = load_or_create_config(tmp_path)
        assert config.remote.api_url == "http://localhost:1234/"
        # Not persisted
        assert load_config(tmp_path).remote.api_url == DEFAULT_API_URL


class TestInvalidConfig:
    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)

    def test_newer_version(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text(f"[store]\nversion = {CONFIG_VERSION + 1}\n")
        with pytest.raises(ValueError, match="newer than supported"):
            load_config(tmp_path)

    def test_unknown_medium(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('[store]\nmedium = "redis"\n')
        with pytest.raises(ValueError, match="Unknown medium"):
            load_config(tmp_path)

    def test_partial_file_uses_defaults(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('[remote]\nseed_query = "ink"\n')
        config = load_config(tmp_path)
        assert config.remote.seed_query == "ink"
        assert config.remote.api_url == DEFAULT_API_URL
        assert config.medium == "sqlite"
