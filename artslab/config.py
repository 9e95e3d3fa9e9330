"""
Configuration management for artslab stores.

The configuration is stored as a TOML file in the store directory.
It names the persistence medium, the storage namespace and the remote
collection API settings.
"""

import os
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import tomli_w

from .gallery import DEFAULT_SEED_QUERY
from .museum_client import DEFAULT_API_URL, DEFAULT_MAX_CONCURRENCY, DEFAULT_TIMEOUT
from .record_store import DEFAULT_NAMESPACE


CONFIG_FILENAME = "artslab.toml"
CONFIG_VERSION = 1

MEDIUMS = ("sqlite", "memory")


@dataclass
class RemoteConfig:
    """Settings for the museum collection API."""
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    seed_query: str = DEFAULT_SEED_QUERY


@dataclass
class StoreConfig:
    """Complete store configuration."""
    path: Path
    version: int = CONFIG_VERSION
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    namespace: str = DEFAULT_NAMESPACE
    medium: str = "sqlite"
    remote: RemoteConfig = field(default_factory=RemoteConfig)

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()


def get_store_path(override: Path | None = None) -> Path:
    """
    Resolve the store directory.

    Priority: explicit override, ARTSLAB_STORE_PATH, ~/.artslab
    """
    if override is not None:
        return Path(override).expanduser()
    env_path = os.environ.get("ARTSLAB_STORE_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".artslab"


def load_config(store_path: Path) -> StoreConfig:
    """
    Load configuration from a store directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = store_path / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    store = data.get("store", {})
    version = store.get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    medium = store.get("medium", "sqlite")
    if medium not in MEDIUMS:
        raise ValueError(f"Unknown medium {medium!r} in {config_path} (expected one of: {', '.join(MEDIUMS)})")

    remote = data.get("remote", {})
    defaults = RemoteConfig()
    return StoreConfig(
        path=store_path,
        version=version,
        created=store.get("created", ""),
        namespace=store.get("namespace", DEFAULT_NAMESPACE),
        medium=medium,
        remote=RemoteConfig(
            api_url=remote.get("api_url", defaults.api_url),
            timeout=float(remote.get("timeout", defaults.timeout)),
            max_concurrency=int(remote.get("max_concurrency", defaults.max_concurrency)),
            seed_query=remote.get("seed_query", defaults.seed_query),
        ),
    )


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the store directory.

    Creates the directory if it doesn't exist.
    """
    config.path.mkdir(parents=True, exist_ok=True)

    data = {
        "store": {
            "version": config.version,
            "created": config.created,
            "namespace": config.namespace,
            "medium": config.medium,
        },
        "remote": {
            "api_url": config.remote.api_url,
            "timeout": config.remote.timeout,
            "max_concurrency": config.remote.max_concurrency,
            "seed_query": config.remote.seed_query,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def apply_env_overrides(config: StoreConfig) -> StoreConfig:
    """Apply environment overrides (not persisted)."""
    api_url = os.environ.get("ARTSLAB_API_URL")
    if api_url:
        config.remote.api_url = api_url
    return config


def load_or_create_config(store_path: Path) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    config_path = store_path / CONFIG_FILENAME

    if config_path.exists():
        config = load_config(store_path)
    else:
        config = StoreConfig(path=store_path)
        save_config(config)
    return apply_env_overrides(config)
