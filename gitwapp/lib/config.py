"""
Configuration loading for gitwapp.

Settings live in an optional gitwapp.env file inside the config directory.
The result is a plain AppConfig value handed to whatever needs it; nothing
here is stored at module level.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import envparse

logger = logging.getLogger(__name__)

APP_DIR_NAME = "gitwapp"
CONFIG_FILE = "gitwapp.env"
CONFIG_DIR_ENV = "GITWAPP_CONFIG_DIR"

DEFAULT_REMOTE_NAME = "origin"
DEFAULT_NETWORK_TIMEOUT = 60
DEFAULT_TRAVERSAL_LIMIT = 10000
DEFAULT_POLL_INTERVAL = 5
DEFAULT_LOG_LEVEL = "INFO"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    """Application settings from gitwapp.env"""
    config_dir: Path
    remote_name: str = DEFAULT_REMOTE_NAME
    network_timeout: int = DEFAULT_NETWORK_TIMEOUT  # push/pull round trips
    traversal_limit: int = DEFAULT_TRAVERSAL_LIMIT  # max commits walked for ahead/behind
    poll_interval: int = DEFAULT_POLL_INTERVAL  # seconds between dashboard refreshes
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Path | None = None

    @property
    def registry_path(self) -> Path:
        return self.config_dir / "repositories.json"

    @property
    def locks_dir(self) -> Path:
        return self.config_dir / "locks"


def default_config_dir() -> Path:
    """Resolve the config directory: GITWAPP_CONFIG_DIR, then XDG, then ~/.config."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def _positive_int(env: dict, key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {key} '{raw}', using default {default}")
        return default
    if value <= 0:
        logger.warning(f"{key} must be positive, got {value}; using default {default}")
        return default
    return value


def load_app_config(config_dir: Path | None = None) -> AppConfig:
    """Load gitwapp.env from the config directory; a missing file means defaults."""
    config_dir = Path(config_dir) if config_dir else default_config_dir()

    try:
        env = envparse.load_env(config_dir / CONFIG_FILE)
    except FileNotFoundError:
        env = {}

    log_level = env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown LOG_LEVEL '{log_level}', using {DEFAULT_LOG_LEVEL}")
        log_level = DEFAULT_LOG_LEVEL

    log_file = env.get("LOG_FILE")

    return AppConfig(
        config_dir=config_dir,
        remote_name=env.get("REMOTE_NAME", DEFAULT_REMOTE_NAME) or DEFAULT_REMOTE_NAME,
        network_timeout=_positive_int(env, "NETWORK_TIMEOUT", DEFAULT_NETWORK_TIMEOUT),
        traversal_limit=_positive_int(env, "TRAVERSAL_LIMIT", DEFAULT_TRAVERSAL_LIMIT),
        poll_interval=_positive_int(env, "POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        log_level=log_level,
        log_file=Path(log_file).expanduser() if log_file else None,
    )
