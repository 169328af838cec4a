"""
Configuration management for Jotter.

Uses XDG base directories:
- Config: ~/.config/jotter/config.toml
- Data: ~/jotter/ (the preference database lives here)
"""

from pathlib import Path
from typing import Any
import logging
import os

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_DATA_HOME = Path.home() / "jotter"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/jotter)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", DEFAULT_CONFIG_HOME))
    return base / "jotter"


def get_jotter_home() -> Path:
    """Get the jotter data directory (~/jotter or JOTTER_HOME)."""
    if env_home := os.environ.get("JOTTER_HOME"):
        return Path(env_home)
    return DEFAULT_DATA_HOME


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def get_db_path() -> Path:
    """Get the path to jotter.db."""
    return get_jotter_home() / "jotter.db"


def ensure_dirs() -> None:
    """Ensure all required directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_jotter_home().mkdir(parents=True, exist_ok=True)


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Returns default config if file doesn't exist. Sections missing from
    the file are filled in from the defaults.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return get_default_config()

    # Lazy import tomli only when needed
    import tomli

    with open(config_path, "rb") as f:
        user_config = tomli.load(f)

    return merge_config(get_default_config(), user_config)


def merge_config(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge user config over defaults, one table level deep."""
    merged = {section: dict(values) for section, values in defaults.items()}
    for section, values in overrides.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "jotter": {
            "home": str(get_jotter_home()),
        },
        "store": {
            "key": "SavedNotes",
        },
        "normalizer": {
            "language": "en",
        },
        "logging": {
            "level": os.environ.get("JOTTER_LOG_LEVEL", "WARNING"),
        },
        "telegram": {},
    }


def configure_logging(level: str | int | None = None) -> None:
    """Set up root logging on stderr."""
    if level is None:
        level = load_config().get("logging", {}).get("level", "WARNING")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(format=LOG_FORMAT, level=level)
