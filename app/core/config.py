"""
Application configuration following kkb_fastapi pattern.

Configuration lives in per-environment TOML files under app/configs.
"""
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import toml

from app.utils.constants import ConfigFile

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"


class Config:
    """Parsed TOML configuration for one environment."""

    def __init__(self, config_file: str):
        self.config_file = config_file
        self.path = CONFIG_DIR / config_file
        self.data: dict[str, Any] = toml.load(self.path)

    def __repr__(self):
        return f"<Config: {self.config_file}>"


@lru_cache
def get_config(config_file: str = ConfigFile.DEVELOPMENT) -> Config:
    """
    Load configuration from a TOML file in app/configs.

    Args:
        config_file: Configuration file name (e.g., "production.toml")

    Returns:
        Config instance with parsed data
    """
    logging.debug(f"Loading configuration from {config_file}")
    return Config(config_file)


def get_environment_config() -> Config:
    """Load the configuration selected by the ENVIRONMENT variable."""
    env = os.getenv("ENVIRONMENT", "development")
    return get_config(f"{env}.toml")


__all__ = ["Config", "ConfigFile", "get_config", "get_environment_config"]
