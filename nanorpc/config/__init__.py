"""Configuration module for nanorpc."""

from nanorpc.config.loader import load_config, get_config_path, save_config
from nanorpc.config.schema import Config, LoggingConfig, ServerConfig

__all__ = [
    "Config",
    "LoggingConfig",
    "ServerConfig",
    "load_config",
    "save_config",
    "get_config_path",
]
