"""Configuration management for remotefs."""

from .base import Config, ConfigError, RemoteNotFoundError, ValidationError
from .remotes import RemoteConfig, SessionSettings

__all__ = [
    "Config",
    "ConfigError",
    "RemoteNotFoundError",
    "ValidationError",
    "RemoteConfig",
    "SessionSettings",
]
