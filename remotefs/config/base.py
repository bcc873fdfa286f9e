import tomllib
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, IO, List

from remotefs.exceptions import ConfigError, RemoteNotFoundError, ValidationError
from remotefs.config.remotes import RemoteConfig, SessionSettings

__all__ = ["ConfigError", "RemoteNotFoundError", "ValidationError", "Config"]


@dataclass
class Config:
    settings: SessionSettings = field(default_factory=SessionSettings)
    remotes: Dict[str, RemoteConfig] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_file(cls, config_file: Optional[IO[bytes]]) -> "Config":
        """Load configuration from a TOML file.

        Args:
            config_file: Open file handle to TOML configuration file

        Returns:
            Config instance with session settings and all remotes loaded

        Raises:
            ConfigError: If configuration file cannot be loaded or parsed
            ValidationError: If the session settings are invalid
        """
        if config_file is None:
            raise ConfigError("Configuration file not provided")

        try:
            config_data = tomllib.load(config_file)
        except Exception as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}")

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "Config":
        session_data = config_data.get("session", {})
        if not isinstance(session_data, dict):
            raise ValidationError("'session' must be a table")
        settings = SessionSettings.from_dict(session_data)

        remotes = {}
        warnings = []

        remotes_data = config_data.get("remotes", {})
        if not isinstance(remotes_data, dict):
            raise ValidationError("'remotes' must be a table")

        for remote_name, remote_data in remotes_data.items():
            try:
                if not isinstance(remote_data, dict):
                    warnings.append(
                        f"Remote '{remote_name}' configuration must be a dictionary - skipping"
                    )
                    continue

                remote_config = RemoteConfig.from_dict(remote_name, remote_data)
                remote_config.validate()
                remotes[remote_name] = remote_config
            except Exception as e:
                warnings.append(
                    f"Invalid configuration for remote '{remote_name}': {e} - skipping"
                )

        for key in config_data:
            if key not in ("session", "remotes"):
                warnings.append(f"Unknown section '{key}' - ignoring")

        config = cls(settings=settings, remotes=remotes, warnings=warnings)
        config.validate()
        return config

    def get_remote(self, name: str) -> RemoteConfig:
        """Get a remote configuration by name.

        Raises:
            RemoteNotFoundError: If remote configuration is not found
        """
        if name not in self.remotes:
            available = ", ".join(self.remotes.keys())
            raise RemoteNotFoundError(
                f"Remote '{name}' not found in configuration. "
                f"Available remotes: {available}"
            )

        return self.remotes[name]

    def validate(self) -> None:
        """Validate the entire configuration.

        Raises:
            ValidationError: If configuration is invalid
        """
        self.settings.validate()

        for remote_name, remote_config in self.remotes.items():
            try:
                remote_config.validate()
            except ValidationError as e:
                raise ValidationError(f"Remote '{remote_name}': {e}")

    def get_warnings(self) -> List[str]:
        """Get list of configuration warnings."""
        return self.warnings.copy()
