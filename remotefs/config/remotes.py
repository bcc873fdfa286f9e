import logging
from dataclasses import dataclass
from typing import Dict, Any

from remotefs.exceptions import ValidationError

PROBES = ("exec", "keepalive")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _validate_port(port: Any, what: str) -> None:
    if not isinstance(port, int) or isinstance(port, bool) or port < 1 or port > 65535:
        raise ValidationError(f"{what} port must be an integer between 1 and 65535")


@dataclass
class SessionSettings:
    """Tunables for the shared connection; secrets never live here."""

    dial_timeout: float = 5.0
    probe: str = "exec"
    probe_timeout: float = 5.0
    probe_command: str = "true"
    buffer_size: int = 32768
    trust_any_host_key: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionSettings":
        defaults = cls()
        settings = cls(
            dial_timeout=data.get("dial_timeout", defaults.dial_timeout),
            probe=data.get("probe", defaults.probe),
            probe_timeout=data.get("probe_timeout", defaults.probe_timeout),
            probe_command=data.get("probe_command", defaults.probe_command),
            buffer_size=data.get("buffer_size", defaults.buffer_size),
            trust_any_host_key=data.get(
                "trust_any_host_key", defaults.trust_any_host_key
            ),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        for key in ("dial_timeout", "probe_timeout"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValidationError(f"'{key}' must be a positive number")

        if self.probe not in PROBES:
            raise ValidationError(f"'probe' must be one of {', '.join(PROBES)}")

        if not isinstance(self.probe_command, str) or not self.probe_command.strip():
            raise ValidationError("'probe_command' cannot be empty")

        if (
            isinstance(self.buffer_size, bool)
            or not isinstance(self.buffer_size, int)
            or self.buffer_size <= 0
        ):
            raise ValidationError("'buffer_size' must be a positive integer")

        if not isinstance(self.trust_any_host_key, bool):
            raise ValidationError("'trust_any_host_key' must be a boolean")

        if self.log_level not in _LOG_LEVELS:
            raise ValidationError(
                f"'log_level' must be one of {', '.join(_LOG_LEVELS)}"
            )

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level)


@dataclass
class RemoteConfig:
    name: str
    host: str
    port: int = 22
    username: str = ""

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "RemoteConfig":
        if "host" not in data:
            raise ValidationError("Remote configuration requires 'host' field")

        if "password" in data or "secret" in data:
            raise ValidationError("Secrets must not be stored in the configuration")

        return cls(
            name=name,
            host=data["host"],
            port=data.get("port", 22),
            username=data.get("username", ""),
        )

    def validate(self) -> None:
        if not self.host:
            raise ValidationError("Remote host cannot be empty")

        _validate_port(self.port, "Remote")

        if not isinstance(self.username, str):
            raise ValidationError("Remote username must be a string")
