"""Centralized exception definitions for remotefs."""


class RemotefsError(Exception):
    """Base exception for all remotefs errors."""


# Configuration Exceptions


class ConfigError(RemotefsError):
    """Base exception for configuration errors."""


class RemoteNotFoundError(ConfigError):
    """Exception raised when a remote configuration is not found."""


class ValidationError(ConfigError):
    """Exception raised when configuration validation fails."""


# Client/Connection Exceptions


class ClientError(RemotefsError):
    """Base exception for client operation errors."""


class NotLoggedInError(ClientError):
    """No credentials were ever supplied to the session."""

    def __init__(self, message: str = "not logged in") -> None:
        super().__init__(message)


class ClientConnectionError(ClientError):
    """Failed to dial, authenticate or open the file session."""


class AuthenticationError(ClientConnectionError):
    """Authentication failed."""


class RemoteOperationError(ClientError):
    """The remote host rejected a file operation."""


class ListingError(RemoteOperationError):
    """Directory listing failed."""


class NotFoundError(RemoteOperationError):
    """Remote file or directory not found."""


class PermissionDeniedError(RemoteOperationError):
    """Permission denied on remote operation."""


class TransferError(ClientError):
    """File transfer (get/put) failed."""


class LocalIOError(TransferError):
    """Reading or writing the local side of a transfer failed."""


class PathExistsError(ClientError):
    """Rename target already exists."""

    def __init__(self, message: str = "exist path") -> None:
        super().__init__(message)
