"""remotefs - one shared SFTP session for many short-lived calls.

This package keeps a single authenticated SSH connection and SFTP channel
alive across calls, checks it before every operation, reconnects with the
stored credentials when it has dropped, and serializes all remote work.

Quick Start:
    from remotefs import SessionManager

    with SessionManager() as session:
        session.login("host.example.com", 22, "user", "secret")
        for entry in session.list("/var/www"):
            print(entry.name, entry.size)
        session.upload("/var/www/site", "build/site")

    # Text results for host processes
    from remotefs import bridge

    bridge.ssh_login("host.example.com", "22", "user", "secret")  # "OK"
    bridge.sftp_list("/var/www")  # '[{"type":"dir","name":"site"}]'
"""

from remotefs.async_wrapper import AsyncSessionManager
from remotefs.bridge import Bridge
from remotefs.entry import EntryKind, RemoteEntry
from remotefs.exceptions import (
    RemotefsError,
    ClientError,
    NotLoggedInError,
    ClientConnectionError,
    AuthenticationError,
    RemoteOperationError,
    NotFoundError,
    PermissionDeniedError,
    LocalIOError,
    PathExistsError,
)
from remotefs.session import EnsureResult, LoginStatus, SessionManager, SessionState

__all__ = [
    # Session
    "SessionManager",
    "AsyncSessionManager",
    "SessionState",
    "LoginStatus",
    "EnsureResult",
    "Bridge",
    # Listing
    "RemoteEntry",
    "EntryKind",
    # Exceptions
    "RemotefsError",
    "ClientError",
    "NotLoggedInError",
    "ClientConnectionError",
    "AuthenticationError",
    "RemoteOperationError",
    "NotFoundError",
    "PermissionDeniedError",
    "LocalIOError",
    "PathExistsError",
]

__version__ = "0.1.0"
