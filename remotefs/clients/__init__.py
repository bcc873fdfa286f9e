"""Transport and file-session implementations for remotefs."""

from remotefs.clients.client import (
    Connector,
    Credentials,
    FileSession,
    RemoteFile,
    Transport,
)
from remotefs.clients.sftpclient import SftpConnector, SftpFileSession, SshTransport

__all__ = [
    "Connector",
    "Credentials",
    "FileSession",
    "RemoteFile",
    "Transport",
    "SftpConnector",
    "SftpFileSession",
    "SshTransport",
]
