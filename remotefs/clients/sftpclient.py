import logging
import stat
import threading
from pathlib import PurePosixPath
from typing import List, Optional, TYPE_CHECKING

import paramiko
from paramiko.sftp_attr import SFTPAttributes
from paramiko.ssh_exception import AuthenticationException, SSHException

from remotefs.clients.client import (
    Connector,
    Credentials,
    FileSession,
    RemoteFile,
    Transport,
)
from remotefs.entry import EntryKind, RemoteEntry
from remotefs.exceptions import (
    AuthenticationError,
    ClientConnectionError,
    ListingError,
    NotFoundError,
    PermissionDeniedError,
    RemoteOperationError,
)

if TYPE_CHECKING:
    from remotefs.config import SessionSettings

logger = logging.getLogger(__name__)

# A dropped link surfaces from paramiko as either of these.
_LINK_ERRORS = (SSHException, EOFError)

KEEPALIVE_REQUEST = "keepalive@openssh.com"


def _remote_error(exc: BaseException, default: type = RemoteOperationError) -> Exception:
    if isinstance(exc, _LINK_ERRORS):
        return ClientConnectionError(str(exc) or type(exc).__name__)
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(str(exc))
    if isinstance(exc, PermissionError):
        return PermissionDeniedError(str(exc))
    return default(str(exc))


class SftpFile(RemoteFile):
    def __init__(self, handle: paramiko.SFTPFile) -> None:
        self._handle = handle

    def read(self, size: int) -> bytes:
        try:
            return self._handle.read(size)
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e

    def write(self, data: bytes) -> None:
        try:
            self._handle.write(data)
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e

    def close(self) -> None:
        try:
            self._handle.close()
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e


class SftpFileSession(FileSession):
    def __init__(self, sftp_client: paramiko.SFTPClient) -> None:
        self.sftp_client: Optional[paramiko.SFTPClient] = sftp_client

    def _sftp(self) -> paramiko.SFTPClient:
        assert self.sftp_client is not None, "File session closed"
        return self.sftp_client

    def listdir(self, remote: PurePosixPath) -> List[RemoteEntry]:
        try:
            attrs = self._sftp().listdir_attr(self._format_path(remote))
        except (SSHException, EOFError, OSError, UnicodeError) as e:
            raise _remote_error(e, ListingError) from e
        return [self._attr_to_entry(attr, attr.filename) for attr in attrs]

    def stat(self, remote: PurePosixPath) -> RemoteEntry:
        try:
            attr = self._sftp().stat(self._format_path(remote))
        except (SSHException, EOFError, OSError, UnicodeError) as e:
            raise _remote_error(e) from e
        return self._attr_to_entry(attr, remote.name or remote.as_posix())

    def open_read(self, remote: PurePosixPath) -> RemoteFile:
        path = self._format_path(remote)
        try:
            handle = self._sftp().open(path, "rb")
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e
        try:
            # Read-ahead in the background; read() drains the buffer.
            handle.prefetch()
        except (SSHException, EOFError, OSError) as e:
            try:
                handle.close()
            except Exception as close_error:
                logger.debug("Ignoring error while closing %s: %s", path, close_error)
            raise _remote_error(e) from e
        return SftpFile(handle)

    def open_write(self, remote: PurePosixPath) -> RemoteFile:
        path = self._format_path(remote)
        try:
            handle = self._sftp().open(path, "wb")
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e
        # Pipelined: write errors are reported by close().
        handle.set_pipelined(True)
        return SftpFile(handle)

    def mkdir(self, remote: PurePosixPath) -> None:
        try:
            self._sftp().mkdir(self._format_path(remote))
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e

    def remove(self, remote: PurePosixPath) -> None:
        try:
            self._sftp().remove(self._format_path(remote))
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e

    def rmdir(self, remote: PurePosixPath) -> None:
        try:
            self._sftp().rmdir(self._format_path(remote))
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e

    def rename(self, old: PurePosixPath, new: PurePosixPath) -> None:
        try:
            self._sftp().rename(self._format_path(old), self._format_path(new))
        except (SSHException, EOFError, OSError) as e:
            raise _remote_error(e) from e

    def close(self) -> None:
        if self.sftp_client is None:
            return
        try:
            self.sftp_client.close()
        except Exception as e:
            logger.debug("Ignoring error while closing SFTP channel: %s", e)
        self.sftp_client = None

    def _format_path(self, path: PurePosixPath) -> str:
        return path.as_posix()

    def _attr_to_entry(self, attr: SFTPAttributes, name: str) -> RemoteEntry:
        if attr.st_mode is not None and stat.S_ISDIR(attr.st_mode):
            return RemoteEntry(name=name, kind=EntryKind.DIRECTORY)
        return RemoteEntry(
            name=name,
            kind=EntryKind.FILE,
            size=attr.st_size if attr.st_size is not None else 0,
        )


class SshTransport(Transport):
    def __init__(self, ssh_client: paramiko.SSHClient, name: str) -> None:
        self.ssh_client = ssh_client
        self._name = name

    def name(self) -> str:
        return self._name

    def is_active(self) -> bool:
        transport = self.ssh_client.get_transport()
        return transport is not None and transport.is_active()

    def run(self, command: str, timeout: float) -> int:
        transport = self.ssh_client.get_transport()
        if transport is None or not transport.is_active():
            raise ClientConnectionError("transport is closed")

        try:
            channel = transport.open_session(timeout=timeout)
        except (SSHException, EOFError, OSError) as e:
            raise ClientConnectionError(f"Failed to open channel: {e}") from e

        try:
            channel.exec_command(command)
            if not channel.status_event.wait(timeout):
                raise ClientConnectionError(
                    f"No exit status for '{command}' within {timeout}s"
                )
            return channel.recv_exit_status()
        except (SSHException, EOFError, OSError) as e:
            raise ClientConnectionError(str(e)) from e
        finally:
            channel.close()

    def keepalive(self, timeout: float) -> None:
        transport = self.ssh_client.get_transport()
        if transport is None or not transport.is_active():
            raise ClientConnectionError("transport is closed")

        errors: List[BaseException] = []

        def request() -> None:
            # Blocks until the peer answers or the transport goes inactive.
            # A denial still proves the peer is there.
            try:
                transport.global_request(KEEPALIVE_REQUEST, wait=True)
            except Exception as e:
                errors.append(e)

        worker = threading.Thread(
            target=request, name=f"keepalive {self._name}", daemon=True
        )
        worker.start()
        worker.join(timeout)

        if worker.is_alive():
            raise ClientConnectionError(f"No keepalive reply within {timeout}s")
        if errors:
            raise ClientConnectionError(str(errors[0])) from errors[0]
        if not transport.is_active():
            raise ClientConnectionError("transport closed during keepalive")

    def open_file_session(self) -> SftpFileSession:
        try:
            sftp_client = self.ssh_client.open_sftp()
        except (SSHException, EOFError, OSError) as e:
            raise ClientConnectionError(f"Failed to open SFTP session: {e}") from e
        return SftpFileSession(sftp_client)

    def close(self) -> None:
        try:
            self.ssh_client.close()
        except Exception as e:
            logger.debug("Ignoring error while closing SSH connection: %s", e)


class SftpConnector(Connector):
    def __init__(
        self,
        *,
        dial_timeout: float = 5.0,
        trust_any_host_key: bool = True,
    ) -> None:
        """
        Initialize the connector.

        Args:
            dial_timeout: Seconds allowed for TCP connect, banner and authentication
            trust_any_host_key: Accept unknown host keys. When False, the system
                known-hosts file is loaded and unknown hosts are rejected.
        """
        self.dial_timeout = dial_timeout
        self.trust_any_host_key = trust_any_host_key

    @classmethod
    def from_settings(cls, settings: "SessionSettings") -> "SftpConnector":
        return cls(
            dial_timeout=settings.dial_timeout,
            trust_any_host_key=settings.trust_any_host_key,
        )

    def dial(self, credentials: Credentials) -> SshTransport:
        ssh_client = paramiko.SSHClient()
        if self.trust_any_host_key:
            ssh_client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        else:
            ssh_client.load_system_host_keys()
            ssh_client.set_missing_host_key_policy(paramiko.RejectPolicy())

        try:
            ssh_client.connect(
                hostname=credentials.host,
                port=credentials.port,
                username=credentials.username,
                password=credentials.secret,
                timeout=self.dial_timeout,
                banner_timeout=self.dial_timeout,
                auth_timeout=self.dial_timeout,
                look_for_keys=False,
                allow_agent=False,
            )
        except AuthenticationException as e:
            ssh_client.close()
            raise AuthenticationError(str(e)) from e
        except (SSHException, EOFError, OSError) as e:
            ssh_client.close()
            raise ClientConnectionError(str(e)) from e

        logger.info("Connected to %s as %s", credentials.address, credentials.username)
        return SshTransport(ssh_client, name=f"SFTP:{credentials.host}")
