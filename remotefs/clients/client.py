from abc import abstractmethod, ABCMeta
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from types import TracebackType
from typing import List, Optional

from remotefs.entry import RemoteEntry


@dataclass(frozen=True)
class Credentials:
    host: str
    port: int
    username: str
    secret: str = field(repr=False)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class RemoteFile(AbstractContextManager, metaclass=ABCMeta):
    """An open remote file. Errors surface as `RemotefsError` subclasses."""

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; an empty result means end of file."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all of ``data``."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release the handle."""


class FileSession(AbstractContextManager, metaclass=ABCMeta):
    """File-protocol channel multiplexed over a `Transport`."""

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    @abstractmethod
    def listdir(self, remote: PurePosixPath) -> List[RemoteEntry]:
        """
        List the entries of a remote directory.

        Args:
            remote: The remote directory to list

        Returns:
            Entries in the order the host returned them
        """

    @abstractmethod
    def stat(self, remote: PurePosixPath) -> RemoteEntry:
        """
        Describe a single remote path.

        Raises:
            NotFoundError: If the path does not exist
        """

    @abstractmethod
    def open_read(self, remote: PurePosixPath) -> RemoteFile:
        """Open a remote file read-only."""

    @abstractmethod
    def open_write(self, remote: PurePosixPath) -> RemoteFile:
        """Create or truncate a remote file and open it for writing."""

    @abstractmethod
    def mkdir(self, remote: PurePosixPath) -> None:
        """Create a single remote directory; the parent must exist."""

    @abstractmethod
    def remove(self, remote: PurePosixPath) -> None:
        """Delete a remote file."""

    @abstractmethod
    def rmdir(self, remote: PurePosixPath) -> None:
        """Delete an empty remote directory."""

    @abstractmethod
    def rename(self, old: PurePosixPath, new: PurePosixPath) -> None:
        """Move a remote path."""

    @abstractmethod
    def close(self) -> None:
        """Release the channel. Must be safe to call on a dead transport."""


class Transport(AbstractContextManager, metaclass=ABCMeta):
    """One authenticated secure-shell connection to a single endpoint."""

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    @abstractmethod
    def name(self) -> str:
        """
        Name of the endpoint represented by the transport.

        :return:
            A string representing a human-readable name.
        """

    @abstractmethod
    def is_active(self) -> bool:
        """Local view of whether the connection is open. Does no I/O."""

    @abstractmethod
    def run(self, command: str, timeout: float) -> int:
        """
        Execute a command on a fresh channel and wait for it to finish.

        Args:
            command: The command line to execute
            timeout: Seconds to wait for the exit status

        Returns:
            The command's exit status

        Raises:
            ClientConnectionError: If the channel cannot be opened or the
                command does not finish within ``timeout``
        """

    @abstractmethod
    def keepalive(self, timeout: float) -> None:
        """
        Send a transport-level request and wait for any reply, accepted or
        denied. Needs no shell on the remote side.

        Raises:
            ClientConnectionError: If no reply arrives within ``timeout``
        """

    @abstractmethod
    def open_file_session(self) -> FileSession:
        """Open a file-protocol channel over this transport."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection. Must not raise for an already dead link."""


class Connector(metaclass=ABCMeta):
    """Dials and authenticates new transports."""

    @abstractmethod
    def dial(self, credentials: Credentials) -> Transport:
        """
        Open and authenticate a transport.

        Raises:
            ClientConnectionError: If the endpoint cannot be reached
            AuthenticationError: If the credentials are rejected
        """
