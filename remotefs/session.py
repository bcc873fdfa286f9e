"""The shared connection and the operations that run over it.

A `SessionManager` owns at most one transport/file-session pair together
with the credentials needed to recreate it. Every public operation holds
one lock for its whole duration, checks the pair with the liveness prober,
reconnects once if needed, and only then touches the remote host.

Example usage:

    manager = SessionManager()
    manager.login("host.example.com", 22, "deploy", secret)
    for entry in manager.list("/srv"):
        print(entry)
    manager.upload("/srv/site", "build/site")
    manager.disconnect()
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path, PurePosixPath
from types import TracebackType
from typing import Iterator, List, Optional, Union
from typing_extensions import Self

from remotefs.clients.client import Connector, Credentials, FileSession, Transport
from remotefs.clients.sftpclient import SftpConnector
from remotefs.config.remotes import SessionSettings
from remotefs.entry import RemoteEntry
from remotefs.exceptions import (
    ClientConnectionError,
    NotFoundError,
    NotLoggedInError,
    PathExistsError,
)
from remotefs.probe import LivenessProber, prober_from_settings
from remotefs.transfer import TransferEngine

logger = logging.getLogger(__name__)

RemotePath = Union[str, PurePosixPath]
LocalPath = Union[str, Path]


class SessionState(Enum):
    DISCONNECTED = auto()
    CONNECTED = auto()


class LoginStatus(Enum):
    CONNECTED = auto()
    ALREADY_CONNECTED = auto()


class EnsureResult(Enum):
    ALREADY_CONNECTED = auto()
    RECONNECTED = auto()


@dataclass
class _ConnectionPair:
    transport: Transport
    file_session: FileSession

    def close(self) -> None:
        # Both handles are being abandoned; close errors carry no information.
        for handle in (self.file_session, self.transport):
            try:
                handle.close()
            except Exception as e:
                logger.debug("Ignoring error while closing %r: %s", handle, e)


def _remote_path(path: RemotePath) -> PurePosixPath:
    if isinstance(path, PurePosixPath):
        return path
    return PurePosixPath(path)


def _parse_port(port: Union[int, str]) -> int:
    if isinstance(port, bool):
        raise ClientConnectionError(f"invalid port {port!r}")
    try:
        number = int(port)
    except (TypeError, ValueError):
        raise ClientConnectionError(f"invalid port {port!r}")
    if not 0 < number < 65536:
        raise ClientConnectionError(f"invalid port {port!r}")
    return number


class SessionManager:
    def __init__(
        self,
        connector: Optional[Connector] = None,
        prober: Optional[LivenessProber] = None,
        settings: Optional[SessionSettings] = None,
    ) -> None:
        """
        Initialize a disconnected session.

        Args:
            connector: Dials new transports (default: paramiko SFTP over SSH)
            prober: Decides whether an existing transport is usable
                    (default: chosen by ``settings.probe``)
            settings: Timeouts and transfer tuning
        """
        self.settings = settings if settings else SessionSettings()
        self._connector = (
            connector if connector else SftpConnector.from_settings(self.settings)
        )
        self._prober = prober if prober else prober_from_settings(self.settings)

        # Guards everything below. Never re-acquired by helpers.
        self._lock = threading.Lock()
        self._credentials: Optional[Credentials] = None
        self._pair: Optional[_ConnectionPair] = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    @property
    def state(self) -> SessionState:
        with self._lock:
            if self._pair is None:
                return SessionState.DISCONNECTED
            return SessionState.CONNECTED

    @property
    def is_logged_in(self) -> bool:
        """True once a login has succeeded, even if the link is currently down."""
        with self._lock:
            return self._credentials is not None

    def login(
        self, host: str, port: Union[int, str], username: str, secret: str
    ) -> LoginStatus:
        """
        Open the shared connection.

        A healthy existing connection is kept as is, whatever credentials are
        passed. A dead one is torn down and replaced.

        Args:
            port: An int, or its decimal text as passed by host processes

        Raises:
            ClientConnectionError: If the port is invalid, or dialing or
                opening the file session fails; the session is left
                disconnected.
        """
        with self._lock:
            logger.debug("login %s@%s:%s", username, host, port)
            if self._pair is not None:
                if self._prober.is_alive(self._pair.transport):
                    return LoginStatus.ALREADY_CONNECTED
                logger.warning(
                    "Connection %s is no longer usable; replacing it",
                    self._pair.transport.name(),
                )
                self._teardown()

            credentials = Credentials(
                host=host, port=_parse_port(port), username=username, secret=secret
            )
            self._pair = self._open_pair(credentials)
            self._credentials = credentials
            return LoginStatus.CONNECTED

    def ensure_connected(self) -> EnsureResult:
        with self._lock:
            return self._ensure_connected()

    def list(self, remote_path: RemotePath) -> List[RemoteEntry]:
        """List a remote directory in the order the host returns it."""
        with self._connected("list", remote_path) as file_session:
            return file_session.listdir(_remote_path(remote_path))

    def download(self, remote_path: RemotePath, local_dir: LocalPath) -> Path:
        """
        Copy a remote file into an existing local directory.

        Returns:
            The path of the written local file
        """
        with self._connected("download", remote_path) as file_session:
            engine = TransferEngine(file_session, self.settings.buffer_size)
            return engine.download_file(_remote_path(remote_path), Path(local_dir))

    def upload(self, remote_path: RemotePath, local_path: LocalPath) -> None:
        """
        Copy a local file to ``remote_path``, or mirror a local directory tree
        below it.
        """
        with self._connected("upload", remote_path) as file_session:
            engine = TransferEngine(file_session, self.settings.buffer_size)
            engine.upload(Path(local_path), _remote_path(remote_path))

    def delete(self, remote_path: RemotePath) -> None:
        """Remove a remote file or an empty remote directory."""
        path = _remote_path(remote_path)
        with self._connected("delete", remote_path) as file_session:
            entry = file_session.stat(path)
            if entry.is_directory:
                file_session.rmdir(path)
            else:
                file_session.remove(path)

    def rename(self, old_path: RemotePath, new_name: str) -> PurePosixPath:
        """
        Rename ``old_path`` to ``new_name`` within the same directory.

        Returns:
            The new remote path

        Raises:
            PathExistsError: If the target already exists; nothing is changed
        """
        old = _remote_path(old_path)
        new = old.parent / new_name.lstrip("/")
        with self._connected("rename", old_path) as file_session:
            file_session.stat(old)
            try:
                file_session.stat(new)
            except NotFoundError:
                pass
            else:
                raise PathExistsError()
            file_session.rename(old, new)
        return new

    def disconnect(self) -> None:
        """
        Close the shared connection but keep the credentials, so the next
        operation or login can reconnect.

        Raises:
            NotLoggedInError: If no login ever succeeded
        """
        with self._lock:
            if self._credentials is None:
                raise NotLoggedInError()
            if self._pair is not None:
                name = self._pair.transport.name()
                self._teardown()
                logger.info("Disconnected from %s", name)

    def close(self) -> None:
        """Tear down the connection and forget the credentials."""
        with self._lock:
            self._teardown()
            self._credentials = None

    @contextmanager
    def _connected(self, operation: str, path: RemotePath) -> Iterator[FileSession]:
        with self._lock:
            logger.debug("%s %s", operation, path)
            self._ensure_connected()
            assert self._pair is not None
            yield self._pair.file_session

    def _ensure_connected(self) -> EnsureResult:
        if self._pair is not None:
            if self._prober.is_alive(self._pair.transport):
                return EnsureResult.ALREADY_CONNECTED
            logger.warning(
                "Connection %s is no longer usable; reconnecting",
                self._pair.transport.name(),
            )
            self._teardown()

        if self._credentials is None:
            raise NotLoggedInError()

        self._pair = self._open_pair(self._credentials)
        logger.info("Reconnected to %s", self._credentials.address)
        return EnsureResult.RECONNECTED

    def _open_pair(self, credentials: Credentials) -> _ConnectionPair:
        transport = self._connector.dial(credentials)
        try:
            file_session = transport.open_file_session()
        except BaseException:
            transport.close()
            raise
        return _ConnectionPair(transport=transport, file_session=file_session)

    def _teardown(self) -> None:
        if self._pair is not None:
            pair, self._pair = self._pair, None
            pair.close()
