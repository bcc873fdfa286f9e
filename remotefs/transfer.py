"""Streaming file transfers and recursive directory upload over a `FileSession`.

Every function here runs with the session lock already held by the caller
and never acquires it.
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Callable, TypeVar

from remotefs.clients.client import FileSession
from remotefs.exceptions import LocalIOError, NotFoundError, RemoteOperationError

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 32768

T = TypeVar("T")


def _local(func: Callable[..., T]) -> Callable[..., T]:
    def call(*args: object) -> T:
        # open() raises ValueError for a path with an embedded NUL byte.
        try:
            return func(*args)
        except (OSError, ValueError) as e:
            raise LocalIOError(str(e)) from e

    return call


class TransferEngine:
    def __init__(
        self, file_session: FileSession, buffer_size: int = DEFAULT_BUFFER_SIZE
    ) -> None:
        self.file_session = file_session
        self.buffer_size = buffer_size

    def download_file(self, remote: PurePosixPath, local_dir: Path) -> Path:
        """
        Copy a remote file into ``local_dir`` under its own base name.

        ``local_dir`` must already exist. A local file left half written by a
        failed copy is not removed.

        Returns:
            The path of the local file
        """
        target = local_dir / remote.name
        with self.file_session.open_read(remote) as remote_file:
            local_file = _local(open)(target, "wb")
            with local_file:
                size = self._copy(remote_file.read, _local(local_file.write))
        logger.debug("Downloaded %s to %s (%d bytes)", remote, target, size)
        return target

    def upload_file(self, local: Path, remote: PurePosixPath) -> int:
        """Create or truncate ``remote`` and fill it with the bytes of ``local``."""
        local_file = _local(open)(local, "rb")
        with local_file:
            with self.file_session.open_write(remote) as remote_file:
                size = self._copy(_local(local_file.read), remote_file.write)
        logger.debug("Uploaded %s to %s (%d bytes)", local, remote, size)
        return size

    def upload_directory(self, local_dir: Path, remote_dir: PurePosixPath) -> None:
        """
        Mirror a local directory tree below ``remote_dir``.

        Remote directories are created when missing; existing ones are reused.
        The first failure aborts the walk and nothing already written is
        rolled back.
        """
        entries = _local(self._scan)(local_dir)
        self.ensure_remote_dir(remote_dir)

        for entry in entries:
            child_remote = remote_dir / entry.name
            if entry.is_dir(follow_symlinks=False):
                self.upload_directory(Path(entry.path), child_remote)
            else:
                self.upload_file(Path(entry.path), child_remote)

    def upload(self, local: Path, remote: PurePosixPath) -> None:
        if local.is_dir():
            self.upload_directory(local, remote)
        else:
            self.upload_file(local, remote)

    def ensure_remote_dir(self, remote_dir: PurePosixPath) -> None:
        """Create ``remote_dir`` and any missing parents."""
        try:
            entry = self.file_session.stat(remote_dir)
        except NotFoundError:
            parent = remote_dir.parent
            if parent != remote_dir:
                self.ensure_remote_dir(parent)
            self.file_session.mkdir(remote_dir)
            return

        if not entry.is_directory:
            raise RemoteOperationError(
                f"'{remote_dir.as_posix()}' exists and is not a directory"
            )

    def _scan(self, local_dir: Path) -> list:
        with os.scandir(local_dir) as it:
            return list(it)

    def _copy(
        self, read: Callable[[int], bytes], write: Callable[[bytes], object]
    ) -> int:
        total = 0
        while True:
            chunk = read(self.buffer_size)
            if not chunk:
                return total
            write(chunk)
            total += len(chunk)
