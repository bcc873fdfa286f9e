"""Asyncio facade over a `SessionManager`."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath
from types import TracebackType
from typing import Callable, List, Optional, TypeVar, Union
from typing_extensions import Self

from remotefs.entry import RemoteEntry
from remotefs.session import (
    EnsureResult,
    LocalPath,
    LoginStatus,
    RemotePath,
    SessionManager,
)

T = TypeVar("T")


class AsyncSessionManager:
    """Runs the blocking session operations on a thread pool.

    The wrapped manager's lock still serializes remote work, so extra
    workers only let callers queue up without blocking the event loop.

    Example:
        async with AsyncSessionManager(SessionManager()) as session:
            await session.login("host", 22, "user", secret)
            entries = await session.list("/")
    """

    def __init__(
        self,
        manager: SessionManager,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        """
        Initialize the async wrapper.

        Args:
            manager: The synchronous session manager to wrap
            executor: Optional thread pool executor. If not provided,
                     a default executor with 4 workers will be created.
        """
        self.manager = manager
        self._executor = executor
        self._owns_executor = executor is None

    async def __aenter__(self) -> Self:
        if self._owns_executor and self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=4)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Close the session and clean up the executor."""
        await self._run(self.manager.close)

        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    async def login(
        self, host: str, port: Union[int, str], username: str, secret: str
    ) -> LoginStatus:
        return await self._run(lambda: self.manager.login(host, port, username, secret))

    async def ensure_connected(self) -> EnsureResult:
        return await self._run(self.manager.ensure_connected)

    async def list(self, remote_path: RemotePath) -> List[RemoteEntry]:
        return await self._run(lambda: self.manager.list(remote_path))

    async def download(self, remote_path: RemotePath, local_dir: LocalPath) -> Path:
        return await self._run(lambda: self.manager.download(remote_path, local_dir))

    async def upload(self, remote_path: RemotePath, local_path: LocalPath) -> None:
        await self._run(lambda: self.manager.upload(remote_path, local_path))

    async def delete(self, remote_path: RemotePath) -> None:
        await self._run(lambda: self.manager.delete(remote_path))

    async def rename(self, old_path: RemotePath, new_name: str) -> PurePosixPath:
        return await self._run(lambda: self.manager.rename(old_path, new_name))

    async def disconnect(self) -> None:
        await self._run(self.manager.disconnect)

    async def _run(self, func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func)
