"""Text-returning operation surface for host processes.

Each function returns a single string: ``OK``, ``NOTE: Connected``, a JSON
listing, or ``ERR: <message>``. Hosts parse on those prefixes, so they must
not change.

The module-level functions share one process-wide `SessionManager`; use
`Bridge` directly to expose a specific manager.
"""

import json
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from remotefs.exceptions import RemotefsError
from remotefs.session import LoginStatus, SessionManager

OK = "OK"
NOTE_CONNECTED = "NOTE: Connected"
ERR_PREFIX = "ERR: "


def error(message: Union[str, BaseException]) -> str:
    return f"{ERR_PREFIX}{message}"


def is_error(result: str) -> bool:
    return result.startswith("ERR:")


class Bridge:
    def __init__(self, manager: SessionManager) -> None:
        self.manager = manager

    def login(self, host: str, port: Union[str, int], username: str, password: str) -> str:
        def run() -> str:
            status = self.manager.login(host, port, username, password)
            if status == LoginStatus.ALREADY_CONNECTED:
                return NOTE_CONNECTED
            return OK

        return self._call(run)

    def list(self, path: str) -> str:
        def run() -> str:
            entries = self.manager.list(path)
            return json.dumps(
                [entry.to_dict() for entry in entries],
                ensure_ascii=False,
                separators=(",", ":"),
            )

        return self._call(run)

    def download(self, path: str, local: str) -> str:
        return self._call(lambda: self._ok(self.manager.download(path, Path(local))))

    def upload(self, path: str, local: str) -> str:
        return self._call(lambda: self._ok(self.manager.upload(path, Path(local))))

    def delete(self, path: str) -> str:
        return self._call(lambda: self._ok(self.manager.delete(path)))

    def rename(self, path: str, new_name: str) -> str:
        return self._call(lambda: self._ok(self.manager.rename(path, new_name)))

    def disconnect(self) -> str:
        return self._call(lambda: self._ok(self.manager.disconnect()))

    def _ok(self, _result: object) -> str:
        return OK

    def _call(self, operation: Callable[[], str]) -> str:
        try:
            return operation()
        except RemotefsError as e:
            return error(e)


_default_bridge: Optional[Bridge] = None
_default_lock = threading.Lock()


def default_bridge() -> Bridge:
    """The process-wide bridge, created on first use."""
    global _default_bridge
    with _default_lock:
        if _default_bridge is None:
            _default_bridge = Bridge(SessionManager())
        return _default_bridge


def ssh_login(host: str, port: Union[str, int], username: str, password: str) -> str:
    return default_bridge().login(host, port, username, password)


def sftp_list(path: str) -> str:
    return default_bridge().list(path)


def sftp_download(path: str, local: str) -> str:
    return default_bridge().download(path, local)


def sftp_upload(path: str, local: str) -> str:
    return default_bridge().upload(path, local)


def sftp_delete(path: str) -> str:
    return default_bridge().delete(path)


def sftp_rename(path: str, new_name: str) -> str:
    return default_bridge().rename(path, new_name)


def disconnect() -> str:
    return default_bridge().disconnect()
