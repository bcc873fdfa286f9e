"""Liveness checks for an established transport."""

import logging
from abc import ABCMeta, abstractmethod
from typing import TYPE_CHECKING

from remotefs.clients.client import Transport

if TYPE_CHECKING:
    from remotefs.config import SessionSettings

logger = logging.getLogger(__name__)


class LivenessProber(metaclass=ABCMeta):
    @abstractmethod
    def is_alive(self, transport: Transport) -> bool:
        """
        Decide whether ``transport`` can still carry requests.

        Must never raise. Answering False for a healthy link only costs a
        reconnect; answering True for a dead one lets the next file
        operation fail with a raw transport error.
        """


class ExecProbe(LivenessProber):
    """Runs a no-op command on a throwaway channel and expects exit status 0."""

    def __init__(self, command: str = "true", timeout: float = 5.0) -> None:
        self.command = command
        self.timeout = timeout

    def is_alive(self, transport: Transport) -> bool:
        if not transport.is_active():
            return False
        try:
            status = transport.run(self.command, self.timeout)
        except Exception as e:
            logger.debug("Liveness probe on %s failed: %s", transport.name(), e)
            return False
        if status != 0:
            logger.debug(
                "Liveness probe on %s exited with status %d", transport.name(), status
            )
            return False
        return True


class KeepaliveProbe(LivenessProber):
    """Sends a keepalive global request; works on accounts without a shell."""

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    def is_alive(self, transport: Transport) -> bool:
        if not transport.is_active():
            return False
        try:
            transport.keepalive(self.timeout)
        except Exception as e:
            logger.debug("Keepalive on %s failed: %s", transport.name(), e)
            return False
        return True


def prober_from_settings(settings: "SessionSettings") -> LivenessProber:
    if settings.probe == "keepalive":
        return KeepaliveProbe(settings.probe_timeout)
    return ExecProbe(settings.probe_command, settings.probe_timeout)
