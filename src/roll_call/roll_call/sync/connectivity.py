from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

from ..database.connection import DatabaseConnection

logger = logging.getLogger(__name__)


class ConnectivitySignal(Protocol):
    def is_online(self) -> bool:
        raise NotImplementedError


class ConnectivityProbe(Protocol):
    def check(self) -> bool:
        raise NotImplementedError


class DatabaseProbe(ConnectivityProbe):
    """Online means the remote store accepts a connection."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def check(self) -> bool:
        return self._conn_factory.ping()


class ConnectivityMonitor(ConnectivitySignal):
    """Last known online/offline state plus transition events.

    The state is a hint: a write may still fail while "online", and callers
    must fall back to the pending queue when it does.
    """

    def __init__(self, probe: ConnectivityProbe | None = None, *, initially_online: bool = True):
        self._probe = probe
        self._online = bool(initially_online)
        self._lock = threading.Lock()
        self._on_online: list[Callable[[], object]] = []
        self._on_offline: list[Callable[[], object]] = []

    def is_online(self) -> bool:
        with self._lock:
            return self._online

    def on_online(self, callback: Callable[[], object]) -> None:
        self._on_online.append(callback)

    def on_offline(self, callback: Callable[[], object]) -> None:
        self._on_offline.append(callback)

    def refresh(self) -> bool:
        """Poll the probe and return the new state. Probe errors count as offline."""
        if self._probe is None:
            return self.is_online()
        try:
            online = bool(self._probe.check())
        except Exception:
            logger.warning("Connectivity probe failed", exc_info=True)
            online = False
        self.set_online(online)
        return online

    def set_online(self, online: bool) -> None:
        with self._lock:
            changed = self._online != online
            self._online = online
        if not changed:
            return
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for callback in list(self._on_online if online else self._on_offline):
            try:
                callback()
            except Exception:
                logger.exception("Connectivity listener %r failed", callback)
