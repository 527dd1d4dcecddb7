from __future__ import annotations

import logging
import threading
from typing import Optional

from ..core.constants import DEFAULT_SYNC_INTERVAL_SECONDS
from .connectivity import ConnectivityMonitor
from .synchronizer import Synchronizer

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Periodic connectivity check + sync pass on a daemon thread."""

    def __init__(
        self,
        monitor: ConnectivityMonitor,
        synchronizer: Synchronizer,
        *,
        interval: float = DEFAULT_SYNC_INTERVAL_SECONDS,
    ):
        self._monitor = monitor
        self._synchronizer = synchronizer
        self._interval = float(interval)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        if self.running:
            return False
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="roll-call-sync", daemon=True)
        self._thread.start()
        logger.info("Sync scheduler started (every %.1fs)", self._interval)
        return True

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def tick(self):
        """One scheduler step. Returns the SyncResult when a pass ran, else None."""
        if not self._monitor.refresh():
            return None
        if self._synchronizer.busy or self._synchronizer.pending_count() == 0:
            return None
        return self._synchronizer.sync()

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Sync scheduler tick failed")
