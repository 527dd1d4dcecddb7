from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Protocol

from ..core.constants import RECENT_OUTCOMES_LIMIT
from .model import SyncResult

logger = logging.getLogger(__name__)


class SyncNotifier(Protocol):
    def notify(self, result: SyncResult) -> None:
        raise NotImplementedError


class LoggingNotifier(SyncNotifier):
    def notify(self, result: SyncResult) -> None:
        if result.success:
            logger.info(result.message)
        else:
            logger.warning("%s (code=%s)", result.message, result.error_code)


class RecordingNotifier(LoggingNotifier):
    """Logs and keeps the most recent outcomes for the status endpoint."""

    def __init__(self, limit: int = RECENT_OUTCOMES_LIMIT):
        self._recent: deque[SyncResult] = deque(maxlen=limit)
        self._lock = threading.Lock()

    def notify(self, result: SyncResult) -> None:
        super().notify(result)
        with self._lock:
            self._recent.append(result)

    def recent(self) -> list[SyncResult]:
        with self._lock:
            return list(reversed(self._recent))
