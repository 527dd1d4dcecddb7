from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Any, Optional

from ..attendance.model import AttendanceBatch
from ..common.datetime_utils import now_local
from ..core.constants import QUEUE_STORAGE_KEY
from ..core.exceptions import StorageUnavailable, ValidationError
from ..storage.repository import KeyValueStore
from .model import PendingEntry

logger = logging.getLogger(__name__)


class PendingQueue:
    """Durable FIFO of roll calls not yet confirmed by the remote store.

    This is the only copy of offline-taken attendance until it is delivered:
    if the medium is wiped first, those roll calls are lost.

    Same-key policy: enqueueing a batch whose ``(class_id, roll_date)`` is
    already queued drops the older entry and appends the new one at the tail.

    Items that cannot be decoded are skipped by readers but written back
    unchanged on every rewrite; only ``clear()`` drops them.
    """

    def __init__(self, store: KeyValueStore, *, key: str = QUEUE_STORAGE_KEY):
        self._store = store
        self._key = key
        self._lock = threading.RLock()

    def enqueue(self, batch: AttendanceBatch) -> bool:
        entry = PendingEntry.new(batch, now=now_local())
        with self._lock:
            try:
                entries, unreadable = self._read()
                superseded = [e for e in entries if e.batch.key == batch.key]
                entries = [e for e in entries if e.batch.key != batch.key]
                entries.append(entry)
                self._write(entries, unreadable)
            except StorageUnavailable as e:
                logger.error("Could not queue roll call %s %s: %s", batch.class_id, batch.roll_date, e)
                return False
        if superseded:
            logger.info(
                "Roll call %s %s replaced %d queued entr%s",
                batch.class_id,
                batch.roll_date,
                len(superseded),
                "y" if len(superseded) == 1 else "ies",
            )
        logger.info("Queued roll call %s %s as %s", batch.class_id, batch.roll_date, entry.entry_id)
        return True

    def load(self) -> list[PendingEntry]:
        """FIFO snapshot of the deliverable entries. Raises ``StorageUnavailable``."""
        with self._lock:
            entries, _ = self._read()
            return entries

    def list(self) -> list[PendingEntry]:
        try:
            return self.load()
        except StorageUnavailable as e:
            logger.warning("Pending queue unreadable: %s", e)
            return []

    def count(self) -> int:
        return len(self.list())

    def unreadable_count(self) -> int:
        """Stored items that could not be decoded; they are kept, never delivered."""
        with self._lock:
            try:
                _, unreadable = self._read()
            except StorageUnavailable:
                return 0
            return len(unreadable)

    def remove(self, entry: PendingEntry) -> bool:
        return self._rewrite(lambda e: e.entry_id != entry.entry_id) > 0

    def discard_key(self, class_id: str, roll_date: date) -> int:
        return self._rewrite(lambda e: e.batch.key != (class_id, roll_date))

    def clear(self) -> bool:
        """Drop every stored item, unreadable ones included."""
        with self._lock:
            try:
                self._store.set(self._key, [])
            except StorageUnavailable as e:
                logger.warning("Could not clear pending queue: %s", e)
                return False
        return True

    def record_attempt(self, entry: PendingEntry, error: Optional[str] = None) -> None:
        with self._lock:
            try:
                entries, unreadable = self._read()
                updated = [e.with_attempt(error) if e.entry_id == entry.entry_id else e for e in entries]
                self._write(updated, unreadable)
            except StorageUnavailable as e:
                logger.warning("Could not record delivery attempt for %s: %s", entry.entry_id, e)

    def _rewrite(self, keep) -> int:
        """Drop entries for which ``keep`` is False; returns how many were dropped."""
        with self._lock:
            try:
                entries, unreadable = self._read()
                kept = [e for e in entries if keep(e)]
                dropped = len(entries) - len(kept)
                if dropped:
                    self._write(kept, unreadable)
                return dropped
            except StorageUnavailable as e:
                logger.warning("Could not update pending queue: %s", e)
                return 0

    def _read(self) -> tuple[list[PendingEntry], list[Any]]:
        raw = self._store.get(self._key) or []
        entries: list[PendingEntry] = []
        unreadable: list[Any] = []
        for item in raw:
            try:
                entries.append(PendingEntry.from_dict(item))
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                # kept as-is: it may be the only copy of a roll call
                logger.error("Unreadable pending entry kept in storage: %s", e)
                unreadable.append(item)
        return entries, unreadable

    def _write(self, entries: list[PendingEntry], unreadable: list[Any]) -> None:
        self._store.set(self._key, list(unreadable) + [e.to_dict() for e in entries])
