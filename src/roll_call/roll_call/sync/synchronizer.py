from __future__ import annotations

import logging
import threading
from datetime import date

from ..attendance.model import AttendanceBatch
from ..attendance.repository import AttendanceStore
from ..common.datetime_utils import now_local
from ..core.enums import SubmitOutcome
from ..core.exceptions import StorageUnavailable
from ..drafts.store import DraftStore
from ..offline.queue import PendingQueue
from .connectivity import ConnectivitySignal
from .model import SubmitResult, SyncResult
from .notifier import SyncNotifier

logger = logging.getLogger(__name__)


class Synchronizer:
    """Decides direct write vs. queue on submit, and drains the queue.

    No method raises: every failure ends as a result object, and a batch is
    never dropped because one write failed.
    """

    def __init__(
        self,
        remote: AttendanceStore,
        queue: PendingQueue,
        drafts: DraftStore,
        connectivity: ConnectivitySignal,
        notifier: SyncNotifier,
    ):
        self._remote = remote
        self._queue = queue
        self._drafts = drafts
        self._connectivity = connectivity
        self._notifier = notifier
        self._pass_lock = threading.Lock()
        self._passes = 0
        self._last_result: SyncResult | None = None

    @property
    def busy(self) -> bool:
        return self._pass_lock.locked()

    @property
    def completed_passes(self) -> int:
        return self._passes

    @property
    def last_result(self) -> SyncResult | None:
        """Result of the most recent pass that got the lock."""
        return self._last_result

    def pending_count(self) -> int:
        return self._queue.count()

    def submit(self, batch: AttendanceBatch) -> SubmitResult:
        # waits for a running pass so an older queued copy cannot land after this write
        with self._pass_lock:
            return self._submit(batch)

    def discard_pending(self, class_id: str, roll_date: date) -> int:
        """Drop queued copies of a roll call; waits for a running pass."""
        with self._pass_lock:
            return self._queue.discard_key(class_id, roll_date)

    def _submit(self, batch: AttendanceBatch) -> SubmitResult:
        if self._connectivity.is_online():
            try:
                self._remote.write_batch(batch)
            except Exception as e:
                logger.warning(
                    "Direct write of %s %s failed, queueing instead: %s", batch.class_id, batch.roll_date, e
                )
            else:
                # a queued copy of this key is older than what was just written
                self._queue.discard_key(batch.class_id, batch.roll_date)
                self._drafts.clear_draft()
                return SubmitResult(SubmitOutcome.COMMITTED, "Chamada salva")

        if not self._queue.enqueue(batch):
            return SubmitResult(
                SubmitOutcome.FAILED,
                "Não foi possível salvar a chamada offline. Mantenha esta tela aberta e tente novamente.",
            )

        self._drafts.clear_draft()
        entry_id = next((e.entry_id for e in reversed(self._queue.list()) if e.batch.key == batch.key), None)
        return SubmitResult(
            SubmitOutcome.QUEUED,
            "Chamada salva offline. Será sincronizada quando a conexão voltar.",
            entry_id=entry_id,
        )

    def sync(self) -> SyncResult:
        """Run one sync pass; a call made while another pass runs is a no-op."""
        if not self._pass_lock.acquire(blocking=False):
            return SyncResult(
                success=False,
                delivered_count=0,
                skipped=True,
                error_code="sync_in_progress",
                message="Sincronização já em andamento.",
            )
        try:
            result = self._run_pass()
            self._last_result = result
            self._passes += 1
            return result
        finally:
            self._pass_lock.release()

    def _run_pass(self) -> SyncResult:
        if not self._connectivity.is_online():
            return SyncResult(
                success=False,
                delivered_count=0,
                skipped=True,
                error_code="offline",
                message="Você precisa estar online para sincronizar.",
            )

        try:
            entries = self._queue.load()
        except StorageUnavailable as e:
            logger.error("Pending queue unreadable, nothing delivered: %s", e)
            result = SyncResult(
                success=False,
                delivered_count=0,
                error_code="storage_unavailable",
                message="Não foi possível ler as chamadas pendentes.",
                finished_at=now_local(),
            )
            self._notify(result)
            return result

        if not entries:
            return SyncResult(success=True, delivered_count=0, message="Não há chamadas pendentes.")

        delivered = 0
        failed = 0
        for entry in entries:
            try:
                self._remote.write_batch(entry.batch)
            except Exception as e:
                failed += 1
                logger.warning("Delivery of queued entry %s failed: %s", entry.entry_id, e)
                self._queue.record_attempt(entry, str(e))
                if not self._connectivity.is_online():
                    logger.info("Connectivity lost during sync; leaving remaining entries queued")
                    break
                continue
            self._queue.remove(entry)
            delivered += 1

        remaining = len(entries) - delivered
        if failed:
            result = SyncResult(
                success=False,
                delivered_count=delivered,
                failed_count=failed,
                error_code="remote_write_failed",
                message=f"Falha ao sincronizar: {remaining} chamadas pendentes",
                finished_at=now_local(),
            )
        else:
            result = SyncResult(
                success=True,
                delivered_count=delivered,
                message=f"{delivered} chamadas sincronizadas",
                finished_at=now_local(),
            )

        self._notify(result)
        return result

    def _notify(self, result: SyncResult) -> None:
        try:
            self._notifier.notify(result)
        except Exception:
            logger.exception("Sync notifier failed")
