from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import AttendanceBatch, AttendanceMark, RollCallSummary


class AttendanceStore(Protocol):
    """Remote store of committed roll calls (single source of truth)."""

    def write_batch(self, batch: AttendanceBatch) -> None:
        """Replace everything stored for ``batch.key`` with ``batch.marks``.

        Must be safe to retry: delivering the same batch twice leaves the same
        rows as delivering it once. Raises ``RemoteWriteFailed``.
        """

        raise NotImplementedError

    def get_marks(self, class_id: str, roll_date: date) -> Sequence[AttendanceMark]:
        raise NotImplementedError

    def delete_batch(self, class_id: str, roll_date: date) -> int:
        raise NotImplementedError

    def get_history(self, class_id: str, *, limit: int) -> Sequence[RollCallSummary]:
        raise NotImplementedError
