from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from ..attendance.model import AttendanceBatch


@dataclass(frozen=True)
class PendingEntry:
    """A roll call waiting for delivery to the remote store.

    Entries are atomic: the whole batch is delivered or the whole entry stays
    queued.
    """

    entry_id: str
    batch: AttendanceBatch
    enqueued_at: datetime
    attempts: int = 0
    last_error: Optional[str] = None

    @classmethod
    def new(cls, batch: AttendanceBatch, *, now: datetime) -> "PendingEntry":
        return cls(entry_id=uuid.uuid4().hex, batch=batch, enqueued_at=now)

    def with_attempt(self, error: Optional[str]) -> "PendingEntry":
        return replace(self, attempts=self.attempts + 1, last_error=error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "batch": self.batch.to_dict(),
            "enqueued_at": self.enqueued_at.isoformat(),
            "attempts": self.attempts,
            "last_error": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PendingEntry":
        return cls(
            entry_id=str(data["entry_id"]),
            batch=AttendanceBatch.from_dict(data["batch"]),
            enqueued_at=datetime.fromisoformat(data["enqueued_at"]),
            attempts=int(data.get("attempts") or 0),
            last_error=data.get("last_error"),
        )
