from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import SubmitOutcome


@dataclass(frozen=True)
class SubmitResult:
    outcome: SubmitOutcome
    message: str
    entry_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome != SubmitOutcome.FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "outcome": self.outcome.value,
            "message": self.message,
            "entry_id": self.entry_id,
        }


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one sync pass, as reported to the UI."""

    success: bool
    delivered_count: int
    message: str
    failed_count: int = 0
    skipped: bool = False
    error_code: Optional[str] = None
    finished_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "delivered_count": self.delivered_count,
            "failed_count": self.failed_count,
            "skipped": self.skipped,
            "error_code": self.error_code,
            "message": self.message,
            "finished_at": self.finished_at.isoformat(timespec="seconds") if self.finished_at else None,
        }
