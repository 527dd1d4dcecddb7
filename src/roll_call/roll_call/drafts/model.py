from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..common.validators import require_mark_status
from ..core.enums import MarkStatus


def draft_slot_key(class_id: str, roll_date: date) -> str:
    return f"{class_id}|{format_iso_date(roll_date)}"


@dataclass(frozen=True)
class SessionDraft:
    """In-progress state of the roll-call screen (``None`` = not marked yet)."""

    class_id: str
    roll_date: date
    marks: dict[str, Optional[MarkStatus]] = field(default_factory=dict)
    saved_at: Optional[datetime] = None

    @property
    def slot_key(self) -> str:
        return draft_slot_key(self.class_id, self.roll_date)

    def matches(self, class_id: str, roll_date: date) -> bool:
        return self.class_id == class_id and self.roll_date == roll_date

    def marked(self) -> dict[str, MarkStatus]:
        return {sid: st for sid, st in self.marks.items() if st is not None}

    def to_dict(self) -> dict[str, Any]:
        return {
            "class_id": self.class_id,
            "roll_date": format_iso_date(self.roll_date),
            "marks": {sid: (st.value if st else None) for sid, st in self.marks.items()},
            "saved_at": self.saved_at.isoformat() if self.saved_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionDraft":
        saved_at = data.get("saved_at")
        return cls(
            class_id=str(data["class_id"]),
            roll_date=parse_iso_date(data["roll_date"]),
            marks={str(sid): require_mark_status(st) for sid, st in (data.get("marks") or {}).items()},
            saved_at=datetime.fromisoformat(saved_at) if saved_at else None,
        )
