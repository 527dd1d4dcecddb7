from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..common.datetime_utils import format_iso_date
from ..common.validators import require_mark_status, require_non_empty
from ..core.enums import MarkStatus
from ..core.exceptions import ValidationError
from ..drafts.store import DraftStore
from ..offline.roster_cache import RosterCache
from ..roster.model import Student
from ..sync.model import SubmitResult
from ..sync.synchronizer import Synchronizer
from .model import AttendanceBatch


@dataclass(frozen=True)
class RollCallScreen:
    class_id: str
    roll_date: date
    students: Optional[list[Student]]
    marks: dict[str, Optional[MarkStatus]] = field(default_factory=dict)
    restored_draft: bool = False

    def to_dict(self) -> dict:
        return {
            "class_id": self.class_id,
            "roll_date": format_iso_date(self.roll_date),
            "students": [s.to_dict() for s in self.students] if self.students is not None else None,
            "marks": {sid: (st.value if st else None) for sid, st in self.marks.items()},
            "restored_draft": self.restored_draft,
        }


class RollCallService:
    """Glue between the roll-call screen and the offline core."""

    def __init__(self, drafts: DraftStore, synchronizer: Synchronizer, rosters: RosterCache):
        self._drafts = drafts
        self._synchronizer = synchronizer
        self._rosters = rosters

    def open_screen(self, class_id: str, roll_date: date) -> RollCallScreen:
        class_id = require_non_empty(class_id, "Turma")
        students = self._rosters.get_students(class_id)
        marks: dict[str, Optional[MarkStatus]] = {s.student_id: None for s in students or []}

        # a draft for another class/date is ignored, not applied
        draft = self._drafts.load_draft_for(class_id, roll_date)
        if draft:
            marks.update(draft.marks)

        return RollCallScreen(
            class_id=class_id,
            roll_date=roll_date,
            students=students,
            marks=marks,
            restored_draft=draft is not None,
        )

    def set_mark(self, class_id: str, roll_date: date, student_id: str, status) -> dict[str, Optional[MarkStatus]]:
        class_id = require_non_empty(class_id, "Turma")
        student_id = require_non_empty(student_id, "Aluno")
        status = require_mark_status(status)

        students = self._rosters.get_students(class_id)
        if students is not None and student_id not in {s.student_id for s in students}:
            raise ValidationError("Aluno não pertence a esta turma")

        draft = self._drafts.set_mark(class_id, roll_date, student_id, status)
        return dict(draft.marks)

    def discard(self, class_id: str, roll_date: date) -> bool:
        if self._drafts.load_draft_for(class_id, roll_date) is None:
            return False
        self._drafts.clear_draft()
        return True

    def build_batch(self, class_id: str, roll_date: date) -> AttendanceBatch:
        class_id = require_non_empty(class_id, "Turma")
        draft = self._drafts.load_draft_for(class_id, roll_date)
        marked = draft.marked() if draft else {}
        if not marked:
            raise ValidationError("Nenhuma presença registrada para salvar.")

        students = self._rosters.get_students(class_id)
        if students is None:
            order = list(marked)
        else:
            order = [s.student_id for s in students]
            missing = [sid for sid in order if sid not in marked]
            if missing:
                raise ValidationError(f"Faltam {len(missing)} alunos sem marcação")

        return AttendanceBatch.from_statuses(
            class_id=class_id,
            roll_date=roll_date,
            statuses=[(sid, marked[sid]) for sid in order],
        )

    def submit(self, class_id: str, roll_date: date) -> SubmitResult:
        return self._synchronizer.submit(self.build_batch(class_id, roll_date))
