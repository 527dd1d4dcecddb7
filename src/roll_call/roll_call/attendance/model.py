from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..core.enums import MarkStatus
from ..core.exceptions import ValidationError

BatchKey = tuple[str, date]


@dataclass(frozen=True)
class AttendanceMark:
    """One student's status for one class on one date."""

    student_id: str
    class_id: str
    roll_date: date
    present: bool
    justified: bool = False

    def __post_init__(self) -> None:
        if not self.student_id or not self.class_id:
            raise ValidationError("Aluno e turma são obrigatórios")
        if self.justified and self.present:
            raise ValidationError("Falta justificada exige presente=False")

    @classmethod
    def from_status(cls, *, student_id: str, class_id: str, roll_date: date, status: MarkStatus) -> "AttendanceMark":
        return cls(
            student_id=student_id,
            class_id=class_id,
            roll_date=roll_date,
            present=status.present,
            justified=status.justified,
        )

    @property
    def status(self) -> MarkStatus:
        if self.present:
            return MarkStatus.PRESENT
        return MarkStatus.JUSTIFIED if self.justified else MarkStatus.ABSENT

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "class_id": self.class_id,
            "roll_date": format_iso_date(self.roll_date),
            "present": self.present,
            "justified": self.justified,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceMark":
        return cls(
            student_id=str(data["student_id"]),
            class_id=str(data["class_id"]),
            roll_date=parse_iso_date(data["roll_date"]),
            present=bool(data["present"]),
            justified=bool(data.get("justified", False)),
        )


@dataclass(frozen=True)
class AttendanceBatch:
    """The unit of submission: every mark for one class on one date.

    A batch replaces whatever the remote store holds for ``key``.
    """

    class_id: str
    roll_date: date
    marks: tuple[AttendanceMark, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "marks", tuple(self.marks))
        if not self.marks:
            raise ValidationError("Nenhuma presença registrada para salvar.")

        seen: set[str] = set()
        for m in self.marks:
            if m.class_id != self.class_id or m.roll_date != self.roll_date:
                raise ValidationError(f"Marcação do aluno {m.student_id} não pertence a esta chamada")
            if m.student_id in seen:
                raise ValidationError(f"Aluno {m.student_id} marcado mais de uma vez")
            seen.add(m.student_id)

    @property
    def key(self) -> BatchKey:
        return (self.class_id, self.roll_date)

    @classmethod
    def from_statuses(
        cls,
        *,
        class_id: str,
        roll_date: date,
        statuses: Iterable[tuple[str, MarkStatus]],
    ) -> "AttendanceBatch":
        return cls(
            class_id=class_id,
            roll_date=roll_date,
            marks=tuple(
                AttendanceMark.from_status(student_id=sid, class_id=class_id, roll_date=roll_date, status=st)
                for sid, st in statuses
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "class_id": self.class_id,
            "roll_date": format_iso_date(self.roll_date),
            "marks": [m.to_dict() for m in self.marks],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceBatch":
        return cls(
            class_id=str(data["class_id"]),
            roll_date=parse_iso_date(data["roll_date"]),
            marks=tuple(AttendanceMark.from_dict(m) for m in data.get("marks") or []),
        )


@dataclass(frozen=True)
class RollCallSummary:
    """Read-model for the per-class roll-call history page."""

    roll_date: date
    present: int
    absent: int
    justified: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "roll_date": format_iso_date(self.roll_date),
            "present": self.present,
            "absent": self.absent,
            "justified": self.justified,
            "total": self.total,
        }

