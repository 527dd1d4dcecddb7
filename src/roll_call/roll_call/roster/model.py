from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class SchoolClass:
    """Turma."""

    class_id: str
    name: str
    school_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"class_id": self.class_id, "name": self.name, "school_id": self.school_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SchoolClass":
        return cls(class_id=str(data["class_id"]), name=str(data["name"]), school_id=data.get("school_id"))


@dataclass(frozen=True)
class Student:
    """Aluno matriculado em uma turma."""

    student_id: str
    name: str
    enrollment: str
    class_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "name": self.name,
            "enrollment": self.enrollment,
            "class_id": self.class_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Student":
        return cls(
            student_id=str(data["student_id"]),
            name=str(data["name"]),
            enrollment=str(data.get("enrollment") or ""),
            class_id=str(data["class_id"]),
        )
