from __future__ import annotations

from typing import Protocol, Sequence

from .model import SchoolClass, Student


class RosterRepository(Protocol):
    def list_classes(self, school_id: str) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_students(self, class_id: str) -> Sequence[Student]:
        raise NotImplementedError
