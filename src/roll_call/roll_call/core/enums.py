from __future__ import annotations

from enum import Enum


class MarkStatus(str, Enum):
    """Marcação escolhida na tela de chamada."""

    PRESENT = "presente"
    ABSENT = "falta"
    JUSTIFIED = "atestado"

    @property
    def present(self) -> bool:
        return self is MarkStatus.PRESENT

    @property
    def justified(self) -> bool:
        return self is MarkStatus.JUSTIFIED


class SubmitOutcome(str, Enum):
    """Where a submitted roll call ended up."""

    COMMITTED = "committed"
    QUEUED = "queued"
    FAILED = "failed"
