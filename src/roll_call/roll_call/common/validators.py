from __future__ import annotations

from ..core.enums import MarkStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} inválido")
    return str(value).strip()


def require_mark_status(value) -> MarkStatus | None:
    """Accept a MarkStatus, its string value, or None (unmarked)."""
    if value is None or isinstance(value, MarkStatus):
        return value
    try:
        return MarkStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Marcação inválida: {value!r}") from None
