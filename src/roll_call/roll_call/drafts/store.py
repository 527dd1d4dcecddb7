from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local
from ..common.debounce import Debouncer
from ..core.constants import DEFAULT_AUTOSAVE_DELAY_SECONDS, DRAFT_STORAGE_KEY
from ..core.enums import MarkStatus
from ..core.exceptions import StorageUnavailable, ValidationError
from ..storage.repository import KeyValueStore
from .model import SessionDraft

logger = logging.getLogger(__name__)


class DraftStore:
    """Holds the single in-progress roll-call draft across reloads.

    The current draft lives in memory and is written to ``store`` through a
    trailing-edge debounce, since marks change one student at a time.
    Persistence is best effort: when the medium fails the store keeps working
    from memory and reports ``degraded``.

    Stored value: ``{"<class_id>|<YYYY-MM-DD>": draft_dict}`` with at most
    one slot populated; saving a new draft replaces the whole mapping.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = DRAFT_STORAGE_KEY,
        autosave_delay: float = DEFAULT_AUTOSAVE_DELAY_SECONDS,
        timer_factory: Callable[[float, Callable[[], None]], Any] | None = None,
    ):
        self._store = store
        self._key = key
        self._lock = threading.RLock()
        self._current: Optional[SessionDraft] = None
        self._degraded = False
        # set when a clear could not reach storage; the stored copy is stale
        self._stored_is_stale = False
        self._autosave = Debouncer(autosave_delay, self._persist, timer_factory=timer_factory)

    @property
    def degraded(self) -> bool:
        return self._degraded

    @property
    def has_pending_write(self) -> bool:
        return self._autosave.pending

    def save_draft(self, class_id: str, roll_date: date, marks: Mapping[str, Optional[MarkStatus]]) -> None:
        if not marks:
            return
        if not class_id:
            raise ValidationError("Turma inválida")

        draft = SessionDraft(class_id=class_id, roll_date=roll_date, marks=dict(marks), saved_at=now_local())
        with self._lock:
            self._current = draft
        self._autosave.call()

    def load_draft(self) -> Optional[SessionDraft]:
        with self._lock:
            if self._current is not None:
                return self._current
            if self._stored_is_stale:
                return None

        try:
            raw = self._store.get(self._key)
        except StorageUnavailable as e:
            self._degrade("load", e)
            return None
        draft = self._decode(raw)
        with self._lock:
            if self._current is None:
                self._current = draft
            return self._current

    def load_draft_for(self, class_id: str, roll_date: date) -> Optional[SessionDraft]:
        """The stored draft, or None when it belongs to another class/date."""
        draft = self.load_draft()
        if draft is None or not draft.matches(class_id, roll_date):
            return None
        return draft

    def set_mark(self, class_id: str, roll_date: date, student_id: str, status: Optional[MarkStatus]) -> SessionDraft:
        """Merge one mark into the matching draft (or start a new one) and autosave."""
        with self._lock:
            current = self.load_draft_for(class_id, roll_date)
            marks = dict(current.marks) if current else {}
            marks[student_id] = status
            self.save_draft(class_id, roll_date, marks)
            return self._current

    def clear_draft(self) -> None:
        self._autosave.cancel()
        with self._lock:
            self._current = None
        try:
            self._store.delete(self._key)
        except StorageUnavailable as e:
            self._stored_is_stale = True
            self._degrade("clear", e)
        else:
            self._stored_is_stale = False

    def flush(self) -> bool:
        return self._autosave.flush()

    def _persist(self) -> None:
        with self._lock:
            draft = self._current
        if draft is None:
            return
        try:
            self._store.set(self._key, {draft.slot_key: draft.to_dict()})
        except StorageUnavailable as e:
            self._degrade("save", e)
            return
        self._stored_is_stale = False
        if self._degraded:
            logger.info("Draft storage available again")
            self._degraded = False

    def _decode(self, raw: Any) -> Optional[SessionDraft]:
        if not raw or not isinstance(raw, dict):
            return None
        drafts = []
        for slot, data in raw.items():
            try:
                drafts.append(SessionDraft.from_dict(data))
            except (KeyError, TypeError, ValueError, ValidationError):
                logger.warning("Ignoring unreadable draft slot %r", slot)
        if not drafts:
            return None
        drafts.sort(key=lambda d: d.saved_at.timestamp() if d.saved_at else 0.0)
        return drafts[-1]

    def _degrade(self, op: str, error: Exception) -> None:
        if not self._degraded:
            logger.warning("Draft %s failed, keeping draft in memory only: %s", op, error)
        self._degraded = True

