from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.constants import ROSTER_STORAGE_KEY
from ..core.exceptions import StorageUnavailable
from ..roster.model import SchoolClass, Student
from ..roster.repository import RosterRepository
from ..storage.repository import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RosterDownload:
    classes_count: int
    students_count: int

    def to_dict(self) -> dict:
        return {"classes_count": self.classes_count, "students_count": self.students_count}


class RosterCache:
    """Local copy of a school's classes and students for offline roll call.

    ``download`` needs connectivity; the ``get_*`` readers only touch the local
    medium and return empty/None when nothing was downloaded.
    """

    def __init__(self, store: KeyValueStore, rosters: RosterRepository, *, key: str = ROSTER_STORAGE_KEY):
        self._store = store
        self._rosters = rosters
        self._key = key

    def download(self, school_id: str) -> RosterDownload:
        """Fetch every class of ``school_id`` with its students and store them.

        Raises ``RemoteReadFailed`` or ``StorageUnavailable``.
        """
        classes = list(self._rosters.list_classes(school_id))
        students: dict[str, list[dict]] = {}
        total = 0
        for c in classes:
            rows = list(self._rosters.list_students(c.class_id))
            students[c.class_id] = [s.to_dict() for s in rows]
            total += len(rows)

        self._store.set(
            self._key,
            {
                "school_id": school_id,
                "downloaded_at": now_local().isoformat(),
                "classes": [c.to_dict() for c in classes],
                "students": students,
            },
        )
        logger.info("Offline data for school %s: %d classes, %d students", school_id, len(classes), total)
        return RosterDownload(classes_count=len(classes), students_count=total)

    def list_classes(self) -> list[SchoolClass]:
        data = self._load()
        return [SchoolClass.from_dict(c) for c in data.get("classes", [])]

    def get_students(self, class_id: str) -> Optional[list[Student]]:
        rows = self._load().get("students", {}).get(class_id)
        if rows is None:
            return None
        return [Student.from_dict(r) for r in rows]

    def _load(self) -> dict:
        try:
            data = self._store.get(self._key)
        except StorageUnavailable as e:
            logger.warning("Offline roster unreadable: %s", e)
            return {}
        return data if isinstance(data, dict) else {}
