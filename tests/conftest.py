from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

import pytest

from src.roll_call.roll_call.attendance.model import AttendanceBatch, AttendanceMark, RollCallSummary
from src.roll_call.roll_call.core.enums import MarkStatus
from src.roll_call.roll_call.core.exceptions import RemoteReadFailed, RemoteWriteFailed
from src.roll_call.roll_call.drafts.store import DraftStore
from src.roll_call.roll_call.offline.queue import PendingQueue
from src.roll_call.roll_call.offline.roster_cache import RosterCache
from src.roll_call.roll_call.roster.model import SchoolClass, Student
from src.roll_call.roll_call.storage.memory_store import MemoryStore
from src.roll_call.roll_call.sync.synchronizer import Synchronizer


class InMemoryAttendanceStore:
    """Remote store fake with replace-by-key semantics."""

    def __init__(self):
        self.committed: dict[tuple[str, date], list[AttendanceMark]] = {}
        self.writes: list[AttendanceBatch] = []
        self.fail_keys: set[tuple[str, date]] = set()
        self.fail_all = False
        self.on_write: Optional[Callable[[AttendanceBatch], None]] = None

    def write_batch(self, batch: AttendanceBatch) -> None:
        if self.on_write:
            self.on_write(batch)
        if self.fail_all or batch.key in self.fail_keys:
            raise RemoteWriteFailed(f"rejected {batch.key}")
        self.writes.append(batch)
        self.committed[batch.key] = list(batch.marks)

    def get_marks(self, class_id: str, roll_date: date):
        return list(self.committed.get((class_id, roll_date), []))

    def delete_batch(self, class_id: str, roll_date: date) -> int:
        return len(self.committed.pop((class_id, roll_date), []))

    def get_history(self, class_id: str, *, limit: int):
        rows = []
        for (cid, d), marks in sorted(self.committed.items(), key=lambda kv: kv[0][1], reverse=True):
            if cid != class_id:
                continue
            rows.append(
                RollCallSummary(
                    roll_date=d,
                    present=sum(1 for m in marks if m.present),
                    absent=sum(1 for m in marks if not m.present and not m.justified),
                    justified=sum(1 for m in marks if m.justified),
                    total=len(marks),
                )
            )
        return rows[:limit]


class FakeConnectivity:
    def __init__(self, online: bool = True):
        self.online = online

    def is_online(self) -> bool:
        return self.online


class RecordingSyncNotifier:
    def __init__(self):
        self.results = []

    def notify(self, result) -> None:
        self.results.append(result)


class ManualTimer:
    def __init__(self, delay: float, fn: Callable[[], None]):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.fn()


class ManualTimers:
    """timer_factory replacement: timers only run when fired by the test."""

    def __init__(self):
        self.created: list[ManualTimer] = []

    def __call__(self, delay: float, fn: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, fn)
        self.created.append(timer)
        return timer

    def fire_all(self) -> None:
        for timer in list(self.created):
            timer.fire()


class InMemoryRosters:
    def __init__(self, classes=None, students=None):
        self.classes: list[SchoolClass] = list(classes or [])
        self.students: dict[str, list[Student]] = dict(students or {})
        self.fail = False

    def list_classes(self, school_id: str):
        if self.fail:
            raise RemoteReadFailed("offline")
        return [c for c in self.classes if c.school_id == school_id]

    def list_students(self, class_id: str):
        return list(self.students.get(class_id, []))


@pytest.fixture
def fixed_now():
    return datetime(2024, 5, 10, 7, 45, 0)


@pytest.fixture
def roll_date():
    return date(2024, 5, 10)


@pytest.fixture
def local_store():
    return MemoryStore()


@pytest.fixture
def remote():
    return InMemoryAttendanceStore()


@pytest.fixture
def connectivity():
    return FakeConnectivity(online=True)


@pytest.fixture
def notifier():
    return RecordingSyncNotifier()


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def rosters():
    return InMemoryRosters(
        classes=[SchoolClass("C1", "6º Ano A", "E1"), SchoolClass("C2", "7º Ano B", "E1")],
        students={
            "C1": [Student("s1", "Ana", "2024001", "C1"), Student("s2", "Bruno", "2024002", "C1")],
            "C2": [Student("s9", "Caio", "2024009", "C2")],
        },
    )


@pytest.fixture
def drafts(local_store, timers):
    return DraftStore(local_store, autosave_delay=1.0, timer_factory=timers)


@pytest.fixture
def queue(local_store):
    return PendingQueue(local_store)


@pytest.fixture
def roster_cache(local_store, rosters):
    return RosterCache(local_store, rosters)


@pytest.fixture
def synchronizer(remote, queue, drafts, connectivity, notifier):
    return Synchronizer(remote, queue, drafts, connectivity, notifier)


@pytest.fixture
def make_batch():
    def _make(class_id: str = "C1", roll_date: date = date(2024, 5, 10), **statuses: MarkStatus) -> AttendanceBatch:
        statuses = statuses or {"s1": MarkStatus.PRESENT, "s2": MarkStatus.ABSENT}
        return AttendanceBatch.from_statuses(class_id=class_id, roll_date=roll_date, statuses=list(statuses.items()))

    return _make
