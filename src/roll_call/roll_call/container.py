from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceStore
from .attendance.service import RollCallService
from .core.constants import DEFAULT_AUTOSAVE_DELAY_SECONDS, DEFAULT_SYNC_INTERVAL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .drafts.store import DraftStore
from .offline.queue import PendingQueue
from .offline.roster_cache import RosterCache
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .storage.json_file_store import JsonFileStore
from .storage.repository import KeyValueStore
from .sync.connectivity import ConnectivityMonitor, ConnectivityProbe, DatabaseProbe
from .sync.notifier import RecordingNotifier
from .sync.scheduler import SyncScheduler
from .sync.synchronizer import Synchronizer


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceStore
    roster_repo: RosterRepository
    local_store: KeyValueStore

    draft_store: DraftStore
    pending_queue: PendingQueue
    roster_cache: RosterCache
    connectivity: ConnectivityMonitor
    notifier: RecordingNotifier
    synchronizer: Synchronizer
    scheduler: SyncScheduler
    roll_call_service: RollCallService

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    remote: AttendanceStore,
    rosters: RosterRepository,
    local_store: KeyValueStore,
    probe: ConnectivityProbe | None = None,
    initially_online: bool = True,
    autosave_delay: float = DEFAULT_AUTOSAVE_DELAY_SECONDS,
    sync_interval: float = DEFAULT_SYNC_INTERVAL_SECONDS,
    timer_factory: Callable[[float, Callable[[], None]], Any] | None = None,
    conn: DatabaseConnection | None = None,
) -> Container:
    """Wire the offline core around already-built remote and local stores."""

    draft_store = DraftStore(local_store, autosave_delay=autosave_delay, timer_factory=timer_factory)
    pending_queue = PendingQueue(local_store)
    roster_cache = RosterCache(local_store, rosters)
    connectivity = ConnectivityMonitor(probe, initially_online=initially_online)
    notifier = RecordingNotifier()
    synchronizer = Synchronizer(remote, pending_queue, draft_store, connectivity, notifier)
    scheduler = SyncScheduler(connectivity, synchronizer, interval=sync_interval)
    roll_call_service = RollCallService(draft_store, synchronizer, roster_cache)

    # connectivity restored -> drain the queue
    connectivity.on_online(synchronizer.sync)

    return Container(
        attendance_repo=remote,
        roster_repo=rosters,
        local_store=local_store,
        draft_store=draft_store,
        pending_queue=pending_queue,
        roster_cache=roster_cache,
        connectivity=connectivity,
        notifier=notifier,
        synchronizer=synchronizer,
        scheduler=scheduler,
        roll_call_service=roll_call_service,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    storage_dir: str | Path,
    autosave_delay: float = DEFAULT_AUTOSAVE_DELAY_SECONDS,
    sync_interval: float = DEFAULT_SYNC_INTERVAL_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        remote=MySQLAttendanceRepository(conn),
        rosters=MySQLRosterRepository(conn),
        local_store=JsonFileStore(storage_dir),
        probe=DatabaseProbe(conn),
        autosave_delay=autosave_delay,
        sync_interval=sync_interval,
        conn=conn,
    )
