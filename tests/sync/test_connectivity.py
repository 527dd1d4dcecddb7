from __future__ import annotations

from datetime import date

from src.roll_call.roll_call.core.enums import MarkStatus
from src.roll_call.roll_call.sync.connectivity import ConnectivityMonitor
from src.roll_call.roll_call.sync.scheduler import SyncScheduler
from src.roll_call.roll_call.sync.synchronizer import Synchronizer


class FlakyProbe:
    def __init__(self, *states):
        self.states = list(states)

    def check(self) -> bool:
        state = self.states.pop(0)
        if isinstance(state, Exception):
            raise state
        return state


def test_listeners_fire_only_on_transitions():
    monitor = ConnectivityMonitor(FlakyProbe(True, False, False, True), initially_online=True)
    events = []
    monitor.on_online(lambda: events.append("online"))
    monitor.on_offline(lambda: events.append("offline"))

    for _ in range(4):
        monitor.refresh()

    assert events == ["offline", "online"]


def test_probe_error_counts_as_offline():
    monitor = ConnectivityMonitor(FlakyProbe(OSError("no route")))
    assert monitor.refresh() is False
    assert monitor.is_online() is False


def test_failing_listener_does_not_stop_others():
    monitor = ConnectivityMonitor(initially_online=False)
    calls = []

    def boom():
        raise RuntimeError("listener bug")

    monitor.on_online(boom)
    monitor.on_online(lambda: calls.append("ok"))
    monitor.set_online(True)

    assert calls == ["ok"]


def test_without_probe_refresh_keeps_last_state():
    monitor = ConnectivityMonitor(initially_online=False)
    assert monitor.refresh() is False


def _scheduler(monitor, remote, queue, drafts, notifier):
    synchronizer = Synchronizer(remote, queue, drafts, monitor, notifier)
    return synchronizer, SyncScheduler(monitor, synchronizer, interval=0.01)


def test_tick_drains_queue_once_back_online(remote, queue, drafts, notifier, make_batch):
    monitor = ConnectivityMonitor(FlakyProbe(False, True), initially_online=False)
    synchronizer, scheduler = _scheduler(monitor, remote, queue, drafts, notifier)
    synchronizer.submit(make_batch())

    assert scheduler.tick() is None
    result = scheduler.tick()

    assert result.delivered_count == 1
    assert queue.count() == 0


def test_tick_skips_when_nothing_is_pending(remote, queue, drafts, notifier):
    monitor = ConnectivityMonitor(FlakyProbe(True))
    _, scheduler = _scheduler(monitor, remote, queue, drafts, notifier)
    assert scheduler.tick() is None
    assert notifier.results == []


def test_reconnect_event_triggers_sync(remote, queue, drafts, notifier, make_batch):
    monitor = ConnectivityMonitor(initially_online=False)
    synchronizer = Synchronizer(remote, queue, drafts, monitor, notifier)
    monitor.on_online(synchronizer.sync)
    synchronizer.submit(make_batch(s1=MarkStatus.PRESENT))

    monitor.set_online(True)

    assert queue.count() == 0
    assert remote.committed[("C1", date(2024, 5, 10))][0].present is True


def test_scheduler_start_and_stop(remote, queue, drafts, notifier):
    monitor = ConnectivityMonitor()
    _, scheduler = _scheduler(monitor, remote, queue, drafts, notifier)

    assert scheduler.start() is True
    assert scheduler.start() is False
    scheduler.stop(timeout=2.0)

    assert scheduler.running is False
