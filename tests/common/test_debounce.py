from __future__ import annotations

import threading

from src.roll_call.roll_call.common.debounce import Debouncer


def test_rapid_calls_coalesce_into_one_trailing_call(timers):
    calls = []
    debouncer = Debouncer(1.0, lambda v: calls.append(v), timer_factory=timers)

    debouncer.call(1)
    debouncer.call(2)
    debouncer.call(3)
    timers.fire_all()

    assert calls == [3]
    assert [t.cancelled for t in timers.created] == [True, True, False]
    assert debouncer.pending is False


def test_flush_runs_pending_call_immediately(timers):
    calls = []
    debouncer = Debouncer(1.0, lambda: calls.append("x"), timer_factory=timers)

    assert debouncer.flush() is False
    debouncer.call()
    assert debouncer.flush() is True
    timers.fire_all()

    assert calls == ["x"]


def test_cancel_drops_pending_call(timers):
    calls = []
    debouncer = Debouncer(1.0, lambda: calls.append("x"), timer_factory=timers)
    debouncer.call()
    debouncer.cancel()
    timers.fire_all()
    assert calls == []


def test_real_timer_fires_after_delay():
    done = threading.Event()
    debouncer = Debouncer(0.01, done.set)
    debouncer.call()
    assert done.wait(2.0)
