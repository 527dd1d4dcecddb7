from __future__ import annotations

import threading
from datetime import date

from src.roll_call.roll_call.attendance.model import AttendanceBatch
from src.roll_call.roll_call.core.enums import MarkStatus, SubmitOutcome


def test_online_submit_commits_and_clears_draft(synchronizer, remote, drafts, queue, make_batch):
    drafts.save_draft("C1", date(2024, 5, 10), {"s1": MarkStatus.PRESENT, "s2": MarkStatus.ABSENT})
    batch = make_batch()

    result = synchronizer.submit(batch)

    assert result.outcome == SubmitOutcome.COMMITTED
    assert result.message == "Chamada salva"
    assert remote.committed[batch.key] == list(batch.marks)
    assert queue.count() == 0
    assert drafts.load_draft() is None


def test_offline_submit_queues_and_clears_draft(synchronizer, remote, drafts, queue, connectivity, make_batch):
    connectivity.online = False
    drafts.save_draft("C1", date(2024, 5, 10), {"s1": MarkStatus.PRESENT})
    batch = make_batch()

    result = synchronizer.submit(batch)

    assert result.outcome == SubmitOutcome.QUEUED
    assert result.entry_id == queue.list()[0].entry_id
    assert remote.writes == []
    assert drafts.load_draft() is None


def test_failed_direct_write_falls_back_to_queue(synchronizer, remote, queue, make_batch):
    remote.fail_all = True

    result = synchronizer.submit(make_batch())

    assert result.outcome == SubmitOutcome.QUEUED
    assert queue.count() == 1


def test_enqueue_failure_keeps_draft(synchronizer, local_store, drafts, connectivity, make_batch):
    connectivity.online = False
    drafts.save_draft("C1", date(2024, 5, 10), {"s1": MarkStatus.PRESENT})
    local_store.fail_writes = True

    result = synchronizer.submit(make_batch())

    assert result.outcome == SubmitOutcome.FAILED
    assert result.success is False
    assert drafts.load_draft() is not None


def test_direct_write_discards_older_queued_copy(synchronizer, remote, queue, connectivity, make_batch):
    connectivity.online = False
    synchronizer.submit(make_batch(s1=MarkStatus.ABSENT, s2=MarkStatus.ABSENT))
    connectivity.online = True
    newer = make_batch(s1=MarkStatus.PRESENT, s2=MarkStatus.PRESENT)

    synchronizer.submit(newer)
    synchronizer.sync()

    assert queue.count() == 0
    assert remote.writes == [newer]


def test_sync_is_a_noop_while_offline(synchronizer, remote, queue, connectivity, notifier, make_batch):
    connectivity.online = False
    synchronizer.submit(make_batch())

    result = synchronizer.sync()

    assert result.skipped is True
    assert result.error_code == "offline"
    assert result.message == "Você precisa estar online para sincronizar."
    assert queue.count() == 1
    assert remote.writes == []
    assert notifier.results == []


def test_sync_with_empty_queue(synchronizer, notifier):
    result = synchronizer.sync()
    assert result.success is True
    assert result.delivered_count == 0
    assert result.message == "Não há chamadas pendentes."
    assert notifier.results == []


def test_sync_delivers_in_order_and_notifies(synchronizer, remote, queue, connectivity, notifier, make_batch):
    connectivity.online = False
    first = make_batch(roll_date=date(2024, 5, 9))
    second = make_batch(roll_date=date(2024, 5, 10))
    synchronizer.submit(first)
    synchronizer.submit(second)
    connectivity.online = True

    result = synchronizer.sync()

    assert result.success is True
    assert result.delivered_count == 2
    assert result.message == "2 chamadas sincronizadas"
    assert remote.writes == [first, second]
    assert queue.count() == 0
    assert notifier.results == [result]


def test_one_failing_entry_does_not_block_the_others(synchronizer, remote, queue, connectivity, notifier, make_batch):
    connectivity.online = False
    batches = [make_batch(roll_date=date(2024, 5, d)) for d in (8, 9, 10)]
    for b in batches:
        synchronizer.submit(b)
    connectivity.online = True
    remote.fail_keys.add(batches[1].key)

    result = synchronizer.sync()

    assert result.success is False
    assert result.delivered_count == 2
    assert result.failed_count == 1
    assert result.error_code == "remote_write_failed"
    assert result.message == "Falha ao sincronizar: 1 chamadas pendentes"
    remaining = queue.list()
    assert [e.batch for e in remaining] == [batches[1]]
    assert remaining[0].attempts == 1
    assert remaining[0].last_error
    assert notifier.results == [result]


def test_failed_pass_is_retried_on_next_pass(synchronizer, remote, queue, connectivity, make_batch):
    connectivity.online = False
    batch = make_batch()
    synchronizer.submit(batch)
    connectivity.online = True
    remote.fail_all = True
    synchronizer.sync()

    remote.fail_all = False
    result = synchronizer.sync()

    assert result.delivered_count == 1
    assert queue.count() == 0
    assert remote.committed[batch.key] == list(batch.marks)


def test_redelivered_batch_leaves_one_record_per_student(synchronizer, remote, queue, connectivity, make_batch):
    batch = make_batch()
    connectivity.online = False
    synchronizer.submit(batch)
    connectivity.online = True
    synchronizer.sync()
    queue.enqueue(batch)
    synchronizer.sync()

    assert len(remote.writes) == 2
    assert remote.get_marks("C1", date(2024, 5, 10)) == list(batch.marks)


def test_pass_stops_when_connectivity_drops_mid_pass(synchronizer, remote, queue, connectivity, make_batch):
    connectivity.online = False
    batches = [make_batch(roll_date=date(2024, 5, d)) for d in (8, 9)]
    for b in batches:
        synchronizer.submit(b)
    connectivity.online = True

    def drop(batch):
        connectivity.online = False

    remote.on_write = drop
    remote.fail_all = True

    result = synchronizer.sync()

    assert result.failed_count == 1
    assert queue.count() == 2
    assert queue.list()[1].attempts == 0


def test_concurrent_sync_calls_are_single_flight(synchronizer, remote, connectivity, make_batch):
    connectivity.online = False
    synchronizer.submit(make_batch())
    connectivity.online = True

    entered = threading.Event()
    release = threading.Event()

    def block(batch):
        entered.set()
        release.wait(5)

    remote.on_write = block
    results = []
    worker = threading.Thread(target=lambda: results.append(synchronizer.sync()))
    worker.start()
    assert entered.wait(5)

    assert synchronizer.busy is True
    second = synchronizer.sync()

    release.set()
    worker.join(5)

    assert second.skipped is True
    assert second.error_code == "sync_in_progress"
    assert len(remote.writes) == 1
    assert results[0].delivered_count == 1


def test_offline_roll_call_reaches_remote_after_reconnect(synchronizer, remote, drafts, queue, connectivity):
    connectivity.online = False
    day = date(2024, 5, 10)
    drafts.set_mark("C1", day, "s1", MarkStatus.PRESENT)
    drafts.set_mark("C1", day, "s2", MarkStatus.JUSTIFIED)
    batch = AttendanceBatch.from_statuses(
        class_id="C1", roll_date=day, statuses=list(drafts.load_draft_for("C1", day).marked().items())
    )

    assert synchronizer.submit(batch).outcome == SubmitOutcome.QUEUED
    assert queue.count() == 1

    connectivity.online = True
    synchronizer.sync()

    stored = {m.student_id: (m.present, m.justified) for m in remote.get_marks("C1", day)}
    assert stored == {"s1": (True, False), "s2": (False, True)}
    assert queue.count() == 0
    assert drafts.load_draft() is None


def test_unreadable_queue_is_reported_not_empty(synchronizer, local_store, notifier, connectivity, make_batch):
    connectivity.online = False
    synchronizer.submit(make_batch())
    connectivity.online = True
    local_store.fail_reads = True

    result = synchronizer.sync()

    assert result.success is False
    assert result.error_code == "storage_unavailable"
    assert notifier.results == [result]
    local_store.fail_reads = False
    assert synchronizer.pending_count() == 1


def test_last_result_tracks_completed_passes(synchronizer):
    assert synchronizer.completed_passes == 0
    assert synchronizer.last_result is None

    result = synchronizer.sync()

    assert synchronizer.completed_passes == 1
    assert synchronizer.last_result is result


def test_discard_pending_drops_queued_copy(synchronizer, remote, queue, connectivity, make_batch):
    connectivity.online = False
    synchronizer.submit(make_batch())
    connectivity.online = True

    assert synchronizer.discard_pending("C1", date(2024, 5, 10)) == 1
    synchronizer.sync()

    assert remote.writes == []
