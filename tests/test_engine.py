# tests/test_engine.py

from __future__ import annotations

import logging

import pytest

from task_timer.core.engine import TimingEngine
from task_timer.core.errors import NotFoundError, PreconditionError
from task_timer.core.writer import BackgroundWriter
from task_timer.tasks.task_models import Task

from .fakes import InlineWriter, RecordingLedger, unavailable

WRITE = Task(name="Write", id=1)
READ = Task(name="Read", id=2)


def test_toggle_from_idle_opens_one_timing(engine, ledger, clock) -> None:
    timing = engine.toggle(WRITE)

    assert timing is not None
    assert timing.task_id == 1
    assert timing.duration == 0
    assert timing.start_time == clock.now
    assert ledger.ops() == ["insert_open"]
    assert engine.current == timing
    assert engine.timing_observer.value == "Write"


def test_toggle_same_task_closes_and_keeps_long_timing(engine, ledger, clock) -> None:
    engine.toggle(WRITE)
    start = clock.now
    clock.advance(42)

    assert engine.toggle(WRITE) is None

    assert engine.current is None
    assert engine.timing_observer.value is None
    assert ledger.ops() == ["insert_open", "update_duration"]
    (_, (timing_id, duration)) = ledger.calls[1]
    assert duration == clock.now - start == 42
    assert ledger.inner.query_open() is None
    assert [t.duration for t in ledger.inner.list_timings(1)] == [42]
    assert timing_id == ledger.inner.list_timings(1)[0].id


def test_scenario_a_short_timing_is_deleted(engine, ledger, clock) -> None:
    engine.toggle(WRITE)
    clock.advance(3)
    engine.toggle(WRITE)

    assert ledger.ops() == ["insert_open", "delete"]
    assert ledger.inner.list_timings(1) == []
    assert engine.current is None
    assert engine.timing_observer.value is None


def test_scenario_b_switch_closes_old_and_opens_new(engine, ledger, clock) -> None:
    t0 = clock.now
    engine.toggle(WRITE)
    clock.advance(10)

    timing = engine.toggle(READ)

    assert ledger.ops() == ["insert_open", "update_duration", "insert_open"]
    assert [t.duration for t in ledger.inner.list_timings(1)] == [10]
    opened = ledger.inner.list_timings(2)
    assert len(opened) == 1
    assert opened[0].start_time == t0 + 10
    assert opened[0].duration == 0
    assert timing is not None and timing.task_id == 2 and timing.duration == 0
    assert engine.timing_observer.value == "Read"


def test_switch_applies_threshold_to_old_timing(engine, ledger, clock) -> None:
    engine.toggle(WRITE)
    clock.advance(2)
    engine.toggle(READ)

    assert ledger.ops() == ["insert_open", "delete", "insert_open"]
    assert ledger.inner.list_timings(1) == []
    assert engine.current.task_id == 2


def test_scenario_c_unsaved_task_is_rejected(engine, ledger) -> None:
    with pytest.raises(PreconditionError):
        engine.toggle(Task(name="draft"))

    assert ledger.calls == []
    assert engine.current is None
    assert engine.timing_observer.value is None


def test_unsaved_task_does_not_touch_open_timing(engine, ledger) -> None:
    engine.toggle(WRITE)
    before = engine.current

    with pytest.raises(PreconditionError):
        engine.toggle(Task(name="draft", id=0))

    assert engine.current == before
    assert ledger.ops() == ["insert_open"]
    assert engine.timing_observer.value == "Write"


@pytest.mark.parametrize(
    ("elapsed", "expected_op"),
    [(4, "delete"), (5, "update_duration"), (6, "update_duration")],
)
def test_threshold_boundary_is_inclusive(engine, ledger, clock, elapsed, expected_op) -> None:
    engine.toggle(WRITE)
    clock.advance(elapsed)
    engine.toggle(WRITE)

    assert ledger.ops()[-1] == expected_op


def test_zero_second_timing_is_never_kept_even_with_zero_threshold(engine, ledger, watcher) -> None:
    watcher.set_ignore_threshold(0)
    engine.toggle(WRITE)
    engine.toggle(WRITE)

    assert ledger.ops() == ["insert_open", "delete"]
    assert ledger.inner.query_open() is None


def test_threshold_change_reaches_engine_and_applies_to_next_close(engine, ledger, clock, watcher) -> None:
    engine.toggle(WRITE)
    clock.advance(8)
    engine.toggle(WRITE)  # kept at threshold 5

    watcher.set_ignore_threshold(10)
    assert engine.ignore_threshold == 10

    engine.toggle(WRITE)
    clock.advance(8)
    engine.toggle(WRITE)  # discarded at threshold 10

    assert ledger.ops() == ["insert_open", "update_duration", "insert_open", "delete"]
    assert [t.duration for t in ledger.inner.list_timings(1)] == [8]


def test_on_threshold_changed_clamps_negative(engine, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="task_timer.core.engine"):
        engine.on_threshold_changed(-7)
    assert engine.ignore_threshold == 0
    assert "shorter than 0 seconds" in caplog.text


def test_scenario_d_recovery_after_restart(ledger, watcher, clock) -> None:
    t0 = clock.now
    ledger.names[3] = "Plan"
    ledger.inner.insert_open(3, t0)
    clock.advance(600)

    eng = TimingEngine(ledger, watcher, writer=InlineWriter(), clock=clock)
    try:
        assert eng.current is not None
        assert eng.current.task_id == 3
        assert eng.current.start_time == t0
        assert eng.current.duration == 0
        assert eng.current_task_name == "Plan"
        assert eng.timing_observer.value == "Plan"
        assert eng.elapsed() == 600
    finally:
        eng.close()


def test_recovered_timing_closes_against_its_stored_record(ledger, watcher, clock) -> None:
    timing_id = ledger.inner.insert_open(3, clock.now)
    clock.advance(30)
    eng = TimingEngine(ledger, watcher, writer=InlineWriter(), clock=clock)
    ledger.calls.clear()

    eng.toggle(Task(name="Plan", id=3))

    assert ledger.calls == [("update_duration", (timing_id, 30))]
    eng.close()


def test_retrieve_open_timing_is_idempotent(engine, ledger) -> None:
    engine.toggle(WRITE)

    first = engine.retrieve_open_timing()
    second = engine.retrieve_open_timing()

    assert first is not None
    assert first == second
    assert first.task_name == "Write"
    assert engine.current is not None and engine.current.duration == 0


def test_retrieve_open_timing_returns_none_when_idle(engine) -> None:
    assert engine.retrieve_open_timing() is None
    assert engine.retrieve_open_timing() is None


def test_vanished_record_does_not_block_state_change(engine, ledger, writer, clock) -> None:
    engine.toggle(WRITE)
    # Simulate an external delete of the open row.
    ledger.inner.delete(ledger.inner.query_open().timing_id)
    clock.advance(20)

    timing = engine.toggle(READ)

    assert timing is not None and timing.task_id == 2
    assert engine.timing_observer.value == "Read"
    assert any(isinstance(e, NotFoundError) for e in writer.failures)
    assert ledger.ops() == ["insert_open", "update_duration", "insert_open"]


def test_storage_unavailable_is_optimistic(engine, ledger, writer, clock) -> None:
    ledger.fail_with = unavailable()

    engine.toggle(WRITE)
    assert engine.current is not None and engine.current.task_id == 1
    assert engine.timing_observer.value == "Write"

    clock.advance(10)
    engine.toggle(READ)
    assert engine.current.task_id == 2
    assert engine.timing_observer.value == "Read"
    assert len(writer.failures) == 3


def test_startup_survives_unavailable_storage(watcher, clock) -> None:
    ledger = RecordingLedger(fail_with=unavailable())
    eng = TimingEngine(ledger, watcher, writer=InlineWriter(), clock=clock)
    try:
        assert eng.current is None
        assert eng.timing_observer.value is None
    finally:
        eng.close()


def test_observer_subscribers_see_latest_name(engine, clock) -> None:
    seen: list[str | None] = []
    sub = engine.timing_observer.subscribe(seen.append)

    engine.toggle(WRITE)
    clock.advance(10)
    engine.toggle(READ)
    clock.advance(10)
    engine.toggle(READ)
    sub.cancel()
    engine.toggle(WRITE)

    assert seen == [None, "Write", "Read", None]


def test_close_releases_threshold_subscription(ledger, watcher, clock) -> None:
    eng = TimingEngine(ledger, watcher, writer=InlineWriter(), clock=clock)
    eng.close()
    eng.close()

    watcher.set_ignore_threshold(60)
    assert eng.ignore_threshold == 5


def test_close_waits_for_its_own_insert_with_background_writer(watcher, clock) -> None:
    ledger = RecordingLedger(names={1: "Write", 2: "Read"})
    writer = BackgroundWriter(max_workers=4)
    eng = TimingEngine(ledger, watcher, writer=writer, clock=clock)
    ledger.calls.clear()
    try:
        eng.toggle(WRITE)
        clock.advance(7)
        eng.toggle(READ)
        clock.advance(7)
        eng.toggle(READ)
        assert writer.flush(timeout=5.0)
    finally:
        eng.close()
        writer.shutdown()

    assert writer.failed_writes == 0
    assert [t.duration for t in ledger.inner.list_timings(1)] == [7]
    assert [t.duration for t in ledger.inner.list_timings(2)] == [7]
    assert ledger.inner.query_open() is None
    assert ledger.ops().count("insert_open") == 2
    assert ledger.ops().count("update_duration") == 2
