from tetris_engine.game import ManualScheduler


def test_callbacks_run_in_time_order():
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_later(2.0, fired.append, "late")
    scheduler.call_later(1.0, fired.append, "early")
    assert scheduler.advance(1.5) == 1
    assert fired == ["early"]
    assert scheduler.time() == 1.5
    assert scheduler.advance(1.0) == 1
    assert fired == ["early", "late"]


def test_cancelled_handle_never_fires():
    scheduler = ManualScheduler(start=10.0)
    fired = []
    handle = scheduler.call_later(1.0, fired.append, 1)
    assert scheduler.pending == 1
    handle.cancel()
    assert handle.cancelled()
    assert scheduler.pending == 0
    assert scheduler.advance(5.0) == 0
    assert fired == []


def test_callbacks_scheduled_while_advancing_are_due_in_same_call():
    scheduler = ManualScheduler()
    times = []

    def tick():
        times.append(scheduler.time())
        scheduler.call_later(1.0, tick)

    scheduler.call_later(1.0, tick)
    assert scheduler.advance(3.0) == 3
    assert times == [1.0, 2.0, 3.0]
    assert scheduler.pending == 1


def test_negative_advance_keeps_clock():
    scheduler = ManualScheduler(start=4.0)
    scheduler.advance(-2.0)
    assert scheduler.time() == 4.0
