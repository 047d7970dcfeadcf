import logging

import pytest

from tetris_engine.game.events import GAME_OVER, LINES_CLEARED, STATE_CHANGE, EventEmitter


def test_emit_reaches_every_listener():
    emitter = EventEmitter()
    seen = []
    emitter.on(LINES_CLEARED, lambda count, snap: seen.append(("a", count)))
    emitter.on(LINES_CLEARED, lambda count, snap: seen.append(("b", count)))
    emitter.emit(LINES_CLEARED, 2, None)
    assert seen == [("a", 2), ("b", 2)]
    assert emitter.listener_count(LINES_CLEARED) == 2
    assert emitter.listener_count(GAME_OVER) == 0


def test_unsubscribe_is_idempotent():
    emitter = EventEmitter()
    seen = []
    unsubscribe = emitter.on(STATE_CHANGE, seen.append)
    unsubscribe()
    unsubscribe()
    emitter.emit(STATE_CHANGE, "x")
    assert seen == []


def test_unknown_event_rejected():
    with pytest.raises(ValueError):
        EventEmitter().on("score_changed", print)


def test_listener_error_is_logged(caplog):
    emitter = EventEmitter()
    seen = []

    def broken(_):
        raise KeyError("nope")

    emitter.on(GAME_OVER, broken)
    emitter.on(GAME_OVER, seen.append)
    with caplog.at_level(logging.ERROR, logger="tetris_engine.game.events"):
        emitter.emit(GAME_OVER, "final")
    assert seen == ["final"]
    assert any(record.exc_info for record in caplog.records)


def test_clear_drops_all_listeners():
    emitter = EventEmitter()
    emitter.on(STATE_CHANGE, print)
    emitter.on(GAME_OVER, print)
    emitter.clear()
    assert emitter.listener_count(STATE_CHANGE) == 0
    assert emitter.listener_count(GAME_OVER) == 0
