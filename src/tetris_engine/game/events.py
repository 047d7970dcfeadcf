from __future__ import annotations

import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

STATE_CHANGE = "state_change"
LINES_CLEARED = "lines_cleared"
GAME_OVER = "game_over"

EVENTS = (STATE_CHANGE, LINES_CLEARED, GAME_OVER)


class EventEmitter:
    """Listener registry with any number of subscribers per event.

    Emitting never waits on listeners for a result; an exception raised by
    one listener is logged and the remaining listeners still run.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Callable[..., None]]] = {name: [] for name in EVENTS}

    def on(self, event: str, callback: Callable[..., None]) -> Callable[[], None]:
        if event not in self._listeners:
            raise ValueError(f"unknown event {event!r}")
        self._listeners[event].append(callback)

        def unsubscribe() -> None:
            try:
                self._listeners[event].remove(callback)
            except ValueError:
                pass  # already removed

        return unsubscribe

    def emit(self, event: str, *args) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(*args)
            except Exception:
                logger.exception("%s listener %r failed", event, callback)

    def listener_count(self, event: str) -> int:
        return len(self._listeners[event])

    def clear(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()
