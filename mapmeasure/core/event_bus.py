"""
In-process event bus for measurement session notifications.

Sessions emit (event_name, payload) pairs such as ("measurement_finished",
MeasurementResult); hosts subscribe to single names or to "*" for everything.
"""
import threading
from collections import defaultdict
from typing import Any, Callable

from .logger import get_logger

logger = get_logger("event_bus")

ALL_EVENTS = "*"

Callback = Callable[[str, Any], None]


class EventBus:
    """
    event_name -> callbacks, plus wildcard subscribers.
    Callbacks run outside the lock in subscription order; a failing callback
    is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callback]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_name: str, callback: Callback) -> Callable[[], None]:
        """Register callback; returns a function that removes this subscription."""
        with self._lock:
            self._handlers[event_name].append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(event_name, callback)

        return _unsubscribe

    def unsubscribe(self, event_name: str, callback: Callback) -> None:
        """Remove one occurrence of callback for event_name; unknown callbacks are ignored."""
        with self._lock:
            handlers = self._handlers.get(event_name)
            if not handlers or callback not in handlers:
                return
            handlers.remove(callback)
            if not handlers:
                del self._handlers[event_name]

    def emit(self, event_name: str, data: Any = None) -> int:
        """Deliver (event_name, data) to subscribers; returns how many callbacks succeeded."""
        with self._lock:
            callbacks = list(self._handlers.get(event_name, ()))
            if event_name != ALL_EVENTS:
                callbacks += self._handlers.get(ALL_EVENTS, ())
        delivered = 0
        for cb in callbacks:
            try:
                cb(event_name, data)
            except Exception:
                logger.exception("EventBus callback error [%s]", event_name)
            else:
                delivered += 1
        return delivered
