"""In-process event stream for the UI layer."""

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from stock_control.domain.events import Event

_logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Interface for publishing workflow and print events."""

    def publish(self, event: Event) -> None:
        """Deliver an event to interested listeners."""


@dataclass
class EventBus(EventSink):
    """Synchronous publish/subscribe bus that keeps a bounded history."""

    history_size: int = 200
    _subscribers: list[Callable[[Event], None]] = field(default_factory=list, init=False)
    _history: deque[Event] = field(init=False)

    def __post_init__(self) -> None:
        self._history = deque(maxlen=self.history_size)

    def subscribe(self, listener: Callable[[Event], None]) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def publish(self, event: Event) -> None:
        """Record the event and hand it to every subscriber."""
        self._history.append(event)
        for listener in list(self._subscribers):
            try:
                listener(event)
            except Exception:
                _logger.exception("Event listener failed for %s", type(event).__name__)

    def recent(self) -> list[Event]:
        """Return recorded events, oldest first."""
        return list(self._history)

    def drain(self) -> list[Event]:
        """Return recorded events and clear the history."""
        events = list(self._history)
        self._history.clear()
        return events
