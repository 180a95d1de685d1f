"""A condition-variable based mailbox for coordinating typed events."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Hashable

Events = Dict[Hashable, Any]


class EventBox:
    """Holds the latest value for each event type and wakes waiters on change."""

    def __init__(self) -> None:
        self._events: Events = {}
        self._cond = threading.Condition()
        self._ignore: set = set()

    def wait(self, callback: Callable[[Events], None]) -> None:
        """Block until some event is set, then run callback on the event dict.

        The callback runs with the box locked and may clear the dict.
        """
        with self._cond:
            if not self._events:
                self._cond.wait()
            callback(self._events)

    def set(self, event: Hashable, value: Any) -> None:
        """Record value for event, waking waiters unless the event is ignored."""
        with self._cond:
            self._events[event] = value
            if event not in self._ignore:
                self._cond.notify_all()

    def peek(self, event: Hashable) -> bool:
        """Return True if event is currently set."""
        with self._cond:
            return event in self._events

    def watch(self, *events: Hashable) -> None:
        """Remove events from the ignore list."""
        with self._cond:
            self._ignore.difference_update(events)

    def unwatch(self, *events: Hashable) -> None:
        """Add events to the ignore list."""
        with self._cond:
            self._ignore.update(events)

    def wait_for(self, event: Hashable) -> None:
        """Block until event has been set."""
        found = False

        def check(events: Events) -> None:
            nonlocal found
            found = event in events

        while not found:
            self.wait(check)