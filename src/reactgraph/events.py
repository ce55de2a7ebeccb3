"""EventQueue — serialize input events from many threads into one session.

A Graph is single-threaded. Worker threads never touch it; they post events
here, and the thread that created the queue drains them one at a time.
An optional notify callback runs on the posting thread after each post so
a UI loop can schedule the drain (e.g. Textual's app.call_from_thread).
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable

from reactgraph.errors import ReentrancyError
from reactgraph.session import Outcomes, Session

logger = logging.getLogger("reactgraph.events")


class EventQueue:
    """Single-writer queue in front of a Session."""

    def __init__(self, session: Session, *, notify: Callable[[], None] | None = None) -> None:
        self.session = session
        self._events: queue.SimpleQueue[tuple[str, object]] = queue.SimpleQueue()
        self._notify = notify
        self._owner = threading.current_thread()

    def post(self, signal_id: str, value) -> None:
        """Enqueue a signal update. Safe from any thread."""
        self._events.put((signal_id, value))
        if self._notify is not None:
            self._notify()

    def pending(self) -> int:
        """Number of events waiting to be drained. Useful for testing."""
        return self._events.qsize()

    def drain(self) -> Outcomes:
        """Apply every queued event in order, one pass per event.

        Must run on the owner thread. If an event raises, it is dropped and
        the rest stay queued for the next drain.
        """
        if threading.current_thread() is not self._owner:
            raise ReentrancyError(
                f"drain() must run on {self._owner.name!r}, "
                f"not {threading.current_thread().name!r}"
            )
        outcomes: Outcomes = []
        applied = 0
        while True:
            try:
                signal_id, value = self._events.get_nowait()
            except queue.Empty:
                break
            outcomes.extend(self.session.set(signal_id, value))
            applied += 1
        if applied:
            logger.debug("Drained %d events into %r", applied, self.session.graph.name)
        return outcomes
