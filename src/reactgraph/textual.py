"""Textual integration for reactgraph. Opt-in — requires textual.

widget_sink() builds sink functions that render into a widget; bind_queue()
marshals events posted from worker threads onto the app thread. Textual
coupling stays in this module so the core graph remains UI-agnostic.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from reactgraph.errors import RenderTargetError
from reactgraph.events import EventQueue

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend widget sinks during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _join(*values) -> str:
    return " ".join(str(v) for v in values)


def widget_sink(app, selector: str, render=_join):
    """Sink function that writes render(*inputs) into the widget at selector.

    Returns the rendered content, or None when skipped because the app is
    not running or is paused. A missing widget raises RenderTargetError,
    which the runner reports as that sink's failure.

    Usage:
        graph.sink("total_label", widget_sink(app, "#total"), ["total"])
    """

    def _render(*values):
        if not is_safe(app):
            return None
        try:
            widget = app.query_one(selector)
        except NoMatches as exc:
            raise RenderTargetError(f"no widget matches {selector!r}") from exc
        content = render(*values)
        widget.update(content)
        return content

    _render.__name__ = f"widget_sink[{selector}]"
    return _render


def bind_queue(app, session) -> EventQueue:
    """EventQueue whose posts from worker threads drain on the app thread.

    Must be called from the app thread. Posts made on the app thread drain
    synchronously.
    """
    _main = threading.get_ident()

    def _notify():
        if threading.get_ident() != _main:
            app.call_from_thread(events.drain)
        else:
            events.drain()

    events = EventQueue(session, notify=_notify)
    return events
