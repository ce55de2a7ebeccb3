"""Session — input events in, sink outcomes out.

A Session binds a Graph to the outside world: each input event sets signals
and immediately runs the sinks it reached, forwarding every outcome to an
optional on_outcome callback (the rendering layer).

Wrapping several events in `with session.transaction()` (or an
@session.action function) defers sink runs until the outermost scope
exits, so each affected sink runs once and never sees a half-applied batch.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Callable, Mapping, ParamSpec, TypeVar

from reactgraph.graph import Graph
from reactgraph.sink import SinkOutcome

P = ParamSpec("P")
R = TypeVar("R")

Outcomes = list[tuple[str, SinkOutcome]]

logger = logging.getLogger("reactgraph.session")


class Session:
    """Drives one graph: applies input events and runs the sinks they reach."""

    def __init__(
        self,
        graph: Graph,
        initial: Mapping[str, object] | None = None,
        on_outcome: Callable[[str, SinkOutcome], None] | None = None,
    ) -> None:
        self.graph = graph
        self.last_outcomes: Outcomes = []
        self._on_outcome = on_outcome
        self._batch_depth = 0
        self._pending: set[str] = set()
        if initial:
            graph.set_many(initial)

    def start(self) -> Outcomes:
        """Initial render: run every sink once."""
        outcomes = self._publish(self.graph.run_all())
        logger.info("Session on %r started: %d sinks rendered", self.graph.name, len(outcomes))
        return outcomes

    def get(self, node_id: str):
        return self.graph.get(node_id)

    def set(self, signal_id: str, value) -> Outcomes:
        """Apply one input event. Returns outcomes, or [] while batching."""
        return self._run(self.graph.set(signal_id, value))

    def update(self, values: Mapping[str, object]) -> Outcomes:
        """Apply several input events at once; each reached sink runs once."""
        return self._run(self.graph.set_many(values))

    @contextmanager
    def transaction(self):
        """Defer sink runs until the outermost transaction exits.

        Usage:
            with session.transaction():
                session.set("year", 2001)
                session.set("country", "Peru")
            # sinks run here; see session.last_outcomes
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self.flush()

    def action(self, fn: Callable[P, R]) -> Callable[P, R]:
        """Decorator: run fn inside a transaction."""

        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with self.transaction():
                return fn(*args, **kwargs)

        return wrapper

    def flush(self) -> Outcomes:
        """Run sinks deferred by a transaction."""
        pending = list(self._pending)
        self._pending.clear()
        if not pending:
            return []
        return self._publish(self.graph.run_all(pending))

    def _run(self, sinks: list[str]) -> Outcomes:
        if self._batch_depth > 0:
            self._pending.update(sinks)
            return []
        if not sinks:
            return []
        return self._publish(self.graph.run_all(sinks))

    def _publish(self, outcomes: Outcomes) -> Outcomes:
        self.last_outcomes = outcomes
        if self._on_outcome is not None:
            for sink_id, outcome in outcomes:
                self._on_outcome(sink_id, outcome)
        return outcomes
