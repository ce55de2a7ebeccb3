"""Sinks — terminal side effects fed by the graph.

Unlike a Derivation (lazy, cached), a Sink keeps no value and re-runs every
time a pass reaches it. The runner resolves each sink's inputs through the
evaluator, calls the sink, and records a per-sink outcome. One failing sink
never stops the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

from reactgraph._handle import NodeHandle
from reactgraph._table import SINK, NodeTable
from reactgraph.derivation import evaluate
from reactgraph.errors import GraphError, SinkError, UnknownNodeError

if TYPE_CHECKING:
    from reactgraph.graph import Graph

logger = logging.getLogger("reactgraph.sink")


@dataclass(frozen=True)
class SinkOutcome:
    """Result of one sink invocation: its return value, or the error it raised."""

    ok: bool
    value: object = None
    error: SinkError | None = None

    @classmethod
    def success(cls, value: object) -> SinkOutcome:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: SinkError) -> SinkOutcome:
        return cls(ok=False, error=error)


def run_all(table: NodeTable, sink_ids: Iterable[str] | None = None) -> list[tuple[str, SinkOutcome]]:
    """Invoke sinks in registration order. None means every sink.

    Unknown ids and non-sink ids are rejected before anything runs.
    """
    if sink_ids is None:
        requested = {node_id for node_id, kind in table.kinds.items() if kind == SINK}
    else:
        requested = set()
        for sink_id in sink_ids:
            kind = table.kinds.get(sink_id)
            if kind is None:
                raise UnknownNodeError(sink_id)
            if kind != SINK:
                raise GraphError(f"{sink_id!r} is a {kind}, not a sink")
            requested.add(sink_id)

    results: list[tuple[str, SinkOutcome]] = []
    for sink_id in table.by_order(requested):
        try:
            args = [evaluate(table, dep) for dep in table.dependencies[sink_id]]
            value = table.fns[sink_id](*args)
        except Exception as exc:
            error = SinkError(sink_id, exc)
            logger.warning("Sink %r failed", sink_id, exc_info=exc)
            results.append((sink_id, SinkOutcome.failure(error)))
        else:
            results.append((sink_id, SinkOutcome.success(value)))
    return results


class Sink(NodeHandle):
    """A side effect over declared dependencies, re-run whenever a pass reaches it."""

    __slots__ = ("fn",)

    def __init__(self, node_id: str, fn: Callable[..., object]) -> None:
        super().__init__(node_id)
        self.fn = fn

    def run(self) -> SinkOutcome:
        """Run just this sink."""
        [(_, outcome)] = self.graph.run_all([self.id])
        return outcome

    def __repr__(self) -> str:
        name = getattr(self.fn, "__name__", repr(self.fn))
        state = "unbound" if self._graph is None else "bound"
        return f"Sink({self.id!r}, {name}, {state})"


def output(graph: Graph, *dependencies: str, name: str | None = None):
    """Decorator factory registering a function as a Sink.

    Usage:
        @output(graph, "total")
        def show_total(total):
            print(f"total={total}")

        graph.set("a", 10)  # -> ["show_total"]
    """

    def decorate(fn: Callable[..., object]) -> Sink:
        node = Sink(name or fn.__name__, fn)
        graph.register(node, dependencies)
        return node

    return decorate
