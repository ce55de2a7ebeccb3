"""Graph — the explicit owner of one reactive dependency graph.

Dependencies are declared when a node is registered and never change
afterwards. There is no process-wide state: independent Graph instances
never see each other.

Processing is single-threaded and run-to-completion. A set() or run_all()
pass finishes before the next one may start; attempting a mutation from
inside a pass (for example a sink setting a signal) raises ReentrancyError.
Events coming from other threads go through reactgraph.events.EventQueue.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Mapping

from reactgraph import _propagation
from reactgraph._table import DERIVATION, SIGNAL, SINK, NodeTable
from reactgraph.derivation import Derivation, evaluate
from reactgraph.errors import (
    CycleError,
    DuplicateNodeError,
    GraphError,
    ReentrancyError,
    UnknownNodeError,
)
from reactgraph.signal import Signal
from reactgraph.sink import Sink, SinkOutcome, run_all

logger = logging.getLogger("reactgraph.graph")


class Graph:
    """Signals, derivations and sinks wired by statically declared dependencies.

    Usage:
        graph = Graph()
        graph.signal("a", 2)
        graph.signal("b", 3)
        graph.derivation("sum", lambda a, b: a + b, ["a", "b"])
        graph.sink("show", print, ["sum"])

        graph.get("sum")          # 5
        graph.set("a", 10)        # ["show"]
        graph.run_all(["show"])   # prints 13
    """

    def __init__(self, name: str = "graph") -> None:
        self.name = name
        self._table = NodeTable()
        self._busy = False
        self._nodes: dict[str, Signal | Derivation | Sink] = {}

    @contextmanager
    def _pass(self, what: str, *, nested_ok: bool = False):
        if self._busy:
            if nested_ok:
                yield
                return
            raise ReentrancyError(f"cannot {what} while graph {self.name!r} is mid-pass")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    # --- Construction ---

    def register(self, node: Signal | Derivation | Sink, dependencies: Iterable[str] = ()):
        """Add a node. Returns the node, now bound to this graph.

        Dependencies may name nodes registered later. Raises CycleError if the
        node would reach itself through them; the graph is unchanged on failure.
        """
        if isinstance(dependencies, str):
            raise GraphError(
                f"dependencies of {getattr(node, 'id', node)!r} must be a list of ids, "
                f"not the string {dependencies!r}"
            )
        deps = tuple(dependencies)
        with self._pass("register"):
            self._check_registration(node, deps)
            table = self._table
            if isinstance(node, Signal):
                table.add_signal(node.id, node.initial, node.equals)
            elif isinstance(node, Derivation):
                table.add_derivation(node.id, node.fn, deps)
            else:
                table.add_sink(node.id, node.fn, deps)
            node._graph = self
            self._nodes[node.id] = node
        logger.debug("Registered %s %r on %r (deps=%s)", table.kinds[node.id], node.id, self.name, deps)
        return node

    def _check_registration(self, node, deps: tuple[str, ...]) -> None:
        if not isinstance(node, (Signal, Derivation, Sink)):
            raise GraphError(f"cannot register {node!r}: expected a Signal, Derivation or Sink")
        if node._graph is not None:
            raise GraphError(f"{node!r} is already registered with graph {node._graph.name!r}")
        table = self._table
        if node.id in table.kinds:
            raise DuplicateNodeError(node.id)
        if isinstance(node, Signal):
            if deps:
                raise GraphError(f"signal {node.id!r} cannot have dependencies")
            return
        for dep in deps:
            if table.kinds.get(dep) == SINK:
                raise GraphError(f"{node.id!r} cannot depend on sink {dep!r}")
        if isinstance(node, Sink) and table.dependents(node.id):
            raise GraphError(
                f"sink {node.id!r} cannot be registered: "
                f"{table.dependents(node.id)} already depend on it"
            )
        cycle = _propagation.find_cycle(table, node.id, deps)
        if cycle is not None:
            raise CycleError(cycle)

    def signal(self, node_id: str, value, *, equals: Callable | None = None) -> Signal:
        return self.register(Signal(node_id, value, equals=equals))

    def derivation(self, node_id: str, fn: Callable, dependencies: Iterable[str] = ()) -> Derivation:
        return self.register(Derivation(node_id, fn), dependencies)

    def sink(self, node_id: str, fn: Callable, dependencies: Iterable[str] = ()) -> Sink:
        return self.register(Sink(node_id, fn), dependencies)

    # --- Mutation ---

    def set(self, signal_id: str, value) -> list[str]:
        """Update a signal, mark dependent derivations dirty, return reached sinks."""
        return self.set_many({signal_id: value})

    def set_many(self, values: Mapping[str, object]) -> list[str]:
        """Apply several signal updates as one event.

        Returns the union of reached sinks in registration order. All ids are
        validated before any value changes.
        """
        with self._pass("set signals"):
            table = self._table
            for signal_id in values:
                kind = table.kinds.get(signal_id)
                if kind is None:
                    raise UnknownNodeError(signal_id)
                if kind != SIGNAL:
                    raise GraphError(f"{signal_id!r} is a {kind}; only signals can be set")

            updates = {}
            for signal_id, value in values.items():
                equals = table.comparators[signal_id]
                if equals is not None and equals(table.values[signal_id], value):
                    continue
                updates[signal_id] = value

            if not updates:
                return []
            table.values.update(updates)
            changed = list(updates)
            sinks, marked = _propagation.invalidate(table, changed)
        logger.debug("Set %s on %r: %d dirty, sinks=%s", changed, self.name, marked, sinks)
        return sinks

    # --- Evaluation ---

    def get(self, node_id: str):
        """Current value of a signal or derivation. Dirty derivations recompute first."""
        with self._pass("read", nested_ok=True):
            return evaluate(self._table, node_id)

    def run_all(self, sink_ids: Iterable[str] | None = None) -> list[tuple[str, SinkOutcome]]:
        """Run sinks in registration order; None runs every sink."""
        with self._pass("run sinks"):
            return run_all(self._table, sink_ids)

    # --- Introspection ---

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._table.kinds

    def __len__(self) -> int:
        return len(self._table.kinds)

    def __getitem__(self, node_id: str) -> Signal | Derivation | Sink:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def kind(self, node_id: str) -> str:
        try:
            return self._table.kinds[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def dependencies(self, node_id: str) -> tuple[str, ...]:
        self.kind(node_id)
        return self._table.dependencies.get(node_id, ())

    def dependents(self, node_id: str) -> list[str]:
        """Direct dependents of a node, in registration order."""
        self.kind(node_id)
        return self._table.dependents(node_id)

    def is_dirty(self, node_id: str) -> bool:
        kind = self.kind(node_id)
        if kind != DERIVATION:
            raise GraphError(f"{node_id!r} is a {kind}; only derivations have a dirty flag")
        return self._table.dirty_flags[node_id]

    def sinks(self) -> list[str]:
        return self._table.by_order(
            node_id for node_id, kind in self._table.kinds.items() if kind == SINK
        )

    def unresolved(self) -> set[str]:
        """Dependency ids that were referenced but never registered."""
        return set(self._table.edges) - self._table.kinds.keys()

    def __repr__(self) -> str:
        return f"Graph({self.name!r}, nodes={len(self)})"
