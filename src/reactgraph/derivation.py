"""Derivations — cached values computed from upstream nodes.

A Derivation wraps a pure function and a fixed, ordered list of
dependencies. The function receives the dependency values positionally.
The result is cached until a signal upstream changes; on the next read,
dirty upstream derivations are brought current first (dependencies before
dependents, each once) and then the function re-runs.

Derivations are lazy — they only recompute when read.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from reactgraph._handle import NodeHandle
from reactgraph._propagation import plan
from reactgraph._table import SIGNAL, SINK, NodeTable
from reactgraph.errors import EvaluationError, GraphError, UnknownNodeError

if TYPE_CHECKING:
    from reactgraph.graph import Graph

T = TypeVar("T")

logger = logging.getLogger("reactgraph.derivation")


def evaluate(table: NodeTable, node_id: str) -> object:
    """Return the current value of a signal or derivation, recomputing if dirty.

    Raises EvaluationError naming the first derivation that failed. That node
    and everything downstream of it stay dirty, so the next read retries.
    """
    kind = table.kinds.get(node_id)
    if kind is None:
        raise UnknownNodeError(node_id)
    if kind == SINK:
        raise GraphError(f"{node_id!r} is a sink and has no value")
    if kind == SIGNAL:
        return table.values[node_id]

    for current in plan(table, node_id):
        args = [_read(table, dep) for dep in table.dependencies[current]]
        try:
            value = table.fns[current](*args)
        except Exception as exc:
            logger.debug("Derivation %r raised %r", current, exc)
            raise EvaluationError(current, exc) from exc
        table.cached_values[current] = value
        table.dirty_flags[current] = False
        logger.debug("Recomputed %r", current)

    return table.cached_values[node_id]


def _read(table: NodeTable, node_id: str) -> object:
    if table.kinds[node_id] == SIGNAL:
        return table.values[node_id]
    return table.cached_values[node_id]


class Derivation(NodeHandle, Generic[T]):
    """A derived value over declared dependencies, cached until they change."""

    __slots__ = ("fn",)

    def __init__(self, node_id: str, fn: Callable[..., T]) -> None:
        super().__init__(node_id)
        self.fn = fn

    def get(self) -> T:
        """Read the value. Recomputes if dirty."""
        return self.graph.get(self.id)

    @property
    def dirty(self) -> bool:
        return self.graph.is_dirty(self.id)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__name__", repr(self.fn))
        if self._graph is None:
            return f"Derivation({self.id!r}, {name}, unbound)"
        table = self._graph._table
        state = "dirty" if table.dirty_flags[self.id] else f"cached={table.cached_values[self.id]!r}"
        return f"Derivation({self.id!r}, {name}, {state})"


def derived(graph: Graph, *dependencies: str, name: str | None = None):
    """Decorator factory registering a function as a Derivation.

    The node id defaults to the function's name.

    Usage:
        graph.signal("a", 2)
        graph.signal("b", 3)

        @derived(graph, "a", "b")
        def total(a, b):
            return a + b

        total.get()  # 5
    """

    def decorate(fn: Callable[..., T]) -> Derivation[T]:
        node = Derivation(name or fn.__name__, fn)
        graph.register(node, dependencies)
        return node

    return decorate
