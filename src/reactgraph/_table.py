"""Node table — plain Python structures that hold all graph state.

Each Graph owns exactly one NodeTable. Signal, Derivation and Sink objects
are thin handles; values, caches, dirty flags and edges live here, keyed by
node id.
"""

from __future__ import annotations

import itertools
from typing import Callable

import networkx as nx

SIGNAL = "signal"
DERIVATION = "derivation"
SINK = "sink"

UNSET = object()


class NodeTable:
    __slots__ = (
        "kinds",
        "values",
        "comparators",
        "fns",
        "dependencies",
        "edges",
        "dirty_flags",
        "cached_values",
        "order",
        "_counter",
    )

    def __init__(self) -> None:
        self.kinds: dict[str, str] = {}
        # Signal state
        self.values: dict[str, object] = {}
        self.comparators: dict[str, Callable[[object, object], bool] | None] = {}
        # Derivation + Sink state
        self.fns: dict[str, Callable] = {}
        # Declared order, duplicates kept: this is the argument list
        self.dependencies: dict[str, tuple[str, ...]] = {}
        self.dirty_flags: dict[str, bool] = {}
        self.cached_values: dict[str, object] = {}
        # dep -> dependent edges; nodes in edges but not in kinds are forward references
        self.edges: nx.DiGraph = nx.DiGraph()
        self.order: dict[str, int] = {}
        self._counter = itertools.count()

    def add_signal(self, node_id: str, value: object, equals=None) -> None:
        self._add(node_id, SIGNAL)
        self.values[node_id] = value
        self.comparators[node_id] = equals

    def add_derivation(self, node_id: str, fn: Callable, dependencies: tuple[str, ...]) -> None:
        self._add(node_id, DERIVATION)
        self.fns[node_id] = fn
        self.dirty_flags[node_id] = True
        self.cached_values[node_id] = UNSET
        self._link(node_id, dependencies)

    def add_sink(self, node_id: str, fn: Callable, dependencies: tuple[str, ...]) -> None:
        self._add(node_id, SINK)
        self.fns[node_id] = fn
        self._link(node_id, dependencies)

    def _add(self, node_id: str, kind: str) -> None:
        self.kinds[node_id] = kind
        self.order[node_id] = next(self._counter)
        self.edges.add_node(node_id)

    def _link(self, node_id: str, dependencies: tuple[str, ...]) -> None:
        self.dependencies[node_id] = dependencies
        self.edges.add_edges_from((dep, node_id) for dep in dependencies)

    def dependents(self, node_id: str) -> list[str]:
        """Direct dependents in registration order."""
        if node_id not in self.edges:
            return []
        return list(self.edges.successors(node_id))

    def by_order(self, node_ids) -> list[str]:
        return sorted(node_ids, key=self.order.__getitem__)
