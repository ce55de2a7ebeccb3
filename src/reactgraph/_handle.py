"""Node handles — the id a caller holds and the graph it was registered with.

State never lives on a handle; it is read through the bound graph's node
table, so an unregistered handle can only report its own id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reactgraph.errors import GraphError

if TYPE_CHECKING:
    from reactgraph.graph import Graph


class NodeHandle:
    """Base for Signal, Derivation and Sink: an id plus the graph it joined."""

    __slots__ = ("id", "_graph")

    def __init__(self, node_id: str) -> None:
        if not isinstance(node_id, str) or not node_id:
            raise GraphError(f"node id must be a non-empty string, got {node_id!r}")
        self.id = node_id
        self._graph: Graph | None = None

    @property
    def graph(self) -> Graph:
        if self._graph is None:
            raise GraphError(f"{type(self).__name__} {self.id!r} is not registered with a graph")
        return self._graph
