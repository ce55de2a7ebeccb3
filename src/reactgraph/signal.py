"""Signals — externally mutable value cells.

A Signal is the only node a caller writes to. Setting one marks every
derivation downstream of it dirty and reports the sinks it reaches.

Until it is registered a Signal only remembers its initial value; after
registration its state lives in the owning graph's node table.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from reactgraph._handle import NodeHandle

T = TypeVar("T")


class Signal(NodeHandle, Generic[T]):
    """A named value cell. Register it with Graph.register or create via Graph.signal."""

    __slots__ = ("initial", "equals")

    def __init__(
        self,
        node_id: str,
        value: T,
        *,
        equals: Callable[[T, T], bool] | None = None,
    ) -> None:
        super().__init__(node_id)
        self.initial = value
        self.equals = equals

    def get(self) -> T:
        return self.graph.get(self.id)

    def set(self, value: T) -> list[str]:
        """Write a new value. Returns the sinks to re-run."""
        return self.graph.set(self.id, value)

    def __repr__(self) -> str:
        if self._graph is None:
            return f"Signal({self.id!r}, {self.initial!r}, unbound)"
        return f"Signal({self.id!r}, {self._graph._table.values[self.id]!r})"
