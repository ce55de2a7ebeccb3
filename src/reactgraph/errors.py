"""Exception hierarchy for reactgraph.

Construction errors (GraphError and subclasses) are fatal to the registration
that raised them. EvaluationError and SinkError are recoverable: the graph
stays usable and the failing node is retried on its next pass.
"""

from __future__ import annotations


class ReactiveError(Exception):
    """Base class for every error raised by reactgraph."""


class GraphError(ReactiveError):
    """Malformed registration, or an operation on the wrong kind of node."""


class CycleError(GraphError):
    """Registering a node would make it depend on itself."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__("dependency cycle: " + " -> ".join(self.cycle))


class DuplicateNodeError(GraphError):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"node {node_id!r} is already registered")


class UnknownNodeError(GraphError, KeyError):
    def __init__(self, node_id: str, needed_by: str | None = None) -> None:
        self.node_id = node_id
        self.needed_by = needed_by
        if needed_by is None:
            message = f"no node {node_id!r}"
        else:
            message = f"no node {node_id!r} (required by {needed_by!r})"
        super().__init__(message)

    # KeyError.__str__ would repr() the message.
    def __str__(self) -> str:
        return self.args[0]


class ReentrancyError(ReactiveError):
    """A mutation was attempted while the graph was mid-pass."""


class EvaluationError(ReactiveError):
    """A derivation's function raised. The node stays dirty."""

    def __init__(self, node_id: str, cause: BaseException) -> None:
        self.node_id = node_id
        super().__init__(f"derivation {node_id!r} failed: {cause!r}")
        self.__cause__ = cause


class SinkError(ReactiveError):
    """A sink's function, or the resolution of its inputs, raised."""

    def __init__(self, node_id: str, cause: BaseException) -> None:
        self.node_id = node_id
        super().__init__(f"sink {node_id!r} failed: {cause!r}")
        self.__cause__ = cause


class RenderTargetError(ReactiveError):
    """A widget sink could not find the widget it renders into."""
