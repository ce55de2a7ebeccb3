"""reactgraph: an explicit reactive computation graph for Python."""

from importlib.metadata import version as _version

__version__ = _version("reactgraph")

from reactgraph.errors import (
    ReactiveError,
    GraphError,
    CycleError,
    DuplicateNodeError,
    UnknownNodeError,
    ReentrancyError,
    EvaluationError,
    SinkError,
    RenderTargetError,
)
from reactgraph.signal import Signal
from reactgraph.derivation import Derivation, derived
from reactgraph.sink import Sink, SinkOutcome, output
from reactgraph.graph import Graph
from reactgraph.session import Session
from reactgraph.events import EventQueue
# textual NOT auto-imported — opt-in only

__all__ = [
    "Graph",
    "Signal",
    "Derivation",
    "derived",
    "Sink",
    "SinkOutcome",
    "output",
    "Session",
    "EventQueue",
    "ReactiveError",
    "GraphError",
    "CycleError",
    "DuplicateNodeError",
    "UnknownNodeError",
    "ReentrancyError",
    "EvaluationError",
    "SinkError",
    "RenderTargetError",
]
