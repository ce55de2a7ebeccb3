"""Propagation engine — the heart of reactgraph.

Three walks over the node table's edge graph (dep -> dependent):

- find_cycle: would a new node's dependencies lead back to it?
- invalidate: breadth-first downstream walk from changed signals that marks
  derivations dirty and collects the sinks it reaches.
- plan: the dirty derivations a read must recompute, dependencies first.

networkx does the traversal, so graph depth is not bounded by the
interpreter recursion limit.
"""

from __future__ import annotations

from typing import Iterable

import networkx as nx

from reactgraph._table import DERIVATION, SINK, NodeTable
from reactgraph.errors import UnknownNodeError


def find_cycle(table: NodeTable, node_id: str, dependencies: Iterable[str]) -> list[str] | None:
    """Return the cycle node_id would close if registered with dependencies, else None.

    The path reads in depends-on direction: [r, q, p, r] means r needs q,
    q needs p and p needs r. The edge graph is only read, never modified.
    """
    deps = list(dict.fromkeys(dependencies))
    if node_id in deps:
        return [node_id, node_id]
    # Only forward references can already have dependents.
    if node_id not in table.edges:
        return None
    for dep in deps:
        if dep in table.edges and nx.has_path(table.edges, node_id, dep):
            downstream = nx.shortest_path(table.edges, node_id, dep)
            return [node_id, *reversed(downstream)]
    return None


def invalidate(table: NodeTable, signal_ids: Iterable[str]) -> tuple[list[str], int]:
    """Mark everything downstream of signal_ids dirty.

    Each node is visited at most once, so diamonds are marked once.
    Returns (reached sinks in registration order, derivations visited).
    """
    sources = list(signal_ids)
    seen = set(sources)
    sinks: list[str] = []
    marked = 0
    for source in sources:
        for _, dependent in nx.bfs_edges(table.edges, source):
            if dependent in seen:
                continue
            seen.add(dependent)
            if table.kinds[dependent] == SINK:
                sinks.append(dependent)
            else:
                table.dirty_flags[dependent] = True
                marked += 1
    return table.by_order(sinks), marked


def plan(table: NodeTable, node_id: str) -> list[str]:
    """Dirty derivations node_id needs recomputed, in dependency order.

    A dirty node makes everything downstream of it dirty, so a clean node
    never has dirty ancestors and every dirty ancestor of node_id is needed.
    """
    if table.kinds.get(node_id) != DERIVATION or not table.dirty_flags[node_id]:
        return []

    upstream = nx.ancestors(table.edges, node_id)
    for missing in upstream - table.kinds.keys():
        needed_by = next(n for n in table.edges.successors(missing) if n in upstream or n == node_id)
        raise UnknownNodeError(missing, needed_by)

    dirty = {
        n
        for n in upstream
        if table.kinds[n] == DERIVATION and table.dirty_flags[n]
    }
    dirty.add(node_id)
    return list(nx.topological_sort(table.edges.subgraph(dirty)))
