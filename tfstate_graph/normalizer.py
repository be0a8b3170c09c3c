"""Graph normalization: deduplication, managed-only filtering, ordering and
transitive reduction.

Every pass returns a new :class:`Graph` and preserves the relative order of
the nodes and edges it keeps.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from tfstate_graph.models import Edge, Graph


def unique_edges(edges: Iterable[Edge]) -> list[Edge]:
    """Remove duplicate edges, keeping the first occurrence of each pair."""
    seen: set[tuple[str, str]] = set()
    out: list[Edge] = []
    for e in edges:
        if e.key in seen:
            continue
        seen.add(e.key)
        out.append(e)
    return out


def only_managed(graph: Graph) -> Graph:
    """Keep managed nodes, and edges whose endpoints are both managed."""
    nodes = [n for n in graph.nodes if n.is_managed]
    keep = {n.id for n in nodes}
    edges = [e for e in graph.edges if e.source in keep and e.target in keep]
    return Graph(nodes=nodes, edges=edges)


def sort_graph(graph: Graph) -> Graph:
    """Order nodes by id and edges by (from, to)."""
    return Graph(
        nodes=sorted(graph.nodes, key=lambda n: n.id),
        edges=sorted(graph.edges, key=lambda e: e.key),
    )


def has_alternate_path(adjacency: dict[str, list[str]], source: str, target: str) -> bool:
    """Return True if *target* is reachable from *source* without taking the
    direct ``source -> target`` edge as the first step."""
    queue = deque(n for n in adjacency.get(source, []) if n != target)
    if not queue:
        return False
    visited = {source}
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        if current == target:
            return True
        queue.extend(n for n in adjacency.get(current, []) if n not in visited)
    return False


def reduce_transitive(graph: Graph) -> Graph:
    """Drop every edge ``u -> v`` already implied by a longer path ``u => v``.

    Each edge is checked on its own against the full edge set. On a DAG this
    yields the transitive reduction; with cycles an edge is kept unless a
    witness path is found.
    """
    adjacency: dict[str, list[str]] = {}
    for e in graph.edges:
        adjacency.setdefault(e.source, []).append(e.target)
    edges = [e for e in graph.edges if not has_alternate_path(adjacency, e.source, e.target)]
    return Graph(nodes=graph.nodes, edges=edges)
