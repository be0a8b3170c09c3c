"""Impact analysis and text reports over a built state graph."""

from __future__ import annotations

import logging
from collections import deque

from tfstate_graph.models import Graph

logger = logging.getLogger(__name__)


def _adjacency(graph: Graph, *, reverse: bool = False) -> dict[str, list[str]]:
    adj: dict[str, list[str]] = {}
    for e in graph.edges:
        src, dst = (e.target, e.source) if reverse else (e.source, e.target)
        adj.setdefault(src, []).append(dst)
    return adj


def _reachable(adj: dict[str, list[str]], start: str) -> list[str]:
    seen: set[str] = {start}
    queue = deque(adj.get(start, []))
    while queue:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)
        queue.extend(adj.get(current, []))
    seen.discard(start)
    return sorted(seen)


def dependencies_of(graph: Graph, node_id: str) -> list[str]:
    """Nodes *node_id* directly depends on."""
    return sorted({e.source for e in graph.edges if e.target == node_id})


def dependents_of(graph: Graph, node_id: str) -> list[str]:
    """Nodes that directly depend on *node_id*."""
    return sorted({e.target for e in graph.edges if e.source == node_id})


def upstream_of(graph: Graph, node_id: str) -> list[str]:
    """Everything *node_id* depends on, directly or transitively."""
    return _reachable(_adjacency(graph, reverse=True), node_id)


def downstream_of(graph: Graph, node_id: str) -> list[str]:
    """Everything affected when *node_id* changes."""
    return _reachable(_adjacency(graph), node_id)


def roots(graph: Graph) -> list[str]:
    """Nodes with no dependencies."""
    has_incoming = {e.target for e in graph.edges}
    return [n.id for n in graph.nodes if n.id not in has_incoming]


def leaves(graph: Graph) -> list[str]:
    """Nodes nothing depends on."""
    has_outgoing = {e.source for e in graph.edges}
    return [n.id for n in graph.nodes if n.id not in has_outgoing]


def graph_report(graph: Graph) -> str:
    """Return a human-readable text summary of the graph."""
    instances = sum(n.instances_count for n in graph.nodes)
    lines: list[str] = []
    lines.append("=" * 60)
    lines.append("STATE GRAPH SUMMARY")
    lines.append("=" * 60)
    lines.append(f"Nodes     : {len(graph.nodes)}")
    lines.append(f"Instances : {instances}")
    lines.append(f"Edges     : {len(graph.edges)}")
    lines.append("")

    for rtype, count in sorted(graph.summary().items()):
        lines.append(f"  {rtype:<40s} {count}")

    if graph.nodes:
        lines.append("")
        lines.append("-" * 60)
        lines.append("RESOURCES")
        lines.append("-" * 60)
        for n in graph.nodes:
            provider = f"  provider={n.provider}" if n.provider else ""
            lines.append(f"  {n.id}  (instances={n.instances_count}){provider}")
            for inst in n.instances:
                if inst.index or inst.created_at:
                    created = f"  created_at={inst.created_at}" if inst.created_at else ""
                    lines.append(f"    {inst.addr}{created}")

    if graph.edges:
        lines.append("")
        lines.append("-" * 60)
        lines.append("DEPENDENCIES")
        lines.append("-" * 60)
        for e in graph.edges:
            lines.append(f"  {e.source}  -->  {e.target}")

    lines.append("")
    return "\n".join(lines)
