"""Build a resource dependency graph from a Terraform/OpenTofu state snapshot.

The pipeline is strictly linear::

    decode -> group nodes -> resolve dependencies into edges -> deduplicate
           -> keep managed only -> sort -> transitive reduction -> encode

Only decoding and encoding can fail. Everything in between is best-effort:
an unresolved dependency, an odd sensitivity marker or a malformed index is
skipped rather than aborting the whole graph.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import JsonValue, ValidationError
from pydantic_core import PydanticSerializationError

from tfstate_graph.addresses import (
    clean_provider,
    instance_index_suffix,
    normalize_index,
    resource_base_addr,
    strip_index,
)
from tfstate_graph.errors import DecodeError, EncodeError
from tfstate_graph.models import Edge, Graph, InstanceInfo, Node, State
from tfstate_graph.normalizer import only_managed, reduce_transitive, sort_graph, unique_edges
from tfstate_graph.redact import filter_sensitive, guess_created_at

logger = logging.getLogger(__name__)


@dataclass
class GroupedNodes:
    """Nodes keyed by base address plus the lookup indexes used for resolution."""

    nodes: dict[str, Node] = field(default_factory=dict)
    by_full: dict[str, str] = field(default_factory=dict)
    """Full instance address -> node id."""
    by_base: dict[str, str] = field(default_factory=dict)
    """Base address -> node id."""


# ── Decoding ──────────────────────────────────────────────────────────────────


def decode_state(data: bytes | str) -> State:
    """Decode a state document. Unknown fields are ignored."""
    try:
        return State.model_validate_json(data)
    except ValidationError as exc:
        raise DecodeError(f"decode state: {exc}") from exc


# ── Grouping ──────────────────────────────────────────────────────────────────


def _sorted_keys(value: JsonValue) -> JsonValue:
    """Order object keys recursively so attribute output does not depend on input order."""
    if isinstance(value, dict):
        return {k: _sorted_keys(value[k]) for k in sorted(value)}
    if isinstance(value, list):
        return [_sorted_keys(v) for v in value]
    return value


def group_nodes(state: State) -> GroupedNodes:
    """Collapse per-instance records into one node per base address.

    e.g. ``aws_instance.web[0]`` and ``aws_instance.web[1]`` both land on the
    ``aws_instance.web`` node.
    """
    grouped = GroupedNodes()
    for resource in state.resources:
        base = resource_base_addr(resource)
        node = grouped.nodes.get(base)
        if node is None:
            node = Node(
                id=base,
                addr=base,
                mode=resource.mode,
                type=resource.type,
                name=resource.name,
                module=resource.module,
                provider=clean_provider(resource.provider),
            )
            grouped.nodes[base] = node
            grouped.by_base[base] = node.id
        if not resource.instances:
            # No instances recorded: the base address stands in for one
            grouped.by_full[base] = node.id
            continue
        for instance in resource.instances:
            index = instance_index_suffix(instance.index_key)
            full = base + index
            attributes = filter_sensitive(instance.attributes, instance.sensitive_attributes)
            node.instances.append(
                InstanceInfo(
                    addr=full,
                    index=index,
                    dependencies=list(instance.dependencies),
                    attributes=_sorted_keys(attributes),
                    created_at=guess_created_at(attributes),
                )
            )
            grouped.by_full[full] = node.id

    for node in grouped.nodes.values():
        node.instances_count = len(node.instances)
    return grouped


# ── Dependency resolution ─────────────────────────────────────────────────────


def resolve_dependency(
    dep: str, by_full: dict[str, str], by_base: dict[str, str]
) -> str | None:
    """Map a dependency address onto a grouped node id.

    Tries the exact full address, then the address with its index quoted,
    then the address with its index stripped. Returns None when nothing
    matches (e.g. addresses this decoder does not track).
    """
    if dep in by_full:
        return by_full[dep]
    normalized = normalize_index(dep)
    if normalized in by_full:
        return by_full[normalized]
    return by_base.get(strip_index(dep))


def collect_edges(state: State, grouped: GroupedNodes) -> list[Edge]:
    """Turn every instance dependency into a node-to-node edge.

    Self-loops between instances of the same node are dropped. The result
    may contain duplicates.
    """
    edges: list[Edge] = []
    for resource in state.resources:
        target = grouped.by_base[resource_base_addr(resource)]
        for instance in resource.instances:
            for dep in instance.dependencies:
                source = resolve_dependency(dep, grouped.by_full, grouped.by_base)
                if source is None:
                    logger.debug("Unresolved dependency %r of %s", dep, target)
                    continue
                if source == target:
                    continue
                edges.append(Edge(source=source, target=target))
    return edges


# ── Pipeline ──────────────────────────────────────────────────────────────────


def build_graph(state: State) -> Graph:
    """Build the deduplicated, managed-only, sorted and reduced graph."""
    grouped = group_nodes(state)
    raw_edges = collect_edges(state, grouped)
    graph = Graph(nodes=list(grouped.nodes.values()), edges=unique_edges(raw_edges))
    logger.debug(
        "Grouped %d nodes from %d resources; %d edges (%d before dedup)",
        len(graph.nodes),
        len(state.resources),
        len(graph.edges),
        len(raw_edges),
    )
    graph = sort_graph(only_managed(graph))
    managed_edges = len(graph.edges)
    graph = reduce_transitive(graph)
    logger.debug(
        "Graph built: %d managed nodes, %d edges (%d redundant removed)",
        len(graph.nodes),
        len(graph.edges),
        managed_edges - len(graph.edges),
    )
    return graph


def encode_graph(graph: Graph) -> bytes:
    """Serialize *graph* to compact JSON."""
    try:
        return graph.model_dump_json(by_alias=True).encode("utf-8")
    except PydanticSerializationError as exc:
        raise EncodeError(f"encode graph: {exc}") from exc


def build_graph_from_state(data: bytes | str) -> bytes:
    """Parse a ``terraform.tfstate`` JSON document and return the graph as JSON."""
    return encode_graph(build_graph(decode_state(data)))
