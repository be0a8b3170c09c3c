"""
tfstate_graph - Build resource dependency graphs from Terraform/OpenTofu state.

Quick start::

    from tfstate_graph import build_graph_from_state

    with open("terraform.tfstate", "rb") as fh:
        graph_json = build_graph_from_state(fh.read())

    # --- or work with the model directly ---
    from tfstate_graph import build_graph, decode_state
    from tfstate_graph.analyzer import downstream_of

    graph = build_graph(decode_state(raw))
    print(downstream_of(graph, "aws_vpc.main"))
"""

from .builder import build_graph, build_graph_from_state, decode_state, encode_graph
from .errors import DecodeError, EncodeError, StateGraphError, StateGraphNotFound
from .models import Edge, Graph, Instance, InstanceInfo, Node, Resource, State

__all__ = [
    # Pipeline
    "build_graph",
    "build_graph_from_state",
    "decode_state",
    "encode_graph",
    # Models
    "State",
    "Resource",
    "Instance",
    "Graph",
    "Node",
    "InstanceInfo",
    "Edge",
    # Errors
    "StateGraphError",
    "DecodeError",
    "EncodeError",
    "StateGraphNotFound",
]
__version__ = "0.1.0"
