"""Render state graphs using Jinja2 templates."""

from __future__ import annotations

import json
import logging
from importlib.resources import files as importlib_files
from pathlib import Path

import yaml
from jinja2 import Environment, FileSystemLoader, select_autoescape

from tfstate_graph.builder import encode_graph
from tfstate_graph.models import Graph, Node

logger = logging.getLogger(__name__)

_TEMPLATES_REF = importlib_files("tfstate_graph") / "templates"


def _mermaid_label(node: Node) -> str:
    label = node.id.replace('"', "#quot;")
    if node.instances_count > 1:
        label += f" x{node.instances_count}"
    return label


def _get_jinja_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_REF)),
        autoescape=select_autoescape(default=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["mermaid_label"] = _mermaid_label
    return env


def render_mermaid(graph: Graph) -> str:
    """Render the graph as a Mermaid flowchart."""
    # Mermaid ids cannot hold the quotes and brackets found in addresses.
    ids = {node_id: f"n{i}" for i, node_id in enumerate(graph.node_ids)}
    template = _get_jinja_env().get_template("graph.mmd.j2")
    return template.render(graph=graph, ids=ids)


def render_graph_summary(graph: Graph) -> str:
    """Render a Markdown summary of the graph."""
    template = _get_jinja_env().get_template("graph_summary.md.j2")
    return template.render(graph=graph)


def render_graph_data(graph: Graph, output_format: str = "json") -> str:
    """Render the graph document as JSON or YAML."""
    if output_format == "yaml":
        return yaml.safe_dump(graph.model_dump(mode="json", by_alias=True), sort_keys=False)
    return json.dumps(json.loads(encode_graph(graph)), indent=2) + "\n"


def write_outputs(graph: Graph, output_dir: Path, output_format: str = "json") -> list[str]:
    """Write all rendered outputs to *output_dir* and return the list of written file paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[str] = []

    data_path = output_dir / f"state-graph.{output_format}"
    data_path.write_text(render_graph_data(graph, output_format), encoding="utf-8")
    written.append(str(data_path))
    logger.info("Wrote %s", data_path)

    mermaid_path = output_dir / "state-graph.mmd"
    mermaid_path.write_text(render_mermaid(graph), encoding="utf-8")
    written.append(str(mermaid_path))
    logger.info("Wrote %s", mermaid_path)

    summary_path = output_dir / "state-graph.md"
    summary_path.write_text(render_graph_summary(graph), encoding="utf-8")
    written.append(str(summary_path))
    logger.info("Wrote %s", summary_path)

    return written
