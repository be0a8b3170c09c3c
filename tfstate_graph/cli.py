"""CLI entry-point for tfstate-graph."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tfstate_graph import __version__
from tfstate_graph.analyzer import downstream_of, graph_report, upstream_of
from tfstate_graph.builder import build_graph, decode_state, encode_graph
from tfstate_graph.config import OUTPUT_FORMATS, Settings
from tfstate_graph.datastore import DatastoreClient
from tfstate_graph.errors import StateGraphError
from tfstate_graph.models import Graph
from tfstate_graph.renderer import write_outputs

console = Console()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quieten noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _fail(message: object) -> None:
    console.print(f"[red bold]Error:[/red bold] {message}")
    sys.exit(1)


def _load_graph(state_file: str) -> Graph:
    try:
        data = Path(state_file).read_bytes()
    except OSError as exc:
        _fail(exc)
    try:
        return build_graph(decode_state(data))
    except StateGraphError as exc:
        _fail(exc)


@click.group()
@click.version_option(version=__version__, prog_name="tfstate-graph")
def main() -> None:
    """Terraform/OpenTofu state dependency graphs."""


@main.command()
@click.argument("state_file", type=click.Path(dir_okay=False))
@click.option(
    "--output", "-o", "output_dir", default="state-graph-output", help="Output directory."
)
@click.option(
    "--format",
    "output_format",
    default="json",
    type=click.Choice(OUTPUT_FORMATS),
    help="Format of the graph document.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output.")
def build(state_file: str, output_dir: str, output_format: str, verbose: bool) -> None:
    """Build the dependency graph of STATE_FILE and write it to disk."""
    _configure_logging(verbose)
    settings = Settings(output_dir=output_dir, output_format=output_format, verbose=verbose)
    try:
        settings.validate_output_format()
    except ValueError as exc:
        _fail(exc)

    graph = _load_graph(state_file)
    written = write_outputs(graph, settings.resolved_output_dir, settings.output_format)

    console.print(
        Panel(
            f"{len(graph.nodes)} resources, {len(graph.edges)} dependencies",
            title="State graph",
            style="bold cyan",
        )
    )
    console.print("[green bold]Done![/green bold] Files written:")
    for f in written:
        console.print(f"  • {f}")


@main.command()
@click.argument("state_file", type=click.Path(dir_okay=False))
@click.option("--verbose", "-v", is_flag=True, help="Print the full text report.")
def show(state_file: str, verbose: bool) -> None:
    """Print the resources and dependencies found in STATE_FILE."""
    _configure_logging(verbose)
    graph = _load_graph(state_file)

    if not graph.nodes:
        console.print("[yellow]No managed resources found.[/yellow]")
        return

    if verbose:
        console.print(graph_report(graph), markup=False, highlight=False)
        return

    table = Table(title="Resources", show_lines=False)
    table.add_column("Address", style="bold")
    table.add_column("Type")
    table.add_column("Provider")
    table.add_column("Instances", justify="right")
    for node in graph.nodes:
        table.add_row(node.id, node.type, node.provider, str(node.instances_count))
    console.print(table)

    if graph.edges:
        console.print("\n[bold]Dependencies:[/bold]")
        for e in graph.edges:
            console.print(f"  {escape(e.source)} [dim]-->[/dim] {escape(e.target)}")


@main.command()
@click.argument("state_file", type=click.Path(dir_okay=False))
@click.argument("node_id")
def impact(state_file: str, node_id: str) -> None:
    """Show what NODE_ID depends on and what depends on it."""
    _configure_logging(False)
    graph = _load_graph(state_file)
    if graph.get_node(node_id) is None:
        _fail(f"{node_id} is not a managed resource in {state_file}")

    upstream = upstream_of(graph, node_id)
    downstream = downstream_of(graph, node_id)
    console.print(Panel(escape(node_id), style="bold cyan"))
    console.print(f"[bold]Depends on ({len(upstream)}):[/bold]")
    for addr in upstream:
        console.print(f"  {escape(addr)}")
    console.print(f"[bold]Affects ({len(downstream)}):[/bold]")
    for addr in downstream:
        console.print(f"  {escape(addr)}")


@main.command()
@click.argument("state_file", type=click.Path(dir_okay=False))
@click.option("--namespace", required=True, help="Namespace of the layer.")
@click.option("--layer", required=True, help="Name of the layer.")
@click.option("--datastore-url", default="", help="Datastore base URL.")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output.")
def push(state_file: str, namespace: str, layer: str, datastore_url: str, verbose: bool) -> None:
    """Build the graph of STATE_FILE and upload it to the datastore."""
    _configure_logging(verbose)
    settings = Settings(verbose=verbose)
    if datastore_url:
        settings.datastore_url = datastore_url

    content = encode_graph(_load_graph(state_file))
    try:
        with DatastoreClient(settings.datastore_url, settings.datastore_token_path) as client:
            client.put_state_graph(namespace, layer, content)
    except (StateGraphError, httpx.HTTPError) as exc:
        _fail(exc)
    console.print(f"[green bold]Uploaded[/green bold] state graph for {namespace}/{layer}")


@main.command()
@click.option("--namespace", required=True, help="Namespace of the layer.")
@click.option("--layer", required=True, help="Name of the layer.")
@click.option("--datastore-url", default="", help="Datastore base URL.")
@click.option("--output", "-o", "output_file", default="", help="Write the graph to this file.")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output.")
def fetch(
    namespace: str, layer: str, datastore_url: str, output_file: str, verbose: bool
) -> None:
    """Download the stored graph of a layer."""
    _configure_logging(verbose)
    settings = Settings(verbose=verbose)
    if datastore_url:
        settings.datastore_url = datastore_url

    try:
        with DatastoreClient(settings.datastore_url, settings.datastore_token_path) as client:
            content = client.get_state_graph(namespace, layer)
    except (StateGraphError, httpx.HTTPError) as exc:
        _fail(exc)

    if output_file:
        Path(output_file).write_bytes(content)
        console.print(f"  Graph saved to [green]{output_file}[/green]")
        return
    try:
        graph = Graph.model_validate_json(content)
    except ValidationError as exc:
        _fail(f"datastore returned an invalid graph: {exc}")
    console.print(graph_report(graph), markup=False, highlight=False)


if __name__ == "__main__":
    main()
