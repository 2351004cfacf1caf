"""
View Command - Render the filtered and highlighted graph.

Runs the same pipeline a graphical viewer would: filters, selection,
blast radius and (optionally) layout, then prints the result as a table or
as JSON for other tools to consume.
"""

import json
import sys
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...analysis.filters import set_confidence, set_max_depth, summarize_filters
from ...core.exceptions import InvalidFilterError
from ...core.session import GraphSession, GraphView
from ...core.types import EdgeType, ExtendedGraphFilters, NodeType
from ..utils import DEFAULT_GRAPH_FILE, echo_error, load_graph, load_viewer_config, resolve_node

console = Console()


def build_filters(
    node_types: Tuple[str, ...],
    edge_types: Tuple[str, ...],
    search: str,
    min_confidence: float,
    max_depth: int,
    connected_only: bool,
    show_blast_radius: bool,
) -> ExtendedGraphFilters:
    """Turn CLI options into validated filters."""
    try:
        filters = ExtendedGraphFilters(
            node_types=[NodeType(t) for t in node_types] or list(NodeType),
            edge_types=[EdgeType(t) for t in edge_types] or list(EdgeType),
            search=search,
            show_connected_only=connected_only,
            show_blast_radius=show_blast_radius,
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "filters"
        raise InvalidFilterError(field, error["msg"]) from e

    filters = set_confidence(filters, min_confidence)
    return set_max_depth(filters, max_depth)


@click.command()
@click.option("-g", "--graph", "graph_file", default=DEFAULT_GRAPH_FILE,
              help="Path to graph JSON file or directory")
@click.option("-t", "--type", "node_types", multiple=True,
              type=click.Choice([t.value for t in NodeType]), help="Node types to show")
@click.option("-e", "--edge-type", "edge_types", multiple=True,
              type=click.Choice([t.value for t in EdgeType]), help="Edge types to show")
@click.option("-s", "--search", default="", help="Substring match on name, id or file path")
@click.option("--min-confidence", default=0.0, type=float, help="Hide edges below this confidence")
@click.option("--max-depth", default=0, type=int, help="Depth for --connected-only (0 = unbounded)")
@click.option("--connected-only", is_flag=True, help="Only show nodes connected to the selection")
@click.option("--select", "select_node", default=None, help="Node to select")
@click.option("--blast", "blast_node", default=None, help="Node whose blast radius to highlight")
@click.option("--layout", "with_layout", is_flag=True, help="Include node positions")
@click.option("--config", "config_file", default=None, help="Path to config.yaml")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def view(
    graph_file: str,
    node_types: Tuple[str, ...],
    edge_types: Tuple[str, ...],
    search: str,
    min_confidence: float,
    max_depth: int,
    connected_only: bool,
    select_node: Optional[str],
    blast_node: Optional[str],
    with_layout: bool,
    config_file: Optional[str],
    as_json: bool,
) -> None:
    """
    Show the graph after filtering and highlighting.
    """
    config = load_viewer_config(config_file)
    if config is None:
        sys.exit(1)

    try:
        filters = build_filters(
            node_types, edge_types, search,
            min_confidence or config.analysis.min_confidence,
            max_depth, connected_only, blast_node is not None,
        )
    except InvalidFilterError as e:
        echo_error(str(e))
        sys.exit(1)

    store = load_graph(graph_file)
    if store is None:
        sys.exit(1)

    with GraphSession(config=config) as session:
        session.load_store(store)

        if select_node is not None:
            selected_id = resolve_node(store, select_node, "selection")
            if selected_id is None:
                sys.exit(1)
            session.select(selected_id)

        blast_id = None
        if blast_node is not None:
            blast_id = resolve_node(store, blast_node, "blast radius node")
            if blast_id is None:
                sys.exit(1)

        graph_view = session.render(filters, blast_node_id=blast_id)
        layout = session.layout(graph_view) if with_layout else None

    if as_json:
        payload = graph_view.model_dump(mode="json")
        payload["filters"] = summarize_filters(filters).model_dump()
        if layout is not None:
            payload["layout"] = layout.model_dump(mode="json")
        click.echo(json.dumps(payload, indent=2))
        return

    _print_view(graph_view, layout)


def _print_view(graph_view: GraphView, layout) -> None:
    table = Table(title=f"{len(graph_view.nodes)} node(s), {len(graph_view.edges)} edge(s)")
    table.add_column("Node", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("State")
    if layout is not None:
        table.add_column("Position", justify="right")

    for node in graph_view.nodes:
        if node.selected:
            state = "[bold green]selected[/]"
        elif node.highlighted:
            state = "[yellow]highlighted[/]"
        elif node.dimmed:
            state = "[dim]dimmed[/]"
        else:
            state = ""
        row = [escape(node.id), node.type.value, state]
        if layout is not None:
            pos = layout.position_of(node.id)
            row.append(f"{pos.x:.0f},{pos.y:.0f}" if pos else "-")
        table.add_row(*row)
    console.print(table)

    if graph_view.blast_radius is not None:
        blast = graph_view.blast_radius
        console.print(
            f"Blast radius of [cyan]{escape(blast.source_node_id)}[/cyan]: "
            f"{blast.total_affected} affected, severity {blast.severity.value}"
        )
