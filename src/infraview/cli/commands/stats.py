"""
Stats Command - Summarise a graph snapshot.
"""

import json
import sys

import click
from rich.console import Console
from rich.table import Table

from ..utils import DEFAULT_GRAPH_FILE, load_graph

console = Console()


@click.command()
@click.option("-g", "--graph", "graph_file", default=DEFAULT_GRAPH_FILE,
              help="Path to graph JSON file or directory")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(graph_file: str, as_json: bool) -> None:
    """
    Show node and edge counts, dependency averages and cycle status.
    """
    store = load_graph(graph_file)
    if store is None:
        sys.exit(1)

    data = store.get_stats()
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    summary = Table(title="Graph Summary", show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right")
    summary.add_row("Nodes", str(data["total_nodes"]))
    summary.add_row("Edges", str(data["total_edges"]))
    summary.add_row("Avg dependencies", f"{data['avg_dependencies']:.2f}")
    summary.add_row("Max dependencies", str(data["max_dependencies"]))
    summary.add_row("Isolated nodes", str(data["isolated_nodes"]))
    summary.add_row("Has cycles", "yes" if data["has_cycles"] else "no")
    console.print(summary)

    by_type = Table(title="Nodes by Type")
    by_type.add_column("Type", style="magenta")
    by_type.add_column("Count", justify="right")
    for node_type, count in data["nodes_by_type"].items():
        if count:
            by_type.add_row(node_type, str(count))
    console.print(by_type)

    if data["dropped_nodes"] or data["dropped_edges"]:
        console.print(
            f"[yellow]Dropped during ingestion:[/yellow] "
            f"{data['dropped_nodes']} node(s), {data['dropped_edges']} edge(s)"
        )
