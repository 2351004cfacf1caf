"""
Blast Radius Command - Calculate the impact of changing a node.
"""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...analysis.blast_radius import BlastRadiusAnalyzer, summarize_impact
from ...config import MAX_TRAVERSAL_DEPTH
from ..utils import DEFAULT_GRAPH_FILE, load_graph, load_viewer_config, resolve_node

console = Console()


@click.command("blast-radius")
@click.argument("node")
@click.option("-g", "--graph", "graph_file", default=DEFAULT_GRAPH_FILE,
              help="Path to graph JSON file or directory")
@click.option("--max-depth", type=click.IntRange(1, MAX_TRAVERSAL_DEPTH), default=None,
              help="Maximum traversal depth (defaults to the project config)")
@click.option("--config", "config_file", default=None, help="Path to config.yaml")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def blast_radius(
    node: str,
    graph_file: str,
    max_depth: Optional[int],
    config_file: Optional[str],
    as_json: bool,
) -> None:
    """
    Show everything that depends on NODE, directly or transitively.
    """
    config = load_viewer_config(config_file)
    if config is None:
        sys.exit(1)

    store = load_graph(graph_file)
    if store is None:
        sys.exit(1)

    node_id = resolve_node(store, node)
    if node_id is None:
        sys.exit(1)

    depth = max_depth or config.analysis.blast_radius_depth
    analyzer = BlastRadiusAnalyzer(store, max_depth=depth)
    result = analyzer.calculate(node_id)
    summary = summarize_impact(result)

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    console.print()
    console.print(f"💥 [bold]Blast Radius[/bold] for [cyan]{escape(node_id)}[/cyan]")
    console.print(
        f"Severity: [{summary.color}]{summary.severity.value.upper()}[/]  "
        f"score {summary.score:.2f}  "
        f"({summary.direct_count} direct, {summary.transitive_count} transitive)"
    )

    if not result.affected_nodes:
        console.print("[dim]No dependents found.[/dim]")
        return

    table = Table(title="Affected Nodes")
    table.add_column("Node", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Depth", justify="right")
    table.add_column("Direct")
    for item in sorted(result.affected_nodes, key=lambda a: (a.depth, a.id)):
        table.add_row(
            escape(item.name),
            item.type.value if item.type else "-",
            str(item.depth),
            "yes" if item.is_direct else "",
        )
    console.print(table)
