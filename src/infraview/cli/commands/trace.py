"""
Trace Command - Find paths between two nodes.
"""

import json
import sys

import click

from ...analysis.paths import all_paths, shortest_path
from ...config import DEFAULT_MAX_PATHS
from ...core.graph import GraphStore
from ..utils import DEFAULT_GRAPH_FILE, load_graph, resolve_node


@click.command()
@click.argument("source")
@click.argument("target")
@click.option("-g", "--graph", "graph_file", default=DEFAULT_GRAPH_FILE,
              help="Path to graph JSON file or directory")
@click.option("--max-paths", default=DEFAULT_MAX_PATHS, type=click.IntRange(1, None),
              help="Maximum paths to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def trace(source: str, target: str, graph_file: str, max_paths: int, as_json: bool) -> None:
    """
    Trace dependency paths from SOURCE to TARGET.

    Follows edges in their declared direction; the shortest path is listed
    first.
    """
    store = load_graph(graph_file)
    if store is None:
        sys.exit(1)

    source_id = resolve_node(store, source, "source")
    if source_id is None:
        sys.exit(1)

    target_id = resolve_node(store, target, "target")
    if target_id is None:
        sys.exit(1)

    shortest = shortest_path(source_id, target_id, store.edges)
    paths = all_paths(source_id, target_id, store.edges, max_paths) if shortest.exists else []
    # Enumeration is depth-first; show the shortest routes first.
    paths.sort(key=lambda p: p.length)

    if as_json:
        click.echo(json.dumps({
            "source": source_id,
            "target": target_id,
            "shortest": shortest.model_dump(),
            "paths": [p.model_dump() for p in paths],
        }, indent=2))
        return

    if not shortest.exists:
        click.echo()
        click.echo(click.style("No path found", fg="yellow") + " between:")
        click.echo(f"  Source: {source_id}")
        click.echo(f"  Target: {target_id}")
        return

    click.echo()
    click.echo(f"🔗 {click.style('Dependency Trace', bold=True)}")
    click.echo("═" * 60)
    click.echo(f"From: {click.style(source_id, fg='cyan')}")
    click.echo(f"To:   {click.style(target_id, fg='green')}")
    click.echo()
    click.echo(f"{len(paths)} path(s) found (shortest: {shortest.length} hop(s)):")
    click.echo()

    for i, path in enumerate(paths, 1):
        click.echo(f" Path {i}: ({path.length} hops)")
        _echo_path(store, path.path)
        click.echo()

    if len(paths) == max_paths:
        click.echo(click.style(f"  Showing the first {max_paths} paths; raise --max-paths for more.", dim=True))


def _echo_path(store: GraphStore, node_ids) -> None:
    for j, node_id in enumerate(node_ids):
        connector = "└─" if j == len(node_ids) - 1 else "├─"
        node = store.get_node(node_id)
        name = node.name if node else node_id
        kind = node.type.value if node else "?"
        click.echo(f"    {connector} {click.style(name, fg='cyan')} {click.style(f'[{kind}]', dim=True)}")
