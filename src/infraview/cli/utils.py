"""
CLI Utilities - Shared helpers for command line operations.

Formatted printing, graph loading and node name resolution used by every
command.
"""

import logging
from pathlib import Path
from typing import List, Optional

import click

from ..config import ViewerConfig, load_config
from ..core.exceptions import ConfigError, NodeNotFoundError
from ..core.graph import GraphStore, load_graph_file

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_FILE = ".infraview/graph.json"


def echo_success(message: str) -> None:
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def load_graph(graph_file: str) -> Optional[GraphStore]:
    """
    Load a GraphStore from a JSON file or a directory holding one.

    Args:
        graph_file (str): Path to a graph JSON file, or a directory containing
            ``.infraview/graph.json`` or ``graph.json``.

    Returns:
        Optional[GraphStore]: The loaded store, or None if loading failed.
    """
    graph_path = Path(graph_file)

    if graph_path.is_dir():
        candidates = [graph_path / DEFAULT_GRAPH_FILE, graph_path / "graph.json"]
        found = next((p for p in candidates if p.exists()), None)
        if found is None:
            echo_error(f"No graph found in directory: {graph_file}")
            click.echo("Expected .infraview/graph.json or graph.json.")
            return None
        graph_path = found

    result = load_graph_file(graph_path)
    if result.is_err():
        echo_error(str(result.error))
        return None

    store = result.unwrap()
    if store.report.has_drops:
        echo_warning(
            f"Dropped {store.report.dropped_nodes} malformed node(s) and "
            f"{store.report.dropped_edges} edge(s) while loading"
        )
    return store


def load_viewer_config(config_file: Optional[str] = None) -> Optional[ViewerConfig]:
    """Load project config, reporting problems instead of raising."""
    try:
        return load_config(Path(config_file) if config_file else None)
    except ConfigError as e:
        echo_error(str(e))
        return None


def match_node(store: GraphStore, name: str) -> List[str]:
    """
    Candidate node ids for a user supplied name, best match first.

    Exact ids win, then an exact name, then substring matches on id or name.

    Raises:
        NodeNotFoundError: Nothing matches ``name``.
    """
    if store.has_node(name):
        return [name]

    matches: List[str] = store.find_nodes(name)
    if not matches:
        raise NodeNotFoundError(name)

    exact_name = next((m for m in matches if store.get_node(m).name == name), None)
    if exact_name:
        return [exact_name]
    return matches


def resolve_node(store: GraphStore, name: str, label: str = "node") -> Optional[str]:
    """
    Resolve a user supplied name to a node id, reporting failures.

    When several nodes match, the first is used and a note is printed.
    """
    try:
        matches = match_node(store, name)
    except NodeNotFoundError as e:
        echo_error(f"No node found matching {label}: {e.node_id}")
        return None

    if len(matches) > 1:
        click.echo(f"Ambiguous {label} '{name}'. Using first match: {matches[0]}")
    return matches[0]
