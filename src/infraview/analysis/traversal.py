"""
Traversal Engine.

Bounded, direction-aware reachability over an edge list plus adjacency and
cycle queries. Every function is pure: it reads the edges it is given and
returns new collections.

Reachability is computed level by level. Each call costs
O(depth x |edges|), so callers that run it per render should bound
``max_depth`` or cache the result for the lifetime of one snapshot.
"""

from typing import Dict, Iterable, List, NamedTuple, Sequence, Set

from ..core.types import Direction, Edge, MaxDepth, Node, is_unbounded


class ConnectedEdges(NamedTuple):
    incoming: List[Edge]
    outgoing: List[Edge]


class ConnectedNodes(NamedTuple):
    """Neighbourhood of a node split by direction."""
    node_ids: Set[str]
    direct_neighbors: Set[str]
    upstream: Set[str]
    downstream: Set[str]


def connected_depths(
    start_id: str,
    edges: Sequence[Edge],
    max_depth: MaxDepth,
    direction: Direction = Direction.BOTH,
) -> Dict[str, int]:
    """
    Map every node reachable from ``start_id`` to the hop count at which it
    was first reached.

    ``start_id`` maps to 0. Keys are in discovery order: level by level, and
    within a level in edge input order. Since a node is recorded on the
    first level that reaches it, the depth is always the minimum.
    """
    depths: Dict[str, int] = {start_id: 0}
    frontier: Set[str] = {start_id}
    follow_out = direction in (Direction.BOTH, Direction.OUTGOING)
    follow_in = direction in (Direction.BOTH, Direction.INCOMING)
    unbounded = is_unbounded(max_depth)

    depth = 0
    while frontier and (unbounded or depth < max_depth):
        depth += 1
        next_frontier: Set[str] = set()
        for edge in edges:
            if follow_out and edge.source_id in frontier and edge.target_id not in depths:
                depths[edge.target_id] = depth
                next_frontier.add(edge.target_id)
            if follow_in and edge.target_id in frontier and edge.source_id not in depths:
                depths[edge.source_id] = depth
                next_frontier.add(edge.source_id)
        frontier = next_frontier

    return depths


def connected_ids(
    start_id: str,
    edges: Sequence[Edge],
    max_depth: MaxDepth,
    direction: Direction = Direction.BOTH,
) -> Set[str]:
    """
    Node IDs reachable from ``start_id`` within ``max_depth`` hops.

    Always contains ``start_id``. ``max_depth=0`` returns just the start.
    """
    return set(connected_depths(start_id, edges, max_depth, direction))


def connected_edges(node_id: str, edges: Iterable[Edge]) -> ConnectedEdges:
    """Partition the edges touching ``node_id`` into incoming and outgoing."""
    incoming: List[Edge] = []
    outgoing: List[Edge] = []
    for edge in edges:
        if edge.target_id == node_id:
            incoming.append(edge)
        if edge.source_id == node_id:
            outgoing.append(edge)
    return ConnectedEdges(incoming, outgoing)


def neighborhood(node_id: str, edges: Sequence[Edge], max_depth: MaxDepth) -> ConnectedNodes:
    """
    Everything connected to ``node_id`` within ``max_depth``.

    ``upstream`` holds what the node depends on (outgoing direction),
    ``downstream`` what depends on it (incoming direction). None of the
    split sets contain the node itself.
    """
    node_ids = connected_ids(node_id, edges, max_depth, Direction.BOTH)
    direct = connected_ids(node_id, edges, 1, Direction.BOTH)
    upstream = connected_ids(node_id, edges, max_depth, Direction.OUTGOING)
    downstream = connected_ids(node_id, edges, max_depth, Direction.INCOMING)
    for group in (direct, upstream, downstream):
        group.discard(node_id)
    return ConnectedNodes(node_ids, direct, upstream, downstream)


def has_cycles(nodes: Iterable[Node], edges: Iterable[Edge]) -> bool:
    """
    Detect a directed cycle using white/gray/black depth-first search.

    Advisory only (e.g. for picking a layout direction); cyclic graphs are
    valid input everywhere else.
    """
    adjacency: Dict[str, List[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source_id, []).append(edge.target_id)

    visited: Set[str] = set()
    on_stack: Set[str] = set()

    # Explicit stack; deep chains would exhaust the interpreter's recursion limit.
    for root in [node.id for node in nodes]:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack = [(root, iter(adjacency.get(root, ())))]
        while stack:
            current, children = stack[-1]
            advanced = False
            for child in children:
                if child in on_stack:
                    return True
                if child not in visited:
                    visited.add(child)
                    on_stack.add(child)
                    stack.append((child, iter(adjacency.get(child, ()))))
                    advanced = True
                    break
            if not advanced:
                on_stack.discard(current)
                stack.pop()

    return False
