"""
Filter Engine.

Type, search, confidence and connectivity predicates over nodes and edges.
Node filtering always runs first: edge visibility is derived from node
visibility, never the reverse. All functions preserve input order.

Also carries the filter-state helpers used by the CLI (toggle a type, clamp
confidence, summarise what is active).
"""

from typing import Iterable, List, Sequence, Set, TypeVar

from pydantic import BaseModel

from ..core.types import (
    UNBOUNDED,
    AnyFilters,
    Direction,
    Edge,
    EdgeType,
    ExtendedGraphFilters,
    GraphFilters,
    MaxDepth,
    Node,
    NodeType,
    is_unbounded,
)
from .traversal import connected_ids

N = TypeVar("N", bound=Node)
E = TypeVar("E", bound=Edge)


# =============================================================================
# Node filters
# =============================================================================

def filter_nodes_by_type(nodes: Sequence[N], node_types: Iterable[NodeType]) -> List[N]:
    """Keep nodes whose type is listed. An empty list keeps everything."""
    allowed = set(node_types)
    if not allowed:
        return list(nodes)
    return [node for node in nodes if node.type in allowed]


def matches_search(node: Node, query: str) -> bool:
    """Case-insensitive substring match against name, id or file path."""
    needle = query.strip().lower()
    if not needle:
        return True
    if needle in node.name.lower() or needle in node.id.lower():
        return True
    file_path = node.file_path
    return file_path is not None and needle in file_path.lower()


def filter_nodes_by_search(nodes: Sequence[N], search: str) -> List[N]:
    if not search.strip():
        return list(nodes)
    return [node for node in nodes if matches_search(node, search)]


def filter_nodes(nodes: Sequence[N], filters: AnyFilters) -> List[N]:
    """Apply the type and search predicates (both must pass)."""
    return filter_nodes_by_search(filter_nodes_by_type(nodes, filters.node_types), filters.search)


def filter_connected_nodes(
    nodes: Sequence[N],
    edges: Sequence[Edge],
    center_id: str,
    max_depth: MaxDepth = UNBOUNDED,
) -> List[N]:
    """Keep the nodes reachable from ``center_id`` in either direction."""
    reachable = connected_ids(center_id, edges, max_depth, Direction.BOTH)
    return [node for node in nodes if node.id in reachable]


# =============================================================================
# Edge filters
# =============================================================================

def filter_edges(edges: Sequence[E], visible_node_ids: Set[str]) -> List[E]:
    """Keep edges whose endpoints are both visible."""
    return [
        edge for edge in edges
        if edge.source_id in visible_node_ids and edge.target_id in visible_node_ids
    ]


def filter_edges_by_type(edges: Sequence[E], edge_types: Iterable[EdgeType]) -> List[E]:
    allowed = set(edge_types)
    if not allowed:
        return list(edges)
    return [edge for edge in edges if edge.type in allowed]


def filter_edges_by_confidence(edges: Sequence[E], min_confidence: float) -> List[E]:
    if min_confidence <= 0:
        return list(edges)
    return [edge for edge in edges if edge.confidence >= min_confidence]


def filter_edges_extended(
    edges: Sequence[E],
    visible_node_ids: Set[str],
    filters: AnyFilters,
) -> List[E]:
    """Endpoint visibility, then edge type, then confidence."""
    extended = to_extended(filters)
    result = filter_edges(edges, visible_node_ids)
    result = filter_edges_by_type(result, extended.edge_types)
    return filter_edges_by_confidence(result, extended.min_confidence)


# =============================================================================
# Filter state helpers
# =============================================================================

class FilterSummary(BaseModel):
    active_filters: int
    node_type_filters: int
    edge_type_filters: int
    has_search: bool
    has_confidence_filter: bool
    has_depth_filter: bool
    showing_connected_only: bool
    blast_radius_active: bool


def to_extended(filters: AnyFilters) -> ExtendedGraphFilters:
    """Promote base filters to extended ones with permissive defaults."""
    if isinstance(filters, ExtendedGraphFilters):
        return filters
    return ExtendedGraphFilters(
        node_types=list(filters.node_types),
        search=filters.search,
        show_blast_radius=filters.show_blast_radius,
    )


def _toggle(current: List, value) -> List:
    if value in current:
        # Never deselect the last remaining type
        if len(current) == 1:
            return current
        return [item for item in current if item != value]
    return [*current, value]


def toggle_node_type(filters: AnyFilters, node_type: NodeType) -> AnyFilters:
    return filters.model_copy(update={"node_types": _toggle(list(filters.node_types), node_type)})


def toggle_edge_type(filters: ExtendedGraphFilters, edge_type: EdgeType) -> ExtendedGraphFilters:
    return filters.model_copy(update={"edge_types": _toggle(list(filters.edge_types), edge_type)})


def set_search(filters: AnyFilters, search: str) -> AnyFilters:
    return type(filters).model_validate({**filters.model_dump(), "search": search})


def set_confidence(filters: ExtendedGraphFilters, min_confidence: float) -> ExtendedGraphFilters:
    return filters.model_copy(update={"min_confidence": max(0.0, min(1.0, min_confidence))})


def set_max_depth(filters: ExtendedGraphFilters, max_depth: int) -> ExtendedGraphFilters:
    """Depths of zero or below mean no bound."""
    depth: MaxDepth = UNBOUNDED if max_depth <= 0 else max_depth
    return filters.model_copy(update={"max_depth": depth})


def toggle_connected_only(filters: ExtendedGraphFilters) -> ExtendedGraphFilters:
    return filters.model_copy(update={"show_connected_only": not filters.show_connected_only})


def toggle_blast_radius(filters: AnyFilters) -> AnyFilters:
    return filters.model_copy(update={"show_blast_radius": not filters.show_blast_radius})


def reset_filters(extended: bool = True) -> AnyFilters:
    return ExtendedGraphFilters() if extended else GraphFilters()


def summarize_filters(filters: AnyFilters) -> FilterSummary:
    extended = to_extended(filters)
    node_type_filters = max(0, len(NodeType) - len(set(extended.node_types))) if extended.node_types else 0
    edge_type_filters = max(0, len(EdgeType) - len(set(extended.edge_types))) if extended.edge_types else 0
    has_search = bool(extended.search.strip())
    has_confidence = extended.min_confidence > 0
    has_depth = not is_unbounded(extended.max_depth)

    active = sum([
        node_type_filters > 0,
        edge_type_filters > 0,
        has_search,
        has_confidence,
        has_depth,
        extended.show_connected_only,
    ])
    return FilterSummary(
        active_filters=active,
        node_type_filters=node_type_filters,
        edge_type_filters=edge_type_filters,
        has_search=has_search,
        has_confidence_filter=has_confidence,
        has_depth_filter=has_depth,
        showing_connected_only=extended.show_connected_only,
        blast_radius_active=extended.show_blast_radius,
    )


def count_active_filters(filters: AnyFilters) -> int:
    return summarize_filters(filters).active_filters


def filters_equal(a: AnyFilters, b: AnyFilters) -> bool:
    """Compare filter states, treating type lists as sets."""
    if set(a.node_types) != set(b.node_types):
        return False
    if a.search != b.search or a.show_blast_radius != b.show_blast_radius:
        return False
    if isinstance(a, ExtendedGraphFilters) and isinstance(b, ExtendedGraphFilters):
        return (
            set(a.edge_types) == set(b.edge_types)
            and a.min_confidence == b.min_confidence
            and a.max_depth == b.max_depth
            and a.show_connected_only == b.show_connected_only
        )
    return True
