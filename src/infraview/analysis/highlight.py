"""
Highlight primitives.

Project canonical nodes and edges into their visual form and compute the
``selected`` / ``highlighted`` / ``dimmed`` flags and edge opacity. Every
function returns fresh ``VisualNode``/``VisualEdge`` instances with all flags
set explicitly, so a projection never inherits stale state from its input.
"""

from typing import AbstractSet, List, Optional, Sequence

from ..config import DEFAULT_EDGE_OPACITY, DIMMED_EDGE_OPACITY
from ..core.types import Edge, Node, VisualEdge, VisualNode


def _visual_node(node: Node, selected: bool, highlighted: bool, dimmed: bool) -> VisualNode:
    fields = {name: getattr(node, name) for name in Node.model_fields}
    return VisualNode.model_construct(
        **fields, selected=selected, highlighted=highlighted, dimmed=dimmed
    )


def _visual_edge(edge: Edge, highlighted: bool, opacity: float) -> VisualEdge:
    fields = {name: getattr(edge, name) for name in Edge.model_fields}
    return VisualEdge.model_construct(**fields, highlighted=highlighted, opacity=opacity)


def to_visual_nodes(nodes: Sequence[Node]) -> List[VisualNode]:
    """Project nodes with every visual flag cleared."""
    return [_visual_node(node, False, False, False) for node in nodes]


def to_visual_edges(edges: Sequence[Edge]) -> List[VisualEdge]:
    return [_visual_edge(edge, False, DEFAULT_EDGE_OPACITY) for edge in edges]


def apply_highlighting(
    nodes: Sequence[Node],
    selected_ids: AbstractSet[str],
    highlight_ids: AbstractSet[str],
) -> List[VisualNode]:
    """
    Compute node flags against a selection and a highlight set.

    A node is dimmed when a highlight context exists (anything selected or
    highlighted) and the node is neither selected nor highlighted.
    """
    context_active = bool(selected_ids) or bool(highlight_ids)
    result = []
    for node in nodes:
        selected = node.id in selected_ids
        highlighted = node.id in highlight_ids
        dimmed = context_active and not selected and not highlighted
        result.append(_visual_node(node, selected, highlighted, dimmed))
    return result


def apply_edge_highlighting(
    edges: Sequence[Edge],
    highlight_ids: AbstractSet[str],
) -> List[VisualEdge]:
    """
    Highlight edges whose source and target are both in ``highlight_ids``.

    With a non-empty set, every other edge drops to the dimmed opacity.
    """
    context_active = bool(highlight_ids)
    result = []
    for edge in edges:
        highlighted = edge.source_id in highlight_ids and edge.target_id in highlight_ids
        opacity = DIMMED_EDGE_OPACITY if context_active and not highlighted else DEFAULT_EDGE_OPACITY
        result.append(_visual_edge(edge, highlighted, opacity))
    return result


def update_edges_state(
    edges: Sequence[Edge],
    highlighted_edge_ids: AbstractSet[str],
    context_active: Optional[bool] = None,
) -> List[VisualEdge]:
    """
    Highlight an explicit set of edge ids.

    Non-highlighted edges are dimmed while ``context_active``; by default
    that is whenever ``highlighted_edge_ids`` is non-empty.
    """
    if context_active is None:
        context_active = bool(highlighted_edge_ids)
    result = []
    for edge in edges:
        highlighted = edge.id in highlighted_edge_ids
        opacity = DIMMED_EDGE_OPACITY if context_active and not highlighted else DEFAULT_EDGE_OPACITY
        result.append(_visual_edge(edge, highlighted, opacity))
    return result


def clear_highlighting(nodes: Sequence[Node]) -> List[VisualNode]:
    return to_visual_nodes(nodes)


def clear_edge_highlighting(edges: Sequence[Edge]) -> List[VisualEdge]:
    return to_visual_edges(edges)
