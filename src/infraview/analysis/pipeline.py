"""
Filter and highlight pipeline.

Combines the filter, traversal and highlight primitives into the single
projection handed to a renderer:

1. Filter nodes by type and search.
2. In connected-only mode with a selection, keep only nodes reachable from
   the selection within ``max_depth`` over the visible edges.
3. Filter edges against the visible nodes (endpoints, type, confidence).
4. Flag nodes. The highlight set is the blast radius (plus its source) when
   one is given, otherwise the selection's 1-hop neighbourhood. A selection
   or blast source that is not visible contributes nothing.
5. Flag edges against the highlight set plus the selection.

The pipeline is pure and idempotent: feeding its output back in with the
same arguments returns the same output.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Set

from pydantic import BaseModel, ConfigDict

from ..core.types import (
    AnyFilters,
    BlastRadiusResult,
    Direction,
    Edge,
    ExtendedGraphFilters,
    Node,
    VisualEdge,
    VisualNode,
)
from .blast_radius import affected_ids
from .filters import count_active_filters, filter_edges_extended, filter_nodes
from .highlight import apply_edge_highlighting, apply_highlighting
from .traversal import connected_ids

logger = logging.getLogger(__name__)


class HighlightedGraph(NamedTuple):
    nodes: List[VisualNode]
    edges: List[VisualEdge]


class FilteredGraph(BaseModel):
    nodes: List[VisualNode]
    edges: List[VisualEdge]
    filtered_out_node_count: int
    filtered_out_edge_count: int
    active_filter_count: int

    model_config = ConfigDict(frozen=True)


def highlight_set(
    selected_id: Optional[str],
    edges: Sequence[Edge],
    blast_radius: Optional[BlastRadiusResult],
) -> Set[str]:
    """Node ids emphasised for a selection and/or blast radius."""
    if blast_radius is not None:
        return affected_ids(blast_radius, include_source=True)
    if selected_id is not None:
        return connected_ids(selected_id, edges, 1, Direction.BOTH)
    return set()


def apply_filters_and_highlighting(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    filters: AnyFilters,
    selected_id: Optional[str] = None,
    blast_radius: Optional[BlastRadiusResult] = None,
) -> HighlightedGraph:
    visible_nodes = filter_nodes(nodes, filters)
    visible_ids = {node.id for node in visible_nodes}
    # Only visible nodes can anchor a selection or a blast radius
    if selected_id not in visible_ids:
        selected_id = None
    visible_edges = filter_edges_extended(edges, visible_ids, filters)

    if (
        isinstance(filters, ExtendedGraphFilters)
        and filters.show_connected_only
        and selected_id is not None
    ):
        # Over visible edges, not raw ones, so re-running on the output is a no-op
        reachable = connected_ids(selected_id, visible_edges, filters.max_depth, Direction.BOTH)
        visible_nodes = [node for node in visible_nodes if node.id in reachable]
        visible_ids = {node.id for node in visible_nodes}
        visible_edges = filter_edges_extended(visible_edges, visible_ids, filters)

    if blast_radius is not None and blast_radius.source_node_id not in visible_ids:
        blast_radius = None

    highlighted = highlight_set(selected_id, visible_edges, blast_radius)
    selected = {selected_id} if selected_id is not None else set()

    return HighlightedGraph(
        nodes=apply_highlighting(visible_nodes, selected, highlighted),
        edges=apply_edge_highlighting(visible_edges, highlighted | selected),
    )


class FilterPipeline:
    """
    Runs the pipeline and reports how much each pass removed.

    Holds no state between calls.
    """

    def apply(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        filters: AnyFilters,
        selected_id: Optional[str] = None,
        blast_radius: Optional[BlastRadiusResult] = None,
    ) -> FilteredGraph:
        result = apply_filters_and_highlighting(nodes, edges, filters, selected_id, blast_radius)
        filtered = FilteredGraph(
            nodes=result.nodes,
            edges=result.edges,
            filtered_out_node_count=len(nodes) - len(result.nodes),
            filtered_out_edge_count=len(edges) - len(result.edges),
            active_filter_count=count_active_filters(filters),
        )
        logger.debug(
            "Filtered graph: %d/%d nodes, %d/%d edges",
            len(result.nodes), len(nodes), len(result.edges), len(edges),
        )
        return filtered

    def connected_to(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        center_id: str,
        filters: Optional[ExtendedGraphFilters] = None,
    ) -> FilteredGraph:
        """Shortcut for connected-only mode around ``center_id``."""
        base = filters or ExtendedGraphFilters()
        connected = base.model_copy(update={"show_connected_only": True})
        return self.apply(nodes, edges, connected, selected_id=center_id)
