"""
Selection Engine.

Keeps the current selection and highlight sets for one graph snapshot and
projects them onto nodes and edges. The engine only mutates its own state;
the graph it is handed is never modified.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Set

from ..config import DEFAULT_MAX_PATHS, DEFAULT_MAX_SELECTION
from ..core.telemetry import ActionRecorder, ActionType
from ..core.types import (
    Edge,
    MaxDepth,
    Node,
    SelectionMode,
    SelectionState,
    UNBOUNDED,
    VisualEdge,
    VisualNode,
)
from .highlight import (
    apply_highlighting,
    clear_edge_highlighting,
    clear_highlighting,
    update_edges_state,
)
from .paths import PathResult, all_paths, shortest_path
from .traversal import ConnectedNodes, connected_edges, connected_ids, neighborhood

logger = logging.getLogger(__name__)


class SelectionUpdate(NamedTuple):
    nodes: List[VisualNode]
    edges: List[VisualEdge]
    state: SelectionState


class SelectionEngine:
    """
    Single, multiple and additive node selection with highlight propagation.

    - ``select_node`` highlights the node's 1-hop neighbourhood and its edges.
    - ``select_multiple`` / ``toggle_selection`` highlight exactly the
      selected nodes and the edges strictly between them.
    - ``highlight_path`` highlights the shortest path between two nodes.

    Selection order is kept so the primary selection is deterministic.
    """

    def __init__(
        self,
        max_selection: int = DEFAULT_MAX_SELECTION,
        mode: SelectionMode = SelectionMode.SINGLE,
        recorder: Optional[ActionRecorder] = None,
    ):
        self.max_selection = max_selection
        self.mode = mode
        self._recorder = recorder
        self._snapshot_id: Optional[str] = None
        self._selected_id: Optional[str] = None
        self._selected: Dict[str, None] = {}
        self._highlighted_nodes: Set[str] = set()
        self._highlighted_edges: Set[str] = set()

    # =========================================================================
    # Selection operations
    # =========================================================================

    def select_node(
        self,
        node_id: Optional[str],
        nodes: Sequence[Node],
        edges: Sequence[Edge],
    ) -> SelectionUpdate:
        """
        Select one node, or clear everything when ``node_id`` is None.

        An id that is not among ``nodes`` clears the selection as well.
        """
        if node_id is None or node_id not in _node_ids(nodes):
            self._reset()
            return self._apply(nodes, edges)

        self._selected_id = node_id
        self._selected = {node_id: None}
        self._highlighted_nodes = connected_ids(node_id, edges, 1)
        incoming, outgoing = connected_edges(node_id, edges)
        self._highlighted_edges = {edge.id for edge in incoming} | {edge.id for edge in outgoing}

        self._record(ActionType.NODE_SELECT, node_id=node_id)
        return self._apply(nodes, edges)

    def select_multiple(
        self,
        node_ids: Iterable[str],
        nodes: Sequence[Node],
        edges: Sequence[Edge],
    ) -> SelectionUpdate:
        """Select up to ``max_selection`` known nodes; other ids are ignored."""
        known = _node_ids(nodes)
        limited: Dict[str, None] = {}
        for node_id in node_ids:
            if node_id not in known:
                continue
            if len(limited) >= self.max_selection:
                break
            limited[node_id] = None

        self._selected = limited
        self._sync_with_selection(edges)

        self._record(ActionType.SELECTION_CHANGE, count=len(self._selected))
        return self._apply(nodes, edges)

    def toggle_selection(
        self,
        node_id: str,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
    ) -> SelectionUpdate:
        """Add or remove ``node_id``. Adding is a no-op once the cap is reached."""
        if node_id in self._selected:
            del self._selected[node_id]
        elif node_id not in _node_ids(nodes):
            logger.debug("Ignoring unknown node %s", node_id)
        elif len(self._selected) < self.max_selection:
            self._selected[node_id] = None
        else:
            logger.debug("Selection cap of %d reached; ignoring %s", self.max_selection, node_id)

        self._sync_with_selection(edges)

        self._record(ActionType.SELECTION_CHANGE, count=len(self._selected))
        return self._apply(nodes, edges)

    def clear_selection(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> SelectionUpdate:
        """Drop all selection and highlight state and return unflagged nodes/edges."""
        self._reset()
        return SelectionUpdate(
            nodes=clear_highlighting(nodes),
            edges=clear_edge_highlighting(edges),
            state=self.get_state(),
        )

    def highlight_path(
        self,
        from_id: str,
        to_id: str,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
    ) -> SelectionUpdate:
        """Highlight the shortest path; with no path or an unknown endpoint this is ``clear_selection``."""
        known = _node_ids(nodes)
        result = shortest_path(from_id, to_id, edges)
        if not result.exists or from_id not in known or to_id not in known:
            return self.clear_selection(nodes, edges)

        self._selected_id = from_id
        self._selected = {from_id: None, to_id: None}
        self._highlighted_nodes = set(result.path)
        self._highlighted_edges = set(result.edge_ids)

        self._record(ActionType.PATH_HIGHLIGHT, source=from_id, target=to_id, length=result.length)
        return self._apply(nodes, edges)

    # =========================================================================
    # Queries
    # =========================================================================

    def find_path(self, from_id: str, to_id: str, edges: Sequence[Edge]) -> PathResult:
        return shortest_path(from_id, to_id, edges)

    def find_all_paths(
        self,
        from_id: str,
        to_id: str,
        edges: Sequence[Edge],
        max_paths: int = DEFAULT_MAX_PATHS,
    ) -> List[PathResult]:
        return all_paths(from_id, to_id, edges, max_paths)

    def neighborhood(
        self,
        node_id: str,
        edges: Sequence[Edge],
        max_depth: MaxDepth = UNBOUNDED,
    ) -> ConnectedNodes:
        return neighborhood(node_id, edges, max_depth)

    def get_state(self) -> SelectionState:
        return SelectionState(
            selected_id=self._selected_id,
            selected_ids=set(self._selected),
            highlighted_node_ids=set(self._highlighted_nodes),
            highlighted_edge_ids=set(self._highlighted_edges),
            mode=self.mode,
            snapshot_id=self._snapshot_id,
        )

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def is_selected(self, node_id: str) -> bool:
        return node_id in self._selected

    def is_highlighted(self, node_id: str) -> bool:
        return node_id in self._highlighted_nodes

    def set_mode(self, mode: SelectionMode) -> None:
        self.mode = mode

    # =========================================================================
    # Snapshot lifecycle
    # =========================================================================

    def bind_snapshot(self, snapshot_id: str) -> None:
        """
        Attach the engine to a graph snapshot.

        State computed against a different snapshot refers to ids that may
        no longer exist, so it is discarded.
        """
        if self._snapshot_id == snapshot_id:
            return
        if self._snapshot_id is not None and self._selected:
            logger.debug("Snapshot changed; dropping selection of %d node(s)", len(self._selected))
        self._reset()
        self._snapshot_id = snapshot_id

    # =========================================================================
    # Internals
    # =========================================================================

    def _reset(self) -> None:
        self._selected_id = None
        self._selected = {}
        self._highlighted_nodes = set()
        self._highlighted_edges = set()

    def _sync_with_selection(self, edges: Sequence[Edge]) -> None:
        self._selected_id = next(iter(self._selected), None)
        self._highlighted_nodes = set(self._selected)
        self._highlighted_edges = {
            edge.id for edge in edges
            if edge.source_id in self._selected and edge.target_id in self._selected
        }

    def _apply(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> SelectionUpdate:
        return SelectionUpdate(
            nodes=apply_highlighting(nodes, set(self._selected), self._highlighted_nodes),
            edges=update_edges_state(edges, self._highlighted_edges),
            state=self.get_state(),
        )

    def _record(self, action: ActionType, **properties) -> None:
        if self._recorder is not None:
            self._recorder.record(action, **properties)


def _node_ids(nodes: Sequence[Node]) -> Set[str]:
    return {node.id for node in nodes}
