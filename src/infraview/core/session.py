"""
Graph viewing session.

A ``GraphSession`` ties one active ``GraphStore`` to the selection state and
blast radius analysis computed against it. Loading a new payload replaces
the store wholesale and invalidates everything derived from the old one.

The session produces ``GraphView`` objects: plain, serializable data a
renderer can diff without calling back into the engines.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..analysis.blast_radius import BlastRadiusAnalyzer
from ..analysis.filters import filters_equal
from ..analysis.pipeline import apply_filters_and_highlighting
from ..analysis.selection import SelectionEngine, SelectionUpdate
from ..config import ViewerConfig
from ..graph.layout import (
    HierarchicalLayout,
    LayoutEngine,
    LayoutOptions,
    LayoutResult,
    choose_direction,
)
from .graph import GraphStore
from .telemetry import ActionRecorder, ActionType
from .types import (
    AnyFilters,
    BlastRadiusResult,
    ExtendedGraphFilters,
    SelectionState,
    VisualEdge,
    VisualNode,
)

logger = logging.getLogger(__name__)


class GraphView(BaseModel):
    snapshot_id: str
    nodes: List[VisualNode] = Field(default_factory=list)
    edges: List[VisualEdge] = Field(default_factory=list)
    selection: SelectionState
    blast_radius: Optional[BlastRadiusResult] = None
    stats: Dict[str, Any] = Field(default_factory=dict)


class GraphSession:
    """
    Owns the active graph snapshot for one viewer.

    The recorder is injected so its lifetime matches the session; ``close()``
    ends both.
    """

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        recorder: Optional[ActionRecorder] = None,
    ):
        self.config = config or ViewerConfig()
        self.recorder = recorder or ActionRecorder(
            enabled=self.config.telemetry.enabled,
            max_history=self.config.telemetry.max_history,
        )
        self.selection = SelectionEngine(
            max_selection=self.config.analysis.max_selection,
            recorder=self.recorder,
        )
        self._last_filters: Optional[AnyFilters] = None
        self._set_store(GraphStore())

    # =========================================================================
    # Snapshot lifecycle
    # =========================================================================

    def load(self, payload: Mapping[str, Any]) -> GraphStore:
        """Replace the active graph with a new payload."""
        return self.load_store(GraphStore.from_payload(payload))

    def load_store(self, store: GraphStore) -> GraphStore:
        self._set_store(store)
        self.recorder.record(
            ActionType.GRAPH_LOAD,
            snapshot_id=store.snapshot_id,
            node_count=store.node_count,
            edge_count=store.edge_count,
            dropped_edges=store.report.dropped_edges,
        )
        logger.info("Loaded graph snapshot %s (%d nodes, %d edges)",
                    store.snapshot_id, store.node_count, store.edge_count)
        return store

    def _set_store(self, store: GraphStore) -> None:
        self.store = store
        self.selection.bind_snapshot(store.snapshot_id)
        self.analyzer = BlastRadiusAnalyzer(store, self.config.analysis.blast_radius_depth)

    @property
    def snapshot_id(self) -> str:
        return self.store.snapshot_id

    # =========================================================================
    # Interaction
    # =========================================================================

    def select(self, node_id: Optional[str]) -> SelectionUpdate:
        return self.selection.select_node(node_id, self.store.nodes, self.store.edges)

    def clear_selection(self) -> SelectionUpdate:
        return self.selection.clear_selection(self.store.nodes, self.store.edges)

    def highlight_path(self, from_id: str, to_id: str) -> SelectionUpdate:
        return self.selection.highlight_path(from_id, to_id, self.store.nodes, self.store.edges)

    def blast_radius(self, node_id: str) -> BlastRadiusResult:
        result = self.analyzer.calculate(node_id)
        self.recorder.record(
            ActionType.BLAST_RADIUS,
            node_id=node_id,
            affected=result.total_affected,
            severity=result.severity.value,
        )
        return result

    def render(
        self,
        filters: Optional[AnyFilters] = None,
        blast_node_id: Optional[str] = None,
    ) -> GraphView:
        """Project the active graph through the filter and highlight pipeline."""
        filters = filters or ExtendedGraphFilters()
        if self._last_filters is not None and not filters_equal(filters, self._last_filters):
            self.recorder.record(ActionType.FILTER_CHANGE, search=filters.search)
            if filters.search != self._last_filters.search:
                self.recorder.record(ActionType.SEARCH, query=filters.search)
        self._last_filters = filters

        blast = self.blast_radius(blast_node_id) if blast_node_id is not None else None
        result = apply_filters_and_highlighting(
            self.store.nodes,
            self.store.edges,
            filters,
            selected_id=self.selection.selected_id,
            blast_radius=blast,
        )
        return GraphView(
            snapshot_id=self.store.snapshot_id,
            nodes=result.nodes,
            edges=result.edges,
            selection=self.selection.get_state(),
            blast_radius=blast,
            stats=self.store.get_stats(),
        )

    def layout(self, view: GraphView, engine: Optional[LayoutEngine] = None) -> LayoutResult:
        """Position the nodes of a rendered view using the configured sizes."""
        direction = choose_direction(view.nodes, view.edges)
        options = LayoutOptions.from_settings(self.config.layout, direction)
        result = (engine or HierarchicalLayout()).layout(view.nodes, view.edges, options)
        self.recorder.record(
            ActionType.LAYOUT_CHANGE, direction=direction.value, node_count=len(result.positioned_nodes)
        )
        return result

    # =========================================================================
    # Teardown
    # =========================================================================

    def close(self) -> None:
        self.recorder.close()

    def __enter__(self) -> "GraphSession":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
