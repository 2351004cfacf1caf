"""
Layout collaborator.

The analysis engines never compute coordinates. A renderer hands the
filtered nodes and edges to a ``LayoutEngine`` and gets positions back.
``HierarchicalLayout`` is the default engine: it ranks nodes by topological
generation (networkx) and lays each rank out as a row or column.
"""

import logging
from enum import StrEnum
from typing import Dict, List, Optional, Protocol, Sequence

import networkx as nx
from pydantic import BaseModel, Field

from ..analysis.traversal import has_cycles
from ..config import DEFAULT_NODE_HEIGHT, DEFAULT_NODE_SPACING, DEFAULT_NODE_WIDTH, LayoutSettings
from ..core.types import Edge, Node

logger = logging.getLogger(__name__)


class LayoutDirection(StrEnum):
    TOP_BOTTOM = "TB"
    LEFT_RIGHT = "LR"


class LayoutOptions(BaseModel):
    direction: LayoutDirection = LayoutDirection.TOP_BOTTOM
    node_width: int = Field(DEFAULT_NODE_WIDTH, gt=0)
    node_height: int = Field(DEFAULT_NODE_HEIGHT, gt=0)
    spacing: int = Field(DEFAULT_NODE_SPACING, ge=0)

    @classmethod
    def from_settings(
        cls, settings: LayoutSettings, direction: LayoutDirection = LayoutDirection.TOP_BOTTOM
    ) -> "LayoutOptions":
        return cls(
            direction=direction,
            node_width=settings.node_width,
            node_height=settings.node_height,
            spacing=settings.spacing,
        )


class PositionedNode(BaseModel):
    id: str
    x: float
    y: float


class LayoutResult(BaseModel):
    positioned_nodes: List[PositionedNode] = Field(default_factory=list)
    width: float = 0.0
    height: float = 0.0

    def position_of(self, node_id: str) -> Optional[PositionedNode]:
        return next((p for p in self.positioned_nodes if p.id == node_id), None)


class LayoutEngine(Protocol):
    def layout(
        self, nodes: Sequence[Node], edges: Sequence[Edge], options: LayoutOptions
    ) -> LayoutResult:
        ...


def choose_direction(nodes: Sequence[Node], edges: Sequence[Edge]) -> LayoutDirection:
    """Top-to-bottom for acyclic graphs; cycles read better left-to-right."""
    return LayoutDirection.LEFT_RIGHT if has_cycles(nodes, edges) else LayoutDirection.TOP_BOTTOM


class HierarchicalLayout:
    """
    Rank-based layout.

    Strongly connected components are collapsed before ranking so cyclic
    graphs still get a well-defined order. Within a rank nodes keep their
    input order.
    """

    def ranks(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> List[List[str]]:
        graph = nx.DiGraph()
        graph.add_nodes_from(node.id for node in nodes)
        graph.add_edges_from(
            (edge.source_id, edge.target_id) for edge in edges
            if edge.source_id in graph and edge.target_id in graph
        )
        if graph.number_of_nodes() == 0:
            return []

        condensed = nx.condensation(graph)
        component_of: Dict[str, int] = condensed.graph["mapping"]
        rank_of_component: Dict[int, int] = {}
        for rank, generation in enumerate(nx.topological_generations(condensed)):
            for component in generation:
                rank_of_component[component] = rank

        ranks: List[List[str]] = [[] for _ in range(len(set(rank_of_component.values())))]
        for node in nodes:
            ranks[rank_of_component[component_of[node.id]]].append(node.id)
        return ranks

    def layout(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        options: Optional[LayoutOptions] = None,
    ) -> LayoutResult:
        options = options or LayoutOptions()
        ranks = self.ranks(nodes, edges)
        if not ranks:
            return LayoutResult()

        step_x = options.node_width + options.spacing
        step_y = options.node_height + options.spacing
        positioned: List[PositionedNode] = []
        for rank, members in enumerate(ranks):
            for slot, node_id in enumerate(members):
                if options.direction == LayoutDirection.TOP_BOTTOM:
                    x, y = slot * step_x, rank * step_y
                else:
                    x, y = rank * step_x, slot * step_y
                positioned.append(PositionedNode(id=node_id, x=x, y=y))

        widest = max(len(members) for members in ranks)
        if options.direction == LayoutDirection.TOP_BOTTOM:
            columns, rows = widest, len(ranks)
        else:
            columns, rows = len(ranks), widest
        width = columns * options.node_width + (columns - 1) * options.spacing
        height = rows * options.node_height + (rows - 1) * options.spacing

        logger.debug("Laid out %d nodes in %d ranks (%s)", len(positioned), len(ranks), options.direction)
        return LayoutResult(positioned_nodes=positioned, width=width, height=height)
