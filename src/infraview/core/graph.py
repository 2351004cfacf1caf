"""
Graph Store backed by rustworkx.

Holds the canonical node and edge arrays for one graph snapshot and the
lookups derived from them:
- The bimap between string Node IDs and rustworkx integer indices.
- Source/target adjacency in edge input order.
- Nodes grouped by type.

A store is never patched. A new payload produces a new store with a new
snapshot id; anything computed against the old snapshot must be dropped.
"""

import json
import logging
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import rustworkx as rx
from pydantic import BaseModel, ValidationError

from .exceptions import GraphLoadError, GraphNotFoundError
from .result import Err, Ok, Result
from .types import Edge, EdgeType, Node, NodeType

logger = logging.getLogger(__name__)


class IngestionReport(BaseModel):
    """Aggregate counts of what ingestion kept and dropped."""
    accepted_nodes: int = 0
    accepted_edges: int = 0
    dropped_nodes: int = 0
    dropped_edges: int = 0

    @property
    def has_drops(self) -> bool:
        return self.dropped_nodes > 0 or self.dropped_edges > 0


class GraphStore:
    """
    Read-only view over one graph snapshot.

    Engines receive ``nodes``/``edges`` as tuples and return new collections;
    nothing outside the store can alter its contents.
    """

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
        malformed_nodes: int = 0,
        malformed_edges: int = 0,
    ):
        self.snapshot_id = uuid.uuid4().hex
        self._graph = rx.PyDiGraph(multigraph=True)
        self._id_to_idx: Dict[str, int] = {}
        self._idx_to_id: Dict[int, str] = {}
        self._nodes_by_type: Dict[NodeType, List[str]] = defaultdict(list)
        self._outgoing: Dict[str, List[Edge]] = defaultdict(list)
        self._incoming: Dict[str, List[Edge]] = defaultdict(list)

        dropped_nodes = malformed_nodes
        kept_nodes: List[Node] = []
        for node in nodes:
            if node.id in self._id_to_idx:
                dropped_nodes += 1
                continue
            idx = self._graph.add_node(node)
            self._id_to_idx[node.id] = idx
            self._idx_to_id[idx] = node.id
            self._nodes_by_type[node.type].append(node.id)
            kept_nodes.append(node)

        dropped_edges = malformed_edges
        kept_edges: List[Edge] = []
        seen_edge_ids: Set[str] = set()
        for edge in edges:
            if (
                edge.id in seen_edge_ids
                or edge.source_id not in self._id_to_idx
                or edge.target_id not in self._id_to_idx
            ):
                dropped_edges += 1
                continue
            seen_edge_ids.add(edge.id)
            self._graph.add_edge(
                self._id_to_idx[edge.source_id], self._id_to_idx[edge.target_id], edge
            )
            self._outgoing[edge.source_id].append(edge)
            self._incoming[edge.target_id].append(edge)
            kept_edges.append(edge)

        self._nodes: Tuple[Node, ...] = tuple(kept_nodes)
        self._edges: Tuple[Edge, ...] = tuple(kept_edges)
        self.report = IngestionReport(
            accepted_nodes=len(kept_nodes),
            accepted_edges=len(kept_edges),
            dropped_nodes=dropped_nodes,
            dropped_edges=dropped_edges,
        )
        if self.report.has_drops:
            logger.warning(
                "Dropped %d node(s) and %d edge(s) during ingestion",
                dropped_nodes, dropped_edges,
            )

    # =========================================================================
    # Ingestion
    # =========================================================================

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GraphStore":
        """
        Build a store from a graph fetch result ``{"nodes": [...], "edges": [...]}``.

        Malformed records, duplicate ids and edges pointing at unknown nodes
        are dropped; only the totals are reported.
        """
        nodes: List[Node] = []
        malformed_nodes = 0
        for raw in payload.get("nodes") or []:
            node = _coerce(Node, raw)
            if node is None:
                malformed_nodes += 1
            else:
                nodes.append(node)

        edges: List[Edge] = []
        malformed_edges = 0
        for raw in payload.get("edges") or []:
            edge = _coerce(Edge, raw)
            if edge is None:
                malformed_edges += 1
            else:
                edges.append(edge)

        store = cls(nodes, edges, malformed_nodes=malformed_nodes, malformed_edges=malformed_edges)
        logger.debug("Ingested %d nodes, %d edges", store.node_count, store.edge_count)
        return store

    # =========================================================================
    # Lookups
    # =========================================================================

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    @property
    def node_ids(self) -> Set[str]:
        return set(self._id_to_idx)

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.num_edges()

    def get_node(self, node_id: str) -> Optional[Node]:
        idx = self._id_to_idx.get(node_id)
        if idx is None:
            return None
        return self._graph[idx]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._id_to_idx

    def get_nodes_by_type(self, node_type: NodeType) -> List[Node]:
        return [self._graph[self._id_to_idx[nid]] for nid in self._nodes_by_type.get(node_type, [])]

    def incoming(self, node_id: str) -> List[Edge]:
        """Edges pointing at ``node_id``, in input order."""
        return list(self._incoming.get(node_id, []))

    def outgoing(self, node_id: str) -> List[Edge]:
        """Edges leaving ``node_id``, in input order."""
        return list(self._outgoing.get(node_id, []))

    def find_nodes(self, pattern: str) -> List[str]:
        """Find node IDs whose id or name contains ``pattern`` (case-insensitive)."""
        pattern_lower = pattern.lower()
        return [
            node.id for node in self._nodes
            if pattern_lower in node.id.lower() or pattern_lower in node.name.lower()
        ]

    def descendants(self, node_id: str) -> Set[str]:
        """All node IDs reachable by following outgoing edges."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.descendants(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    def ancestors(self, node_id: str) -> Set[str]:
        """All node IDs that reach ``node_id`` through outgoing edges."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.ancestors(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    # =========================================================================
    # Summary
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        nodes_by_type = {t.value: len(self._nodes_by_type.get(t, [])) for t in NodeType}
        edges_by_type: Dict[str, int] = {t.value: 0 for t in EdgeType}
        for edge in self._edges:
            edges_by_type[edge.type.value] += 1

        out_degrees = [self._graph.out_degree(idx) for idx in self._graph.node_indices()]
        isolated = len([
            idx for idx in self._graph.node_indices()
            if self._graph.in_degree(idx) == 0 and self._graph.out_degree(idx) == 0
        ])

        return {
            "snapshot_id": self.snapshot_id,
            "total_nodes": self.node_count,
            "total_edges": self.edge_count,
            "nodes_by_type": nodes_by_type,
            "edges_by_type": edges_by_type,
            "avg_dependencies": (sum(out_degrees) / len(out_degrees)) if out_degrees else 0.0,
            "max_dependencies": max(out_degrees) if out_degrees else 0,
            "isolated_nodes": isolated,
            "has_cycles": not rx.is_directed_acyclic_graph(self._graph),
            "dropped_nodes": self.report.dropped_nodes,
            "dropped_edges": self.report.dropped_edges,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.model_dump(mode="json") for node in self._nodes],
            "edges": [edge.model_dump(mode="json") for edge in self._edges],
        }


def _coerce(model: type, raw: Any) -> Optional[Any]:
    if isinstance(raw, model):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return model.model_validate(dict(raw))
    except ValidationError:
        return None


def load_graph_file(path: Path) -> Result[GraphStore, Exception]:
    """Read a graph JSON file into a GraphStore."""
    if not path.exists():
        return Err(GraphNotFoundError(str(path)))

    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        return Err(GraphLoadError(str(path), str(e)))

    if not isinstance(data, dict):
        return Err(GraphLoadError(str(path), "expected a JSON object with 'nodes' and 'edges'"))

    # Scanner responses may wrap the graph in a "data" envelope
    if "nodes" not in data and isinstance(data.get("data"), dict):
        data = data["data"]

    return Ok(GraphStore.from_payload(data))
