"""
Blast Radius Engine.

Given a node, find everything that depends on it: nodes with an edge
pointing at the source are direct dependents, nodes reaching it through
longer chains are transitive ones. The traversal follows edges in the
incoming direction and is bounded by ``max_depth``.

Impact score
------------
``affected / (graph_size - 1)``: the share of all *other* nodes that sit in
the blast radius, clamped to [0, 1]. Adding a dependent can only grow the
numerator, so the score is monotonic. Severity thresholds are fixed:

    >= 0.8 critical, >= 0.6 high, >= 0.4 medium, >= 0.2 low, else minimal
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, Field

from ..config import DEFAULT_BLAST_RADIUS_DEPTH, MAX_TRAVERSAL_DEPTH
from ..core.graph import GraphStore
from ..core.types import (
    AffectedNode,
    BlastRadiusResult,
    Direction,
    Edge,
    ImpactSeverity,
    ImpactVisualNode,
    Node,
    NodeType,
    VisualEdge,
)
from .highlight import apply_edge_highlighting
from .traversal import connected_depths

logger = logging.getLogger(__name__)


SEVERITY_THRESHOLDS: Tuple[Tuple[float, ImpactSeverity], ...] = (
    (0.8, ImpactSeverity.CRITICAL),
    (0.6, ImpactSeverity.HIGH),
    (0.4, ImpactSeverity.MEDIUM),
    (0.2, ImpactSeverity.LOW),
)

SEVERITY_COLORS: Dict[ImpactSeverity, str] = {
    ImpactSeverity.CRITICAL: "#DC2626",
    ImpactSeverity.HIGH: "#EA580C",
    ImpactSeverity.MEDIUM: "#D97706",
    ImpactSeverity.LOW: "#65A30D",
    ImpactSeverity.MINIMAL: "#6B7280",
}

# Per-node colours for an impact view
IMPACT_SOURCE_COLOR = "#EF4444"
IMPACT_DIRECT_COLOR = "#F97316"
IMPACT_TRANSITIVE_COLOR = "#EAB308"
IMPACT_NONE_COLOR = "#6B7280"


class ImpactSummary(BaseModel):
    total_affected: int
    direct_count: int
    transitive_count: int
    direct_percent: int
    max_depth: int
    severity: ImpactSeverity
    color: str
    score: float
    by_type: Dict[str, int] = Field(default_factory=dict)


# =============================================================================
# Scoring
# =============================================================================

def severity_for_score(score: float) -> ImpactSeverity:
    for threshold, severity in SEVERITY_THRESHOLDS:
        if score >= threshold:
            return severity
    return ImpactSeverity.MINIMAL


def severity_color(severity: ImpactSeverity) -> str:
    return SEVERITY_COLORS[severity]


def impact_score(affected_count: int, graph_size: int) -> float:
    if graph_size <= 1 or affected_count <= 0:
        return 0.0
    return max(0.0, min(1.0, affected_count / (graph_size - 1)))


def is_critical(result: BlastRadiusResult) -> bool:
    return result.impact_score >= 0.8


def is_high_or_above(result: BlastRadiusResult) -> bool:
    return result.impact_score >= 0.6


# =============================================================================
# Calculation
# =============================================================================

def calculate_blast_radius(
    source_id: str,
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    max_depth: int = DEFAULT_BLAST_RADIUS_DEPTH,
) -> BlastRadiusResult:
    """
    Compute the blast radius of ``source_id``.

    Each affected node is recorded once, at the minimum depth it is reachable
    from; ``is_direct`` is set whenever a one-hop edge exists. Unknown ids
    produce an empty, minimal-severity result.
    """
    by_id: Dict[str, Node] = {node.id: node for node in nodes}
    if source_id not in by_id:
        logger.debug("Blast radius requested for unknown node %s", source_id)
        return BlastRadiusResult(source_node_id=source_id)

    depth_limit = max(1, min(max_depth, MAX_TRAVERSAL_DEPTH))
    depths = connected_depths(source_id, edges, depth_limit, Direction.INCOMING)

    affected: List[AffectedNode] = []
    for node_id, depth in depths.items():
        if node_id == source_id:
            continue
        node = by_id.get(node_id)
        affected.append(AffectedNode(
            id=node_id,
            name=node.name if node else node_id,
            type=node.type if node else None,
            is_direct=depth == 1,
            depth=depth,
        ))

    direct = sum(1 for item in affected if item.is_direct)
    score = impact_score(len(affected), len(by_id))
    return BlastRadiusResult(
        source_node_id=source_id,
        direct_dependent_count=direct,
        transitive_dependent_count=len(affected) - direct,
        impact_score=score,
        severity=severity_for_score(score),
        affected_nodes=affected,
    )


# =============================================================================
# Result helpers
# =============================================================================

def affected_ids(result: Optional[BlastRadiusResult], include_source: bool = False) -> Set[str]:
    if result is None:
        return set()
    ids = {item.id for item in result.affected_nodes}
    if include_source:
        ids.add(result.source_node_id)
    return ids


def affected_edge_ids(edges: Iterable[Edge], ids: Set[str]) -> Set[str]:
    """Edges running between two affected nodes."""
    return {edge.id for edge in edges if edge.source_id in ids and edge.target_id in ids}


def group_by_directness(result: BlastRadiusResult) -> Dict[str, List[AffectedNode]]:
    groups: Dict[str, List[AffectedNode]] = {"direct": [], "transitive": []}
    for item in result.affected_nodes:
        groups["direct" if item.is_direct else "transitive"].append(item)
    return groups


def group_by_depth(result: BlastRadiusResult) -> Dict[int, List[AffectedNode]]:
    groups: Dict[int, List[AffectedNode]] = defaultdict(list)
    for item in result.affected_nodes:
        groups[item.depth].append(item)
    return dict(groups)


def impact_level(node_id: str, result: Optional[BlastRadiusResult]) -> int:
    """Depth at which ``node_id`` is affected, or -1 when it is not."""
    if result is None:
        return -1
    for item in result.affected_nodes:
        if item.id == node_id:
            return item.depth
    return -1


def sort_by_impact(nodes: Sequence[Node], result: BlastRadiusResult) -> List[Node]:
    """Affected nodes first, shallowest first; unaffected nodes keep their order at the end."""
    def key(indexed: Tuple[int, Node]) -> Tuple[int, int]:
        index, node = indexed
        depth = impact_level(node.id, result)
        return (depth if depth >= 0 else MAX_TRAVERSAL_DEPTH + 1, index)

    return [node for _, node in sorted(enumerate(nodes), key=key)]


def summarize_impact(result: BlastRadiusResult) -> ImpactSummary:
    total = result.direct_dependent_count + result.transitive_dependent_count
    by_type = {node_type.value: 0 for node_type in NodeType}
    for item in result.affected_nodes:
        if item.type is not None:
            by_type[item.type.value] += 1

    return ImpactSummary(
        total_affected=total,
        direct_count=result.direct_dependent_count,
        transitive_count=result.transitive_dependent_count,
        direct_percent=round(result.direct_dependent_count / total * 100) if total else 0,
        max_depth=max((item.depth for item in result.affected_nodes), default=0),
        severity=result.severity,
        color=severity_color(result.severity),
        score=result.impact_score,
        by_type=by_type,
    )


# =============================================================================
# Impact projection
# =============================================================================

def visualize_impact(nodes: Sequence[Node], result: BlastRadiusResult) -> List[ImpactVisualNode]:
    """
    Project nodes for an impact view.

    The source and every affected node are highlighted, everything else is
    dimmed. Colour encodes the role: source, direct or transitive dependent.
    A source that is not among ``nodes`` dims nothing.
    """
    by_id = {item.id: item for item in result.affected_nodes}
    context_active = any(node.id == result.source_node_id for node in nodes)
    projected = []
    for node in nodes:
        item = by_id.get(node.id)
        is_source = node.id == result.source_node_id
        is_direct = item is not None and item.is_direct

        if is_source:
            color, depth = IMPACT_SOURCE_COLOR, 0
        elif item is not None:
            color = IMPACT_DIRECT_COLOR if is_direct else IMPACT_TRANSITIVE_COLOR
            depth = item.depth
        else:
            color, depth = IMPACT_NONE_COLOR, -1

        fields = {name: getattr(node, name) for name in Node.model_fields}
        projected.append(ImpactVisualNode.model_construct(
            **fields,
            selected=False,
            highlighted=is_source or item is not None,
            dimmed=context_active and not is_source and item is None,
            impact_depth=depth,
            is_direct=is_direct,
            impact_color=color,
        ))
    return projected


def visualize_edge_impact(edges: Sequence[Edge], result: BlastRadiusResult) -> List[VisualEdge]:
    """Highlight edges running between affected nodes (source included)."""
    return apply_edge_highlighting(edges, affected_ids(result, include_source=True))


# =============================================================================
# Store-bound analyzer
# =============================================================================

class BlastRadiusAnalyzer:
    """
    Blast radius over a GraphStore.

    Results are cached per node for the lifetime of this analyzer, which is
    tied to a single store; build a new analyzer for a new snapshot.
    """

    def __init__(self, store: GraphStore, max_depth: int = DEFAULT_BLAST_RADIUS_DEPTH):
        self.store = store
        self.max_depth = max(1, max_depth)
        self._cache: Dict[str, BlastRadiusResult] = {}

    @property
    def snapshot_id(self) -> str:
        return self.store.snapshot_id

    def calculate(self, node_id: str) -> BlastRadiusResult:
        if node_id not in self._cache:
            self._cache[node_id] = calculate_blast_radius(
                node_id, self.store.nodes, self.store.edges, self.max_depth
            )
        return self._cache[node_id]

    def summary(self, node_id: str) -> ImpactSummary:
        return summarize_impact(self.calculate(node_id))

    def rank(self, node_ids: Optional[Iterable[str]] = None, limit: int = 10) -> List[BlastRadiusResult]:
        """Nodes with the largest blast radius first."""
        ids = list(node_ids) if node_ids is not None else [node.id for node in self.store.nodes]
        results = [self.calculate(node_id) for node_id in ids]
        results.sort(key=lambda r: (-r.impact_score, -r.total_affected, r.source_node_id))
        return results[:limit]

    def set_max_depth(self, depth: int) -> None:
        self.max_depth = max(1, depth)
        self._cache.clear()
