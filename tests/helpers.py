"""Builders for test graphs."""

from typing import Optional

from infraview.core.types import Edge, EdgeType, Node, NodeType


def build_node(node_id: str, node_type: NodeType = NodeType.RESOURCE, **kwargs) -> Node:
    return Node(id=node_id, name=kwargs.pop("name", node_id), type=node_type, **kwargs)


def build_edge(source: str, target: str, edge_id: Optional[str] = None, **kwargs) -> Edge:
    return Edge(
        id=edge_id or f"{source}->{target}",
        source_id=source,
        target_id=target,
        type=kwargs.pop("type", EdgeType.DEPENDS_ON),
        **kwargs,
    )
