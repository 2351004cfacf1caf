"""
infraview - Infrastructure dependency graph explorer.

Traversal, path finding, filtering, highlight propagation and blast radius
scoring over an in-memory graph of Terraform, Helm, Kubernetes and
Terragrunt artifacts.

Key Components:
- core: Data types, the graph store and the viewing session
- analysis: Traversal, paths, filters, selection and blast radius engines
- graph: Layout collaborator
- cli: Command line interface

Usage:
    from infraview.core.graph import GraphStore
    from infraview.analysis.blast_radius import calculate_blast_radius

    store = GraphStore.from_payload({"nodes": [...], "edges": [...]})
    result = calculate_blast_radius("vpc", store.nodes, store.edges)
"""

__version__ = "0.1.0"

from .core.types import (
    UNBOUNDED,
    Direction,
    Edge,
    EdgeType,
    ExtendedGraphFilters,
    GraphFilters,
    Node,
    NodeType,
)

__all__ = [
    "__version__",
    "UNBOUNDED",
    "Direction",
    "Edge",
    "EdgeType",
    "ExtendedGraphFilters",
    "GraphFilters",
    "Node",
    "NodeType",
]
