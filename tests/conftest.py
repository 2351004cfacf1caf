"""Shared fixtures for the infraview test suite."""

from typing import List

import pytest

from infraview.core.types import Edge, Node

from .helpers import build_edge, build_node


@pytest.fixture
def chain_nodes() -> List[Node]:
    """A, B, C, D and the isolated E."""
    return [build_node(n) for n in ("A", "B", "C", "D", "E")]


@pytest.fixture
def chain_edges() -> List[Edge]:
    """A -> B -> C and D -> C."""
    return [build_edge("A", "B"), build_edge("B", "C"), build_edge("D", "C")]


@pytest.fixture
def chain_payload(chain_nodes, chain_edges) -> dict:
    return {
        "nodes": [n.model_dump(mode="json") for n in chain_nodes],
        "edges": [e.model_dump(mode="json") for e in chain_edges],
    }
