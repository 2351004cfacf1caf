"""Unit tests for the filter and highlight pipeline."""

import pytest

from infraview.analysis.blast_radius import affected_ids, calculate_blast_radius
from infraview.analysis.pipeline import (
    FilterPipeline,
    apply_filters_and_highlighting,
    highlight_set,
)
from infraview.core.types import EdgeType, ExtendedGraphFilters, GraphFilters, NodeType

from ...helpers import build_edge, build_node


@pytest.fixture
def mixed_graph():
    nodes = [
        build_node("tf1", NodeType.RESOURCE, name="TF Resource 1"),
        build_node("tf2", NodeType.RESOURCE, name="TF Resource 2"),
        build_node("helm1", NodeType.CHART, name="Helm Chart"),
    ]
    edges = [build_edge("tf1", "tf2"), build_edge("tf2", "helm1")]
    return nodes, edges


def _by_id(items):
    return {item.id: item for item in items}


class TestApplyFiltersAndHighlighting:
    def test_filters_nodes_then_edges(self, mixed_graph):
        nodes, edges = mixed_graph
        filters = ExtendedGraphFilters(node_types=[NodeType.RESOURCE])
        result = apply_filters_and_highlighting(nodes, edges, filters)
        assert [n.id for n in result.nodes] == ["tf1", "tf2"]
        assert [e.id for e in result.edges] == ["tf1->tf2"]

    def test_connected_only(self):
        nodes = [build_node("center"), build_node("connected"), build_node("isolated")]
        edges = [build_edge("center", "connected")]
        filters = ExtendedGraphFilters(show_connected_only=True, max_depth=1)
        result = apply_filters_and_highlighting(nodes, edges, filters, "center")
        assert [n.id for n in result.nodes] == ["center", "connected"]

    def test_connected_only_without_selection_is_noop(self, chain_nodes, chain_edges):
        filters = ExtendedGraphFilters(show_connected_only=True)
        result = apply_filters_and_highlighting(chain_nodes, chain_edges, filters)
        assert len(result.nodes) == 5

    def test_connected_only_respects_edge_filters(self):
        nodes = [build_node(n) for n in "ABC"]
        edges = [
            build_edge("A", "B", type=EdgeType.DEPENDS_ON),
            build_edge("B", "C", type=EdgeType.REFERENCES),
        ]
        filters = ExtendedGraphFilters(
            edge_types=[EdgeType.DEPENDS_ON], show_connected_only=True,
        )
        result = apply_filters_and_highlighting(nodes, edges, filters, "A")
        assert [n.id for n in result.nodes] == ["A", "B"]

    def test_selection_highlights_neighbours(self, chain_nodes, chain_edges):
        result = apply_filters_and_highlighting(chain_nodes, chain_edges, ExtendedGraphFilters(), "B")
        nodes = _by_id(result.nodes)
        assert nodes["B"].selected
        assert nodes["A"].highlighted and nodes["C"].highlighted
        assert nodes["D"].dimmed and nodes["E"].dimmed

    def test_blast_radius_takes_precedence(self, chain_nodes, chain_edges):
        blast = calculate_blast_radius("C", chain_nodes, chain_edges)
        result = apply_filters_and_highlighting(
            chain_nodes, chain_edges, ExtendedGraphFilters(), "A", blast,
        )
        nodes = _by_id(result.nodes)
        # D is outside A's neighbourhood but inside C's blast radius
        assert nodes["D"].highlighted and not nodes["D"].dimmed
        assert nodes["E"].dimmed

    def test_no_context_no_dimming(self, chain_nodes, chain_edges):
        result = apply_filters_and_highlighting(chain_nodes, chain_edges, GraphFilters())
        assert not any(n.dimmed for n in result.nodes)
        assert all(e.opacity == 1.0 for e in result.edges)

    def test_unknown_blast_source_is_ignored(self, chain_nodes, chain_edges):
        blast = calculate_blast_radius("ghost", chain_nodes, chain_edges)
        assert blast.total_affected == 0
        result = apply_filters_and_highlighting(
            chain_nodes, chain_edges, ExtendedGraphFilters(), None, blast,
        )
        assert not any(n.dimmed or n.highlighted for n in result.nodes)
        assert all(e.opacity == 1.0 for e in result.edges)

    def test_unknown_selection_is_ignored(self, chain_nodes, chain_edges):
        filters = ExtendedGraphFilters(show_connected_only=True)
        result = apply_filters_and_highlighting(chain_nodes, chain_edges, filters, "ghost")
        assert len(result.nodes) == 5
        assert not any(n.selected or n.dimmed for n in result.nodes)

    def test_hidden_selection_is_idempotent(self, mixed_graph):
        nodes, edges = mixed_graph
        filters = ExtendedGraphFilters(node_types=[NodeType.RESOURCE])
        first = apply_filters_and_highlighting(nodes, edges, filters, "helm1")
        assert not any(n.dimmed for n in first.nodes)
        second = apply_filters_and_highlighting(first.nodes, first.edges, filters, "helm1")
        assert second == first

    @pytest.mark.parametrize("selected", [None, "B", "E"])
    def test_edge_highlight_invariant(self, chain_nodes, chain_edges, selected):
        result = apply_filters_and_highlighting(chain_nodes, chain_edges, ExtendedGraphFilters(), selected)
        visible = result.edges
        highlighted = highlight_set(selected, visible, None) | ({selected} if selected else set())
        for edge in visible:
            assert edge.highlighted == (edge.source_id in highlighted and edge.target_id in highlighted)

    def test_edge_highlight_invariant_with_blast(self, chain_nodes, chain_edges):
        blast = calculate_blast_radius("C", chain_nodes, chain_edges)
        result = apply_filters_and_highlighting(
            chain_nodes, chain_edges, ExtendedGraphFilters(), None, blast,
        )
        highlighted = affected_ids(blast, include_source=True)
        for edge in result.edges:
            assert edge.highlighted == (edge.source_id in highlighted and edge.target_id in highlighted)

    @pytest.mark.parametrize("filters,selected", [
        (ExtendedGraphFilters(), None),
        (ExtendedGraphFilters(), "B"),
        (ExtendedGraphFilters(search="a"), "A"),
        (ExtendedGraphFilters(show_connected_only=True, max_depth=1), "B"),
        (ExtendedGraphFilters(show_connected_only=True), "C"),
        (GraphFilters(node_types=[NodeType.RESOURCE]), "D"),
    ])
    def test_idempotent(self, chain_nodes, chain_edges, filters, selected):
        first = apply_filters_and_highlighting(chain_nodes, chain_edges, filters, selected)
        second = apply_filters_and_highlighting(first.nodes, first.edges, filters, selected)
        assert second == first

    def test_idempotent_with_blast(self, chain_nodes, chain_edges):
        blast = calculate_blast_radius("C", chain_nodes, chain_edges)
        filters = ExtendedGraphFilters(show_connected_only=True)
        first = apply_filters_and_highlighting(chain_nodes, chain_edges, filters, "B", blast)
        second = apply_filters_and_highlighting(first.nodes, first.edges, filters, "B", blast)
        assert second == first

    def test_does_not_mutate_inputs(self, chain_nodes, chain_edges):
        nodes_before = list(chain_nodes)
        edges_before = list(chain_edges)
        apply_filters_and_highlighting(chain_nodes, chain_edges, ExtendedGraphFilters(), "B")
        assert chain_nodes == nodes_before
        assert chain_edges == edges_before


class TestFilterPipeline:
    def test_reports_counts(self, mixed_graph):
        nodes, edges = mixed_graph
        filters = ExtendedGraphFilters(node_types=[NodeType.RESOURCE], search="tf")
        result = FilterPipeline().apply(nodes, edges, filters)
        assert result.filtered_out_node_count == 1
        assert result.filtered_out_edge_count == 1
        assert result.active_filter_count == 2

    def test_connected_to(self, chain_nodes, chain_edges):
        result = FilterPipeline().connected_to(chain_nodes, chain_edges, "A")
        assert {n.id for n in result.nodes} == {"A", "B", "C", "D"}
        assert result.filtered_out_node_count == 1
