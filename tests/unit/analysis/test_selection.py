"""Unit tests for the selection engine."""

from unittest.mock import Mock

import pytest

from infraview.analysis.selection import SelectionEngine
from infraview.core.telemetry import ActionRecorder, ActionType
from infraview.core.types import SelectionMode

from ...helpers import build_edge, build_node


@pytest.fixture
def engine():
    return SelectionEngine()


def _by_id(items):
    return {item.id: item for item in items}


class TestSelectNode:
    def test_highlights_one_hop(self, engine, chain_nodes, chain_edges):
        update = engine.select_node("B", chain_nodes, chain_edges)
        nodes = _by_id(update.nodes)

        assert nodes["B"].selected
        assert nodes["A"].highlighted and nodes["C"].highlighted
        assert nodes["D"].dimmed and nodes["E"].dimmed
        assert update.state.selected_id == "B"
        assert update.state.highlighted_node_ids == {"A", "B", "C"}
        assert update.state.highlighted_edge_ids == {"A->B", "B->C"}

    def test_edges_follow_highlighted_ids(self, engine, chain_nodes, chain_edges):
        update = engine.select_node("B", chain_nodes, chain_edges)
        edges = _by_id(update.edges)
        assert edges["A->B"].highlighted and edges["B->C"].highlighted
        assert not edges["D->C"].highlighted
        assert edges["D->C"].opacity == 0.3

    def test_none_clears(self, engine, chain_nodes, chain_edges):
        engine.select_node("B", chain_nodes, chain_edges)
        update = engine.select_node(None, chain_nodes, chain_edges)
        assert update.state.is_empty
        assert not any(n.selected or n.highlighted or n.dimmed for n in update.nodes)

    def test_unknown_id_clears(self, engine, chain_nodes, chain_edges):
        engine.select_node("B", chain_nodes, chain_edges)
        update = engine.select_node("ghost", chain_nodes, chain_edges)
        assert update.state.is_empty
        assert update.state.selected_id is None
        assert not any(n.selected or n.highlighted or n.dimmed for n in update.nodes)
        assert all(e.opacity == 1.0 for e in update.edges)


class TestMultipleSelection:
    def test_highlights_only_selection(self, engine, chain_nodes, chain_edges):
        update = engine.select_multiple(["A", "B", "D"], chain_nodes, chain_edges)
        assert update.state.highlighted_node_ids == {"A", "B", "D"}
        assert update.state.highlighted_edge_ids == {"A->B"}
        assert update.state.selected_id == "A"
        assert _by_id(update.nodes)["C"].dimmed

    def test_truncates_to_cap(self, chain_nodes, chain_edges):
        engine = SelectionEngine(max_selection=2)
        update = engine.select_multiple(["A", "B", "C"], chain_nodes, chain_edges)
        assert update.state.selected_ids == {"A", "B"}

    def test_toggle_adds_and_removes(self, engine, chain_nodes, chain_edges):
        engine.toggle_selection("A", chain_nodes, chain_edges)
        update = engine.toggle_selection("B", chain_nodes, chain_edges)
        assert update.state.selected_ids == {"A", "B"}
        assert update.state.highlighted_edge_ids == {"A->B"}

        update = engine.toggle_selection("A", chain_nodes, chain_edges)
        assert update.state.selected_ids == {"B"}
        assert update.state.selected_id == "B"
        assert update.state.highlighted_edge_ids == set()

    def test_toggle_respects_cap(self, chain_nodes, chain_edges):
        engine = SelectionEngine(max_selection=1)
        engine.toggle_selection("A", chain_nodes, chain_edges)
        update = engine.toggle_selection("B", chain_nodes, chain_edges)
        assert update.state.selected_ids == {"A"}

    def test_unknown_ids_are_dropped(self, engine, chain_nodes, chain_edges):
        update = engine.select_multiple(["ghost", "A", "B"], chain_nodes, chain_edges)
        assert update.state.selected_ids == {"A", "B"}
        assert update.state.selected_id == "A"

        update = engine.toggle_selection("ghost", chain_nodes, chain_edges)
        assert update.state.selected_ids == {"A", "B"}

    def test_toggle_last_clears_primary(self, engine, chain_nodes, chain_edges):
        engine.toggle_selection("A", chain_nodes, chain_edges)
        update = engine.toggle_selection("A", chain_nodes, chain_edges)
        assert update.state.selected_id is None
        assert not any(n.dimmed for n in update.nodes)


class TestClearSelection:
    def test_resets_every_flag(self, engine, chain_nodes, chain_edges):
        first = engine.select_node("B", chain_nodes, chain_edges)
        assert any(n.dimmed for n in first.nodes)

        update = engine.clear_selection(first.nodes, first.edges)
        for node in update.nodes:
            assert (node.selected, node.highlighted, node.dimmed) == (False, False, False)
        assert all(e.opacity == 1.0 and not e.highlighted for e in update.edges)
        assert update.state.is_empty
        assert not engine.is_selected("B")


class TestHighlightPath:
    def test_highlights_path(self, engine, chain_nodes, chain_edges):
        update = engine.highlight_path("A", "C", chain_nodes, chain_edges)
        assert update.state.selected_ids == {"A", "C"}
        assert update.state.highlighted_node_ids == {"A", "B", "C"}
        assert update.state.highlighted_edge_ids == {"A->B", "B->C"}
        assert engine.is_highlighted("B")

    def test_missing_path_clears(self, engine, chain_nodes, chain_edges):
        engine.select_node("B", chain_nodes, chain_edges)
        update = engine.highlight_path("A", "E", chain_nodes, chain_edges)
        assert update.state.is_empty
        assert not any(n.dimmed for n in update.nodes)

    def test_unknown_endpoint_clears(self, engine, chain_nodes, chain_edges):
        update = engine.highlight_path("ghost", "ghost", chain_nodes, chain_edges)
        assert update.state.is_empty
        assert not any(n.dimmed for n in update.nodes)

    def test_find_all_paths(self, engine):
        edges = [build_edge("S", "X"), build_edge("X", "T"), build_edge("S", "T")]
        assert len(engine.find_all_paths("S", "T", edges)) == 2
        assert engine.find_path("S", "T", edges).length == 1


class TestSnapshotBinding:
    def test_rebinding_drops_state(self, engine, chain_nodes, chain_edges):
        engine.bind_snapshot("snap-1")
        engine.select_node("B", chain_nodes, chain_edges)
        engine.bind_snapshot("snap-2")

        state = engine.get_state()
        assert state.is_empty
        assert state.snapshot_id == "snap-2"

    def test_same_snapshot_keeps_state(self, engine, chain_nodes, chain_edges):
        engine.bind_snapshot("snap-1")
        engine.select_node("B", chain_nodes, chain_edges)
        engine.bind_snapshot("snap-1")
        assert engine.is_selected("B")


class TestRecorder:
    def test_records_actions(self, chain_nodes, chain_edges):
        recorder = ActionRecorder()
        engine = SelectionEngine(recorder=recorder)
        engine.select_node("A", chain_nodes, chain_edges)
        engine.highlight_path("A", "C", chain_nodes, chain_edges)
        assert recorder.counts() == {"node_select": 1, "path_highlight": 1}

    def test_recorder_is_optional_collaborator(self, chain_nodes, chain_edges):
        recorder = Mock()
        engine = SelectionEngine(recorder=recorder)
        engine.select_multiple(["A"], chain_nodes, chain_edges)
        recorder.record.assert_called_once_with(ActionType.SELECTION_CHANGE, count=1)

    def test_mode(self, engine):
        engine.set_mode(SelectionMode.ADDITIVE)
        assert engine.get_state().mode == SelectionMode.ADDITIVE


class TestNeighborhood:
    def test_delegates_to_traversal(self, engine, chain_edges):
        result = engine.neighborhood("C", chain_edges)
        assert result.downstream == {"A", "B", "D"}
        assert result.upstream == set()

    def test_nodes_without_edges(self, engine):
        nodes = [build_node("solo")]
        update = engine.select_node("solo", nodes, [])
        assert update.nodes[0].selected
        assert update.edges == []
