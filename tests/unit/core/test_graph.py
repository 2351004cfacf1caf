"""Unit tests for the GraphStore and graph file loading."""

import json
import logging

from infraview.core.exceptions import GraphLoadError, GraphNotFoundError
from infraview.core.graph import GraphStore, load_graph_file
from infraview.core.result import Err, Ok
from infraview.core.types import NodeType

from ...helpers import build_edge, build_node


class TestIngestion:
    def test_from_payload(self, chain_payload):
        store = GraphStore.from_payload(chain_payload)
        assert store.node_count == 5
        assert store.edge_count == 3
        assert not store.report.has_drops

    def test_drops_malformed_and_dangling(self, caplog):
        payload = {
            "nodes": [
                {"id": "a", "name": "a", "type": "terraform_resource"},
                {"id": "b", "name": "b", "type": "not_a_type"},
                {"name": "missing id", "type": "helm_chart"},
                {"id": "a", "name": "duplicate", "type": "helm_chart"},
                "garbage",
                {"id": "c", "name": "c", "type": "helm_chart"},
            ],
            "edges": [
                {"id": "e1", "source": "a", "target": "c", "type": "DEPENDS_ON"},
                {"id": "e2", "source": "a", "target": "ghost", "type": "DEPENDS_ON"},
                {"id": "e3", "source": "a", "target": "c", "type": "DEPENDS_ON", "confidence": 4},
                {"id": "e1", "source": "c", "target": "a", "type": "DEPENDS_ON"},
            ],
        }
        with caplog.at_level(logging.WARNING):
            store = GraphStore.from_payload(payload)

        assert [n.id for n in store.nodes] == ["a", "c"]
        assert [e.id for e in store.edges] == ["e1"]
        assert store.report.dropped_nodes == 4
        assert store.report.dropped_edges == 3
        assert "Dropped 4 node(s) and 3 edge(s)" in caplog.text

    def test_constructor_reports_skipped_records(self, chain_nodes):
        store = GraphStore(
            chain_nodes + [build_node("A")],
            [build_edge("A", "missing"), build_edge("A", "B"), build_edge("A", "B")],
        )
        assert store.report.accepted_nodes == 5
        assert store.report.accepted_edges == 1
        assert store.report.dropped_nodes == 1
        assert store.report.dropped_edges == 2
        assert store.get_stats()["dropped_edges"] == 2

    def test_empty_payload(self):
        store = GraphStore.from_payload({})
        assert store.node_count == 0
        assert store.get_stats()["has_cycles"] is False

    def test_each_store_has_own_snapshot(self, chain_payload):
        assert GraphStore.from_payload(chain_payload).snapshot_id != GraphStore.from_payload(chain_payload).snapshot_id


class TestLookups:
    def test_get_node(self, chain_nodes, chain_edges):
        store = GraphStore(chain_nodes, chain_edges)
        assert store.get_node("A").id == "A"
        assert store.get_node("ghost") is None
        assert store.has_node("E")

    def test_adjacency_in_input_order(self, chain_nodes, chain_edges):
        store = GraphStore(chain_nodes, chain_edges)
        assert [e.id for e in store.incoming("C")] == ["B->C", "D->C"]
        assert [e.id for e in store.outgoing("A")] == ["A->B"]
        assert store.outgoing("E") == []

    def test_ancestors_and_descendants(self, chain_nodes, chain_edges):
        store = GraphStore(chain_nodes, chain_edges)
        assert store.descendants("A") == {"B", "C"}
        assert store.ancestors("C") == {"A", "B", "D"}
        assert store.descendants("ghost") == set()

    def test_nodes_by_type(self):
        store = GraphStore([build_node("r"), build_node("h", NodeType.CHART)], [])
        assert [n.id for n in store.get_nodes_by_type(NodeType.CHART)] == ["h"]
        assert store.get_nodes_by_type(NodeType.CONFIG) == []

    def test_find_nodes(self):
        store = GraphStore([build_node("r1", name="db-primary"), build_node("r2", name="cache")], [])
        assert store.find_nodes("DB") == ["r1"]

    def test_collections_are_immutable(self, chain_nodes, chain_edges):
        store = GraphStore(chain_nodes, chain_edges)
        assert isinstance(store.nodes, tuple)
        assert isinstance(store.edges, tuple)


class TestStats:
    def test_stats(self, chain_nodes, chain_edges):
        stats = GraphStore(chain_nodes, chain_edges).get_stats()
        assert stats["total_nodes"] == 5
        assert stats["total_edges"] == 3
        assert stats["nodes_by_type"]["terraform_resource"] == 5
        assert stats["edges_by_type"]["DEPENDS_ON"] == 3
        assert stats["isolated_nodes"] == 1
        assert stats["max_dependencies"] == 1
        assert stats["avg_dependencies"] == 3 / 5
        assert stats["has_cycles"] is False

    def test_cycle_flag(self, chain_nodes, chain_edges):
        store = GraphStore(chain_nodes, chain_edges + [build_edge("C", "A")])
        assert store.get_stats()["has_cycles"] is True

    def test_to_dict_reloads(self, chain_nodes, chain_edges):
        store = GraphStore(chain_nodes, chain_edges)
        again = GraphStore.from_payload(json.loads(json.dumps(store.to_dict())))
        assert again.nodes == store.nodes
        assert again.edges == store.edges


class TestLoadGraphFile:
    def test_loads_file(self, tmp_path, chain_payload):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(chain_payload))
        result = load_graph_file(path)
        assert isinstance(result, Ok)
        assert result.unwrap().node_count == 5

    def test_unwraps_data_envelope(self, tmp_path, chain_payload):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"data": chain_payload}))
        assert load_graph_file(path).unwrap().edge_count == 3

    def test_missing_file(self, tmp_path):
        result = load_graph_file(tmp_path / "nope.json")
        assert isinstance(result, Err)
        assert isinstance(result.error, GraphNotFoundError)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text("{not json")
        result = load_graph_file(path)
        assert result.is_err()
        assert isinstance(result.error, GraphLoadError)

    def test_non_object(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text("[1, 2]")
        assert isinstance(load_graph_file(path).error, GraphLoadError)
