"""Tests for graph models, normalization and file loading."""

from __future__ import annotations

import json
import logging

import pytest

from arch_preflight.graph import (
    ApiBindingData,
    ApiEndpointData,
    DatabaseData,
    GraphFileError,
    GraphIndex,
    GraphNode,
    ProcessData,
    QueueData,
    UnknownNodeData,
    is_graph_collection,
    load_graph_collection,
    read_graph_file,
)


class TestNodePayloads:
    def test_kind_selects_variant(self):
        cases = {
            "api_binding": ApiBindingData,
            "process": ProcessData,
            "database": DatabaseData,
            "queue": QueueData,
            "api_endpoint": ApiEndpointData,
        }
        for kind, cls in cases.items():
            n = GraphNode.model_validate({"id": "n", "data": {"kind": kind, "label": "X"}})
            assert isinstance(n.data, cls)
            assert n.kind == kind

    def test_kind_falls_back_to_node_type(self):
        n = GraphNode.model_validate({"id": "n", "type": "queue", "data": {"label": "Jobs"}})
        assert isinstance(n.data, QueueData)

    def test_unknown_kind_is_kept(self):
        n = GraphNode.model_validate({"id": "n", "data": {"kind": "trigger", "label": "Cron"}})
        assert isinstance(n.data, UnknownNodeData)
        assert n.kind == "trigger"

    def test_non_string_kind_is_unknown(self):
        n = GraphNode.model_validate({"id": "n", "data": {"kind": ["process"], "label": "X"}})
        assert isinstance(n.data, UnknownNodeData)
        assert n.kind == ""
        typed = GraphNode.model_validate({"id": "n", "type": "process", "data": {"kind": {"a": 1}}})
        assert isinstance(typed.data, ProcessData)

    def test_camel_case_fields(self):
        n = GraphNode.model_validate({
            "id": "db",
            "data": {
                "kind": "database", "label": "DB", "dbType": "nosql",
                "tables": [{"name": "users", "fields": [{"name": "id", "isPrimaryKey": True}]}],
            },
        })
        assert n.data.db_type == "nosql"
        assert n.data.tables[0].fields[0].is_pk is True

    def test_legacy_primary_key_flag(self):
        n = GraphNode.model_validate({
            "id": "db",
            "data": {"kind": "database", "tables": [{"name": "t", "fields": [{"name": "id", "primaryKey": True}]}]},
        })
        assert n.data.tables[0].fields[0].is_pk is True

    def test_display_name_falls_back_to_id(self):
        n = GraphNode.model_validate({"id": "n42", "data": {"kind": "process", "label": "  "}})
        assert n.display_name == "n42"

    def test_garbage_values_collapse_to_defaults(self):
        n = GraphNode.model_validate({
            "id": 7,
            "data": {
                "kind": "database", "label": None, "dbType": None,
                "tables": [None, "users", {"name": "orders", "fields": "id,total", "indexes": [1, "total"]}],
                "queries": [{"operation": "MERGE", "target": None, "conditions": None}],
            },
        })
        assert n.id == "7"
        assert n.label == ""
        assert n.data.db_type == "sql"
        assert [t.name for t in n.data.tables] == ["orders"]
        assert n.data.tables[0].fields == []
        assert n.data.tables[0].indexes == ["total"]
        q = n.data.queries[0]
        assert (q.operation, q.target, q.conditions) == ("SELECT", "", "")

    def test_missing_protocol_is_rest(self):
        n = GraphNode.model_validate({"id": "a", "data": {"kind": "api_binding", "protocol": None}})
        assert n.data.protocol == "rest"


class TestLoadGraphCollection:
    def test_tabs_are_stamped(self):
        graphs = load_graph_collection({
            "api": {"nodes": [{"id": "a", "data": {"kind": "api_binding"}}], "edges": []},
            "functions": {"nodes": [{"id": "p", "data": {"kind": "process"}}],
                          "edges": [{"id": "e", "source": "a", "target": "p"}]},
        })
        assert graphs["api"].nodes[0].tab == "api"
        assert graphs["functions"].edges[0].tab == "functions"

    def test_flat_graph_loads_as_main_tab(self):
        graphs = load_graph_collection({"nodes": [{"id": "a", "data": {"kind": "process"}}]})
        assert list(graphs) == ["main"]
        assert graphs["main"].edges == []

    def test_edge_without_id_gets_one(self):
        graphs = load_graph_collection({"edges": [{"source": "a", "target": "b"}]})
        assert graphs["main"].edges[0].id == "a->b"

    def test_nodes_without_id_are_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="arch_preflight.graph.loader"):
            graphs = load_graph_collection({"nodes": [{"data": {"kind": "process"}}, 3]})
        assert graphs["main"].nodes == []
        assert "without id" in caplog.text

    def test_non_mapping_input_is_empty(self):
        assert load_graph_collection(["not", "a", "graph"]) == {}
        assert load_graph_collection(None) == {}

    def test_raw_input_is_untouched(self):
        raw = {"api": {"nodes": [{"id": "a", "type": "queue", "data": {"label": "Q"}}], "edges": []}}
        load_graph_collection(raw)
        assert raw["api"]["nodes"][0]["data"] == {"label": "Q"}


class TestGraphIndex:
    def test_index_spans_tabs(self):
        graphs = load_graph_collection({
            "api": {"nodes": [{"id": "a", "data": {"kind": "api_binding"}},
                              {"id": "b", "data": {"kind": "service_boundary"}}], "edges": []},
            "functions": {"nodes": [{"id": "p", "data": {"kind": "process"}}],
                          "edges": [{"id": "e", "source": "p", "target": "ghost"}]},
        })
        index = GraphIndex.build(graphs)
        assert [n.id for n in index.nodes] == ["a", "b", "p"]
        assert [n.id for n in index.meaningful] == ["a", "p"]
        assert index.api_binding_ids == {"a"}
        assert index.connected_ids == {"p", "ghost"}
        assert index.is_connected("p")
        assert not index.is_connected("a")

    def test_is_graph_collection(self):
        graphs = load_graph_collection({"api": {"nodes": []}})
        assert is_graph_collection(graphs)
        assert is_graph_collection({})
        assert not is_graph_collection({"api": {"nodes": []}})
        assert not is_graph_collection(None)


class TestReadGraphFile:
    def test_reads_json(self, tmp_path):
        f = tmp_path / "graph.json"
        f.write_text(json.dumps({"api": {"nodes": [{"id": "a", "data": {"kind": "process", "label": "A"}}]}}))
        graphs = read_graph_file(f)
        assert graphs["api"].nodes[0].label == "A"

    def test_reads_yaml(self, tmp_path):
        f = tmp_path / "graph.yaml"
        f.write_text("functions:\n  nodes:\n    - id: p1\n      data: {kind: process, label: Worker}\n")
        graphs = read_graph_file(f)
        assert graphs["functions"].nodes[0].display_name == "Worker"

    def test_invalid_json(self, tmp_path):
        f = tmp_path / "graph.json"
        f.write_text("{nodes: ")
        with pytest.raises(GraphFileError, match="Cannot parse"):
            read_graph_file(f)

    def test_non_mapping_document(self, tmp_path):
        f = tmp_path / "graph.yml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(GraphFileError, match="does not contain a graph mapping"):
            read_graph_file(f)

    def test_invalid_utf8(self, tmp_path):
        f = tmp_path / "graph.json"
        f.write_bytes(b'{"nodes": [{"id": "\xff\xfe"}]}')
        with pytest.raises(GraphFileError, match="Cannot read"):
            read_graph_file(f)

    def test_missing_file(self, tmp_path):
        with pytest.raises(GraphFileError, match="Cannot read"):
            read_graph_file(tmp_path / "absent.json")
