"""Tests for the markdown report renderer."""

from pathlib import Path

from arch_preflight.preflight import run_preflight
from arch_preflight.render.markdown import render_markdown


def _db_graph(conditions: str) -> dict:
    return {
        "data": {"nodes": [{
            "id": "db1",
            "data": {
                "kind": "database", "label": "UsersDB", "dbType": "sql",
                "tables": [{"name": "users", "fields": [{"name": "id", "isPrimaryKey": True}, {"name": "email"}]}],
                "queries": [{"id": "q1", "name": "By email", "operation": "SELECT",
                             "target": "users", "conditions": conditions}],
            },
        }, {
            "id": "p1",
            "data": {"kind": "process", "label": "Lookup", "steps": [{"id": "s1"}]},
        }], "edges": [{"id": "e1", "source": "p1", "target": "db1"}]},
    }


def test_clean_report():
    md = render_markdown(run_preflight(_db_graph("id = 1"), source=Path("/tmp/users.json")))
    assert md.startswith("# Preflight Report: users.json")
    assert "PASS -- ready to generate." in md
    assert "No issues found." in md
    assert "## Errors" not in md
    assert "| UsersDB | By email | `SELECT * FROM users WHERE id = 1;` | 🟢 simple | yes | 1,200 |" in md
    assert "Suggested Indexes" not in md


def test_suggested_indexes_listed():
    md = render_markdown(run_preflight(_db_graph("email = 'a'")))
    assert "# Preflight Report: architecture" in md
    assert "### Suggested Indexes" in md
    assert "- **By email**: `users.email`" in md


def test_errors_and_warnings_tables():
    graphs = {"api": {
        "nodes": [
            {"id": "a1", "data": {"kind": "api_binding", "label": "Users", "method": "GET", "route": "/u"}},
            {"id": "a2", "data": {"kind": "api_binding", "label": "Users", "method": "GET", "route": "/u"}},
        ],
        "edges": [{"id": "e1", "source": "a1", "target": "gone"}],
    }}
    md = render_markdown(run_preflight(graphs))
    assert "BLOCKED" in md
    assert "## Errors" in md
    assert "## Warnings" in md
    assert "| `DUPLICATE_ROUTE` |" in md
    assert "edge `e1`" in md
    assert "`a1`, `a2`" in md  # duplicate label lists both blocks


def test_pipes_in_conditions_are_escaped():
    md = render_markdown(run_preflight(_db_graph("email = 'a' || 'b'")))
    assert "'a' \\|\\| 'b'" in md
