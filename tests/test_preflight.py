"""Integration tests: run the full preflight on the example designs."""

from pathlib import Path

from arch_preflight.graph.loader import read_graph_file
from arch_preflight.preflight import run_preflight

EXAMPLES = Path(__file__).parent.parent / "examples"
CHECKOUT = EXAMPLES / "checkout-service" / "graph.json"
BROKEN = EXAMPLES / "broken-design" / "graph.yaml"


def test_checkout_service_is_clean():
    """The checkout example is a complete design with no findings."""
    assert CHECKOUT.exists(), f"Example not found at {CHECKOUT}"

    result = run_preflight(read_graph_file(CHECKOUT), source=CHECKOUT)

    assert result.validation.valid is True
    assert result.validation.warnings == ()
    # service boundary excluded
    assert result.validation.node_count == 8
    assert result.validation.edge_count == 7
    assert result.passed(strict=True)

    by_id = {r.query.id: r for r in result.queries}
    assert list(by_id) == ["q1", "q2", "q3"]
    assert all(r.node_id == "db_orders" and r.tab == "data" for r in result.queries)

    open_orders = by_id["q1"]
    assert open_orders.performance.uses_index is True
    assert open_orders.query.estimated_rows_scanned == 1200
    assert open_orders.query.generated_code == "SELECT * FROM orders WHERE status = 'open';"

    by_customer = by_id["q2"]
    assert by_customer.query.suggested_indexes == ["orders.customer_id"]
    assert [r.query.id for r in result.unindexed_queries] == ["q2"]

    place = by_id["q3"]
    assert place.query.estimated_rows_scanned == 1
    assert place.query.generated_code == "INSERT INTO orders (...) VALUES (...);"


def test_broken_design_is_blocked():
    result = run_preflight(read_graph_file(BROKEN), source=BROKEN)
    v = result.validation

    assert v.valid is False
    assert not result.passed()
    errors = v.codes("error")
    for code in (
        "DUPLICATE_ROUTE",
        "API_NO_METHOD",
        "API_ROUTE_SLASH",
        "API_ROUTE_SPACES",
        "DANGLING_EDGE",
        "API_ENDPOINT_DANGLING_REF",
        "QUEUE_BAD_DELIVERY",
    ):
        assert code in errors, code
    warnings = v.codes("warning")
    assert "TABLE_NO_FIELDS" in warnings
    assert "NO_FUNCTIONS" in warnings
    assert "DB_NO_FUNCTIONS" in warnings

    dup = next(e for e in v.errors if e.code == "DUPLICATE_ROUTE")
    assert dup.node_id == "api_users_again"
    assert result.queries == []


def test_strict_mode_fails_on_warnings():
    graphs = {"functions": {"nodes": [
        {"id": "p1", "data": {"kind": "process", "label": "Worker", "steps": []}},
    ]}}
    result = run_preflight(graphs)
    assert result.validation.valid is True
    assert result.passed() is True
    assert result.passed(strict=True) is False


def test_each_query_is_estimated_once(monkeypatch):
    import arch_preflight.preflight as preflight
    import arch_preflight.query.estimator as estimator

    calls = []
    real = estimator.estimate

    def counting(database, query):
        calls.append(query.id)
        return real(database, query)

    monkeypatch.setattr(preflight, "estimate", counting)
    monkeypatch.setattr(estimator, "estimate", counting)

    result = run_preflight(read_graph_file(CHECKOUT))
    assert calls == ["q1", "q2", "q3"]
    for r in result.queries:
        assert r.query.estimated_rows_scanned == r.performance.estimated_rows_scanned
        assert r.query.uses_index == r.performance.uses_index
        assert r.db_type == "sql"
